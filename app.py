# app.py

"""
Main application entry point
3PM SKU & Component Portal
"""

import streamlit as st
from datetime import datetime
import logging

# Configure page
st.set_page_config(
    page_title="3PM Component Portal",
    page_icon="🏭",
    layout="wide",
    initial_sidebar_state="expanded",
)

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

from utils.config import config
from utils.cm_sku import VERSION


def main():
    """Landing page"""

    st.title("🏭 3PM SKU & Component Portal")

    st.info("""
    👈 **Select a page from the sidebar** to begin:
    - **3PM Dashboard**: signoff overview, filters and active flags per 3PM
    - **SKU Details**: SKUs of a 3PM, their components, and new SKUs copied from a reference
    """)

    col1, col2, col3 = st.columns(3)

    with col1:
        st.metric("Today", datetime.now().strftime('%d %b %Y'))

    with col2:
        st.metric("Backend", config.api_config['base_url'])

    with col3:
        st.metric("Version", VERSION)


if __name__ == "__main__":
    main()
