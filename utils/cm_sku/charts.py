# utils/cm_sku/charts.py

"""
Charts for the 3PM dashboard
Plotly visualizations
"""

import pandas as pd
import plotly.graph_objects as go
import logging

from .constants import MATERIAL_TYPES, SIGNOFF_STATUS_CONFIG, UI_CONFIG
from .classifier import bucket_counts
from .view import summarize_signoff

logger = logging.getLogger(__name__)


class CmSkuCharts:
    """Chart generator for the 3PM portal"""

    def __init__(self):
        self.chart_height = UI_CONFIG.get('chart_height', 300)

    def create_signoff_donut(self, records: pd.DataFrame, title: str = "Signoff Status") -> go.Figure:
        """Donut chart of 3PM signoff statuses"""
        if records is None or records.empty:
            return self._empty_chart("No data available")

        summary = summarize_signoff(records)
        statuses = [s for s, item in summary.items() if item['count'] > 0]

        fig = go.Figure(data=[go.Pie(
            labels=[summary[s]['label'] for s in statuses],
            values=[summary[s]['count'] for s in statuses],
            hole=0.5,
            marker_colors=[SIGNOFF_STATUS_CONFIG[s]['color'] for s in statuses],
            textinfo='label+value',
            textposition='outside'
        )])

        fig.update_layout(
            title=title,
            height=self.chart_height,
            showlegend=True,
            legend=dict(orientation="h", yanchor="bottom", y=-0.2),
            margin=dict(t=40, b=40, l=20, r=20)
        )

        return fig

    def create_material_split(self, components: pd.DataFrame) -> go.Figure:
        """Packaging vs raw material component counts"""
        counts = bucket_counts(components)
        labels = [MATERIAL_TYPES[b]['label'] for b in ('packaging', 'raw_material')]
        values = [counts['packaging'], counts['raw_material']]

        if sum(values) == 0:
            return self._empty_chart("No components")

        fig = go.Figure(data=[go.Pie(
            labels=labels,
            values=values,
            hole=0.4,
            marker_colors=['#3B82F6', '#10B981'],
            textinfo='label+value+percent',
            textposition='inside'
        )])

        fig.update_layout(
            title="Components by Material Type",
            height=self.chart_height,
            showlegend=False,
            margin=dict(t=40, b=20, l=20, r=20)
        )

        return fig

    def _empty_chart(self, message: str) -> go.Figure:
        """Placeholder figure with a centered message"""
        fig = go.Figure()
        fig.add_annotation(
            text=message,
            xref="paper", yref="paper",
            x=0.5, y=0.5,
            showarrow=False,
            font=dict(size=14, color="#6B7280")
        )
        fig.update_layout(
            height=self.chart_height,
            xaxis=dict(visible=False),
            yaxis=dict(visible=False)
        )
        return fig


_charts = None


def get_charts() -> CmSkuCharts:
    """Get or create charts instance"""
    global _charts
    if _charts is None:
        _charts = CmSkuCharts()
    return _charts
