# utils/config.py

"""
Application configuration read from environment variables
"""

import os
import logging
from typing import Dict, Any

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = 'http://localhost:3000'
DEFAULT_API_TIMEOUT = 30
DEFAULT_PAGE_SIZE = 10


class Config:
    """Configuration holder for the 3PM portal"""

    def __init__(self, environ: Dict[str, str] = None):
        self._environ = environ if environ is not None else os.environ

    def _get_int(self, name: str, default: int) -> int:
        raw = self._environ.get(name)
        if raw is None or str(raw).strip() == '':
            return default
        try:
            return int(raw)
        except ValueError:
            logger.warning(f"Invalid integer for {name}: {raw!r}, using {default}")
            return default

    @property
    def api_config(self) -> Dict[str, Any]:
        """Backend API connection settings"""
        return {
            'base_url': self._environ.get('CM_PORTAL_API_BASE_URL', DEFAULT_API_BASE_URL).rstrip('/'),
            'token': self._environ.get('CM_PORTAL_API_TOKEN', ''),
            'timeout': self._get_int('CM_PORTAL_API_TIMEOUT', DEFAULT_API_TIMEOUT)
        }

    @property
    def page_size(self) -> int:
        return self._get_int('CM_PORTAL_PAGE_SIZE', DEFAULT_PAGE_SIZE)


config = Config()
