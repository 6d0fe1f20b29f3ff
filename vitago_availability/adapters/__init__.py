"""
Adapters layer - External integrations (Vitago marketplace API).
"""

from .api_client import VitagoApiClient
from .mock_api_client import MockVitagoClient

__all__ = ["VitagoApiClient", "MockVitagoClient"]
