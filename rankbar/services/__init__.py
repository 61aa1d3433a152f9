"""Service modules for rankbar."""

from .site_api import SiteApiClient
from .site_registry import SiteRegistry

__all__ = ['SiteApiClient', 'SiteRegistry']
