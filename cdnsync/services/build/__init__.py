"""
Static-site build stage.
"""
from .base import PrebuiltSite, SiteBuilder
from .hugo_builder import HugoBuilder

__all__ = ['SiteBuilder', 'PrebuiltSite', 'HugoBuilder']
