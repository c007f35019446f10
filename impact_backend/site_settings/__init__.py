"""
Module 'site_settings' (feature-first): paramètres éditables du site.
"""

from .service import list_settings, save_settings

__all__ = ["list_settings", "save_settings"]
