"""
Configuration module for webcanvas.

Provides environment-driven settings for the browser-session service.
"""

from webcanvas.config.settings import Settings, get_settings, reload_settings

__all__ = [
	'Settings',
	'get_settings',
	'reload_settings',
]
