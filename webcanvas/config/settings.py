"""
Service Settings

Centralized configuration for the browser-session service, read from
environment variables (``.env.local`` / ``.env`` are loaded by the server
entry point).
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_PREVIEW_FRAME_SELECTOR = '#web-preview-iframe'
DEFAULT_CORS_ORIGINS = ('https://localhost:5173', 'https://localhost:5174')


def _get_flag(env_var: str, default: bool = False) -> bool:
	"""
	Get a boolean flag from an environment variable.

	Args:
		env_var: Environment variable name
		default: Default value if not set

	Returns:
		True if enabled, False otherwise
	"""
	value = os.getenv(env_var, str(default)).lower()
	return value in ('true', '1', 'yes', 'on', 'enabled')


def _get_int(env_var: str, default: int) -> int:
	"""Get an integer from an environment variable, falling back to the default on bad input."""
	raw = os.getenv(env_var)
	if raw is None or raw.strip() == '':
		return default
	try:
		return int(raw)
	except ValueError:
		logger.warning(f'⚠️  Invalid integer for {env_var}: {raw!r} (using default {default})')
		return default


def _get_list(env_var: str, default: tuple[str, ...] = ()) -> list[str]:
	raw = os.getenv(env_var)
	if raw is None:
		return list(default)
	return [item.strip() for item in raw.split(',') if item.strip()]


@dataclass
class Settings:
	"""Browser-session service configuration."""

	# HTTP server
	host: str = '0.0.0.0'
	port: int = 8000
	debug: bool = False
	cors_origins: list[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))

	# Browser launch
	headless: bool = True
	viewport_width: int = 1920
	viewport_height: int = 1080

	# Session lifecycle (30 minute idle threshold, swept every 5 minutes)
	idle_timeout_seconds: int = 30 * 60
	reap_interval_seconds: int = 5 * 60

	# Timeouts (milliseconds)
	navigation_timeout_ms: int = 30_000
	network_idle_timeout_ms: int = 10_000
	action_timeout_ms: int = 10_000
	verify_timeout_ms: int = 5_000
	# Upper bound on a single wait action
	max_wait_ms: int = 60_000

	# Frame that hosts the previewed page in the authoring UI
	preview_frame_selector: str | None = DEFAULT_PREVIEW_FRAME_SELECTOR

	capture_screenshot: bool = True
	page_event_logging: bool = False

	# Bearer tokens accepted by the API (empty = authentication disabled)
	api_tokens: list[str] = field(default_factory=list)

	@classmethod
	def from_env(cls) -> 'Settings':
		"""
		Create settings from environment variables.

		Environment variables (all prefixed ``WEBCANVAS_``):
		- HOST, PORT, DEBUG, CORS_ORIGINS
		- HEADLESS, VIEWPORT_WIDTH, VIEWPORT_HEIGHT
		- IDLE_TIMEOUT_SECONDS, REAP_INTERVAL_SECONDS
		- NAVIGATION_TIMEOUT_MS, NETWORK_IDLE_TIMEOUT_MS, ACTION_TIMEOUT_MS, VERIFY_TIMEOUT_MS, MAX_WAIT_MS
		- PREVIEW_FRAME_SELECTOR (empty string disables frame scoping)
		- CAPTURE_SCREENSHOT, PAGE_EVENT_LOGGING
		- API_TOKENS (comma-separated)
		"""
		frame_selector = os.getenv('WEBCANVAS_PREVIEW_FRAME_SELECTOR', DEFAULT_PREVIEW_FRAME_SELECTOR).strip()

		return cls(
			host=os.getenv('WEBCANVAS_HOST', '0.0.0.0'),
			port=_get_int('WEBCANVAS_PORT', 8000),
			debug=_get_flag('WEBCANVAS_DEBUG', default=False),
			cors_origins=_get_list('WEBCANVAS_CORS_ORIGINS', DEFAULT_CORS_ORIGINS),
			headless=_get_flag('WEBCANVAS_HEADLESS', default=True),
			viewport_width=_get_int('WEBCANVAS_VIEWPORT_WIDTH', 1920),
			viewport_height=_get_int('WEBCANVAS_VIEWPORT_HEIGHT', 1080),
			idle_timeout_seconds=_get_int('WEBCANVAS_IDLE_TIMEOUT_SECONDS', 30 * 60),
			reap_interval_seconds=_get_int('WEBCANVAS_REAP_INTERVAL_SECONDS', 5 * 60),
			navigation_timeout_ms=_get_int('WEBCANVAS_NAVIGATION_TIMEOUT_MS', 30_000),
			network_idle_timeout_ms=_get_int('WEBCANVAS_NETWORK_IDLE_TIMEOUT_MS', 10_000),
			action_timeout_ms=_get_int('WEBCANVAS_ACTION_TIMEOUT_MS', 10_000),
			verify_timeout_ms=_get_int('WEBCANVAS_VERIFY_TIMEOUT_MS', 5_000),
			max_wait_ms=_get_int('WEBCANVAS_MAX_WAIT_MS', 60_000),
			preview_frame_selector=frame_selector or None,
			capture_screenshot=_get_flag('WEBCANVAS_CAPTURE_SCREENSHOT', default=True),
			page_event_logging=_get_flag('WEBCANVAS_PAGE_EVENT_LOGGING', default=False),
			api_tokens=_get_list('WEBCANVAS_API_TOKENS'),
		)

	def to_dict(self) -> dict[str, Any]:
		"""Export settings as a dictionary (tokens are not included)."""
		return {
			'host': self.host,
			'port': self.port,
			'debug': self.debug,
			'headless': self.headless,
			'viewport': {'width': self.viewport_width, 'height': self.viewport_height},
			'idle_timeout_seconds': self.idle_timeout_seconds,
			'reap_interval_seconds': self.reap_interval_seconds,
			'navigation_timeout_ms': self.navigation_timeout_ms,
			'network_idle_timeout_ms': self.network_idle_timeout_ms,
			'action_timeout_ms': self.action_timeout_ms,
			'verify_timeout_ms': self.verify_timeout_ms,
			'max_wait_ms': self.max_wait_ms,
			'preview_frame_selector': self.preview_frame_selector,
			'capture_screenshot': self.capture_screenshot,
			'page_event_logging': self.page_event_logging,
			'auth_enabled': bool(self.api_tokens),
		}


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
	"""
	Get global settings instance.

	Returns:
		Settings instance
	"""
	global _settings
	if _settings is None:
		_settings = Settings.from_env()
	return _settings


def reload_settings() -> Settings:
	"""Reload settings from environment (useful for testing)."""
	global _settings
	_settings = Settings.from_env()
	return _settings
