"""
Startup script for the webcanvas browser-session service.

Loads ``.env.local`` / ``.env``, configures logging and runs the HTTP API
with uvicorn. The idle reaper starts and stops with the app lifespan.
"""

import logging
import os

import uvicorn
from dotenv import load_dotenv

logger = logging.getLogger(__name__)


def configure_logging(debug: bool) -> None:
	"""Configure root logging; DEBUG only when explicitly requested."""
	logging.basicConfig(
		level=logging.DEBUG if debug else logging.INFO,
		format='%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s',
		force=True,  # Override any existing configuration
	)

	logging.getLogger('uvicorn').setLevel(logging.INFO)
	logging.getLogger('uvicorn.access').setLevel(logging.INFO if debug else logging.WARNING)
	logging.getLogger('fastapi').setLevel(logging.INFO)
	logging.getLogger('asyncio').setLevel(logging.WARNING)


def main() -> None:
	# .env.local takes precedence over .env for local development
	load_dotenv(dotenv_path='.env.local', override=False)
	load_dotenv(override=False)

	from webcanvas.config.settings import reload_settings
	from webcanvas.server.api import create_app

	settings = reload_settings()
	configure_logging(settings.debug)

	logger.info('=' * 70)
	logger.info('Starting webcanvas browser-session service')
	logger.info('=' * 70)
	logger.info(f'Session API: http://{settings.host}:{settings.port}/api/sessions')
	logger.info(f'Health check: http://{settings.host}:{settings.port}/health')
	logger.info(f'Headless: {settings.headless}, viewport: {settings.viewport_width}x{settings.viewport_height}')
	logger.info(f'Preview frame: {settings.preview_frame_selector or "(disabled)"}')
	if settings.api_tokens:
		logger.info('✅ Bearer token authentication enabled')
	else:
		logger.warning('⚠️  WEBCANVAS_API_TOKENS not set, API is unauthenticated')
	logger.info('=' * 70)

	app = create_app(settings)

	# log_config=None keeps uvicorn from replacing the configuration above
	uvicorn.run(
		app,
		host=settings.host,
		port=settings.port,
		log_config=None,
	)


if __name__ == '__main__':
	main()
