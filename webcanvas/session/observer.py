"""
Page event observers.

An observer is attached to every page a session opens. The base class is a
no-op; ``LoggingPageObserver`` mirrors console output, page errors and
network traffic into the service log.
"""

import logging

from playwright.async_api import ConsoleMessage, Page, Request, Response

logger = logging.getLogger(__name__)


class PageEventObserver:
	"""Hook for page events. Subclasses override ``attach``."""

	def attach(self, page: Page, session_id: str) -> None:
		pass


class LoggingPageObserver(PageEventObserver):
	def __init__(self, level: int = logging.DEBUG):
		self.level = level

	def attach(self, page: Page, session_id: str) -> None:
		prefix = f'[Page {session_id[-8:]}]'

		def on_console(message: ConsoleMessage) -> None:
			logger.log(self.level, f'{prefix} console.{message.type}: {message.text}')

		def on_page_error(error: Exception) -> None:
			logger.warning(f'{prefix} page error: {error}')

		def on_request(request: Request) -> None:
			logger.log(self.level, f'{prefix} → {request.method} {request.url}')

		def on_response(response: Response) -> None:
			logger.log(self.level, f'{prefix} ← {response.status} {response.url}')

		page.on('console', on_console)
		page.on('pageerror', on_page_error)
		page.on('request', on_request)
		page.on('response', on_response)
