"""
Utility action handlers.

Handles wait actions and element screenshots.
"""

import base64
import logging
import time

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from webcanvas.action.command import ActionResult, ActionType, WaitAction
from webcanvas.action.dispatcher.utils import resolve_locator
from webcanvas.config.settings import Settings
from webcanvas.errors import ElementNotFound
from webcanvas.session.manager import BrowserSessionInfo

logger = logging.getLogger(__name__)


async def execute_wait(session: BrowserSessionInfo, action: WaitAction) -> ActionResult:
	"""Execute a wait action on the page's event loop."""
	started = time.monotonic()
	await session.page.wait_for_timeout(action.duration_ms)
	elapsed_ms = round((time.monotonic() - started) * 1000)

	return ActionResult(
		success=True,
		action=ActionType.WAIT,
		duration_ms=elapsed_ms,
		message=f'Waited {elapsed_ms}ms',
	)


async def capture_element_screenshot(session: BrowserSessionInfo, selector: str, settings: Settings) -> str:
	"""
	Screenshot a single element, resolved through the preview frame.

	Returns:
		Base64-encoded PNG

	Raises:
		ElementNotFound: The selector did not resolve to a visible element in time
	"""
	locator = await resolve_locator(session.page, selector, settings.preview_frame_selector)
	try:
		data = await locator.screenshot(timeout=settings.action_timeout_ms)
	except PlaywrightTimeoutError:
		raise ElementNotFound(f'Element not found: {selector}', details={'selector': selector})
	return base64.b64encode(data).decode('ascii')
