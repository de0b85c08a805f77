"""
Verification action handlers.
"""

import logging

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from webcanvas.action.command import ActionResult, ActionType, VerifyTextAction
from webcanvas.action.dispatcher.utils import FORM_CONTROL_TAGS, resolve_locator
from webcanvas.config.settings import Settings
from webcanvas.dom.scripts import TAG_NAME_JS
from webcanvas.session.manager import BrowserSessionInfo

logger = logging.getLogger(__name__)


async def execute_verify_text(session: BrowserSessionInfo, action: VerifyTextAction, settings: Settings) -> ActionResult:
	"""
	Compare the element's text with the expected value, both trimmed.

	Text content is read first; when it is empty and the element is a form
	control, its input value is used instead.
	"""
	timeout = settings.verify_timeout_ms
	locator = await resolve_locator(session.page, action.selector, settings.preview_frame_selector)

	text = await locator.text_content(timeout=timeout)
	if text is None or not text.strip():
		try:
			tag = await locator.evaluate(TAG_NAME_JS, timeout=timeout)
			if str(tag).upper() in FORM_CONTROL_TAGS:
				text = await locator.input_value(timeout=timeout)
		except PlaywrightTimeoutError:
			raise
		except PlaywrightError as e:
			if session.closed:
				raise
			logger.warning(f'[ActionDispatcher] Could not read input value for {action.selector!r}, using text content: {e}')

	actual = (text or '').strip()
	expected = action.expected.strip()
	success = actual == expected

	if success:
		message = 'Text verification successful.'
	else:
		message = f'Text verification failed. Expected: "{expected}", Actual: "{actual}"'

	return ActionResult(
		success=success,
		action=ActionType.VERIFY_TEXT,
		selector=action.selector,
		expected=action.expected,
		actual=actual,
		message=message,
	)
