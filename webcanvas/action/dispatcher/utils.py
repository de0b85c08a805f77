"""
Utility functions for action dispatcher.
"""

import logging

from playwright.async_api import Locator, Page

logger = logging.getLogger(__name__)

STRICT_MODE_MARKER = 'strict mode violation'

FORM_CONTROL_TAGS = ('INPUT', 'TEXTAREA', 'SELECT')


async def resolve_locator(page: Page, selector: str, frame_selector: str | None) -> Locator:
	"""
	Locate ``selector`` inside the preview frame.

	Falls back to the page's own document when the page has no element
	matching ``frame_selector`` (the session was opened directly on the
	target page rather than on the authoring UI).

	Args:
		page: Session page
		selector: CSS selector of the target element
		frame_selector: Selector of the hosting iframe, or None to disable frame scoping

	Returns:
		Locator scoped to the frame document or the page document
	"""
	if frame_selector and await page.locator(frame_selector).count() > 0:
		return page.frame_locator(frame_selector).locator(selector)
	logger.debug(f'[ActionDispatcher] No frame matching {frame_selector!r}, resolving {selector!r} on the page')
	return page.locator(selector)


def is_strict_mode_violation(error: Exception) -> bool:
	"""Whether Playwright rejected the action because the selector matched several elements."""
	return STRICT_MODE_MARKER in str(error)
