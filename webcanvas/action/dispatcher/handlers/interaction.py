"""
Interaction action handlers.

Handles click, fill and select-option actions. Locator timeouts propagate
to the dispatcher, which reports them as failed results.
"""

import logging

from webcanvas.action.command import ActionResult, ActionType, ClickAction, FillAction, SelectOptionAction
from webcanvas.action.dispatcher.utils import resolve_locator
from webcanvas.config.settings import Settings
from webcanvas.session.manager import BrowserSessionInfo

logger = logging.getLogger(__name__)


async def execute_click(session: BrowserSessionInfo, action: ClickAction, settings: Settings) -> ActionResult:
	"""Execute a click action."""
	locator = await resolve_locator(session.page, action.selector, settings.preview_frame_selector)
	await locator.click(timeout=settings.action_timeout_ms)
	return ActionResult(
		success=True,
		action=ActionType.CLICK,
		selector=action.selector,
		message=f'Clicked {action.selector}',
	)


async def execute_fill(session: BrowserSessionInfo, action: FillAction, settings: Settings) -> ActionResult:
	"""Execute a type/fill action (replaces the current value)."""
	locator = await resolve_locator(session.page, action.selector, settings.preview_frame_selector)
	await locator.fill(action.value, timeout=settings.action_timeout_ms)
	return ActionResult(
		success=True,
		action=ActionType.TYPE,
		selector=action.selector,
		message=f'Filled {action.selector}',
	)


async def execute_select_option(session: BrowserSessionInfo, action: SelectOptionAction, settings: Settings) -> ActionResult:
	"""Execute a select-option action."""
	locator = await resolve_locator(session.page, action.selector, settings.preview_frame_selector)
	selected = await locator.select_option(action.value, timeout=settings.action_timeout_ms)
	logger.debug(f'[ActionDispatcher] Selected {selected} in {action.selector}')
	return ActionResult(
		success=True,
		action=ActionType.SELECT,
		selector=action.selector,
		message=f'Selected {action.value!r} in {action.selector}',
	)
