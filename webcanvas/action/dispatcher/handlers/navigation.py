"""
Navigation action handlers.
"""

import logging

from webcanvas.action.command import ActionResult, ActionType, NavigateAction
from webcanvas.session.driver import BrowserDriver
from webcanvas.session.manager import BrowserSessionInfo

logger = logging.getLogger(__name__)


async def execute_navigate(session: BrowserSessionInfo, action: NavigateAction, driver: BrowserDriver) -> ActionResult:
	"""Navigate the session page. Raises NavigationError when the page cannot be loaded."""
	navigated_url = await driver.navigate(session.page, action.url)
	if navigated_url != action.url:
		logger.debug(f'[ActionDispatcher] Navigation redirected: {action.url} → {navigated_url}')
	return ActionResult(
		success=True,
		action=ActionType.NAVIGATE,
		navigated_url=navigated_url,
		message=f'Navigated to {navigated_url}',
	)
