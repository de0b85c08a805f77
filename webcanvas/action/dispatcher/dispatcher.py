"""
Main ActionDispatcher class.

Routes parsed actions to their handlers and translates driver failures:
timeouts and ambiguous selectors become failed results, a closed session
becomes SessionNotFound, anything else an ExecutionError.
"""

import logging

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from webcanvas.action.command import (
	Action,
	ActionResult,
	ClickAction,
	FillAction,
	NavigateAction,
	SelectOptionAction,
	VerifyTextAction,
	WaitAction,
)
from webcanvas.action.dispatcher.handlers import interaction as interaction_handlers
from webcanvas.action.dispatcher.handlers import navigation as navigation_handlers
from webcanvas.action.dispatcher.handlers import utility as utility_handlers
from webcanvas.action.dispatcher.handlers import verification as verification_handlers
from webcanvas.action.dispatcher.utils import is_strict_mode_violation
from webcanvas.config.settings import Settings, get_settings
from webcanvas.errors import ClientError, ExecutionError, NavigationError, SessionNotFound, error_summary
from webcanvas.session.driver import BrowserDriver
from webcanvas.session.manager import BrowserSessionInfo

logger = logging.getLogger(__name__)


class ActionDispatcher:
	"""Executes actions against a session's page."""

	def __init__(self, driver: BrowserDriver, settings: Settings | None = None):
		"""Initialize the action dispatcher.

		Args:
			driver: Browser driver, used for navigation
			settings: Service settings (timeouts, preview frame selector)
		"""
		self.driver = driver
		self.settings = settings or get_settings()

	async def execute(self, session: BrowserSessionInfo, action: Action) -> ActionResult:
		"""Execute an action and return the result.

		The caller holds the session lock.

		Args:
			session: Live session to act on
			action: Parsed action

		Returns:
			ActionResult; ``success=False`` for timeouts, ambiguous selectors,
			failed navigations and text mismatches

		Raises:
			SessionNotFound: The session was closed while the action was in flight
			ExecutionError: Unexpected driver failure
		"""
		logger.debug(f'[ActionDispatcher] Session {session.session_id}: executing {action!r}')

		try:
			result = await self._route(session, action)
		except PlaywrightTimeoutError as e:
			self._raise_if_closed(session)
			logger.info(f'[ActionDispatcher] {action.kind.value} timed out: {error_summary(e)}')
			return self._failure(action, f'Timed out: {error_summary(e)}', error_type='timeout')
		except NavigationError as e:
			self._raise_if_closed(session)
			error_type = 'timeout' if e.details.get('reason') == 'timeout' else 'navigation_error'
			return self._failure(action, e.message, error_type=error_type)
		except PlaywrightError as e:
			self._raise_if_closed(session)
			if is_strict_mode_violation(e):
				return self._failure(
					action,
					f'Selector matches more than one element: {getattr(action, "selector", "")}',
					error_type='ambiguous_selector',
				)
			logger.error(f'[ActionDispatcher] {action.kind.value} failed: {type(e).__name__}: {e}', exc_info=True)
			raise ExecutionError(f'Action {action.kind.value} failed: {error_summary(e)}')

		logger.debug(f'[ActionDispatcher] Action result: success={result.success}, message={result.message}')
		return result

	async def _route(self, session: BrowserSessionInfo, action: Action) -> ActionResult:
		if isinstance(action, ClickAction):
			return await interaction_handlers.execute_click(session, action, self.settings)
		elif isinstance(action, FillAction):
			return await interaction_handlers.execute_fill(session, action, self.settings)
		elif isinstance(action, SelectOptionAction):
			return await interaction_handlers.execute_select_option(session, action, self.settings)
		elif isinstance(action, WaitAction):
			return await utility_handlers.execute_wait(session, action)
		elif isinstance(action, NavigateAction):
			return await navigation_handlers.execute_navigate(session, action, self.driver)
		elif isinstance(action, VerifyTextAction):
			return await verification_handlers.execute_verify_text(session, action, self.settings)
		raise ClientError(f'Unsupported action: {action!r}')

	@staticmethod
	def _raise_if_closed(session: BrowserSessionInfo) -> None:
		if session.closed:
			raise SessionNotFound(session.session_id)

	@staticmethod
	def _failure(action: Action, message: str, error_type: str) -> ActionResult:
		result = ActionResult(
			success=False,
			action=action.kind,
			message=message,
			selector=getattr(action, 'selector', None),
			error_type=error_type,
		)
		if isinstance(action, VerifyTextAction):
			result.expected = action.expected
			result.actual = ''
		return result

	async def element_screenshot(self, session: BrowserSessionInfo, selector: str) -> str:
		"""Base64 PNG of one element, resolved the same way actions resolve their targets."""
		try:
			return await utility_handlers.capture_element_screenshot(session, selector, self.settings)
		except PlaywrightError as e:
			self._raise_if_closed(session)
			if is_strict_mode_violation(e):
				raise ClientError(f'Selector matches more than one element: {selector}', details={'selector': selector})
			logger.error(f'[ActionDispatcher] Element screenshot failed: {e}', exc_info=True)
			raise ExecutionError(f'Element screenshot failed: {error_summary(e)}')
