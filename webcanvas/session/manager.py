"""
Browser Session Manager

Lifecycle authority for live browser sessions:
- Session creation (launch, open page, navigate)
- Lookup with activity refresh and per-session locking
- Explicit close and periodic idle reaping
"""

import asyncio
import logging
import time
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any
from urllib.parse import urlsplit, urlunsplit

from playwright.async_api import Browser, Page
from playwright.async_api import Error as PlaywrightError
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from uuid_extensions import uuid7str

from webcanvas.config.settings import Settings, get_settings
from webcanvas.errors import ExecutionError, SessionNotFound, error_summary
from webcanvas.session.driver import BrowserDriver
from webcanvas.session.observer import LoggingPageObserver, PageEventObserver

logger = logging.getLogger(__name__)


class BrowserSessionInfo:
	"""A live browser session: one Chromium process, one page."""

	def __init__(self, session_id: str, browser: Browser, page: Page, requested_url: str, now: float):
		self.session_id = session_id
		self.browser = browser
		self.page = page
		self.requested_url = requested_url
		self.created_at = now
		self.opened_at = time.time()
		self.last_activity = now
		self.closed = False
		# Serializes scans, actions and screenshots on this page
		self.lock = asyncio.Lock()

	def touch(self, now: float) -> None:
		self.last_activity = now

	def idle_seconds(self, now: float) -> float:
		return max(0.0, now - self.last_activity)

	@property
	def busy(self) -> bool:
		return self.lock.locked()


class SessionCreated(BaseModel):
	"""Response of a session creation."""

	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

	session_id: str
	title: str
	actual_url: str
	screenshot: str | None = None
	reused: bool = False

	def to_response(self) -> dict[str, Any]:
		return self.model_dump(mode='json', by_alias=True, exclude_none=True)


def normalize_url(url: str) -> str:
	"""Canonical form used for explicit session reuse: lowercased scheme and host, no fragment, non-empty path."""
	parts = urlsplit(url.strip())
	path = parts.path or '/'
	return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), path, parts.query, ''))


class BrowserSessionManager:
	"""Registry of live browser sessions keyed by session id."""

	def __init__(
		self,
		driver: BrowserDriver | None = None,
		settings: Settings | None = None,
		observer: PageEventObserver | None = None,
		clock: Callable[[], float] = time.monotonic,
	):
		"""Initialize the session registry.

		Args:
			driver: Browser driver used to launch and navigate pages
			settings: Service settings (defaults to the global settings)
			observer: Page event observer attached to every new page
			clock: Monotonic clock in seconds, injectable for tests
		"""
		self.settings = settings or get_settings()
		self.driver = driver or BrowserDriver(self.settings)
		if observer is None:
			observer = LoggingPageObserver() if self.settings.page_event_logging else PageEventObserver()
		self.observer = observer
		self.clock = clock

		self.sessions: dict[str, BrowserSessionInfo] = {}
		self._lock = asyncio.Lock()
		self._cleanup_task: asyncio.Task | None = None
		self._closing = False

	async def start(self) -> None:
		"""Start the idle reaper."""
		if self._cleanup_task is None:
			self._cleanup_task = asyncio.create_task(self._cleanup_loop())
			logger.info(
				f'[SessionManager] Idle reaper started (idle timeout: {self.settings.idle_timeout_seconds}s, '
				f'interval: {self.settings.reap_interval_seconds}s)'
			)

	async def create(self, url: str, reuse_existing: bool = False) -> SessionCreated:
		"""Create a session navigated to ``url``.

		Args:
			url: Page to open
			reuse_existing: Return an open session whose current URL is exactly ``url`` (after normalization)

		Returns:
			SessionCreated with the new (or reused) session id, title and canonical URL

		Raises:
			BrowserLaunchError: Chromium could not be started
			NavigationError: The page could not be reached or answered with an error status
			ExecutionError: Any other failure while preparing the page, or the manager is shutting down
		"""
		if self._closing:
			raise ExecutionError('Session manager is shutting down')

		if reuse_existing:
			reused = await self._find_reusable(url)
			if reused is not None:
				return reused

		logger.info(f'[SessionManager] Creating session for {url}')
		browser = await self.driver.launch()
		session_id = uuid7str()
		try:
			page = await self.driver.new_page(browser)
			self.observer.attach(page, session_id)
			actual_url = await self.driver.navigate(page, url)
			title = await page.title()
			screenshot = await self.driver.screenshot(page) if self.settings.capture_screenshot else None
		except PlaywrightError as e:
			await self.driver.close_browser(browser)
			raise ExecutionError(f'Failed to prepare session page: {error_summary(e)}')
		except BaseException:
			await self.driver.close_browser(browser)
			raise

		session = BrowserSessionInfo(session_id, browser, page, url, self.clock())
		async with self._lock:
			registered = not self._closing
			if registered:
				self.sessions[session_id] = session
		if not registered:
			# shutdown() already swept the registry
			await self.driver.close_browser(browser)
			raise ExecutionError('Session manager is shutting down')

		logger.info(f'[SessionManager] ✅ Session {session_id} created: {actual_url} ({title!r})')
		return SessionCreated(session_id=session_id, title=title, actual_url=actual_url, screenshot=screenshot)

	async def _find_reusable(self, url: str) -> SessionCreated | None:
		wanted = normalize_url(url)
		async with self._lock:
			for session in self.sessions.values():
				if session.closed or normalize_url(session.page.url) != wanted:
					continue
				session.touch(self.clock())
				break
			else:
				return None

		logger.info(f'[SessionManager] Reusing session {session.session_id} for {url}')
		try:
			title = await session.page.title()
		except PlaywrightError as e:
			logger.warning(f'[SessionManager] Reusable session {session.session_id} not readable: {error_summary(e)}')
			return None
		return SessionCreated(session_id=session.session_id, title=title, actual_url=session.page.url, reused=True)

	async def get(self, session_id: str) -> BrowserSessionInfo:
		"""Look up a live session and refresh its activity clock.

		Raises:
			SessionNotFound: Unknown, closed or reaped session id
		"""
		async with self._lock:
			session = self.sessions.get(session_id)
			if session is None or session.closed:
				raise SessionNotFound(session_id)
			session.touch(self.clock())
			return session

	@asynccontextmanager
	async def acquire(self, session_id: str) -> AsyncIterator[BrowserSessionInfo]:
		"""Look up a session and hold its lock for the duration of the block.

		Usage:
			async with manager.acquire(session_id) as session:
				await session.page.title()
		"""
		session = await self.get(session_id)
		async with session.lock:
			if session.closed:
				raise SessionNotFound(session_id)
			try:
				yield session
			finally:
				session.touch(self.clock())

	async def close(self, session_id: str) -> None:
		"""Close a session and release its browser.

		Does not wait for an in-flight action; that action fails with SessionNotFound.

		Raises:
			SessionNotFound: Unknown or already-closed session id
		"""
		async with self._lock:
			session = self.sessions.pop(session_id, None)
		if session is None:
			raise SessionNotFound(session_id)
		await self._release(session)
		logger.info(f'[SessionManager] Session {session_id} closed')

	async def _release(self, session: BrowserSessionInfo) -> None:
		# Guards the browser handle against a second close
		if session.closed:
			return
		session.closed = True
		await self.driver.close_browser(session.browser)

	async def reap_idle(self) -> list[str]:
		"""Close every session idle for longer than the idle timeout.

		Sessions with an action in flight are skipped.

		Returns:
			Ids of the sessions that were closed
		"""
		now = self.clock()
		async with self._lock:
			expired = [
				session
				for session in self.sessions.values()
				if session.idle_seconds(now) > self.settings.idle_timeout_seconds and not session.busy
			]
			for session in expired:
				del self.sessions[session.session_id]

		for session in expired:
			logger.info(f'[SessionManager] Closing idle session {session.session_id} (idle {session.idle_seconds(now):.0f}s)')
			try:
				await self._release(session)
			except Exception as e:
				logger.error(f'[SessionManager] Error closing idle session {session.session_id}: {e}', exc_info=True)

		return [session.session_id for session in expired]

	async def _cleanup_loop(self) -> None:
		"""Background task that reaps idle sessions on a fixed interval."""
		while True:
			try:
				await asyncio.sleep(self.settings.reap_interval_seconds)
				await self.reap_idle()
			except asyncio.CancelledError:
				break
			except Exception as e:
				logger.error(f'[SessionManager] Error in cleanup loop: {e}', exc_info=True)

	def list_sessions(self) -> list[dict[str, Any]]:
		"""Snapshot of live sessions."""
		now = self.clock()
		return [
			{
				'sessionId': session.session_id,
				'url': session.page.url,
				'createdAt': session.opened_at,
				'idleSeconds': round(session.idle_seconds(now), 3),
				'busy': session.busy,
			}
			for session in list(self.sessions.values())
			if not session.closed
		]

	async def shutdown(self) -> None:
		"""Stop the reaper and close all sessions."""
		if self._cleanup_task:
			self._cleanup_task.cancel()
			try:
				await self._cleanup_task
			except asyncio.CancelledError:
				pass
			self._cleanup_task = None

		async with self._lock:
			self._closing = True
			sessions = list(self.sessions.values())
			self.sessions.clear()

		for session in sessions:
			try:
				await self._release(session)
			except Exception as e:
				logger.error(f'[SessionManager] Error closing session {session.session_id} on shutdown: {e}', exc_info=True)

		await self.driver.stop()
		logger.info(f'[SessionManager] Shutdown complete ({len(sessions)} sessions closed)')
