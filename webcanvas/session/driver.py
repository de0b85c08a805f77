"""
Browser Driver

Thin layer over Playwright's async API: one Playwright runtime per process,
one Chromium process per session. Playwright exceptions raised while
launching or navigating are translated into service errors here.
"""

import asyncio
import base64
import logging

from playwright.async_api import Browser, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from webcanvas.config.settings import Settings, get_settings
from webcanvas.errors import BrowserLaunchError, ExecutionError, NavigationError, error_summary

logger = logging.getLogger(__name__)

# Lets the authoring UI script into the cross-origin preview iframe
CHROMIUM_ARGS = [
	'--disable-web-security',
	'--disable-features=IsolateOrigins,site-per-process',
	'--ignore-certificate-errors',
	'--no-sandbox',
	'--disable-dev-shm-usage',
]


class BrowserDriver:
	"""Launches browsers, opens pages and navigates them."""

	def __init__(self, settings: Settings | None = None):
		self.settings = settings or get_settings()
		self._playwright: Playwright | None = None
		self._start_lock = asyncio.Lock()

	async def start(self) -> None:
		"""Start the Playwright runtime (idempotent)."""
		async with self._start_lock:
			if self._playwright is not None:
				return
			logger.debug('[BrowserDriver] Starting Playwright...')
			self._playwright = await async_playwright().start()
			logger.debug('[BrowserDriver] ✅ Playwright started')

	async def stop(self) -> None:
		async with self._start_lock:
			if self._playwright is None:
				return
			await self._playwright.stop()
			self._playwright = None
			logger.debug('[BrowserDriver] Playwright stopped')

	async def launch(self) -> Browser:
		"""
		Launch a new Chromium process.

		Raises:
			BrowserLaunchError: Playwright could not start or launch Chromium
		"""
		try:
			await self.start()
			playwright = self._playwright
			if playwright is None:
				raise BrowserLaunchError('Failed to launch browser: Playwright runtime was stopped')
			browser = await playwright.chromium.launch(headless=self.settings.headless, args=CHROMIUM_ARGS)
		except PlaywrightError as e:
			logger.error(f'[BrowserDriver] Failed to launch browser: {e}', exc_info=True)
			raise BrowserLaunchError(f'Failed to launch browser: {error_summary(e)}')
		logger.debug(f'[BrowserDriver] Browser launched (headless={self.settings.headless})')
		return browser

	async def new_page(self, browser: Browser) -> Page:
		"""Open a page in a fresh context with the configured viewport."""
		try:
			context = await browser.new_context(
				viewport={'width': self.settings.viewport_width, 'height': self.settings.viewport_height},
				ignore_https_errors=True,
				bypass_csp=True,
			)
			return await context.new_page()
		except PlaywrightError as e:
			raise BrowserLaunchError(f'Failed to open page: {error_summary(e)}')

	async def navigate(self, page: Page, url: str) -> str:
		"""
		Navigate ``page`` to ``url``.

		Waits for DOM content within the navigation timeout, then gives the
		network a bounded chance to go idle.

		Args:
			page: Page to navigate
			url: Target URL

		Returns:
			The page URL after redirects

		Raises:
			NavigationError: The page could not be reached or answered with an error status
		"""
		try:
			response = await page.goto(url, wait_until='domcontentloaded', timeout=self.settings.navigation_timeout_ms)
		except PlaywrightTimeoutError:
			raise NavigationError(f'Timed out loading {url} after {self.settings.navigation_timeout_ms}ms', details={'reason': 'timeout'})
		except PlaywrightError as e:
			raise NavigationError(f'Failed to load {url}: {error_summary(e)}')

		if response is None:
			raise NavigationError(f'Navigation to {url} returned no response')
		if not response.ok:
			raise NavigationError(f'Navigation to {url} failed with status {response.status}', details={'status': response.status})

		try:
			await page.wait_for_load_state('networkidle', timeout=self.settings.network_idle_timeout_ms)
		except PlaywrightTimeoutError:
			logger.debug(f'[BrowserDriver] Network not idle after {self.settings.network_idle_timeout_ms}ms on {url}, continuing')

		return page.url

	async def screenshot(self, page: Page) -> str:
		"""Full-page JPEG screenshot, base64-encoded."""
		try:
			data = await page.screenshot(full_page=True, type='jpeg', quality=80)
		except PlaywrightError as e:
			raise ExecutionError(f'Failed to capture screenshot: {error_summary(e)}')
		return base64.b64encode(data).decode('ascii')

	async def close_browser(self, browser: Browser) -> None:
		try:
			await browser.close()
		except PlaywrightError as e:
			# Already gone (crashed or closed by the driver)
			logger.debug(f'[BrowserDriver] Browser close raised: {e}')
