"""
Pytest configuration and shared fixtures for all tests.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from webcanvas.config.settings import Settings
from webcanvas.session.manager import BrowserSessionManager

HEADING_ELEMENT = {
	'tag': 'H1',
	'id': None,
	'classes': ['title'],
	'text': 'Example Domain',
	'attributes': {'class': 'title'},
	'xpath': '/html[1]/body[1]/h1[1]',
	'selector': 'html > body:nth-of-type(1) > h1:nth-of-type(1)',
	'boundingBox': {'x': 8, 'y': 21, 'width': 784, 'height': 37},
}


class FakeClock:
	"""Manually advanced monotonic clock."""

	def __init__(self, start: float = 1000.0):
		self.now = start

	def __call__(self) -> float:
		return self.now

	def advance(self, seconds: float) -> None:
		self.now += seconds


def make_locator() -> MagicMock:
	"""Locator whose interaction methods are all awaitable."""
	locator = MagicMock(name='locator')
	locator.count = AsyncMock(return_value=0)
	locator.click = AsyncMock(return_value=None)
	locator.fill = AsyncMock(return_value=None)
	locator.select_option = AsyncMock(side_effect=lambda value, timeout=None: [value])
	locator.text_content = AsyncMock(return_value='')
	locator.evaluate = AsyncMock(return_value='DIV')
	locator.input_value = AsyncMock(return_value='')
	locator.screenshot = AsyncMock(return_value=b'png-bytes')
	return locator


def make_page(locator: MagicMock | None = None, has_preview_frame: bool = False, elements: list | None = None) -> MagicMock:
	"""
	Page double covering what the service touches.

	``page.locator('#web-preview-iframe').count()`` reports whether the
	preview frame exists; every other selector resolves to ``locator``.
	"""
	locator = locator or make_locator()
	preview_frame = MagicMock(name='preview_frame')
	preview_frame.count = AsyncMock(return_value=1 if has_preview_frame else 0)

	page = MagicMock(name='page')
	page.url = 'about:blank'
	page.title = AsyncMock(return_value='Fake Page')
	page.locator = MagicMock(side_effect=lambda selector: preview_frame if selector == '#web-preview-iframe' else locator)
	page.frame_locator.return_value.locator.return_value = locator
	page.wait_for_timeout = AsyncMock(return_value=None)
	page.main_frame.child_frames = []
	page.main_frame.evaluate = AsyncMock(return_value=list(elements if elements is not None else [HEADING_ELEMENT]))
	page.test_locator = locator
	page.test_preview_frame = preview_frame
	return page


class FakeDriver:
	"""In-memory stand-in for BrowserDriver."""

	def __init__(self):
		self.launched: list[MagicMock] = []
		self.closed: list[MagicMock] = []
		self.pages: list[MagicMock] = []
		self.launch_error: Exception | None = None
		self.navigate_error: Exception | None = None
		self.navigate_gate: asyncio.Event | None = None
		self.title = 'Fake Page'
		self.stopped = False

	async def start(self) -> None:
		pass

	async def stop(self) -> None:
		self.stopped = True

	async def launch(self):
		if self.launch_error is not None:
			raise self.launch_error
		browser = MagicMock(name=f'browser-{len(self.launched)}')
		self.launched.append(browser)
		return browser

	async def new_page(self, browser):
		page = make_page()
		page.title = AsyncMock(return_value=self.title)
		self.pages.append(page)
		return page

	async def navigate(self, page, url: str) -> str:
		if self.navigate_gate is not None:
			await self.navigate_gate.wait()
		if self.navigate_error is not None:
			raise self.navigate_error
		page.url = url
		return url

	async def screenshot(self, page) -> str:
		return 'ZmFrZS1zY3JlZW5zaG90'

	async def close_browser(self, browser) -> None:
		self.closed.append(browser)


@pytest.fixture(scope='function')
def settings():
	"""Default settings, independent of the process environment."""
	return Settings()


@pytest.fixture(scope='function')
def clock():
	return FakeClock()


@pytest.fixture(scope='function')
def fake_driver():
	return FakeDriver()


@pytest.fixture(scope='function')
def session_manager(fake_driver, settings, clock):
	"""Create a BrowserSessionManager backed by the fake driver."""
	return BrowserSessionManager(driver=fake_driver, settings=settings, clock=clock)


@pytest.fixture(scope='function')
def locator_factory():
	return make_locator


@pytest.fixture(scope='function')
def page_factory():
	return make_page
