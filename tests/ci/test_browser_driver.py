"""
Tests for BrowserDriver error translation, with Playwright objects mocked out.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from webcanvas.config.settings import Settings
from webcanvas.errors import BrowserLaunchError, NavigationError
from webcanvas.session.driver import BrowserDriver


@pytest.fixture
def driver():
	return BrowserDriver(Settings(navigation_timeout_ms=1_000, network_idle_timeout_ms=100))


def make_response(status: int) -> MagicMock:
	response = MagicMock(name='response')
	response.status = status
	response.ok = 200 <= status < 400
	return response


class TestLaunch:
	"""Tests for browser launch."""

	async def test_runtime_missing_after_start(self, driver):
		"""Test that a runtime stopped underneath launch is a launch error."""
		driver.start = AsyncMock()

		with pytest.raises(BrowserLaunchError, match='runtime was stopped'):
			await driver.launch()

	async def test_chromium_launch_failure(self, driver):
		playwright = MagicMock(name='playwright')
		playwright.chromium.launch = AsyncMock(side_effect=PlaywrightError("Executable doesn't exist\nCall log: ..."))
		driver._playwright = playwright

		with pytest.raises(BrowserLaunchError) as exc_info:
			await driver.launch()
		assert exc_info.value.message == "Failed to launch browser: Executable doesn't exist"


class TestNavigate:
	"""Tests for navigation outcomes."""

	async def test_ok_returns_final_url(self, driver):
		page = MagicMock(name='page')
		page.goto = AsyncMock(return_value=make_response(200))
		page.wait_for_load_state = AsyncMock(side_effect=PlaywrightTimeoutError('Timeout 100ms exceeded.'))
		page.url = 'https://example.test/landing'

		assert await driver.navigate(page, 'https://example.test/') == 'https://example.test/landing'

	async def test_error_status(self, driver):
		page = MagicMock(name='page')
		page.goto = AsyncMock(return_value=make_response(404))

		with pytest.raises(NavigationError, match='status 404') as exc_info:
			await driver.navigate(page, 'https://example.test/missing')
		assert exc_info.value.details == {'status': 404}

	async def test_timeout(self, driver):
		page = MagicMock(name='page')
		page.goto = AsyncMock(side_effect=PlaywrightTimeoutError('Timeout 1000ms exceeded.'))

		with pytest.raises(NavigationError) as exc_info:
			await driver.navigate(page, 'https://example.test/')
		assert exc_info.value.details == {'reason': 'timeout'}
