"""
Tests for the session REST API.

Runs the FastAPI app in-process over httpx's ASGI transport, with the
session registry backed by the fake driver.
"""

from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from webcanvas.errors import BrowserLaunchError, NavigationError
from webcanvas.server.api import create_app
from webcanvas.server.auth import StaticTokenVerifier


@pytest.fixture
def app(settings, session_manager):
	return create_app(settings=settings, manager=session_manager)


@pytest.fixture
async def client(app):
	async with AsyncClient(transport=ASGITransport(app=app), base_url='http://testserver') as client:
		yield client


async def create_session(client, url='https://example.test/') -> str:
	response = await client.post('/api/sessions', json={'url': url})
	assert response.status_code == 201
	return response.json()['sessionId']


class TestCreateSession:
	"""Tests for POST /api/sessions."""

	async def test_create(self, client):
		response = await client.post('/api/sessions', json={'url': 'https://example.test/'})

		assert response.status_code == 201
		body = response.json()
		assert body['sessionId']
		assert body['title'] == 'Fake Page'
		assert body['actualUrl'] == 'https://example.test/'
		assert body['screenshot'] == 'ZmFrZS1zY3JlZW5zaG90'
		assert body['reused'] is False

	async def test_reuse_existing(self, client):
		session_id = await create_session(client)

		response = await client.post('/api/sessions', json={'url': 'https://example.test/', 'reuseExisting': True})

		assert response.status_code == 201
		assert response.json()['sessionId'] == session_id
		assert response.json()['reused'] is True

	async def test_missing_url(self, client):
		response = await client.post('/api/sessions', json={})

		assert response.status_code == 400
		assert response.json()['error']['type'] == 'client_error'
		assert 'url' in response.json()['error']['message']

	@pytest.mark.parametrize('url', ['', 'example.test', 'ftp://example.test/file'])
	async def test_invalid_url(self, client, url):
		response = await client.post('/api/sessions', json={'url': url})

		assert response.status_code == 400
		assert response.json()['error']['type'] == 'client_error'

	async def test_navigation_error(self, client, fake_driver):
		fake_driver.navigate_error = NavigationError('Navigation to https://example.test/ failed with status 503')

		response = await client.post('/api/sessions', json={'url': 'https://example.test/'})

		assert response.status_code == 502
		assert response.json() == {
			'error': {
				'type': 'navigation_error',
				'message': 'Navigation to https://example.test/ failed with status 503',
			}
		}
		assert fake_driver.closed == fake_driver.launched

	async def test_launch_error(self, client, fake_driver):
		fake_driver.launch_error = BrowserLaunchError('Failed to launch browser: executable missing')

		response = await client.post('/api/sessions', json={'url': 'https://example.test/'})

		assert response.status_code == 500
		assert response.json()['error']['type'] == 'browser_launch_error'


class TestCloseSession:
	"""Tests for DELETE /api/sessions/{id}."""

	async def test_close(self, client):
		session_id = await create_session(client)

		response = await client.delete(f'/api/sessions/{session_id}')

		assert response.status_code == 200
		assert session_id in response.json()['message']

	async def test_double_close(self, client):
		session_id = await create_session(client)
		await client.delete(f'/api/sessions/{session_id}')

		response = await client.delete(f'/api/sessions/{session_id}')

		assert response.status_code == 404
		assert response.json()['error']['type'] == 'session_not_found'


class TestScanElements:
	"""Tests for GET /api/sessions/{id}/elements."""

	async def test_scan(self, client):
		session_id = await create_session(client)

		response = await client.get(f'/api/sessions/{session_id}/elements')

		assert response.status_code == 200
		body = response.json()
		assert body['inaccessibleFrames'] == []
		assert body['elements'][0]['tag'] == 'H1'
		assert body['elements'][0]['boundingBox']['height'] == 37

	async def test_scan_unknown_session(self, client):
		response = await client.get('/api/sessions/does-not-exist/elements')

		assert response.status_code == 404
		assert response.json()['error']['type'] == 'session_not_found'

	async def test_scan_dom_access_error(self, client, fake_driver):
		session_id = await create_session(client)
		fake_driver.pages[-1].main_frame.evaluate = AsyncMock(side_effect=PlaywrightError('Execution context was destroyed'))

		response = await client.get(f'/api/sessions/{session_id}/elements')

		assert response.status_code == 500
		assert response.json()['error']['type'] == 'dom_access_error'

	async def test_scan_after_close(self, client):
		session_id = await create_session(client)
		await client.delete(f'/api/sessions/{session_id}')

		response = await client.get(f'/api/sessions/{session_id}/elements')

		assert response.status_code == 404


class TestExecuteAction:
	"""Tests for POST /api/sessions/{id}/actions."""

	async def test_click(self, client, fake_driver):
		session_id = await create_session(client)

		response = await client.post(f'/api/sessions/{session_id}/actions', json={'action': 'click', 'selector': 'h1'})

		assert response.status_code == 200
		assert response.json()['success'] is True
		assert response.json()['action'] == 'click'
		fake_driver.pages[-1].test_locator.click.assert_awaited_once_with(timeout=10_000)

	async def test_failed_action_is_200(self, client, fake_driver):
		"""Test that a timed-out interaction is a normal response with success false."""
		session_id = await create_session(client)
		fake_driver.pages[-1].test_locator.click.side_effect = PlaywrightTimeoutError('Timeout 10000ms exceeded.')

		response = await client.post(f'/api/sessions/{session_id}/actions', json={'action': 'click', 'selector': '#nope'})

		assert response.status_code == 200
		assert response.json()['success'] is False
		assert response.json()['errorType'] == 'timeout'

	async def test_verify_text(self, client, fake_driver):
		session_id = await create_session(client)
		fake_driver.pages[-1].test_locator.text_content.return_value = '  Hello World  '

		response = await client.post(
			f'/api/sessions/{session_id}/actions',
			json={'action': 'verify_text', 'selector': 'h1', 'value': 'Hello World'},
		)

		body = response.json()
		assert body['success'] is True
		assert body['expected'] == 'Hello World'
		assert body['actual'] == 'Hello World'

	async def test_wait_with_numeric_value(self, client):
		session_id = await create_session(client)

		response = await client.post(f'/api/sessions/{session_id}/actions', json={'action': 'wait', 'value': 0})

		assert response.status_code == 200
		assert response.json()['success'] is True
		assert 'durationMs' in response.json()

	@pytest.mark.parametrize('value', ['inf', '1e400', '1e15'])
	async def test_out_of_range_wait_is_400(self, client, value):
		session_id = await create_session(client)

		response = await client.post(f'/api/sessions/{session_id}/actions', json={'action': 'wait', 'value': value})

		assert response.status_code == 400
		assert response.json()['error']['type'] == 'client_error'

	async def test_unsupported_action(self, client):
		session_id = await create_session(client)

		response = await client.post(f'/api/sessions/{session_id}/actions', json={'action': 'hover', 'selector': 'h1'})

		assert response.status_code == 400
		assert 'Unsupported action' in response.json()['error']['message']

	async def test_missing_selector(self, client):
		session_id = await create_session(client)

		response = await client.post(f'/api/sessions/{session_id}/actions', json={'action': 'click'})

		assert response.status_code == 400

	async def test_unknown_session(self, client):
		response = await client.post('/api/sessions/unknown/actions', json={'action': 'click', 'selector': 'h1'})

		assert response.status_code == 404

	async def test_driver_failure_is_500(self, client, fake_driver):
		session_id = await create_session(client)
		fake_driver.pages[-1].test_locator.click.side_effect = PlaywrightError('Element is not attached to the DOM')

		response = await client.post(f'/api/sessions/{session_id}/actions', json={'action': 'click', 'selector': 'h1'})

		assert response.status_code == 500
		assert response.json()['error']['type'] == 'execution_error'


class TestAuxiliaryRoutes:
	"""Tests for listing, element screenshots, one-shot detection and health."""

	async def test_list_sessions(self, client):
		session_id = await create_session(client)

		response = await client.get('/api/sessions')

		assert response.status_code == 200
		assert [s['sessionId'] for s in response.json()['sessions']] == [session_id]

	async def test_element_screenshot(self, client):
		session_id = await create_session(client)

		response = await client.get(f'/api/sessions/{session_id}/elements/screenshot', params={'selector': '#logo'})

		assert response.status_code == 200
		assert response.json() == {'selector': '#logo', 'screenshot': 'cG5nLWJ5dGVz'}

	async def test_element_screenshot_not_found(self, client, fake_driver):
		session_id = await create_session(client)
		fake_driver.pages[-1].test_locator.screenshot.side_effect = PlaywrightTimeoutError('Timeout 10000ms exceeded.')

		response = await client.get(f'/api/sessions/{session_id}/elements/screenshot', params={'selector': '#nope'})

		assert response.status_code == 404
		assert response.json()['error']['type'] == 'element_not_found'

	async def test_detect_elements_closes_session(self, client, session_manager, fake_driver):
		response = await client.post('/api/detect-elements', json={'url': 'https://example.test/'})

		assert response.status_code == 200
		assert response.json()['elements'][0]['tag'] == 'H1'
		assert session_manager.sessions == {}
		assert fake_driver.closed == fake_driver.launched

	async def test_health(self, client):
		response = await client.get('/health')

		assert response.status_code == 200
		assert response.json()['status'] == 'ok'
		assert response.json()['sessions'] == 0


class TestAuthentication:
	"""Tests for bearer-token verification."""

	@pytest.fixture
	async def secured_client(self, settings, session_manager):
		app = create_app(settings=settings, manager=session_manager, token_verifier=StaticTokenVerifier(['s3cret']))
		async with AsyncClient(transport=ASGITransport(app=app), base_url='http://testserver') as client:
			yield client

	async def test_missing_token(self, secured_client):
		response = await secured_client.get('/api/sessions')

		assert response.status_code == 401
		assert response.json()['error']['type'] == 'unauthorized'
		assert response.headers['www-authenticate'] == 'Bearer'

	async def test_wrong_token(self, secured_client):
		response = await secured_client.get('/api/sessions', headers={'Authorization': 'Bearer nope'})

		assert response.status_code == 401

	async def test_valid_token(self, secured_client):
		response = await secured_client.post(
			'/api/sessions',
			json={'url': 'https://example.test/'},
			headers={'Authorization': 'Bearer s3cret'},
		)

		assert response.status_code == 201

	async def test_health_is_public(self, secured_client):
		response = await secured_client.get('/health')

		assert response.status_code == 200

	async def test_tokens_from_settings(self, session_manager):
		from webcanvas.config.settings import Settings

		app = create_app(settings=Settings(api_tokens=['from-env']), manager=session_manager)
		async with AsyncClient(transport=ASGITransport(app=app), base_url='http://testserver') as client:
			assert (await client.get('/api/sessions')).status_code == 401
			response = await client.get('/api/sessions', headers={'Authorization': 'Bearer from-env'})
			assert response.status_code == 200
