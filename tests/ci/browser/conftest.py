"""
Fixtures for tests that drive a real headless Chromium.

Pages are served by pytest-httpserver. Tests are skipped when Chromium
cannot be launched (e.g. ``playwright install chromium`` was not run).
"""

import pytest
from pytest_httpserver import HTTPServer

from webcanvas.config.settings import Settings
from webcanvas.errors import BrowserLaunchError
from webcanvas.session.driver import BrowserDriver
from webcanvas.session.manager import BrowserSessionManager

ELEMENTS_PAGE = """<html><head><title>Elements</title><style>p { margin: 4px; }</style></head><body>
<h1>Example Domain</h1>
<div class="card">
	<p>First paragraph</p>
	<p>Second paragraph</p>
	<span>no id, not matched</span>
	<span id="badge">New</span>
</div>
<div class="card">
	<p>Third paragraph</p>
	<button>Save</button>
	<button>Cancel</button>
	<a href="/next">Next</a>
</div>
<form id="signup">
	<input type="text" name="first">
	<input type="text" name="last">
	<select name="country"><option value="nl">NL</option><option value="be">BE</option></select>
	<textarea></textarea>
</form>
<ul>
	<li><a href="#one">One</a></li>
	<li><a href="#two">Two</a></li>
	<li><div role="button" data-testid="menu">Menu</div></li>
</ul>
<div id="panel"><h2>Panel</h2><div><p>Nested</p><p>Nested again</p></div></div>
<form action="/search">
	<input type="hidden" name="id" value="42">
	<input type="text" name="q">
	<button type="submit">Search</button>
</form>
<span id="1st">Starts with a digit</span>
<span id='say "hi"'>Quoted</span>
</body></html>"""

FORM_PAGE = """<html><head><title>Form</title></head><body>
<h1 id="greeting">  Hello World  </h1>
<input id="answer" value="42">
<select id="country"><option value="nl">NL</option><option value="be">BE</option></select>
<input id="name" type="text">
<p class="dup">one</p><p class="dup">two</p>
</body></html>"""

HOST_PAGE = """<html><head><title>Authoring UI</title></head><body>
<h1>Editor</h1>
<iframe id="web-preview-iframe" src="/inner"></iframe>
</body></html>"""

INNER_PAGE = """<html><head><title>Preview</title></head><body>
<h1>Preview</h1>
<button id="inner-btn" onclick="document.getElementById('inner-status').textContent = 'clicked'">Go</button>
<p id="inner-status">idle</p>
</body></html>"""


@pytest.fixture(scope='session')
def http_server():
	"""Create a test HTTP server serving the test pages."""
	server = HTTPServer()
	server.start()

	for path, body in (
		('/elements', ELEMENTS_PAGE),
		('/form', FORM_PAGE),
		('/host', HOST_PAGE),
		('/inner', INNER_PAGE),
	):
		server.expect_request(path).respond_with_data(body, content_type='text/html')
	server.expect_request('/broken').respond_with_data('boom', status=500, content_type='text/plain')

	yield server
	server.clear()
	if server.is_running():
		server.stop()


@pytest.fixture(scope='session')
def base_url(http_server):
	"""Return the base URL for the test HTTP server."""
	return f'http://{http_server.host}:{http_server.port}'


@pytest.fixture(scope='function')
def browser_settings():
	return Settings(capture_screenshot=True, navigation_timeout_ms=15_000, network_idle_timeout_ms=2_000)


@pytest.fixture(scope='function')
async def browser_manager(browser_settings):
	"""Session registry over a real Playwright driver; skips if Chromium is unavailable."""
	driver = BrowserDriver(browser_settings)
	try:
		browser = await driver.launch()
	except BrowserLaunchError as e:
		await driver.stop()
		pytest.skip(f'Chromium not available: {e.message}')
	await driver.close_browser(browser)

	manager = BrowserSessionManager(driver=driver, settings=browser_settings)
	yield manager
	await manager.shutdown()
