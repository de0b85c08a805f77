from webcanvas.session.driver import BrowserDriver
from webcanvas.session.manager import BrowserSessionInfo, BrowserSessionManager, SessionCreated
from webcanvas.session.observer import LoggingPageObserver, PageEventObserver

__all__ = [
	'BrowserDriver',
	'BrowserSessionInfo',
	'BrowserSessionManager',
	'SessionCreated',
	'LoggingPageObserver',
	'PageEventObserver',
]
