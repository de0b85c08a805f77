"""
webcanvas - Browser-Session Orchestration Service

Creates and tears down remote-controlled browser sessions, scans their pages
for interactive elements and executes UI actions against them.
"""

from webcanvas.action.command import ActionRequest, ActionResult, ActionType, parse_action
from webcanvas.action.dispatcher import ActionDispatcher
from webcanvas.dom.scanner import ElementScanner
from webcanvas.dom.views import DetectedElement, ScanResult
from webcanvas.session.driver import BrowserDriver
from webcanvas.session.manager import BrowserSessionInfo, BrowserSessionManager, SessionCreated

__all__ = [
	'ActionRequest',
	'ActionResult',
	'ActionType',
	'parse_action',
	'ActionDispatcher',
	'ElementScanner',
	'DetectedElement',
	'ScanResult',
	'BrowserDriver',
	'BrowserSessionInfo',
	'BrowserSessionManager',
	'SessionCreated',
]
