"""
Error taxonomy for the browser-session service.

Every error raised across a component boundary is one of these classes.
Driver-level (Playwright) exceptions are translated before they reach the
HTTP layer; the API maps ``status_code`` straight onto the response.
"""

from typing import Any


class WebCanvasError(Exception):
	"""
	Base class for service errors.

	Maps to HTTP status codes via ``status_code``:
	- 400 Bad Request: malformed or incomplete request
	- 401 Unauthorized: missing or rejected bearer token
	- 404 Not Found: unknown session or element
	- 500 Internal Server Error: browser, execution or page document access failure
	- 502 Bad Gateway: target page unreachable
	"""

	status_code: int = 500
	error_type: str = 'internal_error'

	def __init__(self, message: str, status_code: int | None = None, details: dict[str, Any] | None = None):
		"""
		Initialize the error.

		Args:
			message: Human-readable error message (safe to return to clients)
			status_code: Optional override of the class HTTP status code
			details: Additional structured error details
		"""
		super().__init__(message)
		self.message = message
		if status_code is not None:
			self.status_code = status_code
		self.details = details or {}

	def to_dict(self) -> dict[str, Any]:
		body: dict[str, Any] = {'type': self.error_type, 'message': self.message}
		if self.details:
			body['details'] = self.details
		return body


class Unauthorized(WebCanvasError):
	"""Missing or rejected bearer token."""

	status_code = 401
	error_type = 'unauthorized'


class ClientError(WebCanvasError):
	"""Malformed or incomplete request. Never retried."""

	status_code = 400
	error_type = 'client_error'


class ElementNotFound(ClientError):
	"""Selector did not resolve to an element in time (element screenshot)."""

	status_code = 404
	error_type = 'element_not_found'


class SessionNotFound(WebCanvasError):
	"""Session id is unknown, closed or reaped."""

	status_code = 404
	error_type = 'session_not_found'

	def __init__(self, session_id: str):
		super().__init__(f'Session not found: {session_id}', details={'session_id': session_id})
		self.session_id = session_id


class BrowserLaunchError(WebCanvasError):
	"""The browser process could not be started."""

	status_code = 500
	error_type = 'browser_launch_error'


class NavigationError(WebCanvasError):
	"""The target page could not be reached or answered with an error status."""

	status_code = 502
	error_type = 'navigation_error'


class DomAccessError(WebCanvasError):
	"""The page document could not be read (navigated away, closed, cross-origin)."""

	status_code = 500
	error_type = 'dom_access_error'


class ExecutionError(WebCanvasError):
	"""Unexpected failure while driving the page. The session may be broken."""

	status_code = 500
	error_type = 'execution_error'


def error_summary(error: BaseException) -> str:
	"""First line of an exception message (Playwright appends multi-line call logs)."""
	message = str(error).strip()
	return message.splitlines()[0] if message else type(error).__name__
