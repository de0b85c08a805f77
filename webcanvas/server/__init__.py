from webcanvas.server.api import create_app, create_session_router
from webcanvas.server.auth import StaticTokenVerifier, TokenVerifier, require_user

__all__ = [
	'create_app',
	'create_session_router',
	'StaticTokenVerifier',
	'TokenVerifier',
	'require_user',
]
