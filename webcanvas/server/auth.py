"""
Bearer-token authentication for the session API.

Token issuance lives outside this service; the API only verifies tokens via
a pluggable ``TokenVerifier`` stored on ``app.state.token_verifier``. When
no verifier is configured every request is let through as anonymous.
"""

import hmac
import logging

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from webcanvas.errors import Unauthorized

logger = logging.getLogger(__name__)

ANONYMOUS_USER = 'anonymous'

bearer_scheme = HTTPBearer(auto_error=False)


class TokenVerifier:
	"""Resolves a bearer token to a user identity."""

	async def verify(self, token: str) -> str | None:
		"""
		Verify a token.

		Args:
			token: Raw bearer token

		Returns:
			User identity, or None when the token is rejected
		"""
		raise NotImplementedError


class StaticTokenVerifier(TokenVerifier):
	"""Accepts a fixed set of tokens (``WEBCANVAS_API_TOKENS``)."""

	def __init__(self, tokens: list[str]):
		self._tokens = [token for token in tokens if token]

	async def verify(self, token: str) -> str | None:
		for index, known in enumerate(self._tokens):
			if hmac.compare_digest(known.encode(), token.encode()):
				return f'token-{index}'
		return None


async def require_user(
	request: Request,
	credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
	"""FastAPI dependency returning the caller's identity."""
	verifier: TokenVerifier | None = getattr(request.app.state, 'token_verifier', None)
	if verifier is None:
		return ANONYMOUS_USER

	if credentials is None:
		raise Unauthorized('Missing bearer token')

	identity = await verifier.verify(credentials.credentials)
	if identity is None:
		logger.info(f'[API] Rejected bearer token for {request.method} {request.url.path}')
		raise Unauthorized('Invalid bearer token')
	return identity
