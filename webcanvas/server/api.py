"""
HTTP API for the browser-session service.

Routes:
- POST   /api/sessions                              create a session
- GET    /api/sessions                              list live sessions
- DELETE /api/sessions/{session_id}                 close a session
- GET    /api/sessions/{session_id}/elements        scan for elements
- GET    /api/sessions/{session_id}/elements/screenshot?selector=
- POST   /api/sessions/{session_id}/actions         execute an action
- POST   /api/detect-elements                       one-shot create, scan, close
- GET    /health                                    unauthenticated
"""

import logging
from contextlib import asynccontextmanager
from urllib.parse import urlsplit

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from webcanvas.action.command import ActionRequest, parse_action
from webcanvas.action.dispatcher import ActionDispatcher
from webcanvas.config.settings import Settings, get_settings
from webcanvas.dom.scanner import ElementScanner
from webcanvas.errors import ClientError, SessionNotFound, WebCanvasError
from webcanvas.server.auth import StaticTokenVerifier, TokenVerifier, require_user
from webcanvas.session.driver import BrowserDriver
from webcanvas.session.manager import BrowserSessionManager

logger = logging.getLogger(__name__)

SERVICE_NAME = 'webcanvas-session-api'


class CreateSessionRequest(BaseModel):
	"""Body of POST /api/sessions."""

	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

	url: str = Field(..., description='Page to open in the new session')
	reuse_existing: bool = Field(default=False, description='Reuse an open session already on exactly this URL')


class DetectElementsRequest(BaseModel):
	url: str


def _validate_url(url: str) -> str:
	url = url.strip()
	if not url:
		raise ClientError('URL is required')
	parts = urlsplit(url)
	if parts.scheme not in ('http', 'https') or not parts.netloc:
		raise ClientError(f'URL must be an absolute http(s) URL: {url}')
	return url


def create_session_router(
	manager: BrowserSessionManager,
	scanner: ElementScanner,
	dispatcher: ActionDispatcher,
) -> APIRouter:
	"""
	Create the session API router.

	Args:
		manager: Session registry
		scanner: Element scanner
		dispatcher: Action dispatcher

	Returns:
		APIRouter mounted under ``/api``
	"""
	router = APIRouter(prefix='/api', tags=['sessions'], dependencies=[Depends(require_user)])

	@router.post('/sessions', status_code=201)
	async def create_session(body: CreateSessionRequest):
		"""Open a browser session on ``url``."""
		url = _validate_url(body.url)
		logger.info(f'[API] Create session: {url} (reuse_existing={body.reuse_existing})')
		created = await manager.create(url, reuse_existing=body.reuse_existing)
		return JSONResponse(created.to_response(), status_code=201)

	@router.get('/sessions')
	async def list_sessions():
		return {'sessions': manager.list_sessions()}

	@router.delete('/sessions/{session_id}')
	async def close_session(session_id: str):
		await manager.close(session_id)
		return {'message': f'Session {session_id} closed'}

	@router.get('/sessions/{session_id}/elements')
	async def scan_elements(session_id: str):
		"""Scan the session's page (and its frames) for interactive elements."""
		async with manager.acquire(session_id) as session:
			result = await scanner.scan(session)
		return JSONResponse(result.to_response())

	@router.get('/sessions/{session_id}/elements/screenshot')
	async def element_screenshot(session_id: str, selector: str = Query(..., min_length=1)):
		async with manager.acquire(session_id) as session:
			screenshot = await dispatcher.element_screenshot(session, selector)
		return {'selector': selector, 'screenshot': screenshot}

	@router.post('/sessions/{session_id}/actions')
	async def execute_action(session_id: str, body: ActionRequest):
		"""Execute one action; failed interactions are reported with ``success: false``."""
		action = parse_action(body, max_wait_ms=dispatcher.settings.max_wait_ms)
		async with manager.acquire(session_id) as session:
			result = await dispatcher.execute(session, action)
		logger.info(f'[API] Session {session_id}: {action.kind.value} → success={result.success}')
		return JSONResponse(result.to_response())

	@router.post('/detect-elements')
	async def detect_elements(body: DetectElementsRequest):
		"""Open a throwaway session on ``url``, scan it, and close it."""
		url = _validate_url(body.url)
		created = await manager.create(url)
		try:
			async with manager.acquire(created.session_id) as session:
				result = await scanner.scan(session)
		finally:
			try:
				await manager.close(created.session_id)
			except SessionNotFound:
				logger.debug(f'[API] Detection session {created.session_id} already closed')
		return JSONResponse(result.to_response())

	return router


def _error_response(error: WebCanvasError) -> JSONResponse:
	headers = {'WWW-Authenticate': 'Bearer'} if error.status_code == 401 else None
	return JSONResponse({'error': error.to_dict()}, status_code=error.status_code, headers=headers)


def _setup_exception_handlers(app: FastAPI) -> None:
	@app.exception_handler(WebCanvasError)
	async def webcanvas_error_handler(request: Request, exc: WebCanvasError):
		if exc.status_code >= 500:
			logger.error(f'[API] {request.method} {request.url.path} failed: {exc.error_type}: {exc.message}')
		else:
			logger.info(f'[API] {request.method} {request.url.path} → {exc.status_code} {exc.error_type}: {exc.message}')
		return _error_response(exc)

	@app.exception_handler(RequestValidationError)
	async def validation_error_handler(request: Request, exc: RequestValidationError):
		messages = []
		for error in exc.errors():
			location = '.'.join(str(part) for part in error.get('loc', ()) if part != 'body')
			messages.append(f'{location}: {error.get("msg")}' if location else str(error.get('msg')))
		return _error_response(ClientError('; '.join(messages) or 'Invalid request'))

	@app.exception_handler(Exception)
	async def unhandled_error_handler(request: Request, exc: Exception):
		logger.error(f'[API] Unhandled error on {request.method} {request.url.path}: {exc}', exc_info=True)
		return JSONResponse(
			{'error': {'type': 'internal_error', 'message': 'Internal server error'}},
			status_code=500,
		)


def create_app(
	settings: Settings | None = None,
	manager: BrowserSessionManager | None = None,
	driver: BrowserDriver | None = None,
	token_verifier: TokenVerifier | None = None,
) -> FastAPI:
	"""
	Build the FastAPI application.

	Args:
		settings: Service settings (defaults to the global settings)
		manager: Session registry (built from ``driver`` and ``settings`` if omitted)
		driver: Browser driver (a Playwright-backed driver if omitted)
		token_verifier: Bearer token verifier; defaults to the configured static tokens, if any

	Returns:
		FastAPI app whose lifespan starts the idle reaper and closes all sessions on shutdown
	"""
	settings = settings or get_settings()
	if manager is None:
		manager = BrowserSessionManager(driver=driver or BrowserDriver(settings), settings=settings)
	if token_verifier is None and settings.api_tokens:
		token_verifier = StaticTokenVerifier(settings.api_tokens)

	scanner = ElementScanner()
	dispatcher = ActionDispatcher(manager.driver, settings)

	@asynccontextmanager
	async def lifespan(app: FastAPI):
		logger.info(f'[API] Starting {SERVICE_NAME}')
		await manager.start()
		try:
			yield
		finally:
			logger.info('[API] Shutting down, closing all sessions')
			await manager.shutdown()

	app = FastAPI(title='webcanvas Browser Session API', lifespan=lifespan)
	app.state.settings = settings
	app.state.session_manager = manager
	app.state.token_verifier = token_verifier

	app.add_middleware(
		CORSMiddleware,
		allow_origins=settings.cors_origins,
		allow_credentials=True,
		allow_methods=['*'],
		allow_headers=['*'],
	)

	_setup_exception_handlers(app)

	@app.get('/health')
	async def health_check():
		"""Health check endpoint."""
		return {
			'status': 'ok',
			'service': SERVICE_NAME,
			'sessions': len(manager.list_sessions()),
		}

	app.include_router(create_session_router(manager, scanner, dispatcher))
	return app
