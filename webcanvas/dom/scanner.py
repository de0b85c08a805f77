"""
Element Scanner

Enumerates the interactive elements of a session's page, descending into
child frames, and synthesizes a CSS selector and an XPath for each one.
"""

import logging
import re

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Frame

from webcanvas.dom.scripts import INTERACTIVE_ELEMENT_QUERY, SCAN_ELEMENTS_JS, SKIPPED_TAGS
from webcanvas.dom.views import DetectedElement, InaccessibleFrame, ScanResult
from webcanvas.errors import DomAccessError, SessionNotFound, error_summary
from webcanvas.session.manager import BrowserSessionInfo

logger = logging.getLogger(__name__)

FRAME_PATH_SEPARATOR = ' >>> '

# Ids usable verbatim after `#`: no leading digit, no leading hyphen-digit
_PLAIN_CSS_IDENT = re.compile(r'^-?[A-Za-z_][A-Za-z0-9_-]*$')


def attribute_selector(tag: str, attribute: str, value: str) -> str:
	"""Attribute selector with the value quoted as a CSS string."""
	escaped = value.replace('\\', '\\\\').replace("'", "\\'")
	return f"{tag}[{attribute}='{escaped}']"


def iframe_id_selector(frame_id: str) -> str:
	if _PLAIN_CSS_IDENT.match(frame_id):
		return f'iframe#{frame_id}'
	return attribute_selector('iframe', 'id', frame_id)


class ElementScanner:
	"""
	Scans a page (and its child frames) for elements a test can target.

	The caller is expected to hold the session lock; the scanner itself never
	touches the registry.
	"""

	def __init__(self, max_frame_depth: int = 8):
		self.max_frame_depth = max_frame_depth

	async def scan(self, session: BrowserSessionInfo) -> ScanResult:
		"""
		Scan the session's page.

		Args:
			session: Live session whose page is scanned

		Returns:
			ScanResult with elements in document order, main document first,
			then each child frame depth-first

		Raises:
			DomAccessError: The main document could not be evaluated
			SessionNotFound: The session was closed while the scan was running
		"""
		result = ScanResult()
		main_frame = session.page.main_frame

		try:
			raw_elements = await self._evaluate_frame(main_frame)
		except PlaywrightError as e:
			if session.closed:
				raise SessionNotFound(session.session_id)
			logger.warning(f'[ElementScanner] Main document not accessible for session {session.session_id}: {e}')
			raise DomAccessError(f'Page document is not accessible: {error_summary(e)}')

		result.elements.extend(DetectedElement.model_validate(raw) for raw in raw_elements)
		await self._scan_children(session, main_frame, '', 1, result)

		logger.info(
			f'[ElementScanner] Session {session.session_id}: {len(result.elements)} elements, '
			f'{len(result.inaccessible_frames)} inaccessible frames'
		)
		return result

	async def _scan_children(self, session: BrowserSessionInfo, frame: Frame, path: str, depth: int, result: ScanResult) -> None:
		if depth > self.max_frame_depth:
			logger.debug(f'[ElementScanner] Max frame depth reached at {path!r}')
			return

		for child in frame.child_frames:
			if session.closed:
				raise SessionNotFound(session.session_id)

			segment = await self._frame_segment(child)
			child_path = f'{path}{FRAME_PATH_SEPARATOR}{segment}' if path else segment

			try:
				raw_elements = await self._evaluate_frame(child)
			except PlaywrightError as e:
				if session.closed:
					raise SessionNotFound(session.session_id)
				logger.warning(f'[ElementScanner] ⚠️  Frame {child_path} not accessible: {error_summary(e)}')
				result.inaccessible_frames.append(
					InaccessibleFrame(frame_selector=child_path, url=child.url, reason=error_summary(e))
				)
				continue

			for raw in raw_elements:
				result.elements.append(DetectedElement.model_validate({**raw, 'frameSelector': child_path}))

			await self._scan_children(session, child, child_path, depth + 1, result)

	async def _evaluate_frame(self, frame: Frame) -> list[dict]:
		return await frame.evaluate(
			SCAN_ELEMENTS_JS,
			{'query': INTERACTIVE_ELEMENT_QUERY, 'skippedTags': list(SKIPPED_TAGS)},
		)

	async def _frame_segment(self, frame: Frame) -> str:
		"""Selector for the iframe element hosting ``frame``: id, then name attribute, then frame name."""
		segment = attribute_selector('iframe', 'name', frame.name)
		try:
			handle = await frame.frame_element()
		except PlaywrightError as e:
			logger.debug(f'[ElementScanner] Could not resolve iframe element for frame {frame.name!r}: {e}')
			return segment

		try:
			frame_id = await handle.get_attribute('id')
			if frame_id:
				return iframe_id_selector(frame_id)
			name = await handle.get_attribute('name')
			if name:
				return attribute_selector('iframe', 'name', name)
			logger.debug(f'[ElementScanner] Iframe without id or name, using frame name {frame.name!r}')
			return segment
		except PlaywrightError as e:
			logger.debug(f'[ElementScanner] Could not read iframe attributes: {e}')
			return segment
		finally:
			try:
				await handle.dispose()
			except PlaywrightError as e:
				logger.debug(f'[ElementScanner] Iframe handle dispose failed: {e}')
