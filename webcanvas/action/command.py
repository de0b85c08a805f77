"""
Action primitives for the session API.

The wire format is a flat ``{action, selector?, value?}`` object. It is parsed
once, at the API boundary, into one of six action models; each model carries
only the fields its kind needs, so the dispatcher never re-validates input.
"""

import math
import time
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from webcanvas.errors import ClientError

DEFAULT_WAIT_MS = 1000
MAX_WAIT_MS = 60_000


class ActionType(str, Enum):
	"""Kinds of actions that can be executed against a session."""

	CLICK = 'click'
	TYPE = 'type'
	SELECT = 'select'
	WAIT = 'wait'
	NAVIGATE = 'navigate'
	VERIFY_TEXT = 'verify_text'


# Wire spellings accepted for each action kind
ACTION_ALIASES: dict[str, ActionType] = {
	'click': ActionType.CLICK,
	'type': ActionType.TYPE,
	'fill': ActionType.TYPE,
	'select': ActionType.SELECT,
	'select_option': ActionType.SELECT,
	'wait': ActionType.WAIT,
	'navigate': ActionType.NAVIGATE,
	'goto_url': ActionType.NAVIGATE,
	'verify_text': ActionType.VERIFY_TEXT,
}


class ActionRequest(BaseModel):
	"""Raw action request as received over HTTP."""

	action: str = Field(..., description='Action kind (click, type/fill, select, wait, navigate/goto_url, verify_text)')
	selector: str | None = Field(default=None, description='CSS selector of the target element')
	value: str | None = Field(default=None, description='Text to type/verify, option value, URL, or wait milliseconds')

	@field_validator('value', mode='before')
	@classmethod
	def coerce_value(cls, v: Any) -> Any:
		"""Accept numbers for ``value`` (e.g. wait durations) and keep them as strings."""
		if isinstance(v, bool):
			raise ValueError('value must be a string or a number')
		if isinstance(v, (int, float)):
			return str(v)
		return v


class ClickAction(BaseModel):
	"""Click the element matched by ``selector``."""

	kind: Literal[ActionType.CLICK] = ActionType.CLICK
	selector: str


class FillAction(BaseModel):
	"""Clear the element matched by ``selector`` and fill it with ``value``."""

	kind: Literal[ActionType.TYPE] = ActionType.TYPE
	selector: str
	value: str


class SelectOptionAction(BaseModel):
	"""Select the option with ``value`` in the ``<select>`` matched by ``selector``."""

	kind: Literal[ActionType.SELECT] = ActionType.SELECT
	selector: str
	value: str


class WaitAction(BaseModel):
	"""Pause on the page's event loop."""

	kind: Literal[ActionType.WAIT] = ActionType.WAIT
	duration_ms: int = Field(default=DEFAULT_WAIT_MS, ge=0)


class NavigateAction(BaseModel):
	"""Navigate the session's page to ``url``."""

	kind: Literal[ActionType.NAVIGATE] = ActionType.NAVIGATE
	url: str


class VerifyTextAction(BaseModel):
	"""Assert that the element's text (or input value) equals ``expected`` after trimming."""

	kind: Literal[ActionType.VERIFY_TEXT] = ActionType.VERIFY_TEXT
	selector: str
	expected: str


Action = Annotated[
	Union[ClickAction, FillAction, SelectOptionAction, WaitAction, NavigateAction, VerifyTextAction],
	Field(discriminator='kind'),
]


def _require_selector(request: ActionRequest, kind: ActionType) -> str:
	if request.selector is None or not request.selector.strip():
		raise ClientError(f'Selector required for {kind.value} action')
	return request.selector


def _require_value(request: ActionRequest, kind: ActionType, allow_empty: bool = True) -> str:
	if request.value is None or (not allow_empty and not request.value.strip()):
		raise ClientError(f'Value required for {kind.value} action')
	return request.value


def _parse_wait_duration(value: str | None, max_wait_ms: int) -> int:
	if value is None or not value.strip():
		return DEFAULT_WAIT_MS
	try:
		duration = float(value)
	except ValueError:
		raise ClientError(f'Wait value must be a number of milliseconds, got: {value!r}')
	if not math.isfinite(duration):
		raise ClientError(f'Wait value must be a finite number of milliseconds, got: {value!r}')
	duration_ms = int(duration)
	if duration_ms < 0:
		raise ClientError(f'Wait value must not be negative, got: {duration_ms}')
	if duration_ms > max_wait_ms:
		raise ClientError(
			f'Wait value must not exceed {max_wait_ms} ms, got: {duration_ms}',
			details={'max_wait_ms': max_wait_ms},
		)
	return duration_ms


def parse_action(request: ActionRequest, max_wait_ms: int = MAX_WAIT_MS) -> Action:
	"""
	Turn a raw wire request into a typed action.

	Args:
		request: The raw action request
		max_wait_ms: Longest accepted wait duration

	Returns:
		One of the six action models

	Raises:
		ClientError: unknown action kind, a required selector/value is missing, or a wait value out of range
	"""
	kind = ACTION_ALIASES.get(request.action.strip().lower())
	if kind is None:
		raise ClientError(f'Unsupported action: {request.action}', details={'supported': sorted(ACTION_ALIASES)})

	if kind is ActionType.CLICK:
		return ClickAction(selector=_require_selector(request, kind))
	if kind is ActionType.TYPE:
		selector = _require_selector(request, kind)
		return FillAction(selector=selector, value=_require_value(request, kind))
	if kind is ActionType.SELECT:
		selector = _require_selector(request, kind)
		return SelectOptionAction(selector=selector, value=_require_value(request, kind, allow_empty=False))
	if kind is ActionType.WAIT:
		return WaitAction(duration_ms=_parse_wait_duration(request.value, max_wait_ms))
	if kind is ActionType.NAVIGATE:
		return NavigateAction(url=_require_value(request, kind, allow_empty=False).strip())
	if kind is ActionType.VERIFY_TEXT:
		selector = _require_selector(request, kind)
		return VerifyTextAction(selector=selector, expected=_require_value(request, kind))

	raise ClientError(f'Unsupported action: {request.action}')


class ActionResult(BaseModel):
	"""Result of executing an action. Failed interactions and assertions are results, not errors."""

	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

	success: bool = Field(..., description='Whether the action (and its assertion, if any) succeeded')
	action: ActionType = Field(..., description='Kind of action that was executed')
	message: str = Field(default='', description='Human-readable outcome')
	selector: str | None = Field(default=None, description='Target selector, for element actions')
	expected: str | None = Field(default=None, description='Expected text (verify_text)')
	actual: str | None = Field(default=None, description='Actual trimmed text (verify_text)')
	navigated_url: str | None = Field(default=None, description='Resolved URL after navigation')
	duration_ms: int | None = Field(default=None, description='Elapsed milliseconds (wait)')
	error_type: str | None = Field(default=None, description='Failure class: timeout or ambiguous_selector')
	timestamp: float = Field(default_factory=time.time, description='Timestamp of result')

	def to_response(self) -> dict[str, Any]:
		"""Serialize for the HTTP response (camelCase, unset optionals dropped)."""
		return self.model_dump(mode='json', by_alias=True, exclude_none=True)
