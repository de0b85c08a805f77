"""Action primitives and execution."""
from webcanvas.action.command import (
	Action,
	ActionRequest,
	ActionResult,
	ActionType,
	ClickAction,
	FillAction,
	NavigateAction,
	SelectOptionAction,
	VerifyTextAction,
	WaitAction,
	parse_action,
)
from webcanvas.action.dispatcher import ActionDispatcher

__all__ = [
	'Action',
	'ActionRequest',
	'ActionResult',
	'ActionType',
	'ClickAction',
	'FillAction',
	'NavigateAction',
	'SelectOptionAction',
	'VerifyTextAction',
	'WaitAction',
	'parse_action',
	'ActionDispatcher',
]
