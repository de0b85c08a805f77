"""
Element scan models.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
	model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class BoundingBox(_CamelModel):
	"""Viewport-relative box at scan time."""

	x: float
	y: float
	width: float
	height: float


class DetectedElement(_CamelModel):
	"""
	One interactive element found by a scan.

	``selector`` and ``xpath`` are relative to the document the element lives
	in; ``frame_selector`` is the ``>>>``-joined chain of iframe selectors
	leading to that document (empty for the top-level page).
	"""

	tag: str
	id: str | None = None
	classes: list[str] = Field(default_factory=list)
	text: str | None = None
	attributes: dict[str, str] = Field(default_factory=dict)
	xpath: str
	selector: str
	bounding_box: BoundingBox | None = None
	frame_selector: str = ''


class InaccessibleFrame(_CamelModel):
	"""A child frame whose document could not be evaluated."""

	frame_selector: str
	url: str = ''
	reason: str


class ScanResult(_CamelModel):
	elements: list[DetectedElement] = Field(default_factory=list)
	inaccessible_frames: list[InaccessibleFrame] = Field(default_factory=list)

	def to_response(self) -> dict[str, Any]:
		return self.model_dump(mode='json', by_alias=True)
