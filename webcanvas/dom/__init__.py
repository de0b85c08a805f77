from webcanvas.dom.scanner import ElementScanner
from webcanvas.dom.views import BoundingBox, DetectedElement, InaccessibleFrame, ScanResult

__all__ = [
	'ElementScanner',
	'BoundingBox',
	'DetectedElement',
	'InaccessibleFrame',
	'ScanResult',
]
