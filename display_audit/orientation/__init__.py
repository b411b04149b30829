"""
Orientation Reconciliation Module

Normalizes rotation signals from the kernel command line, DRM panel
properties, the compositor and firmware overlays, then combines them into
an effective orientation per display with conflict detection.
"""

from .models import (
    CONSOLE_DISPLAY_ID,
    ConflictFinding,
    ConflictKind,
    DisplayOrientationRecord,
    NormalizedAngle,
    OrientationSource,
    RawSignal,
)
from .normalizer import add, normalize, normalize_signal
from .resolver import ConflictResolver
from .overlay import OverlayLine, parse_overlay_line, select_overlay_signal
from .calibration import touch_matrix, libinput_calibration, xinput_command

__all__ = [
    "CONSOLE_DISPLAY_ID",
    "ConflictFinding",
    "ConflictKind",
    "DisplayOrientationRecord",
    "NormalizedAngle",
    "OrientationSource",
    "RawSignal",
    "add",
    "normalize",
    "normalize_signal",
    "ConflictResolver",
    "OverlayLine",
    "parse_overlay_line",
    "select_overlay_signal",
    "touch_matrix",
    "libinput_calibration",
    "xinput_command",
]
