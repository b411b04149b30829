"""
Firmware overlay line parsing.

Extracts rotate= / orientation= hints from Raspberry Pi style
``dtoverlay=<name>,<param>=<value>,...`` configuration lines.
"""

import re
import logging
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional

from .models import CONSOLE_DISPLAY_ID, OrientationSource, RawSignal

logger = logging.getLogger(__name__)

ROTATION_KEYS = ("rotate", "orientation")

# Overlays that drive a panel directly; their params are worth showing even without rotation
PANEL_OVERLAY_PATTERN = re.compile(
    r"^(dpi|tc358|ili|waveshare|tinylcd|goodix|edt-ft5x06|rpi-dpi|panel)"
)

_DTOVERLAY_LINE = re.compile(r"^\s*dtoverlay\s*=(.*)$", re.IGNORECASE)


@dataclass
class OverlayLine:
    """
    One parsed dtoverlay line.

    Attributes:
        name: Overlay identifier (text before the first comma)
        params: Parameters in file order; bare flags map to ""
        signals: rotate=/orientation= hints, both kept when present
        source_line: Cleaned line text
    """
    name: str
    params: Dict[str, str] = field(default_factory=dict)
    signals: List[RawSignal] = field(default_factory=list)
    source_line: str = ""

    @property
    def has_rotation_hint(self) -> bool:
        return bool(self.signals)

    @property
    def is_panel_overlay(self) -> bool:
        return bool(PANEL_OVERLAY_PATTERN.match(self.name.lower()))

    @property
    def param_string(self) -> str:
        """Parameters rendered back to their comma-separated form."""
        return ",".join(f"{k}={v}" if v != "" else k for k, v in self.params.items())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "params": dict(self.params),
            "signals": [s.raw_value for s in self.signals],
            "panel_overlay": self.is_panel_overlay,
        }


def strip_comment(line: str) -> str:
    """Drop a trailing ``#`` comment and surrounding whitespace."""
    return line.split("#", 1)[0].strip()


def parse_overlay_line(
    line: str,
    display_id: str = CONSOLE_DISPLAY_ID,
) -> Optional[OverlayLine]:
    """
    Parse one configuration line.

    Args:
        line: Raw line from config.txt (comments allowed)
        display_id: Display identity to attach to extracted signals

    Returns:
        OverlayLine, or None when the line is not a usable dtoverlay line
    """
    cleaned = strip_comment(line)
    match = _DTOVERLAY_LINE.match(cleaned)
    if not match:
        return None

    parts = [p.strip() for p in match.group(1).split(",")]
    name = parts[0] if parts else ""
    if not name or "=" in name:
        logger.debug(f"Skipping malformed overlay line: {line.strip()!r}")
        return None

    params: Dict[str, str] = {}
    assignments = []
    for part in parts[1:]:
        if not part:
            continue
        key, sep, value = part.partition("=")
        key = key.strip()
        if not key:
            logger.debug(f"Ignoring empty parameter key in overlay line: {line.strip()!r}")
            continue
        params[key] = value.strip() if sep else ""
        assignments.append((key.lower(), params[key]))

    signals = []
    for key in ROTATION_KEYS:
        # Keys are matched case-insensitively; the last assignment wins,
        # matching the order the firmware applies them in
        values = [v for k, v in assignments if k == key]
        if values:
            signals.append(RawSignal(
                source=OrientationSource.FIRMWARE_OVERLAY,
                display_id=display_id,
                raw_value=f"{key}={values[-1]}",
            ))

    return OverlayLine(name=name, params=params, signals=signals, source_line=cleaned)


def select_overlay_signal(signals: List[RawSignal]) -> Optional[RawSignal]:
    """
    Pick the signal that represents an overlay line.

    orientation= is preferred over rotate= since it is semantically
    more specific.
    """
    for key in ("orientation", "rotate"):
        for signal in signals:
            if signal.raw_value.lower().startswith(f"{key}="):
                return signal
    return None


def parse_overlay_lines(text: str, display_id: str = CONSOLE_DISPLAY_ID) -> List[OverlayLine]:
    """Parse every dtoverlay line in a config file, skipping malformed ones."""
    overlays = []
    for line in text.splitlines():
        overlay = parse_overlay_line(line, display_id=display_id)
        if overlay is not None:
            overlays.append(overlay)
    return overlays
