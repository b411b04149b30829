"""
Compositor rotation state via xrandr.
"""

import os
import re
import logging
from dataclasses import dataclass, field
from typing import Dict, Any, List, Mapping, Optional

from ..orientation.models import OrientationSource, RawSignal
from .base import run_probe

logger = logging.getLogger(__name__)

ROTATION_WORDS = ("normal", "left", "right", "inverted")
WAYLAND_NOTE = "Wayland session detected; xrandr shows Xwayland views, not compositor transforms."

_CONNECTED_LINE = re.compile(r"^(\S+)\s+connected\b")
_SUPPORTED_LIST = re.compile(r"\((?:normal|left|right|inverted)\b.*$")


@dataclass
class CompositorFacts:
    """
    Compositor (X11/Xwayland) rotation facts.

    Attributes:
        session_type: XDG_SESSION_TYPE, None when unset
        display: DISPLAY, None when there is no X display
        rotations: Output name -> rotation word ("unknown" when not shown)
        queried: Whether xrandr answered
        notes: Caveats about how to read the rotations
    """
    session_type: Optional[str] = None
    display: Optional[str] = None
    rotations: Dict[str, str] = field(default_factory=dict)
    queried: bool = False
    notes: List[str] = field(default_factory=list)

    def signals(self) -> List[RawSignal]:
        """Get COMPOSITOR signals, one per connected output."""
        return [
            RawSignal(
                source=OrientationSource.COMPOSITOR,
                display_id=name,
                raw_value=rotation,
            )
            for name, rotation in self.rotations.items()
        ]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "session_type": self.session_type,
            "display": self.display,
            "rotations": self.rotations,
            "queried": self.queried,
            "notes": self.notes,
        }


def parse_xrandr_rotations(output: Optional[str]) -> Dict[str, str]:
    """
    Parse connected outputs and their current rotation from xrandr output.

    The current rotation is the first bare rotation word on the output's
    header line; the parenthesized list of supported rotations is ignored.

    Example:
        >>> parse_xrandr_rotations("HDMI-1 connected 1080x1920+0+0 (0x46) left (normal left inverted right x axis y axis)")
        {'HDMI-1': 'left'}
    """
    rotations: Dict[str, str] = {}
    for line in (output or "").splitlines():
        match = _CONNECTED_LINE.match(line)
        if not match:
            continue
        name = match.group(1)
        rotation = "unknown"
        header = _SUPPORTED_LIST.sub("", line)
        for word in header.split()[2:]:
            if word in ROTATION_WORDS:
                rotation = word
                break
        rotations[name] = rotation
    return rotations


def collect_compositor(
    env: Optional[Mapping[str, str]] = None,
    timeout: float = 5.0,
) -> CompositorFacts:
    """
    Collect compositor rotation.

    xrandr is only queried when DISPLAY is set.

    Args:
        env: Environment to read session variables from (defaults to os.environ)
        timeout: Probe timeout

    Returns:
        CompositorFacts
    """
    env = os.environ if env is None else env
    facts = CompositorFacts(
        session_type=env.get("XDG_SESSION_TYPE") or None,
        display=env.get("DISPLAY") or None,
    )

    if facts.session_type == "wayland":
        facts.notes.append(WAYLAND_NOTE)

    if not facts.display:
        logger.debug("No DISPLAY; skipping xrandr")
        return facts

    output = run_probe(["xrandr", "--verbose"], timeout=timeout)
    if output is None:
        return facts

    facts.queried = True
    facts.rotations = parse_xrandr_rotations(output)
    logger.debug(f"xrandr rotations: {facts.rotations}")
    return facts
