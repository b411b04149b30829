"""
Kernel log hints: panel orientation messages, panel quirks, framebuffer handoff.
"""

import re
import logging
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional

from .base import grep_lines, run_probe

logger = logging.getLogger(__name__)

_PANEL_ORIENTATION = re.compile(r"panel_orientation", re.IGNORECASE)
_QUIRK = re.compile(r"quirk", re.IGNORECASE)
_QUIRK_SUBJECT = re.compile(r"panel|backlight", re.IGNORECASE)
_FRAMEBUFFER = re.compile(r"efifb|simpledrm|drmfb|fbcon")


@dataclass
class KernelLogFacts:
    """Kernel log lines relevant to orientation."""
    available: bool = False
    panel_lines: List[str] = field(default_factory=list)
    quirk_lines: List[str] = field(default_factory=list)
    framebuffer_lines: List[str] = field(default_factory=list)

    @property
    def panel_evidence(self) -> bool:
        """Whether the kernel mentioned panel_orientation at all."""
        return bool(self.panel_lines)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "available": self.available,
            "panel_lines": self.panel_lines,
            "quirk_lines": self.quirk_lines,
            "framebuffer_lines": self.framebuffer_lines,
        }


def parse_kernel_log(text: Optional[str], framebuffer_lines: int = 50) -> KernelLogFacts:
    """
    Extract orientation hints from dmesg output.

    Args:
        text: dmesg output (None when dmesg could not be read)
        framebuffer_lines: Keep this many trailing framebuffer handoff lines

    Returns:
        KernelLogFacts
    """
    if text is None:
        return KernelLogFacts()

    quirks = [line for line in grep_lines(text, _QUIRK) if _QUIRK_SUBJECT.search(line)]
    framebuffer = grep_lines(text, _FRAMEBUFFER)
    tail = framebuffer[-framebuffer_lines:] if framebuffer_lines > 0 else []

    return KernelLogFacts(
        available=True,
        panel_lines=grep_lines(text, _PANEL_ORIENTATION),
        quirk_lines=quirks,
        framebuffer_lines=tail,
    )


def collect_kernel_log(timeout: float = 5.0, framebuffer_lines: int = 50) -> KernelLogFacts:
    """Read dmesg and extract orientation hints."""
    facts = parse_kernel_log(run_probe(["dmesg"], timeout=timeout), framebuffer_lines)
    if facts.available:
        logger.debug(
            f"dmesg: {len(facts.panel_lines)} panel_orientation lines, "
            f"{len(facts.quirk_lines)} quirk lines"
        )
    return facts
