"""
Boot-time facts: kernel command line, fbcon rotation and boot splash.
"""

import re
import logging
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional

from ..orientation.models import CONSOLE_DISPLAY_ID, OrientationSource, RawSignal
from .base import read_text, run_probe

logger = logging.getLogger(__name__)

_FBCON_ROTATE = re.compile(r"fbcon=rotate:([0-3])")
_VIDEO_PARAM = re.compile(r"video=\S*")


@dataclass
class BootFacts:
    """
    Boot configuration relevant to console orientation.

    Attributes:
        cmdline: Raw kernel command line (None when unreadable)
        fbcon_index: fbcon rotation index as text, None when not set
        video_params: video= parameters in command line order
        plymouth_theme: Active boot splash theme, None when plymouth is absent
    """
    cmdline: Optional[str] = None
    fbcon_index: Optional[str] = None
    video_params: List[str] = field(default_factory=list)
    plymouth_theme: Optional[str] = None

    def signal(self) -> Optional[RawSignal]:
        """Get the fbcon signal for the console identity."""
        if self.fbcon_index is None:
            return None
        return RawSignal(
            source=OrientationSource.CMDLINE,
            display_id=CONSOLE_DISPLAY_ID,
            raw_value=self.fbcon_index,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "cmdline": self.cmdline,
            "fbcon_index": self.fbcon_index,
            "video_params": self.video_params,
            "plymouth_theme": self.plymouth_theme,
        }


def parse_fbcon_index(cmdline: Optional[str]) -> Optional[str]:
    """Find the first fbcon=rotate:<0-3> token and return its index."""
    if not cmdline:
        return None
    match = _FBCON_ROTATE.search(cmdline)
    return match.group(1) if match else None


def parse_video_params(cmdline: Optional[str]) -> List[str]:
    """Collect all video= parameters."""
    if not cmdline:
        return []
    return _VIDEO_PARAM.findall(cmdline)


def parse_plymouth_theme(output: Optional[str]) -> Optional[str]:
    """Extract the theme name from plymouth-set-default-theme output."""
    if not output:
        return None
    for line in output.splitlines():
        words = line.split()
        if words:
            return words[-1]
    return None


def collect_boot(
    cmdline_path: str = "/proc/cmdline",
    timeout: float = 5.0,
) -> BootFacts:
    """
    Collect boot facts.

    Args:
        cmdline_path: Kernel command line file
        timeout: Timeout for the plymouth probe

    Returns:
        BootFacts; fields stay None when their source is unavailable
    """
    cmdline = read_text(cmdline_path)
    if cmdline is not None:
        cmdline = cmdline.strip()

    facts = BootFacts(
        cmdline=cmdline,
        fbcon_index=parse_fbcon_index(cmdline),
        video_params=parse_video_params(cmdline),
        plymouth_theme=parse_plymouth_theme(
            run_probe(["plymouth-set-default-theme"], timeout=timeout)
        ),
    )
    logger.debug(f"fbcon index: {facts.fbcon_index}, video params: {facts.video_params}")
    return facts
