"""
Input devices from /proc/bus/input/devices, used for touch calibration hints,
plus the libinput, xinput and udev views of the same devices.
"""

import re
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, List, Optional

from .base import read_text, run_probe

logger = logging.getLogger(__name__)

_TOUCH_NAME = re.compile(r"touch|ft5406|ft5x06|goodix|ili2|egalax|eeti|stmpe|ads7846|xpt2046", re.IGNORECASE)

# ABS_MT_POSITION_X is bit 0x35 of the absolute axis bitmap
_ABS_MT_POSITION_X = 0x35

# by-path entries worth asking udev about
_BY_PATH_ENTRY = re.compile(r"event|mouse")


@dataclass
class InputDevice:
    """One kernel input device."""
    name: str
    handlers: List[str] = field(default_factory=list)
    abs_bits: Optional[int] = None

    @property
    def is_touch(self) -> bool:
        """Heuristic: multitouch axes or a touch-controller name."""
        if self.abs_bits is not None and self.abs_bits >> _ABS_MT_POSITION_X & 1:
            return True
        return bool(_TOUCH_NAME.search(self.name))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "name": self.name,
            "handlers": self.handlers,
            "touch": self.is_touch,
        }


def _parse_abs_bitmap(value: str) -> Optional[int]:
    # Words are printed most significant first, each 64 (or 32) bits wide
    words = value.split()
    if not words:
        return None
    width = 64 if any(len(w) > 8 for w in words) else 32
    bits = 0
    try:
        for word in words:
            bits = (bits << width) | int(word, 16)
    except ValueError:
        return None
    return bits


def parse_input_devices(text: Optional[str]) -> List[InputDevice]:
    """Parse the blank-line separated device blocks."""
    devices = []
    for block in re.split(r"\n\s*\n", text or ""):
        name = None
        handlers: List[str] = []
        abs_bits = None
        for line in block.splitlines():
            if line.startswith("N: Name="):
                name = line[len("N: Name="):].strip().strip('"')
            elif line.startswith("H: Handlers="):
                handlers = line[len("H: Handlers="):].split()
            elif line.startswith("B: ABS="):
                abs_bits = _parse_abs_bitmap(line[len("B: ABS="):])
        if name:
            devices.append(InputDevice(name=name, handlers=handlers, abs_bits=abs_bits))
    return devices


def collect_inputs(path: str = "/proc/bus/input/devices") -> List[InputDevice]:
    """Read and parse the kernel input device list."""
    devices = parse_input_devices(read_text(path))
    touch = [d.name for d in devices if d.is_touch]
    logger.debug(f"{len(devices)} input devices, touch: {touch}")
    return devices


@dataclass
class UdevInput:
    """udev properties of one /dev/input/by-path entry."""
    path: str
    properties: Dict[str, str] = field(default_factory=dict)

    @property
    def is_touch(self) -> bool:
        return self.properties.get("ID_INPUT_TOUCHSCREEN") == "1"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "path": self.path,
            "properties": dict(self.properties),
            "touch": self.is_touch,
        }


@dataclass
class InputToolFacts:
    """
    Input device listings from userspace tools.

    Attributes:
        libinput: ``libinput list-devices`` output, None when unavailable
        xinput: ``xinput --list`` output, None without xinput or an X session
        udev: Properties for event and mouse nodes under /dev/input/by-path
    """
    libinput: Optional[str] = None
    xinput: Optional[str] = None
    udev: List[UdevInput] = field(default_factory=list)

    @property
    def udev_touch(self) -> List[UdevInput]:
        return [u for u in self.udev if u.is_touch]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "libinput": self.libinput,
            "xinput": self.xinput,
            "udev": [u.to_dict() for u in self.udev],
        }


def parse_udev_properties(text: Optional[str]) -> Dict[str, str]:
    """Parse ``udevadm info -q property`` KEY=VALUE lines."""
    properties = {}
    for line in (text or "").splitlines():
        key, sep, value = line.strip().partition("=")
        if sep and key:
            properties[key] = value
    return properties


def list_by_path(by_path_dir: str = "/dev/input/by-path") -> List[Path]:
    """List event and mouse entries under by_path_dir, sorted by name."""
    root = Path(by_path_dir)
    if not root.is_dir():
        logger.debug(f"No input by-path directory at {by_path_dir}")
        return []
    return sorted(p for p in root.iterdir() if _BY_PATH_ENTRY.search(p.name))


def _listing(cmd: List[str], timeout: float) -> Optional[str]:
    output = run_probe(cmd, timeout=timeout)
    if output is None or not output.strip():
        return None
    return output.rstrip("\n")


def collect_input_tools(
    by_path_dir: str = "/dev/input/by-path",
    timeout: float = 5.0,
) -> InputToolFacts:
    """
    Gather libinput, xinput and udev views of the input devices.

    Args:
        by_path_dir: Directory of persistent input device links
        timeout: Probe timeout per tool call

    Returns:
        InputToolFacts; a missing or silent tool leaves its field empty
    """
    facts = InputToolFacts(
        libinput=_listing(["libinput", "list-devices"], timeout),
        xinput=_listing(["xinput", "--list"], timeout),
    )
    for entry in list_by_path(by_path_dir):
        output = run_probe(["udevadm", "info", "-q", "property", "-n", str(entry)], timeout=timeout)
        properties = parse_udev_properties(output)
        if properties:
            facts.udev.append(UdevInput(path=str(entry), properties=properties))

    logger.debug(
        f"libinput={'yes' if facts.libinput else 'no'} xinput={'yes' if facts.xinput else 'no'} "
        f"udev entries={len(facts.udev)} touch={[u.path for u in facts.udev_touch]}"
    )
    return facts
