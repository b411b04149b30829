"""
Chromium kiosk processes.

A kiosk browser can carry its own rotation or scale flags, so running
instances are listed next to the display facts.
"""

import re
import logging
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional

from .base import run_probe

logger = logging.getLogger(__name__)

_BROWSER = re.compile(r"chromium|chrome")


@dataclass
class BrowserProcess:
    """One chromium or chrome process."""
    pid: int
    command: str

    @property
    def kiosk(self) -> bool:
        return "--kiosk" in self.command.split()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "pid": self.pid,
            "command": self.command,
            "kiosk": self.kiosk,
        }


@dataclass
class KioskFacts:
    """Browser processes found by ps; queried is False when ps could not run."""
    processes: List[BrowserProcess] = field(default_factory=list)
    queried: bool = False

    @property
    def kiosk_processes(self) -> List[BrowserProcess]:
        return [p for p in self.processes if p.kiosk]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "queried": self.queried,
            "processes": [p.to_dict() for p in self.processes],
        }


def parse_browser_processes(text: Optional[str]) -> List[BrowserProcess]:
    """
    Pick chromium/chrome lines out of ``ps -eo pid,cmd`` output.

    The header line and lines without a numeric pid are skipped.
    """
    processes = []
    for line in (text or "").splitlines():
        parts = line.strip().split(None, 1)
        if len(parts) != 2 or not parts[0].isdigit():
            continue
        pid, command = parts
        if _BROWSER.search(command):
            processes.append(BrowserProcess(pid=int(pid), command=command))
    return processes


def collect_kiosk(timeout: float = 5.0) -> KioskFacts:
    """List running chromium/chrome processes."""
    output = run_probe(["ps", "-eo", "pid,cmd"], timeout=timeout)
    if output is None:
        return KioskFacts()

    facts = KioskFacts(processes=parse_browser_processes(output), queried=True)
    logger.debug(f"{len(facts.processes)} browser processes, {len(facts.kiosk_processes)} in kiosk mode")
    return facts
