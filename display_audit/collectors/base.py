"""
Helpers for probing external tools and kernel files.

A probe that cannot produce output (tool missing, launch failure,
timeout) returns None; callers treat that as an unknown signal.
"""

import logging
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0


def have(tool: str) -> bool:
    """Check whether a tool is on PATH."""
    return shutil.which(tool) is not None


def run_probe(cmd: List[str], timeout: float = DEFAULT_TIMEOUT) -> Optional[str]:
    """
    Run an external tool and return its stdout.

    Args:
        cmd: argv list; cmd[0] is looked up on PATH
        timeout: Seconds before the probe is abandoned

    Returns:
        stdout text (possibly empty), or None when the tool is absent,
        cannot be launched or times out
    """
    if not cmd or shutil.which(cmd[0]) is None:
        logger.debug(f"Tool not available: {cmd[0] if cmd else '<empty>'}")
        return None

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        logger.warning(f"Probe timed out after {timeout}s: {' '.join(cmd)}")
        return None
    except OSError as e:
        logger.warning(f"Probe failed to start: {' '.join(cmd)}: {e}")
        return None

    if result.returncode != 0:
        logger.debug(f"Probe exited with {result.returncode}: {' '.join(cmd)}")
    return result.stdout


def read_text(path, max_bytes: int = 200_000) -> Optional[str]:
    """
    Read a text file, returning None when it cannot be read.

    Args:
        path: File path
        max_bytes: Read at most this many bytes

    Returns:
        Decoded contents, or None on any OS error
    """
    try:
        with open(Path(path), "rb") as f:
            data = f.read(max_bytes)
    except OSError as e:
        logger.debug(f"Cannot read {path}: {e}")
        return None
    return data.decode(errors="replace")


def grep_lines(text: Optional[str], pattern, max_hits: Optional[int] = None) -> List[str]:
    """Return lines of text matching a compiled regex."""
    if not text:
        return []
    hits = [line for line in text.splitlines() if pattern.search(line)]
    if max_hits is not None:
        hits = hits[:max_hits]
    return hits
