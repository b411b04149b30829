"""
DRM connector facts from sysfs, drm_info/modetest and edid-decode.
"""

import re
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, List, Optional, Tuple

from ..orientation.models import OrientationSource, RawSignal
from .base import have, read_text, run_probe

logger = logging.getLogger(__name__)

_CARD_PREFIX = re.compile(r"^card\d+-")
_ORIENTATION_LINE = re.compile(r"panel.?orientation", re.IGNORECASE)
_ENUM_ENTRY = re.compile(r"([A-Za-z][A-Za-z _-]*?)\s*=\s*(\d+)")
# Lines that start the next connector in modetest output
_CONNECTOR_HEADER = re.compile(
    r"^\d+\s+\d+\s+(?:connected|disconnected|unknown)",
    re.IGNORECASE,
)

# drm_info prints a box-drawing tree; these match lines with the tree prefix removed
_TREE_PREFIX = re.compile(r"^[\s│├└─]+")
_DRM_INFO_NODE = re.compile(r"^Node:\s*\S*?(card\d+)")
_DRM_INFO_OBJECT = re.compile(r"^(Connector|Encoder|CRTC|Plane)\s+\d+$")
_DRM_INFO_TYPE = re.compile(r"^Type:\s*(\S+)")

EDID_MISSING_DECODER = "edid present (install edid-decode for details)"
EDID_EMPTY = "edid node present but empty"
EDID_UNPARSED = "edid present, could not parse summary"


@dataclass
class DrmConnector:
    """
    One DRM connector as seen in sysfs.

    Attributes:
        sysfs_name: Directory name, e.g. "card0-eDP-1"
        status: Content of the status file ("connected", "disconnected", ...)
        modes: First modes from the modes file, None when there is no modes file
        panel_orientation: panel_orientation in kernel vocabulary, None when unknown
        edid_summary: Human readable EDID summary, None when no EDID node exists
    """
    sysfs_name: str
    status: str = "unknown"
    modes: Optional[List[str]] = None
    panel_orientation: Optional[str] = None
    edid_summary: Optional[str] = None

    @property
    def name(self) -> str:
        """Connector name without the card prefix (xrandr style)."""
        return plain_connector_name(self.sysfs_name)

    @property
    def connected(self) -> bool:
        return self.status == "connected"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "sysfs_name": self.sysfs_name,
            "name": self.name,
            "status": self.status,
            "modes": self.modes,
            "panel_orientation": self.panel_orientation,
            "edid_summary": self.edid_summary,
        }


@dataclass
class DrmFacts:
    """All DRM facts gathered during one audit."""
    connectors: List[DrmConnector] = field(default_factory=list)
    orientation_tool: Optional[str] = None
    edid_nodes: int = 0
    unmatched_edid: Dict[str, str] = field(default_factory=dict)

    def connector(self, name: str) -> Optional[DrmConnector]:
        """Find a connector by plain or sysfs name."""
        for conn in self.connectors:
            if name in (conn.name, conn.sysfs_name):
                return conn
        return None

    def signals(self) -> List[RawSignal]:
        """Get KERNEL_PANEL signals for connectors with a known property."""
        return [
            RawSignal(
                source=OrientationSource.KERNEL_PANEL,
                display_id=conn.name,
                raw_value=conn.panel_orientation,
            )
            for conn in self.connectors
            if conn.panel_orientation is not None
        ]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "connectors": [c.to_dict() for c in self.connectors],
            "orientation_tool": self.orientation_tool,
            "edid_nodes": self.edid_nodes,
            "unmatched_edid": self.unmatched_edid,
        }


def plain_connector_name(sysfs_name: str) -> str:
    """Map a sysfs connector (card0-HDMI-A-1) to its plain name (HDMI-A-1)."""
    return _CARD_PREFIX.sub("", sysfs_name)


def canonical_orientation(value: Optional[str]) -> Optional[str]:
    """
    Bring a tool's orientation text into kernel vocabulary.

    "enum {...} = Left Side Up" and "Left Side Up" both become "left_side_up".
    """
    if value is None:
        return None
    if "=" in value:
        value = value.rsplit("=", 1)[1]
    value = value.strip().strip('"').strip()
    if not value:
        return None
    return re.sub(r"[\s]+", "_", value.lower())


def enumerate_connectors(drm_root: str = "/sys/class/drm", max_modes: int = 5) -> List[DrmConnector]:
    """
    List connectors that expose a status file under drm_root.

    Args:
        drm_root: DRM class directory
        max_modes: Number of modes to keep per connector

    Returns:
        Connectors sorted by sysfs name
    """
    root = Path(drm_root)
    if not root.is_dir():
        logger.debug(f"No DRM sysfs tree at {drm_root}")
        return []

    connectors = []
    for status_file in sorted(root.glob("*/status")):
        conn_dir = status_file.parent
        status = read_text(status_file)
        modes_text = read_text(conn_dir / "modes")
        modes = None
        if modes_text is not None:
            modes = [m.strip() for m in modes_text.splitlines() if m.strip()][:max_modes]
        connectors.append(DrmConnector(
            sysfs_name=conn_dir.name,
            status=status.strip() if status and status.strip() else "unknown",
            modes=modes,
        ))
    return connectors


def connector_block(text: Optional[str], names: List[str]) -> Optional[List[str]]:
    """
    Find the block of tool output that describes a connector.

    The block starts at the first line naming the connector and ends at
    a blank line or at the header of another connector.
    """
    if not text:
        return None

    patterns = [re.compile(r"(?<![\w-])" + re.escape(n) + r"(?![\w-])") for n in names if n]
    lines = text.splitlines()
    start = None
    for i, line in enumerate(lines):
        if any(p.search(line) for p in patterns):
            start = i
            break
    if start is None:
        return None

    block = [lines[start]]
    for line in lines[start + 1:]:
        if not line.strip() or _CONNECTOR_HEADER.search(line):
            break
        block.append(line)
    return block


def extract_orientation(block: Optional[List[str]]) -> Optional[str]:
    """
    Pull the panel orientation value out of a connector block.

    Handles inline values ("panel orientation: Normal",
    "... = Left Side Up") and modetest's enum listing followed by an
    integer value.
    """
    if not block:
        return None

    for i, line in enumerate(block):
        if not _ORIENTATION_LINE.search(line):
            continue

        inline = line.split(":", 1)[1] if ":" in line else ""
        value = canonical_orientation(inline)
        if value:
            return value

        enums: Dict[str, str] = {}
        for follow in block[i + 1:i + 6]:
            key, _, rest = follow.strip().partition(":")
            key = key.strip().lower()
            if key == "enums":
                enums = {num: name for name, num in _ENUM_ENTRY.findall(rest)}
            elif key == "value":
                return canonical_orientation(enums.get(rest.strip(), rest))
        return None

    return None


def parse_drm_info(text: Optional[str]) -> Dict[str, Optional[str]]:
    """
    Map sysfs connector names to panel orientation from drm_info output.

    drm_info lists connectors by index ("Connector 0") with a "Type: eDP"
    child. The kernel names a connector <card>-<type>-<n>, where n counts
    connectors of that type on the card from 1 in registration order,
    which is also the order drm_info lists them in.

    Args:
        text: drm_info tree output

    Returns:
        sysfs name (e.g. "card0-eDP-1") -> orientation in kernel
        vocabulary, None for connectors without the property
    """
    orientations: Dict[str, Optional[str]] = {}
    counters: Dict[Tuple[str, str], int] = {}
    card = "card0"
    in_connector = False
    current = None

    for raw in (text or "").splitlines():
        line = _TREE_PREFIX.sub("", raw).strip()

        node = _DRM_INFO_NODE.match(line)
        if node:
            card = node.group(1)
            in_connector, current = False, None
            continue

        obj = _DRM_INFO_OBJECT.match(line)
        if obj:
            in_connector, current = obj.group(1) == "Connector", None
            continue

        if not in_connector:
            continue

        conn_type = _DRM_INFO_TYPE.match(line)
        if conn_type and current is None:
            key = (card, conn_type.group(1))
            counters[key] = counters.get(key, 0) + 1
            current = f"{card}-{conn_type.group(1)}-{counters[key]}"
            orientations[current] = None
        elif current is not None and _ORIENTATION_LINE.search(line) and ":" in line:
            orientations[current] = canonical_orientation(line.split(":", 1)[1])

    return orientations


def _apply_drm_info(connectors: List[DrmConnector], output: str) -> None:
    orientations = parse_drm_info(output)
    for conn in connectors:
        conn.panel_orientation = orientations.get(conn.sysfs_name)


def _apply_modetest(connectors: List[DrmConnector], output: str) -> None:
    for conn in connectors:
        block = connector_block(output, [conn.sysfs_name, conn.name])
        conn.panel_orientation = extract_orientation(block)


def collect_panel_orientations(
    connectors: List[DrmConnector],
    timeout: float = 5.0,
) -> Optional[str]:
    """
    Fill panel_orientation on each connector from drm_info or modetest.

    drm_info is tried first; modetest -c is used when drm_info is
    missing, times out or reports no orientation for any connector.

    Args:
        connectors: Connectors to update in place
        timeout: Probe timeout

    Returns:
        Name of the last tool that answered, None when neither is usable
    """
    tool = None
    probes = (
        ("drm_info", ["drm_info"], _apply_drm_info),
        ("modetest", ["modetest", "-c"], _apply_modetest),
    )
    for name, cmd, apply in probes:
        if not have(name):
            continue
        output = run_probe(cmd, timeout=timeout)
        if output is None:
            continue

        tool = name
        apply(connectors, output)
        if any(conn.panel_orientation for conn in connectors):
            break
        logger.debug(f"{name} reported no panel orientation")

    if tool is None:
        logger.debug("Neither drm_info nor modetest answered; panel orientation unknown")
    for conn in connectors:
        logger.debug(f"{conn.name}: panel_orientation={conn.panel_orientation} ({tool})")
    return tool


def summarize_edid(decoded: Optional[str]) -> str:
    """
    Summarize edid-decode output.

    Keeps the preferred mode (or the last detailed mode) and the
    manufacturer line.
    """
    preferred = detailed = manufacturer = None
    for line in (decoded or "").splitlines():
        stripped = line.strip()
        if "Preferred mode:" in line:
            preferred = stripped
        elif "Detailed mode:" in line:
            detailed = stripped
        elif "Manufacturer:" in line:
            manufacturer = stripped

    parts = [p for p in (preferred or detailed, manufacturer) if p]
    return "\n".join(parts) if parts else EDID_UNPARSED


def find_edid_nodes(drm_root: str = "/sys/class/drm") -> List[Path]:
    """Find edid files up to two directories below drm_root."""
    root = Path(drm_root)
    if not root.is_dir():
        return []
    nodes = list(root.glob("*/edid")) + list(root.glob("*/*/edid"))
    return sorted(p for p in nodes if p.is_file())


def describe_edid(node: Path, timeout: float = 5.0) -> str:
    """Describe one EDID node."""
    try:
        size = len(node.read_bytes())
    except OSError:
        return EDID_EMPTY
    if size == 0:
        return EDID_EMPTY
    if not have("edid-decode"):
        return EDID_MISSING_DECODER
    return summarize_edid(run_probe(["edid-decode", str(node)], timeout=timeout))


def collect_edid(
    connectors: List[DrmConnector],
    drm_root: str = "/sys/class/drm",
    timeout: float = 5.0,
) -> Tuple[int, Dict[str, str]]:
    """
    Attach EDID summaries to connectors.

    Returns:
        (number of EDID nodes found, summaries for nodes with no enumerated connector)
    """
    by_sysfs = {c.sysfs_name: c for c in connectors}
    unmatched: Dict[str, str] = {}
    nodes = find_edid_nodes(drm_root)
    for node in nodes:
        owner = node.parent.name
        summary = describe_edid(node, timeout=timeout)
        if owner in by_sysfs:
            by_sysfs[owner].edid_summary = summary
        else:
            unmatched[owner] = summary
    return len(nodes), unmatched


def collect_drm(
    drm_root: str = "/sys/class/drm",
    max_modes: int = 5,
    timeout: float = 5.0,
) -> DrmFacts:
    """Collect connector, panel orientation and EDID facts."""
    connectors = enumerate_connectors(drm_root, max_modes=max_modes)
    tool = collect_panel_orientations(connectors, timeout=timeout) if connectors else None
    edid_nodes, unmatched = collect_edid(connectors, drm_root, timeout=timeout)
    logger.info(f"Found {len(connectors)} DRM connectors, {edid_nodes} EDID nodes")
    return DrmFacts(
        connectors=connectors,
        orientation_tool=tool,
        edid_nodes=edid_nodes,
        unmatched_edid=unmatched,
    )
