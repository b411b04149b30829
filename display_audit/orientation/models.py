"""
Data structures for display orientation reconciliation.

Each rotation source speaks its own vocabulary; everything is brought into
the NormalizedAngle domain before it is combined.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, Optional, List, FrozenSet


CONSOLE_DISPLAY_ID = "console"


class OrientationSource(Enum):
    """Where a rotation signal came from."""
    CMDLINE = "cmdline"  # fbcon=rotate:<n> on the kernel command line
    KERNEL_PANEL = "kernel_panel"  # DRM connector panel_orientation property
    COMPOSITOR = "compositor"  # xrandr-style output rotation
    FIRMWARE_OVERLAY = "firmware_overlay"  # dtoverlay rotate=/orientation= params


class NormalizedAngle(Enum):
    """Rotation in degrees, or UNKNOWN when no usable signal exists."""
    DEG_0 = 0
    DEG_90 = 90
    DEG_180 = 180
    DEG_270 = 270
    UNKNOWN = "unknown"

    @property
    def degrees(self) -> Optional[int]:
        """Get rotation in degrees, None when unknown."""
        if self is NormalizedAngle.UNKNOWN:
            return None
        return self.value

    @property
    def is_known(self) -> bool:
        return self is not NormalizedAngle.UNKNOWN

    @classmethod
    def from_degrees(cls, degrees: Optional[int]) -> "NormalizedAngle":
        """
        Map an integer rotation to an angle.

        Values are reduced mod 360; anything that is not a multiple
        of 90 maps to UNKNOWN.
        """
        if degrees is None:
            return cls.UNKNOWN
        degrees = degrees % 360
        for angle in (cls.DEG_0, cls.DEG_90, cls.DEG_180, cls.DEG_270):
            if angle.value == degrees:
                return angle
        return cls.UNKNOWN

    def __add__(self, other: "NormalizedAngle") -> "NormalizedAngle":
        if not isinstance(other, NormalizedAngle):
            return NotImplemented
        from .normalizer import add
        return add(self, other)

    def __str__(self) -> str:
        return str(self.value)


class ConflictKind(Enum):
    """Kinds of orientation conflicts, in reporting order."""
    KERNEL_FBCON_MISMATCH = "kernel_fbcon_mismatch"
    COMPOSITOR_DOUBLE_ROTATION = "compositor_double_rotation"
    NO_ORIENTATION_SIGNAL = "no_orientation_signal"
    FIRMWARE_OVERLAY_MISMATCH = "firmware_overlay_mismatch"


@dataclass(frozen=True)
class RawSignal:
    """
    Raw orientation fact reported by a collector.

    Attributes:
        source: Which collector produced the value
        display_id: Connector name, or "console" for framebuffer-level signals
        raw_value: Text exactly as the collector found it
    """
    source: OrientationSource
    display_id: str
    raw_value: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "source": self.source.value,
            "display_id": self.display_id,
            "raw_value": self.raw_value,
        }


@dataclass(frozen=True)
class ConflictFinding:
    """An advisory about disagreeing orientation sources."""
    kind: ConflictKind
    sources_involved: FrozenSet[OrientationSource]
    detail: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "kind": self.kind.value,
            "sources": sorted(s.value for s in self.sources_involved),
            "detail": self.detail,
        }


@dataclass
class DisplayOrientationRecord:
    """
    Reconciled orientation state for one display output.

    Attributes:
        display_id: Connector name or "console"
        per_source: Normalized angle per source; missing sources count as UNKNOWN
        raw_values: Raw text per source, kept for reporting
        effective_console: Rotation seen by console text (fbcon)
        effective_gui: Rotation seen by GUI content (panel + compositor)
        conflicts: Findings in fixed rule order
        panel_evidence: Whether the kernel log mentions panel_orientation at all
    """
    display_id: str
    per_source: Dict[OrientationSource, NormalizedAngle] = field(default_factory=dict)
    raw_values: Dict[OrientationSource, str] = field(default_factory=dict)
    effective_console: NormalizedAngle = NormalizedAngle.UNKNOWN
    effective_gui: NormalizedAngle = NormalizedAngle.UNKNOWN
    conflicts: List[ConflictFinding] = field(default_factory=list)
    panel_evidence: bool = False

    def angle(self, source: OrientationSource) -> NormalizedAngle:
        """Get the normalized angle for a source, UNKNOWN if never reported."""
        return self.per_source.get(source, NormalizedAngle.UNKNOWN)

    @property
    def conflict_kinds(self) -> List[ConflictKind]:
        return [c.kind for c in self.conflicts]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "display_id": self.display_id,
            "sources": {
                source.value: {
                    "raw": self.raw_values.get(source),
                    "degrees": self.angle(source).degrees,
                }
                for source in OrientationSource
            },
            "effective_console": self.effective_console.degrees,
            "effective_gui": self.effective_gui.degrees,
            "panel_evidence": self.panel_evidence,
            "conflicts": [c.to_dict() for c in self.conflicts],
        }

    def to_flat_dict(self) -> Dict[str, str]:
        """
        Flatten to string key/value pairs for line-oriented reports.

        Keys look like ``compositor.raw``, ``effective_gui`` and
        ``conflict.1.kind``; unknown angles render as ``unknown``.
        """
        flat = {"display_id": self.display_id}
        for source in OrientationSource:
            flat[f"{source.value}.raw"] = self.raw_values.get(source) or "none"
            flat[f"{source.value}.degrees"] = str(self.angle(source))
        flat["effective_console"] = str(self.effective_console)
        flat["effective_gui"] = str(self.effective_gui)
        for i, finding in enumerate(self.conflicts, start=1):
            flat[f"conflict.{i}.kind"] = finding.kind.value
            flat[f"conflict.{i}.detail"] = finding.detail
        return flat
