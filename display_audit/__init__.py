"""
Display Audit Package

Read-only display orientation audit for Linux kiosk and media-player
systems: reconciles fbcon, DRM panel orientation, compositor rotation and
firmware overlay hints into one effective orientation per display.
"""

from .orientation import (
    ConflictKind,
    ConflictResolver,
    DisplayOrientationRecord,
    NormalizedAngle,
    OrientationSource,
    RawSignal,
    add,
    normalize,
)
from .config.audit_config import AuditConfig
from .audit import AuditReport, OrientationAudit, reconcile, reconcile_values

__version__ = "1.0.0"

__all__ = [
    "ConflictKind",
    "ConflictResolver",
    "DisplayOrientationRecord",
    "NormalizedAngle",
    "OrientationSource",
    "RawSignal",
    "add",
    "normalize",
    "AuditConfig",
    "AuditReport",
    "OrientationAudit",
    "reconcile",
    "reconcile_values",
]
