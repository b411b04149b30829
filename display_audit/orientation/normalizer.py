"""
Angle normalization for every orientation vocabulary.

normalize() is total: unrecognized or missing values map to UNKNOWN
instead of raising, so partial information still yields a summary.
"""

import re
from typing import Dict, Optional

from .models import NormalizedAngle, OrientationSource, RawSignal


FBCON_TABLE: Dict[str, NormalizedAngle] = {
    "0": NormalizedAngle.DEG_0,
    "1": NormalizedAngle.DEG_90,
    "2": NormalizedAngle.DEG_180,
    "3": NormalizedAngle.DEG_270,
}

PANEL_ORIENTATION_TABLE: Dict[str, NormalizedAngle] = {
    "normal": NormalizedAngle.DEG_0,
    "left_side_up": NormalizedAngle.DEG_90,
    "left-up": NormalizedAngle.DEG_90,
    "left_up": NormalizedAngle.DEG_90,
    "upside_down": NormalizedAngle.DEG_180,
    "inverted": NormalizedAngle.DEG_180,
    "bottom_up": NormalizedAngle.DEG_180,
    "right_side_up": NormalizedAngle.DEG_270,
    "right-up": NormalizedAngle.DEG_270,
    "right_up": NormalizedAngle.DEG_270,
}

COMPOSITOR_TABLE: Dict[str, NormalizedAngle] = {
    "normal": NormalizedAngle.DEG_0,
    "left": NormalizedAngle.DEG_90,
    "inverted": NormalizedAngle.DEG_180,
    "right": NormalizedAngle.DEG_270,
}

# Overlay rotate= commonly carries degrees; fbcon indices are accepted too.
OVERLAY_ROTATE_TABLE: Dict[str, NormalizedAngle] = {
    "0": NormalizedAngle.DEG_0,
    "90": NormalizedAngle.DEG_90,
    "180": NormalizedAngle.DEG_180,
    "270": NormalizedAngle.DEG_270,
    **{k: v for k, v in FBCON_TABLE.items() if k != "0"},
}

_ROTATE_PARAM = re.compile(r"(?:^|[,\s])rotate=([^,\s]*)", re.IGNORECASE)
_ORIENTATION_PARAM = re.compile(r"(?:^|[,\s])orientation=([^,\s]*)", re.IGNORECASE)


def _lookup(table: Dict[str, NormalizedAngle], raw_value: Optional[str]) -> NormalizedAngle:
    if raw_value is None:
        return NormalizedAngle.UNKNOWN
    return table.get(raw_value.strip().lower(), NormalizedAngle.UNKNOWN)


def normalize_overlay_params(params: Optional[str]) -> NormalizedAngle:
    """
    Normalize a firmware overlay parameter string.

    ``orientation=`` is preferred over ``rotate=`` when both are present,
    since it is the more specific key. A repeated key takes its last
    value, as the firmware applies parameters in order.

    Args:
        params: Comma-separated overlay parameters, e.g. "rotate=180,orientation=normal"

    Returns:
        Normalized angle, UNKNOWN when neither key is present or usable
    """
    if not params:
        return NormalizedAngle.UNKNOWN

    values = _ORIENTATION_PARAM.findall(params)
    if values:
        return _lookup(PANEL_ORIENTATION_TABLE, values[-1])

    values = _ROTATE_PARAM.findall(params)
    if values:
        return _lookup(OVERLAY_ROTATE_TABLE, values[-1])

    return NormalizedAngle.UNKNOWN


def normalize(source: OrientationSource, raw_value: Optional[str]) -> NormalizedAngle:
    """
    Map a raw value from the given source into the common degree domain.

    Args:
        source: Source vocabulary to interpret raw_value with
        raw_value: Raw text from the collector (None when unavailable)

    Returns:
        Normalized angle; UNKNOWN for missing or unrecognized values

    Example:
        >>> normalize(OrientationSource.COMPOSITOR, "left")
        <NormalizedAngle.DEG_90: 90>
    """
    if source is OrientationSource.CMDLINE:
        return _lookup(FBCON_TABLE, raw_value)
    if source is OrientationSource.KERNEL_PANEL:
        return _lookup(PANEL_ORIENTATION_TABLE, raw_value)
    if source is OrientationSource.COMPOSITOR:
        return _lookup(COMPOSITOR_TABLE, raw_value)
    if source is OrientationSource.FIRMWARE_OVERLAY:
        return normalize_overlay_params(raw_value)
    return NormalizedAngle.UNKNOWN


def normalize_signal(signal: RawSignal) -> NormalizedAngle:
    """Normalize a collector signal."""
    return normalize(signal.source, signal.raw_value)


def add(a: NormalizedAngle, b: NormalizedAngle) -> NormalizedAngle:
    """
    Combine two rotations modulo 360.

    UNKNOWN is absorbing: if either operand is unknown the result is too.
    """
    if not a.is_known or not b.is_known:
        return NormalizedAngle.UNKNOWN
    return NormalizedAngle.from_degrees((a.degrees + b.degrees) % 360)
