"""
Touch calibration matrices for rotated displays.

Every angle is derived from a single 90 degree coordinate transformation
matrix so touch input and display rotation stay consistent.
"""

from typing import List, Optional, Tuple
import numpy as np

from .models import NormalizedAngle


# libinput/xinput Coordinate Transformation Matrix for a 90 degree ("left") rotation
QUARTER_TURN = np.array(
    [
        [0, -1, 1],
        [1, 0, 0],
        [0, 0, 1],
    ],
    dtype=np.int64,
)


def touch_matrix(angle: NormalizedAngle) -> Optional[np.ndarray]:
    """
    Get the 3x3 coordinate transformation matrix for a rotation.

    Args:
        angle: Effective rotation of the display

    Returns:
        Integer matrix, or None when the angle is unknown

    Example:
        >>> touch_matrix(NormalizedAngle.DEG_180).tolist()
        [[-1, 0, 1], [0, -1, 1], [0, 0, 1]]
    """
    if not angle.is_known:
        return None
    return np.linalg.matrix_power(QUARTER_TURN, angle.degrees // 90)


def format_matrix(matrix: np.ndarray) -> str:
    """Render a matrix as the space-separated row-major string xinput expects."""
    return " ".join(str(int(v)) for v in matrix.flatten())


def libinput_calibration(angle: NormalizedAngle) -> Optional[str]:
    """
    Get the value for a udev LIBINPUT_CALIBRATION_MATRIX property.

    libinput takes only the first two rows of the matrix.
    """
    matrix = touch_matrix(angle)
    if matrix is None:
        return None
    return format_matrix(matrix[:2])


def xinput_command(device: str, angle: NormalizedAngle) -> Optional[List[str]]:
    """
    Build the xinput command applying the matrix to a device.

    Args:
        device: xinput device name or id
        angle: Effective rotation of the display

    Returns:
        argv list, or None when the angle is unknown
    """
    matrix = touch_matrix(angle)
    if matrix is None:
        return None
    return [
        "xinput", "set-prop", device,
        "Coordinate Transformation Matrix",
        *[str(int(v)) for v in matrix.flatten()],
    ]


def map_touch_point(
    point: Tuple[float, float],
    angle: NormalizedAngle,
) -> Optional[Tuple[float, float]]:
    """
    Apply the calibration matrix to a normalized touch coordinate.

    Args:
        point: (x, y) in the 0.0-1.0 range reported by the touch device
        angle: Effective rotation of the display

    Returns:
        Transformed (x, y), or None when the angle is unknown
    """
    matrix = touch_matrix(angle)
    if matrix is None:
        return None
    x, y = point
    tx, ty, _ = matrix @ np.array([x, y, 1.0])
    return (float(tx), float(ty))
