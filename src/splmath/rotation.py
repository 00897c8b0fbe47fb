"""Rotation helpers shared by the matrix builders.

Quaternion Convention: (w, x, y, z) - scalar first

All math runs in float64 on plain NumPy arrays; ``Matrix3`` and
``Matrix4`` convert the results to their own kind.
"""

from __future__ import annotations

import math

import numpy as np


def axis_angle_to_quaternion(axis: np.ndarray, angle: float) -> np.ndarray:
    """Unit quaternion rotating by ``angle`` radians about ``axis``.

    :param axis: Rotation axis [3], any non-zero length
    :param angle: Rotation angle in radians
    :returns: Quaternion [4] (w, x, y, z); identity for a zero axis
    """
    axis = np.asarray(axis, dtype=np.float64)
    norm = math.sqrt(float(np.dot(axis, axis)))
    if norm == 0.0:
        return np.array([1.0, 0.0, 0.0, 0.0])

    half_angle = angle / 2
    sin_half = math.sin(half_angle)
    x, y, z = axis / norm * sin_half
    return np.array([math.cos(half_angle), x, y, z])


def quaternion_to_rotation_matrix(q: np.ndarray) -> np.ndarray:
    """Quaternion to row-major 3x3 rotation matrix.

    :param q: Quaternion [4] (w, x, y, z), normalized here
    :returns: 3x3 rotation matrix, ``R[row, col]``
    """
    q = np.asarray(q, dtype=np.float64)
    q = q / np.linalg.norm(q)
    w, x, y, z = q
    xx, yy, zz = x * x, y * y, z * z
    xy, xz, yz = x * y, x * z, y * z
    wx, wy, wz = w * x, w * y, w * z

    return 2.0 * np.array(
        [
            [0.5 - yy - zz, xy - wz, xz + wy],
            [xy + wz, 0.5 - xx - zz, yz - wx],
            [xz - wy, yz + wx, 0.5 - xx - yy],
        ]
    )


def rotation_matrix_to_quaternion(R: np.ndarray) -> np.ndarray:
    """Row-major 3x3 rotation matrix to unit quaternion.

    :param R: 3x3 rotation matrix, ``R[row, col]``
    :returns: Quaternion [4] (w, x, y, z)
    """
    R = np.asarray(R, dtype=np.float64)
    trace = float(np.trace(R))
    d21, d02, d10 = R[2, 1] - R[1, 2], R[0, 2] - R[2, 0], R[1, 0] - R[0, 1]
    s01, s02, s12 = R[0, 1] + R[1, 0], R[0, 2] + R[2, 0], R[1, 2] + R[2, 1]

    # Expand around the largest of 4w², 4x², 4y², 4z² for stability
    largest = int(np.argmax([trace, R[0, 0], R[1, 1], R[2, 2]]))
    if largest == 0:
        q = np.array([1.0 + trace, d21, d02, d10])
    elif largest == 1:
        q = np.array([d21, 1.0 + 2.0 * R[0, 0] - trace, s01, s02])
    elif largest == 2:
        q = np.array([d02, s01, 1.0 + 2.0 * R[1, 1] - trace, s12])
    else:
        q = np.array([d10, s02, s12, 1.0 + 2.0 * R[2, 2] - trace])
    return q / np.linalg.norm(q)
