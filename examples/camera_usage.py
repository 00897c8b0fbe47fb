"""
Example: building a camera and transforming points.

Demonstrates how to use splmath for:
- Model-view and projection matrices
- Viewport mapping to window coordinates
- Tagging matrices with CameraMatrix ids
- Batched transforms of a point cloud

Run with debug logging to see the matrix dumps.
"""

import logging
import math

import numpy as np

from splmath import (
    CameraMatrix,
    Matrix4d,
    Vector3d,
    Vector4d,
    camera_matrix,
    config_context,
    decode_id,
    transform_batch,
)

# Configure logging to see the debug dumps
logging.basicConfig(level=logging.DEBUG, format="%(levelname)s: %(message)s")


def build_camera(width: int = 640, height: int = 480) -> dict[CameraMatrix, Matrix4d]:
    """Build the model-view, projection and viewport matrices of a camera."""
    return {
        CameraMatrix.MODELVIEW: camera_matrix(
            CameraMatrix.MODELVIEW, (0.0, 2.0, 6.0), (0.0, 0.0, 0.0), (0.0, 1.0, 0.0)
        ),
        CameraMatrix.FRUSTUM: Matrix4d.perspective(math.radians(60), width / height, 0.1, 100.0),
        CameraMatrix.VIEWPORT: camera_matrix(CameraMatrix.VIEWPORT, 0, 0, width, height),
    }


def project(camera: dict[CameraMatrix, Matrix4d], point: Vector3d) -> Vector3d:
    """Project a world point to window coordinates (x, y, depth)."""
    eye = camera[CameraMatrix.MODELVIEW] * Vector4d.from_vector3(point, w=1)
    clip = camera[CameraMatrix.FRUSTUM] * eye
    ndc = clip / clip.w
    window = camera[CameraMatrix.VIEWPORT] * ndc
    return Vector3d(window)


def example_single_point():
    """Project the origin and a point on the unit sphere."""
    print("\n" + "=" * 60)
    print("Example 1: Projecting single points")
    print("=" * 60)

    camera = build_camera()
    for point in (Vector3d(0, 0, 0), Vector3d(1, 1, 1).get_normalized()):
        window = project(camera, point)
        print(f"{point!r} -> window {window!r}")

    with config_context(debug=True):
        camera[CameraMatrix.MODELVIEW].print()


def example_point_cloud(n: int = 100_000):
    """Transform a point cloud in one batched call."""
    print("\n" + "=" * 60)
    print("Example 2: Batched transform")
    print("=" * 60)

    rng = np.random.default_rng(42)
    points = np.ones((n, 4))
    points[:, :3] = rng.standard_normal((n, 3))

    camera = build_camera()
    view_proj = camera[CameraMatrix.FRUSTUM] * camera[CameraMatrix.MODELVIEW]
    clip = transform_batch(view_proj, points)
    visible = np.all(np.abs(clip[:, :3]) <= clip[:, 3:4], axis=1)
    print(f"{visible.sum():,} of {n:,} points inside the view frustum")


def example_ids():
    """Matrix tags are plain integer ids."""
    print("\n" + "=" * 60)
    print("Example 3: Role ids")
    print("=" * 60)

    for role in CameraMatrix:
        print(f"{role.name:10s} 0x{int(role):08X} -> {decode_id(int(role))!r}")


if __name__ == "__main__":
    example_single_point()
    example_point_cloud()
    example_ids()
