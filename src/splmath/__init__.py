"""
splmath - Fixed-dimension linear algebra for visualization

Small value types for 3D graphics and volume work, generic over a closed
set of scalar kinds, plus the type/role identifier registry used to tag
stored data.

Features:
- Vector2/3/4, Matrix3/4 and RGBA color tuples backed by one NumPy array
- Per-kind specialization: Vector3[ScalarKind.IEEE32], Vector3f, Matrix4d, RGBA8
- Camera matrix builders: look_at, ortho, frustum, perspective, viewport
- Stable integer ids for scalar types, file formats, camera matrices,
  material channels and light kinds
- Batched operations over [N, K] arrays (Numba on CPU, PyTorch on GPU)

Example - Value types:
    >>> from splmath import Vector3f, Matrix4f
    >>>
    >>> v = Vector3f(3.0, 4.0, 0.0)
    >>> v.length()
    5.0
    >>> v = v.get_normalized()
    >>> Matrix4f.identity() * v == v
    True

Example - Registry:
    >>> from splmath import ScalarTypeId, decode_id
    >>>
    >>> decode_id(int(ScalarTypeId.IEEE32)).kind
    <ScalarKind.IEEE32: 'ieee32'>

Example - Batch:
    >>> from splmath import normalize_batch
    >>>
    >>> unit = normalize_batch(np.random.randn(100_000, 3))
"""

__version__ = "0.1.0"

# Batch operations (NumPy/Numba and PyTorch)
from splmath.batch import (
    cross_batch,
    dot_batch,
    normalize_batch,
    square_batch,
    transform_batch,
)

# Colors
from splmath.color import RGBA, RGBA8, RGBAf

# Configuration
from splmath.config import (
    MathConfig,
    config_context,
    config_from_dict,
    get_config,
    load_config_json,
    set_config,
)

# Errors
from splmath.errors import (
    ComponentIndexError,
    ConfigError,
    ContractError,
    RegistryError,
    ScalarKindError,
    SplMathError,
    UnsupportedTypeIdError,
    ZeroDivisorError,
)

# Matrices
from splmath.matrix import (
    Matrix3,
    Matrix3d,
    Matrix3f,
    Matrix3i,
    Matrix4,
    Matrix4d,
    Matrix4f,
    Matrix4i,
    camera_matrix,
)

# Identifier registry
from splmath.registry import (
    CameraMatrix,
    FileFormat,
    LightKind,
    MaterialApprox,
    MaterialChannel,
    ScalarTypeId,
    TaggedValue,
    decode_id,
    verify_partitions,
)

# Scalar kinds
from splmath.types import ENUM_KIND, INDEX_KIND, SIZEI_KIND, ScalarKind

# Vectors
from splmath.vector import (
    Vector2,
    Vector2d,
    Vector2f,
    Vector2i,
    Vector3,
    Vector3d,
    Vector3f,
    Vector3i,
    Vector4,
    Vector4d,
    Vector4f,
    Vector4i,
)

# Verification utilities
from splmath.verification import BackendVerifier

__all__ = [
    # Version
    "__version__",
    # Scalar kinds
    "ScalarKind",
    "INDEX_KIND",
    "ENUM_KIND",
    "SIZEI_KIND",
    # Vectors
    "Vector2",
    "Vector3",
    "Vector4",
    "Vector2i",
    "Vector2f",
    "Vector2d",
    "Vector3i",
    "Vector3f",
    "Vector3d",
    "Vector4i",
    "Vector4f",
    "Vector4d",
    # Matrices
    "Matrix3",
    "Matrix4",
    "Matrix3i",
    "Matrix3f",
    "Matrix3d",
    "Matrix4i",
    "Matrix4f",
    "Matrix4d",
    "camera_matrix",
    # Colors
    "RGBA",
    "RGBA8",
    "RGBAf",
    # Registry
    "ScalarTypeId",
    "FileFormat",
    "CameraMatrix",
    "MaterialChannel",
    "MaterialApprox",
    "LightKind",
    "TaggedValue",
    "decode_id",
    "verify_partitions",
    # Batch
    "square_batch",
    "dot_batch",
    "cross_batch",
    "normalize_batch",
    "transform_batch",
    # Config
    "MathConfig",
    "get_config",
    "set_config",
    "config_context",
    "config_from_dict",
    "load_config_json",
    # Errors
    "SplMathError",
    "ContractError",
    "ComponentIndexError",
    "ZeroDivisorError",
    "ScalarKindError",
    "UnsupportedTypeIdError",
    "RegistryError",
    "ConfigError",
    # Verification
    "BackendVerifier",
]
