from .quaternion_utils import (
    quaternion_to_rotation_matrix,
    axis_angle_to_quaternion,
    to_scipy_rotation,
    from_scipy_rotation
)
from .frames import (
    VIEWPORT_ROTATION,
    viewport_to_robot,
)

__all__ = [
    'quaternion_to_rotation_matrix',
    'axis_angle_to_quaternion',
    'to_scipy_rotation',
    'from_scipy_rotation',
    'VIEWPORT_ROTATION',
    'viewport_to_robot',
]
