"""
求解层 (Solver Layer)
纯数学计算，负责 TCP 位姿提取（正向运动学）、数值雅可比构建、阻尼最小二乘求解及变量更新
"""

from .fk import (
    extract_tcp_pose,
    forward_kinematics,
    rotation_to_euler,
    euler_to_rotation,
    quaternion_to_euler,
    tcp_poses_are_different
)
from .ik_core import (
    compute_jacobian,
    compute_error_vector,
    damped_least_squares_step
)
from .solve_ik import solve_ik

__all__ = [
    'extract_tcp_pose',
    'forward_kinematics',
    'rotation_to_euler',
    'euler_to_rotation',
    'quaternion_to_euler',
    'tcp_poses_are_different',
    'compute_jacobian',
    'compute_error_vector',
    'damped_least_squares_step',
    'solve_ik'
]
