"""
parol6_ik - PAROL6 TCP 位姿提取与带轴掩码的数值逆运动学
"""

from .types import AxisMask, CartesianPose, FailureReason, IKResult, JointConfiguration
from .model import KinematicChain, build_parol6_chain
from .solver import extract_tcp_pose, forward_kinematics, solve_ik, tcp_poses_are_different

__all__ = [
    'AxisMask',
    'CartesianPose',
    'FailureReason',
    'IKResult',
    'JointConfiguration',
    'KinematicChain',
    'build_parol6_chain',
    'extract_tcp_pose',
    'forward_kinematics',
    'solve_ik',
    'tcp_poses_are_different'
]
