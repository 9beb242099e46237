"""
PAROL6 运动链构建
"""
import numpy as np

from .joint import FixedJoint, RevoluteJoint
from .chain import KinematicChain
from ..constants import JOINT_NAMES, JOINT_LIMITS, STANDBY_POSITION, PAROL6_LINKS, TERMINAL_LINK
from ..utils import axis_angle_to_quaternion, from_scipy_rotation, VIEWPORT_ROTATION


def build_parol6_chain(viewport: bool = True) -> KinematicChain:
    """
    构建 PAROL6 场景图：[viewport] -> base_link -> J1 -> L1 -> ... -> J6 -> L6
    所有关节绕局部 Z 轴旋转，限位取自 JOINT_LIMITS，初始姿态为待机位。

    :param viewport: 是否像渲染层一样在根部挂一个绕 X 轴 -90° 的视口节点（Y-up 世界）
    :return: KinematicChain
    """
    base = FixedJoint('base_link', np.zeros(3))
    if viewport:
        root = FixedJoint('viewport', np.zeros(3), from_scipy_rotation(VIEWPORT_ROTATION))
        root.add_child(base)
    else:
        root = base

    joints = []
    parent = base
    for name, (link_name, offset, axis, angle) in zip(JOINT_NAMES, PAROL6_LINKS):
        min_deg, max_deg = JOINT_LIMITS[name]
        joint = RevoluteJoint(name, np.zeros(3), np.array([0.0, 0.0, 1.0]),
                              limits=(np.deg2rad(min_deg), np.deg2rad(max_deg)))
        link = FixedJoint(link_name, np.array(offset),
                          axis_angle_to_quaternion(axis, np.deg2rad(angle)))
        parent.add_child(joint)
        joint.add_child(link)
        joints.append(joint)
        parent = link

    chain = KinematicChain(root, joints, terminal_name=TERMINAL_LINK, viewport_frame=viewport)
    chain.set_joint_angles([STANDBY_POSITION[name] for name in JOINT_NAMES])
    return chain
