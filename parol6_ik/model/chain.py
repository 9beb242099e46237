"""
KinematicChain：对外部场景图的只读封装
提供“给定关节角 -> 连杆世界变换”的能力，关节角在此边界上以度为单位。
"""
import logging
from contextlib import contextmanager
from typing import Iterable, Iterator, List, Optional

import numpy as np

from .joint import JointNode, RevoluteJoint
from ..constants import TERMINAL_LINK

logger = logging.getLogger(__name__)


class KinematicChain:
    """
    有序的旋转关节列表 + 末端连杆。

    场景图由调用方拥有；求解器只在数值微分时临时修改关节角，
    并且必须通过 preserved() 在返回前恢复。
    """

    def __init__(self, root: JointNode, joints: List[RevoluteJoint],
                 terminal_name: str = TERMINAL_LINK, viewport_frame: bool = False):
        """
        :param root: 场景图根节点
        :param joints: 按 J1..Jn 顺序排列的旋转关节（必须位于 root 子树中）
        :param terminal_name: 末端连杆名称，工具偏移在其坐标系下表达
        :param viewport_frame: 根坐标系是否为渲染层的 Y-up 视口坐标系
        """
        if not joints:
            raise ValueError("Kinematic chain needs at least one joint")
        for joint in joints:
            if not isinstance(joint, RevoluteJoint):
                raise ValueError(f"Only revolute joints can be driven, got {joint!r}")
            if root.find(joint.name) is not joint:
                raise ValueError(f"Joint {joint.name} is not part of the tree rooted at {root.name}")
        self.root = root
        self.joints = list(joints)
        self.terminal_name = terminal_name
        self.viewport_frame = viewport_frame

    @property
    def joint_count(self) -> int:
        return len(self.joints)

    @property
    def joint_names(self) -> List[str]:
        return [joint.name for joint in self.joints]

    @property
    def limits(self) -> np.ndarray:
        """(n, 2) 关节限位（度），无约束的关节为 ±inf"""
        limits = np.empty((self.joint_count, 2), dtype=np.float64)
        for i, joint in enumerate(self.joints):
            if joint.limits is None:
                limits[i] = (-np.inf, np.inf)
            else:
                limits[i] = np.rad2deg(joint.limits)
        return limits

    def max_reach(self) -> float:
        """
        J1 原点到末端连杆原点距离的上界（米）：路径上各节点静态偏移长度之和。
        末端不可用或不在 J1 子树下时返回 inf。
        """
        total = 0.0
        node = self.terminal()
        while node is not None and node is not self.joints[0]:
            total += float(np.linalg.norm(node.local_offset))
            node = node.parent
        return total if node is not None else float('inf')

    def terminal(self) -> Optional[JointNode]:
        """解析末端连杆；尚未加载时返回 None"""
        return self.root.find(self.terminal_name)

    def refresh(self):
        """FK 更新：刷新全树变换"""
        self.root.update_global_transform()

    def joint_angles(self) -> np.ndarray:
        """当前关节角（度）"""
        return np.rad2deg([joint.q for joint in self.joints])

    def set_joint_angles(self, angles: Iterable[float]):
        """
        写入关节角（度）并刷新变换。不做限位裁剪，调用方负责传入合法值。
        """
        angles = np.asarray(list(angles), dtype=np.float64)
        if angles.shape != (self.joint_count,):
            raise ValueError(f"Expected {self.joint_count} joint angles, got shape {angles.shape}")
        for joint, angle in zip(self.joints, np.deg2rad(angles)):
            joint.q = float(angle)
        self.refresh()

    def clamp_to_limits(self, angles: Iterable[float]) -> np.ndarray:
        limits = self.limits
        return np.clip(np.asarray(list(angles), dtype=np.float64), limits[:, 0], limits[:, 1])

    def within_limits(self, angles: Iterable[float], tolerance: float = 1e-9) -> bool:
        limits = self.limits
        angles = np.asarray(list(angles), dtype=np.float64)
        return bool(np.all(angles >= limits[:, 0] - tolerance) and np.all(angles <= limits[:, 1] + tolerance))

    @contextmanager
    def preserved(self) -> Iterator['KinematicChain']:
        """
        保存当前关节角，退出时（包括异常）无条件恢复并刷新变换
        """
        saved = [joint.q for joint in self.joints]
        try:
            yield self
        finally:
            for joint, q in zip(self.joints, saved):
                joint.q = q
            self.refresh()
            logger.debug("Restored %d joint angles on chain %s", len(saved), self.root.name)

    def __repr__(self):
        return f"<KinematicChain: {self.root.name} -> {self.terminal_name} ({self.joint_count} joints)>"
