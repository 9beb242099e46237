"""
关节类层次结构实现
场景图中的节点：FixedJoint 表示刚性连杆/坐标系，RevoluteJoint 表示 1 自由度旋转关节。
长度单位为米，关节角为弧度（场景图原生单位），角度制只出现在 KinematicChain 的边界上。
"""
import numpy as np
from abc import ABC, abstractmethod
from typing import Iterator, Optional, Tuple, List

from ..utils import quaternion_to_rotation_matrix, axis_angle_to_quaternion


class JointNode(ABC):
    """
    所有关节类型的抽象基类。
    """

    def __init__(self, name: str, offset: np.ndarray):
        """
        初始化关节节点

        :param name: 关节名称
        :param offset: 相对父级的静态位移 (Vec3, 米)
        """
        self.name = name
        self.parent: Optional['JointNode'] = None
        self.children: List['JointNode'] = []
        self.local_offset: np.ndarray = np.asarray(offset, dtype=np.float64)
        self.global_transform: np.ndarray = np.identity(4, dtype=np.float64)

    def add_child(self, child: 'JointNode'):
        """添加子节点，建立父子关系"""
        child.parent = self
        self.children.append(child)

    @abstractmethod
    def get_local_matrix(self) -> np.ndarray:
        """
        根据当前内部变量计算局部变换矩阵。

        :return: 4x4 局部变换矩阵
        """
        pass

    @abstractmethod
    def get_dof(self) -> int:
        """
        返回自由度数量 (0 或 1)。
        """
        pass

    def update_global_transform(self):
        """
        递归更新此关节及其所有子关节的 global_transform。
        """
        local_transform = self.get_local_matrix()

        if self.parent is None:
            self.global_transform = local_transform
        else:
            # global = parent_global @ local
            self.global_transform = self.parent.global_transform @ local_transform

        for child in self.children:
            child.update_global_transform()

    def walk(self) -> Iterator['JointNode']:
        """深度优先遍历以本节点为根的子树（先序）"""
        yield self
        for child in self.children:
            yield from child.walk()

    def find(self, name: str) -> Optional['JointNode']:
        """
        在子树中按名称查找节点

        :return: 找到的节点；不存在时返回 None
        """
        for node in self.walk():
            if node.name == name:
                return node
        return None

    def __repr__(self):
        return f"<{self.__class__.__name__}: {self.name}>"


class RevoluteJoint(JointNode):
    """
    旋转关节 - 绕固定轴旋转的铰链
    """

    def __init__(self, name: str, offset: np.ndarray, axis: np.ndarray,
                 limits: Optional[Tuple[float, float]] = None):
        """
        初始化旋转关节

        :param name: 关节名称
        :param offset: 相对父级的静态位移 (Vec3, 米)
        :param axis: 旋转轴（局部坐标系，不能为零向量。程序自动归一化）
        :param limits: 约束范围 [min, max]（弧度），None 表示无约束
        """
        super().__init__(name, offset)
        self.axis = np.asarray(axis, dtype=np.float64)
        axis_norm = np.linalg.norm(self.axis)
        if axis_norm > 1e-6:
            self.axis = self.axis / axis_norm
        else:
            raise ValueError(f"Axis vector is not a unit vector and too small to be normalized: {self.axis}")
        self.q: float = 0.0  # 角度（弧度）
        self.limits: Optional[Tuple[float, float]] = limits

    def get_local_matrix(self) -> np.ndarray:
        """生成先平移 offset、再绕 axis 旋转 q 的矩阵"""
        local_transform = np.identity(4, dtype=np.float64)
        local_transform[:3, :3] = quaternion_to_rotation_matrix(
            axis_angle_to_quaternion(self.axis, self.q)
        )
        local_transform[:3, 3] = self.local_offset
        return local_transform

    def get_dof(self) -> int:
        return 1


class FixedJoint(JointNode):
    """
    固定关节 - 无变量的刚性连杆，用于表示固定的偏移（位置和姿态）
    quaternion 为本地旋转姿态，格式 [w, x, y, z]
    """

    def __init__(self, name: str, offset: np.ndarray, quaternion: Optional[np.ndarray] = None):
        """
        初始化固定关节

        :param name: 关节名称
        :param offset: 相对父级的静态位移 (Vec3, 米)
        :param quaternion: 本地旋转（四元数, [w, x, y, z]），None 表示无旋转
        """
        super().__init__(name, offset)
        if quaternion is None:
            self.quaternion = np.array([1.0, 0.0, 0.0, 0.0], dtype=np.float64)
        else:
            self.quaternion = np.array(quaternion, dtype=np.float64)
            norm = np.linalg.norm(self.quaternion)
            if norm > 1e-6:
                self.quaternion /= norm
            else:
                raise ValueError(f"Quaternion norm too small: {self.quaternion}")
        # 固定关节的局部矩阵恒定，构造时计算一次
        self._local_matrix = np.identity(4, dtype=np.float64)
        self._local_matrix[:3, :3] = quaternion_to_rotation_matrix(self.quaternion)
        self._local_matrix[:3, 3] = self.local_offset

    def get_local_matrix(self) -> np.ndarray:
        return self._local_matrix

    def get_dof(self) -> int:
        return 0
