"""
值类型：JointConfiguration / CartesianPose / AxisMask / IKResult
均为不可变值，每次调用新建
"""
from dataclasses import dataclass, astuple
from enum import Enum
from typing import Iterable, List, Optional

import numpy as np


class FailureReason(str, Enum):
    OUT_OF_REACH = 'OUT_OF_REACH'
    SINGULAR = 'SINGULAR'
    INVALID_INPUT = 'INVALID_INPUT'
    DID_NOT_CONVERGE = 'DID_NOT_CONVERGE'


def _as_vector(values: Iterable[float], size: int, what: str) -> np.ndarray:
    vector = np.asarray(list(values), dtype=np.float64)
    if vector.shape != (size,):
        raise ValueError(f"{what} must have {size} elements, got shape {vector.shape}")
    return vector


@dataclass(frozen=True)
class JointConfiguration:
    """六个关节角（度），J1..J6"""
    j1: float
    j2: float
    j3: float
    j4: float
    j5: float
    j6: float

    @classmethod
    def from_array(cls, values: Iterable[float]) -> 'JointConfiguration':
        return cls(*(float(v) for v in _as_vector(values, 6, 'Joint configuration')))

    def as_array(self) -> np.ndarray:
        return np.array(astuple(self), dtype=np.float64)

    def as_list(self) -> List[float]:
        return list(astuple(self))


@dataclass(frozen=True)
class CartesianPose:
    """TCP 位姿：X/Y/Z 毫米，RX/RY/RZ 度（ZXY 欧拉约定，见 constants.ORIENTATION_CONFIG）"""
    x: float
    y: float
    z: float
    rx: float
    ry: float
    rz: float

    @classmethod
    def from_array(cls, values: Iterable[float]) -> 'CartesianPose':
        return cls(*(float(v) for v in _as_vector(values, 6, 'Cartesian pose')))

    def as_array(self) -> np.ndarray:
        return np.array(astuple(self), dtype=np.float64)

    def as_list(self) -> List[float]:
        return list(astuple(self))

    @property
    def position(self) -> np.ndarray:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    @property
    def orientation(self) -> np.ndarray:
        return np.array([self.rx, self.ry, self.rz], dtype=np.float64)

    def is_finite(self) -> bool:
        return bool(np.all(np.isfinite(self.as_array())))


@dataclass(frozen=True)
class AxisMask:
    """每个笛卡尔自由度是否参与求解，默认全部启用"""
    x: bool = True
    y: bool = True
    z: bool = True
    rx: bool = True
    ry: bool = True
    rz: bool = True

    @classmethod
    def from_array(cls, values: Iterable[int]) -> 'AxisMask':
        values = list(values)
        if len(values) != 6:
            raise ValueError(f"Axis mask must have 6 elements, got {len(values)}")
        return cls(*(bool(v) for v in values))

    @classmethod
    def position_only(cls) -> 'AxisMask':
        return cls(rx=False, ry=False, rz=False)

    def as_array(self) -> np.ndarray:
        return np.array(astuple(self), dtype=bool)

    def as_list(self) -> List[int]:
        """线格式：6 个 0/1 整数"""
        return [1 if enabled else 0 for enabled in astuple(self)]


@dataclass(frozen=True)
class IKResult:
    """
    一次求解的结果。
    success 为 True 时 joint_angles 存在；为 False 时 failure_reason 存在。
    residual 为最终掩码误差范数（加权后），position_error 为最终掩码位置误差（毫米）。
    """
    success: bool
    iterations: int
    residual: float
    position_error: float = float('nan')
    joint_angles: Optional[JointConfiguration] = None
    failure_reason: Optional[FailureReason] = None

    def __post_init__(self):
        if self.success and (self.joint_angles is None or self.failure_reason is not None):
            raise ValueError("Successful IKResult requires joint_angles and no failure_reason")
        if not self.success and (self.joint_angles is not None or self.failure_reason is None):
            raise ValueError("Failed IKResult requires failure_reason and no joint_angles")

    @classmethod
    def failure(cls, reason: FailureReason, iterations: int = 0,
                residual: float = float('nan'), position_error: float = float('nan')) -> 'IKResult':
        return cls(success=False, iterations=iterations, residual=residual,
                   position_error=position_error, failure_reason=reason)
