"""
四元数工具函数
约定：本包内部四元数一律为 [w, x, y, z]；scipy 使用 [x, y, z, w]，在此处统一转换
"""
import numpy as np
from typing import Union
from scipy.spatial.transform import Rotation as R


def quaternion_to_rotation_matrix(quaternion: Union[np.ndarray, list, tuple]) -> np.ndarray:
    """
    将四元数转换为旋转矩阵

    :param quaternion: 四元数，格式为 [w, x, y, z] 或 (w, x, y, z)
    :return: 3x3 旋转矩阵
    """
    quaternion = np.asarray(quaternion, dtype=np.float64)

    if quaternion.shape != (4,):
        raise ValueError(f"Quaternion must be a 4-element array, got shape {quaternion.shape}")

    # 归一化四元数
    norm = np.linalg.norm(quaternion)
    if norm < 1e-10:
        raise ValueError(f"Quaternion norm too small: {norm}, cannot normalize")
    quaternion = quaternion / norm

    w, x, y, z = quaternion[0], quaternion[1], quaternion[2], quaternion[3]

    return np.array([
        [1 - 2 * (y * y + z * z),     2 * (x * y - w * z),     2 * (x * z + w * y)],
        [    2 * (x * y + w * z), 1 - 2 * (x * x + z * z),     2 * (y * z - w * x)],
        [    2 * (x * z - w * y),     2 * (y * z + w * x), 1 - 2 * (x * x + y * y)]
    ], dtype=np.float64)


def axis_angle_to_quaternion(axis: Union[np.ndarray, list, tuple], angle: float) -> np.ndarray:
    """
    绕单位轴 axis 旋转 angle 弧度的四元数 [w, x, y, z]
    """
    axis = np.asarray(axis, dtype=np.float64)
    half = angle / 2.0
    xyz = axis * np.sin(half)
    return np.array([np.cos(half), xyz[0], xyz[1], xyz[2]], dtype=np.float64)


def to_scipy_rotation(quaternion: Union[np.ndarray, list, tuple]) -> R:
    """[w, x, y, z] -> scipy Rotation"""
    w, x, y, z = np.asarray(quaternion, dtype=np.float64)
    return R.from_quat([x, y, z, w])


def from_scipy_rotation(rotation: R) -> np.ndarray:
    """scipy Rotation -> [w, x, y, z]"""
    x, y, z, w = rotation.as_quat()
    return np.array([w, x, y, z], dtype=np.float64)
