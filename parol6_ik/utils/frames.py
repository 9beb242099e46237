"""
视口坐标系 (Y-up, 渲染层) 与机器人坐标系 (Z-up, 控制器) 之间的唯一转换入口

渲染层把机器人挂在一个绕 X 轴 -90° 的父节点下，于是
    viewport = VIEWPORT_ROTATION · robot   即 (x, y, z)_robot -> (x, z, -y)_viewport
该旋转是与实物标定得到的常量，而非几何推导结果；更换渲染层约定时只需修改这里。
"""
import numpy as np
from scipy.spatial.transform import Rotation as R

# 渲染层父节点旋转（绕 X 轴 -90°）
VIEWPORT_ROTATION: R = R.from_euler('x', -90.0, degrees=True)


def viewport_to_robot(vector: np.ndarray) -> np.ndarray:
    """
    将视口坐标系下的向量（或 3x3 旋转矩阵）转换到机器人坐标系

    :param vector: 3 维向量，或 3x3 旋转矩阵
    :return: 机器人坐标系下的同一量
    """
    vector = np.asarray(vector, dtype=np.float64)
    return VIEWPORT_ROTATION.inv().as_matrix() @ vector

