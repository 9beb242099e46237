"""
TCP 位姿提取（正向运动学）

输出约定（机器人坐标系，Z-up）：
- 位置：毫米
- 姿态：RX/RY/RZ（度）。旋转矩阵按 ORIENTATION_CONFIG['euler_order'] 做内旋分解，
  再逐轴执行 final = sign * (raw - offset)。

注意：欧拉分解在万向锁附近（ZXY 顺序下 |RX_raw| -> 90°）是奇异的，输出会不连续，
scipy 会给出 "Gimbal lock detected" 警告。外部控制器协议要求欧拉角，因此这里保留该近似，
内部一律以旋转矩阵/四元数组合姿态，只在边界处转换为欧拉角。
"""
import logging
from typing import Dict, Iterable, Optional, Sequence

import numpy as np
from scipy.spatial.transform import Rotation as R

from ..constants import DEFAULT_TOOL_OFFSET, ORIENTATION_CONFIG
from ..model.chain import KinematicChain
from ..types import CartesianPose
from ..utils import viewport_to_robot, to_scipy_rotation

logger = logging.getLogger(__name__)

_ROTATION_AXES = ('RX', 'RY', 'RZ')


def rotation_to_euler(rotation_matrix: np.ndarray, config: Dict = ORIENTATION_CONFIG) -> np.ndarray:
    """
    旋转矩阵 -> [RX, RY, RZ]（度，控制器约定）

    :param rotation_matrix: 机器人坐标系下的 3x3 旋转矩阵
    :param config: 姿态约定，见 constants.ORIENTATION_CONFIG
    """
    order = config['euler_order']
    raw = R.from_matrix(rotation_matrix).as_euler(order, degrees=True)
    raw_by_axis = dict(zip(order.upper(), raw))

    euler = np.empty(3, dtype=np.float64)
    for i, key in enumerate(_ROTATION_AXES):
        value = raw_by_axis[key[1]] - config['offset'][key]
        euler[i] = -value if config['negate'][key] else value
    return euler


def euler_to_rotation(euler: Sequence[float], config: Dict = ORIENTATION_CONFIG) -> R:
    """
    rotation_to_euler 的逆：[RX, RY, RZ]（度，控制器约定）-> scipy Rotation
    """
    order = config['euler_order']
    raw_by_axis = {}
    for key, value in zip(_ROTATION_AXES, euler):
        signed = -value if config['negate'][key] else value
        raw_by_axis[key[1]] = signed + config['offset'][key]
    return R.from_euler(order, [raw_by_axis[axis] for axis in order.upper()], degrees=True)


def quaternion_to_euler(quaternion: Sequence[float], config: Dict = ORIENTATION_CONFIG) -> np.ndarray:
    """机器人坐标系下的四元数 [w, x, y, z] -> [RX, RY, RZ]"""
    return rotation_to_euler(to_scipy_rotation(quaternion).as_matrix(), config)


def extract_tcp_pose(chain: KinematicChain,
                     tool_offset: Sequence[float] = DEFAULT_TOOL_OFFSET,
                     config: Dict = ORIENTATION_CONFIG,
                     refresh: bool = True) -> Optional[CartesianPose]:
    """
    从运动链当前状态计算 TCP 位姿

    :param chain: 运动链（只读）
    :param tool_offset: 工具偏移（毫米，末端连杆坐标系）
    :param config: 姿态约定
    :param refresh: 是否先刷新场景图变换；调用方刚写入关节角时可传 False
    :return: CartesianPose；末端连杆无法解析（如模型尚未加载）时返回 None
    """
    terminal = chain.terminal()
    if terminal is None:
        logger.debug("Terminal link %s not resolvable, pose unavailable", chain.terminal_name)
        return None

    if refresh:
        chain.refresh()

    transform = terminal.global_transform
    rotation = transform[:3, :3]
    position = transform[:3, 3]

    # 工具偏移从末端连杆局部坐标系转换到世界坐标系（毫米 -> 米）
    offset_m = np.asarray(tool_offset, dtype=np.float64) / 1000.0
    tcp_position = position + rotation @ offset_m

    if chain.viewport_frame:
        tcp_position = viewport_to_robot(tcp_position)
        rotation = viewport_to_robot(rotation)

    euler = rotation_to_euler(rotation, config)
    x, y, z = tcp_position * 1000.0
    return CartesianPose(float(x), float(y), float(z), float(euler[0]), float(euler[1]), float(euler[2]))


def forward_kinematics(chain: KinematicChain, joint_angles: Iterable[float],
                       tool_offset: Sequence[float] = DEFAULT_TOOL_OFFSET,
                       config: Dict = ORIENTATION_CONFIG) -> Optional[CartesianPose]:
    """
    给定关节角（度）计算 TCP 位姿；运动链状态在返回前恢复
    """
    with chain.preserved():
        chain.set_joint_angles(joint_angles)
        return extract_tcp_pose(chain, tool_offset, config, refresh=False)


def tcp_poses_are_different(pose1: Optional[CartesianPose], pose2: Optional[CartesianPose],
                            tolerance: float = 0.01) -> bool:
    """
    两个位姿是否存在超过 tolerance（毫米 / 度）的差异；任一为 None 视为不同
    """
    if pose1 is None or pose2 is None:
        return True
    return bool(np.any(np.abs(pose1.as_array() - pose2.as_array()) > tolerance))
