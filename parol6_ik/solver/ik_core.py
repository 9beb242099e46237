"""
IK核心算法实现：误差向量、数值雅可比、阻尼最小二乘步长
单位约定：位置毫米，姿态度，关节角度
"""
import numpy as np
from typing import Dict, Iterator, Optional, Sequence, Tuple

from ..constants import ORIENTATION_CONFIG
from ..model.chain import KinematicChain
from ..utils import viewport_to_robot
from .fk import extract_tcp_pose

# 重启构型：J2..J6 在各自限位区间内的位置比例（J1 随后转向目标）
RESTART_POSTURES = (
    (0.5, 0.5, 0.5, 0.6, 0.5),
    (0.25, 0.75, 0.5, 0.75, 0.5),
    (0.75, 0.25, 0.5, 0.25, 0.5),
    (0.25, 0.25, 0.5, 0.4, 0.5),
    (0.75, 0.75, 0.5, 0.6, 0.5),
)


def wrap_degrees(angles: np.ndarray) -> np.ndarray:
    """将角度差折叠到 (-180, 180]"""
    return 180.0 - (180.0 - np.asarray(angles, dtype=np.float64)) % 360.0


def compute_error_vector(current_pose: np.ndarray, target_pose: np.ndarray) -> np.ndarray:
    """
    计算当前位姿与目标位姿之间的 6x1 误差向量 (target - current)

    :param current_pose: [X, Y, Z, RX, RY, RZ]
    :param target_pose: [X, Y, Z, RX, RY, RZ]
    :return: [dX, dY, dZ (毫米), dRX, dRY, dRZ (度, 折叠到 (-180, 180])]
    """
    delta_x = np.asarray(target_pose, dtype=np.float64) - np.asarray(current_pose, dtype=np.float64)
    delta_x[3:] = wrap_degrees(delta_x[3:])
    return delta_x


def axis_weights(orientation_weight: float) -> np.ndarray:
    """
    误差加权：位置行权重为 1，姿态行权重为 orientation_weight（毫米/度），
    使毫米与度两种量纲在同一个范数里可比
    """
    return np.array([1.0, 1.0, 1.0, orientation_weight, orientation_weight, orientation_weight])


def evaluate_pose(chain: KinematicChain, joint_angles: np.ndarray,
                  tool_offset: Sequence[float], config: Dict = ORIENTATION_CONFIG) -> Optional[np.ndarray]:
    """
    写入关节角并返回 TCP 位姿向量；末端不可用时返回 None
    调用方负责在外层用 chain.preserved() 恢复关节角
    """
    chain.set_joint_angles(joint_angles)
    pose = extract_tcp_pose(chain, tool_offset, config, refresh=False)
    return None if pose is None else pose.as_array()


def compute_jacobian(chain: KinematicChain, joint_angles: np.ndarray, base_pose: np.ndarray,
                     tool_offset: Sequence[float], epsilon: float = 1e-3,
                     config: Dict = ORIENTATION_CONFIG) -> Optional[np.ndarray]:
    """
    前向差分数值雅可比 J (6xN)，单位 [毫米/度, 度/度]

    每个关节扰动 epsilon 度后重新求 TCP 位姿，结束时把运动链恢复到 joint_angles。
    关节位于上限时向下扰动，保证扰动点不越出限位。

    :param chain: 运动链
    :param joint_angles: 线性化点（度）
    :param base_pose: joint_angles 处的位姿向量
    :param tool_offset: 工具偏移（毫米）
    :param epsilon: 扰动量（度）
    :return: 6xN 雅可比矩阵；扰动过程中末端不可用时返回 None
    """
    joint_angles = np.asarray(joint_angles, dtype=np.float64)
    upper = chain.limits[:, 1]
    jacobian = np.zeros((6, joint_angles.size), dtype=np.float64)

    try:
        for i in range(joint_angles.size):
            step = -epsilon if joint_angles[i] + epsilon > upper[i] else epsilon
            perturbed = joint_angles.copy()
            perturbed[i] += step
            pose = evaluate_pose(chain, perturbed, tool_offset, config)
            if pose is None:
                return None
            jacobian[:, i] = compute_error_vector(base_pose, pose) / step
    finally:
        chain.set_joint_angles(joint_angles)

    return jacobian


def damped_least_squares_step(jacobian: np.ndarray, error: np.ndarray, damping: float) -> np.ndarray:
    """
    阻尼最小二乘: Δq = J^T (J J^T + λ² I)^-1 e

    :raises np.linalg.LinAlgError: 标准求解与最小二乘均失败时
    """
    identity = np.identity(jacobian.shape[0], dtype=np.float64)
    A = jacobian @ jacobian.T + damping ** 2 * identity
    try:
        beta = np.linalg.solve(A, error)
    except np.linalg.LinAlgError:
        # 矩阵奇异或接近奇异，退回最小二乘
        beta = np.linalg.lstsq(A, error, rcond=None)[0]
    return jacobian.T @ beta


def limit_step(delta_q: np.ndarray, max_step: float) -> np.ndarray:
    """等比缩放步长，使任一关节的增量不超过 max_step 度（保持方向不变）"""
    largest = float(np.max(np.abs(delta_q))) if delta_q.size else 0.0
    if largest > max_step:
        return delta_q * (max_step / largest)
    return delta_q


def smallest_singular_value(jacobian: np.ndarray, mask: np.ndarray) -> float:
    """启用轴对应的雅可比行的最小奇异值；无启用轴时返回 inf"""
    active = jacobian[np.asarray(mask, dtype=bool)]
    if active.size == 0:
        return float('inf')
    return float(np.linalg.svd(active, compute_uv=False).min())


def base_frame(chain: KinematicChain) -> Tuple[np.ndarray, np.ndarray]:
    """
    J1 原点（毫米）与 J1 转轴单位向量，机器人坐标系下。
    读取的是当前全局变换，调用前需已刷新运动链。
    """
    base = chain.joints[0]
    origin = base.global_transform[:3, 3] * 1000.0
    axis = base.global_transform[:3, :3] @ base.axis
    if chain.viewport_frame:
        origin = viewport_to_robot(origin)
        axis = viewport_to_robot(axis)
    return origin, axis


def beyond_reach(chain: KinematicChain, target_position: np.ndarray, position_mask: np.ndarray,
                 tool_offset: Sequence[float]) -> bool:
    """
    目标是否落在可达球之外（只比较启用的位置轴）

    可达球以 J1 原点为球心，半径为 max_reach 加工具偏移长度，
    真实工作空间一定在球内，因此球外的目标在任何关节角下都无法到达。
    """
    origin, _ = base_frame(chain)
    radius = chain.max_reach() * 1000.0 + float(np.linalg.norm(tool_offset))
    offset = (np.asarray(target_position, dtype=np.float64) - origin)[np.asarray(position_mask, dtype=bool)]
    return bool(np.linalg.norm(offset) > radius)


def aim_base_joint(chain: KinematicChain, joint_angles: np.ndarray, target_position: np.ndarray,
                   tool_offset: Sequence[float], config: Dict = ORIENTATION_CONFIG) -> np.ndarray:
    """
    只转动 J1，使 TCP 绕 J1 轴的方位角对准目标位置

    :return: 新的关节角（度），J1 取限位内离原值最近的等价角，无解时裁剪到限位
    """
    aimed = np.array(joint_angles, dtype=np.float64)
    pose = evaluate_pose(chain, aimed, tool_offset, config)
    if pose is None:
        return aimed
    origin, axis = base_frame(chain)

    def project(point):
        v = np.asarray(point, dtype=np.float64) - origin
        return v - np.dot(v, axis) * axis

    current = project(pose[:3])
    target = project(target_position)
    if np.linalg.norm(current) < 1e-6 or np.linalg.norm(target) < 1e-6:
        return aimed

    angle = np.degrees(np.arctan2(np.dot(axis, np.cross(current, target)), np.dot(current, target)))
    lower, upper = chain.limits[0]
    candidates = aimed[0] + angle + np.array([-360.0, 0.0, 360.0])
    inside = candidates[(candidates >= lower) & (candidates <= upper)]
    if inside.size:
        aimed[0] = inside[np.argmin(np.abs(inside - aimed[0]))]
    else:
        aimed[0] = np.clip(aimed[0] + angle, lower, upper)
    return aimed


def restart_seeds(chain: KinematicChain, seed: np.ndarray, target_position: np.ndarray,
                  tool_offset: Sequence[float], config: Dict = ORIENTATION_CONFIG) -> Iterator[np.ndarray]:
    """
    确定性的重启初值序列：先是把 J1 转向目标的原初值，再是 RESTART_POSTURES 中的各构型。
    无限位的关节保留原初值。
    """
    limits = chain.limits
    yield aim_base_joint(chain, seed, target_position, tool_offset, config)
    for posture in RESTART_POSTURES:
        candidate = np.array(seed, dtype=np.float64)
        for i, fraction in enumerate(posture[:chain.joint_count - 1], start=1):
            lower, upper = limits[i]
            if np.isfinite(lower) and np.isfinite(upper):
                candidate[i] = lower + fraction * (upper - lower)
        yield aim_base_joint(chain, candidate, target_position, tool_offset, config)
