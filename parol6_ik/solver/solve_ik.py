"""
IK求解器实现
使用阻尼最小二乘法 (Damped Least Squares, DLS) + 前向差分数值雅可比 + 回溯线搜索

状态机（每次调用）：SEEDED -> ITERATING -> {CONVERGED | FAILED(reason)}
ITERATING 从调用方初值开始；失败且目标在可达球内时，依次从确定性的重启初值再迭代。
调用之间不保留任何状态；运动链在返回前恢复到调用时的关节角。
"""
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Union

import numpy as np

from ..constants import DEFAULT_TOOL_OFFSET, ORIENTATION_CONFIG
from ..model.chain import KinematicChain
from ..types import AxisMask, CartesianPose, FailureReason, IKResult, JointConfiguration
from .ik_core import (
    axis_weights,
    beyond_reach,
    compute_error_vector,
    compute_jacobian,
    damped_least_squares_step,
    evaluate_pose,
    limit_step,
    restart_seeds,
    smallest_singular_value
)

logger = logging.getLogger(__name__)


@dataclass
class _Descent:
    """单个初值上一次下降的结果"""
    converged: bool
    joint_angles: np.ndarray
    iterations: int
    residual: float
    position_error: float
    singular: bool = False
    pose_lost: bool = False


def _as_float_vector(values) -> Optional[np.ndarray]:
    if isinstance(values, JointConfiguration):
        return values.as_array()
    try:
        vector = np.asarray(list(values), dtype=np.float64)
    except (TypeError, ValueError):
        return None
    return vector if vector.ndim == 1 else None


def _descend(chain, seed_vector, target_vector, tool_offset, row_mask, weights, params, config) -> _Descent:
    """
    从一个初值出发做 DLS 迭代，每步回溯线搜索保证加权残差严格下降。
    关节角每步裁剪到限位。
    """
    max_iterations = params['max_iterations']
    stall_tolerance = params['stall_tolerance']

    working = chain.clamp_to_limits(seed_vector)
    current = evaluate_pose(chain, working, tool_offset, config)
    if current is None:
        return _Descent(False, working, 0, np.nan, np.nan, pose_lost=True)

    def masked_error(pose):
        delta = compute_error_vector(pose, target_vector) * row_mask
        return delta, float(np.linalg.norm(delta[:3])), float(np.linalg.norm(delta * weights))

    delta_x, position_error, residual = masked_error(current)
    iterations = 0
    best_residual = np.inf
    stalled = 0
    singular_streak = 0
    singular = False

    while True:
        orientation_error = float(np.linalg.norm(delta_x[3:]))
        logger.debug("iter %d: pos %.4f mm, ori %.4f deg, joints %s",
                     iterations, position_error, orientation_error, np.round(working, 4))

        # 收敛检查
        if position_error < params['position_tolerance'] and orientation_error < params['orientation_tolerance']:
            return _Descent(True, working, iterations, residual, position_error)

        # 进展跟踪
        if residual < best_residual * (1.0 - stall_tolerance):
            best_residual = residual
            stalled = 0
        else:
            stalled += 1
        if iterations >= max_iterations or stalled >= params['stall_iterations']:
            break

        # 构建雅可比矩阵 J（加权，禁用轴行置零）
        J = compute_jacobian(chain, working, current, tool_offset, params['epsilon'], config)
        if J is None:
            return _Descent(False, working, iterations, residual, position_error, pose_lost=True)
        J = J * (weights * row_mask)[:, np.newaxis]
        near_singular = smallest_singular_value(J, row_mask.astype(bool)) < params['singular_threshold']

        # 求解 Δq
        try:
            delta_q = damped_least_squares_step(J, delta_x * weights, params['damping'])
        except np.linalg.LinAlgError:
            logger.warning("IK linear solve failed at iteration %d", iterations)
            return _Descent(False, working, iterations, residual, position_error, singular=True)
        delta_q = limit_step(delta_q, params['max_step'])

        # 线搜索：步长减半直到残差下降
        alpha = 1.0
        while True:
            trial = chain.clamp_to_limits(working + alpha * delta_q)
            trial_pose = evaluate_pose(chain, trial, tool_offset, config)
            if trial_pose is None:
                return _Descent(False, working, iterations, residual, position_error, pose_lost=True)
            trial_delta, trial_position_error, trial_residual = masked_error(trial_pose)
            if trial_residual < residual:
                break
            alpha /= 2.0
            if alpha < params['line_search_alpha_min']:
                trial = None
                break

        if trial is None:
            # 任何步长都无法改进：局部极小或奇异
            singular = singular or near_singular
            break

        if near_singular and not trial_position_error < position_error * (1.0 - stall_tolerance):
            singular_streak += 1
            singular = singular or singular_streak >= params['singular_iterations']
        else:
            singular_streak = 0

        working, current = trial, trial_pose
        delta_x, position_error, residual = trial_delta, trial_position_error, trial_residual
        iterations += 1

    return _Descent(False, working, iterations, residual, position_error, singular=singular)


def solve_ik(
    target: CartesianPose,
    seed: Union[JointConfiguration, Sequence[float]],
    chain: KinematicChain,
    tool_offset: Sequence[float] = DEFAULT_TOOL_OFFSET,
    axis_mask: Optional[AxisMask] = None,
    max_iterations: int = 100,
    position_tolerance: float = 0.1,
    orientation_tolerance: float = 0.1,
    damping: float = 0.05,
    orientation_weight: float = 1.0,
    epsilon: float = 1e-3,
    max_step: float = 10.0,
    line_search_alpha_min: float = 1e-2,
    restarts: int = 6,
    reach_threshold: float = 10.0,
    singular_threshold: float = 1e-2,
    singular_iterations: int = 3,
    stall_iterations: int = 10,
    stall_tolerance: float = 1e-5,
    config: Dict = ORIENTATION_CONFIG
) -> IKResult:
    """
    使用阻尼最小二乘法 (DLS) 求解IK

    :param target: 目标 TCP 位姿
    :param seed: 迭代初值（度），通常为当前关节角，保证解的连续性
    :param chain: 运动链；求解期间会被临时修改，返回前恢复
    :param tool_offset: 工具偏移（毫米，末端连杆坐标系）
    :param axis_mask: 参与求解的笛卡尔轴，默认全部启用
    :param max_iterations: 每个初值上的最大迭代次数，默认值100
    :param position_tolerance: 位置收敛容差（毫米），默认值0.1
    :param orientation_tolerance: 姿态收敛容差（度），默认值0.1
    :param damping: 阻尼系数λ，默认值0.05
    :param orientation_weight: 姿态误差权重（毫米/度），默认值1.0
    :param epsilon: 数值微分扰动（度），默认值1e-3
    :param max_step: 单次迭代单关节最大增量（度），默认值10
    :param line_search_alpha_min: 线搜索最小步长比例，默认值1e-2；仍无法改进则结束该初值上的迭代
    :param restarts: 调用方初值失败后最多再尝试的重启初值个数，默认值6；0 表示不重启
    :param reach_threshold: 目标在可达球外且位置误差超过该值（毫米）时判定为 OUT_OF_REACH
    :param singular_threshold: 雅可比最小奇异值低于该值视为接近奇异
    :param singular_iterations: 连续接近奇异且位置误差不减小达到该次数判定为 SINGULAR
    :param stall_iterations: 残差连续该次数无明显下降则提前结束迭代
    :param stall_tolerance: 残差相对下降量低于该值视为无进展
    :param config: 姿态约定
    :return: IKResult；iterations 为给出结果的那个初值上的迭代次数
    """
    # ---- SEEDED: 输入检查 ----
    mask = (axis_mask or AxisMask()).as_array()
    seed_vector = _as_float_vector(seed)
    tool_offset = _as_float_vector(tool_offset)

    if not target.is_finite():
        logger.warning("IK rejected: non-finite target %s", target)
        return IKResult.failure(FailureReason.INVALID_INPUT)
    if seed_vector is None or seed_vector.shape != (6,) or seed_vector.size != chain.joint_count \
            or not np.all(np.isfinite(seed_vector)):
        logger.warning("IK rejected: invalid seed %s for %r", seed_vector, chain)
        return IKResult.failure(FailureReason.INVALID_INPUT)
    if tool_offset is None or tool_offset.shape != (3,) or not np.all(np.isfinite(tool_offset)):
        logger.warning("IK rejected: invalid tool offset %s", tool_offset)
        return IKResult.failure(FailureReason.INVALID_INPUT)
    if chain.terminal() is None:
        logger.warning("IK rejected: terminal link %s unavailable", chain.terminal_name)
        return IKResult.failure(FailureReason.INVALID_INPUT)

    target_vector = target.as_array()
    weights = axis_weights(orientation_weight)
    row_mask = mask.astype(np.float64)
    params = {
        'max_iterations': max_iterations,
        'position_tolerance': position_tolerance,
        'orientation_tolerance': orientation_tolerance,
        'damping': damping,
        'epsilon': epsilon,
        'max_step': max_step,
        'line_search_alpha_min': line_search_alpha_min,
        'singular_threshold': singular_threshold,
        'singular_iterations': singular_iterations,
        'stall_iterations': stall_iterations,
        'stall_tolerance': stall_tolerance,
    }

    # ---- ITERATING ----
    with chain.preserved():
        best = _descend(chain, seed_vector, target_vector, tool_offset, row_mask, weights, params, config)
        unreachable = not best.pose_lost and beyond_reach(chain, target_vector[:3], mask[:3], tool_offset)

        if not best.converged and not best.pose_lost and not unreachable and restarts > 0:
            tried = [chain.clamp_to_limits(seed_vector)]
            seeds = restart_seeds(chain, seed_vector, target_vector[:3], tool_offset, config)
            for restart_seed in seeds:
                if len(tried) > restarts:
                    break
                restart_seed = chain.clamp_to_limits(restart_seed)
                if any(np.allclose(restart_seed, previous, atol=1e-6) for previous in tried):
                    continue
                tried.append(restart_seed)
                logger.debug("IK restart %d from %s", len(tried) - 1, np.round(restart_seed, 2))
                attempt = _descend(chain, restart_seed, target_vector, tool_offset,
                                   row_mask, weights, params, config)
                if attempt.pose_lost:
                    best = attempt
                    break
                if attempt.converged or attempt.residual < best.residual:
                    best = attempt
                if attempt.converged:
                    break

    if best.pose_lost:
        logger.warning("IK aborted: pose became unavailable after %d iterations", best.iterations)
        return IKResult.failure(FailureReason.INVALID_INPUT, best.iterations)

    if best.converged:
        logger.debug("IK converged after %d iterations (residual %.6f)", best.iterations, best.residual)
        return IKResult(
            success=True,
            iterations=best.iterations,
            residual=best.residual,
            position_error=best.position_error,
            joint_angles=JointConfiguration.from_array(best.joint_angles)
        )

    # ---- FAILED: 分类 ----
    if unreachable and best.position_error > reach_threshold:
        reason = FailureReason.OUT_OF_REACH
    elif best.singular:
        reason = FailureReason.SINGULAR
    else:
        reason = FailureReason.DID_NOT_CONVERGE

    logger.info("IK failed (%s) after %d iterations: pos %.4f mm, residual %.4f",
                reason.value, best.iterations, best.position_error, best.residual)
    return IKResult.failure(reason, best.iterations, best.residual, best.position_error)
