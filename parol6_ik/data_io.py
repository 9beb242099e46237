"""
数据交换功能实现
- 骨骼 JSON -> 场景图 / KinematicChain
- 目标列表 JSON
- HTTP IK 接口的扁平数组线格式编解码
- 求解结果导出
"""
import json
import math
import os
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .model.joint import JointNode, RevoluteJoint, FixedJoint
from .model.chain import KinematicChain
from .constants import TERMINAL_LINK
from .solver.fk import quaternion_to_euler
from .types import AxisMask, CartesianPose, IKResult, JointConfiguration


def skeleton_from_dict(data: Dict[str, Any]) -> Tuple[JointNode, Dict[str, JointNode]]:
    """
    从骨骼定义字典构建场景图

    :param data: {"root_name": str, "joints": [{"name", "type", "offset", "parent", ...}]}
    :return: (root节点, 关节名称到节点的映射字典)
    """
    root_name = data['root_name']
    joints_data = data['joints']

    joint_map: Dict[str, JointNode] = {}

    for joint_data in joints_data:
        name = joint_data['name']
        joint_type = joint_data['type']
        offset = np.array(joint_data['offset'], dtype=np.float64)

        if name in joint_map:
            raise ValueError(f"Duplicate joint name: {name}")

        if joint_type == 'fixed':
            quat = None
            if joint_data.get('quaternion') is not None:
                quat = np.array(joint_data['quaternion'], dtype=np.float64)
            joint = FixedJoint(name, offset, quat)
        elif joint_type == 'revolute':
            axis = np.array(joint_data['axis'], dtype=np.float64)
            limits = None
            if joint_data.get('limits') is not None:
                limits = tuple(joint_data['limits'])
            joint = RevoluteJoint(name, offset, axis, limits)
        else:
            raise ValueError(f"Unknown joint type: {joint_type}")

        joint_map[name] = joint

    # 建立父子关系
    for joint_data in joints_data:
        name = joint_data['name']
        parent_name = joint_data.get('parent')

        if parent_name is not None:
            if parent_name not in joint_map:
                raise ValueError(f"Parent '{parent_name}' not found for joint '{name}'")
            joint_map[parent_name].add_child(joint_map[name])

    if root_name not in joint_map:
        raise ValueError(f"Root node '{root_name}' not found")
    root = joint_map[root_name]
    root.update_global_transform()

    return root, joint_map


def load_skeleton(json_path: str) -> Tuple[JointNode, Dict[str, JointNode]]:
    """
    从skeleton.json加载骨骼定义，构建场景图
    关节 limits 与 q 均为弧度，offset 为米。
    """
    with open(json_path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    return skeleton_from_dict(data)


def chain_from_dict(data: Dict[str, Any]) -> KinematicChain:
    """
    从骨骼定义字典构建 KinematicChain

    额外字段：
    - joint_order: 驱动关节名称列表（默认按出现顺序取全部 revolute 关节）
    - terminal: 末端连杆名称（默认 L6）
    - viewport_frame: 根坐标系是否为 Y-up 视口坐标系（默认 False）
    """
    root, joint_map = skeleton_from_dict(data)
    order = data.get('joint_order')
    if order is None:
        order = [j['name'] for j in data['joints'] if joint_map[j['name']].get_dof() == 1]
    missing = [name for name in order if name not in joint_map]
    if missing:
        raise ValueError(f"joint_order references unknown joints: {missing}")
    joints = [joint_map[name] for name in order]
    return KinematicChain(root, joints,
                          terminal_name=data.get('terminal', TERMINAL_LINK),
                          viewport_frame=bool(data.get('viewport_frame', False)))


def load_chain(json_path: str) -> KinematicChain:
    with open(json_path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    return chain_from_dict(data)


def load_targets(json_path: str) -> List[Dict]:
    """
    从targets.json加载目标列表

    :param json_path: targets.json文件路径
    :return: [{"name": str, "target": CartesianPose, "axis_mask": AxisMask}]
    """
    with open(json_path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    targets = []
    for index, item in enumerate(data):
        targets.append({
            'name': item.get('name', f"target_{index}"),
            'target': pose_from_wire(item['pose'], item.get('quaternion')),
            'axis_mask': mask_from_wire(item.get('axis_mask')),
        })
    return targets


# ---------------------------------------------------------------------------
# 线格式：pose [X,Y,Z,RX,RY,RZ]，joints [J1..J6]，mask 6 个 0/1，quaternion [w,x,y,z]
# ---------------------------------------------------------------------------

def pose_from_wire(values: List[float], quaternion: Optional[List[float]] = None) -> CartesianPose:
    """
    :param values: [X, Y, Z, RX, RY, RZ]
    :param quaternion: 可选，机器人坐标系下的 [w, x, y, z]；提供时替代 RX/RY/RZ
    """
    if values is None or len(values) != 6:
        raise ValueError(f"Pose must be [X, Y, Z, RX, RY, RZ], got {values}")
    values = [float(v) for v in values]
    if quaternion is not None:
        if len(quaternion) != 4:
            raise ValueError(f"Quaternion must be [w, x, y, z], got {quaternion}")
        values[3:] = [float(v) for v in quaternion_to_euler(quaternion)]
    return CartesianPose.from_array(values)


def joints_from_wire(values: List[float]) -> JointConfiguration:
    if values is None or len(values) != 6:
        raise ValueError(f"Joints must be [J1..J6], got {values}")
    return JointConfiguration.from_array(values)


def tool_offset_from_wire(values: Optional[List[float]], default: Sequence[float]) -> List[float]:
    """工具偏移 [X, Y, Z]（毫米），缺省时使用 default"""
    if values is None:
        return [float(v) for v in default]
    if isinstance(values, (str, bytes)) or not hasattr(values, '__len__') or len(values) != 3:
        raise ValueError(f"Tool offset must be [X, Y, Z], got {values}")
    offset = [float(v) for v in values]
    if not all(math.isfinite(v) for v in offset):
        raise ValueError(f"Tool offset must be finite, got {values}")
    return offset


def mask_from_wire(values: Optional[List[int]]) -> AxisMask:
    """缺省时全部启用"""
    if values is None:
        return AxisMask()
    if len(values) != 6 or any(v not in (0, 1, True, False) for v in values):
        raise ValueError(f"Axis mask must be 6 values of 0/1, got {values}")
    return AxisMask.from_array(values)


def decode_ik_request(payload: Dict[str, Any]) -> Tuple[CartesianPose, JointConfiguration, AxisMask]:
    """
    解析 IK 请求 {"target_pose", "target_quaternion"?, "current_joints", "axis_mask"?}

    :raises ValueError: 字段缺失或形状错误
    """
    if not isinstance(payload, dict):
        raise ValueError("IK request must be a JSON object")
    for key in ('target_pose', 'current_joints'):
        if key not in payload:
            raise ValueError(f"Missing field: {key}")
    target = pose_from_wire(payload['target_pose'], payload.get('target_quaternion'))
    seed = joints_from_wire(payload['current_joints'])
    mask = mask_from_wire(payload.get('axis_mask'))
    return target, seed, mask


def _finite_or_none(value: float) -> Optional[float]:
    return float(value) if value is not None and math.isfinite(value) else None


def encode_ik_result(result: IKResult) -> Dict[str, Any]:
    """IKResult -> {"success", "joints", "iterations", "residual", "error"}"""
    return {
        'success': result.success,
        'joints': result.joint_angles.as_list() if result.joint_angles is not None else None,
        'iterations': result.iterations,
        'residual': _finite_or_none(result.residual),
        'error': result.failure_reason.value if result.failure_reason is not None else None,
    }


def export_results(results: List[Dict[str, Any]], output_path: str):
    """
    导出求解结果 JSON

    :param results: [{"name": str, "target": CartesianPose, "result": IKResult}]
    :param output_path: 输出文件路径
    """
    os.makedirs(os.path.dirname(os.path.abspath(output_path)), exist_ok=True)

    output = []
    for item in results:
        entry = {
            'name': item['name'],
            'target': item['target'].as_list(),
        }
        entry.update(encode_ik_result(item['result']))
        output.append(entry)

    with open(output_path, 'w', encoding='utf-8') as f:
        json.dump({'results': output}, f, indent=2, ensure_ascii=False)
