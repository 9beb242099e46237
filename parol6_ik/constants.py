"""
PAROL6 静态参数：关节限位、待机位、姿态提取约定、默认工具偏移、连杆几何
"""
from typing import Dict, Tuple

JOINT_NAMES = ('J1', 'J2', 'J3', 'J4', 'J5', 'J6')

CARTESIAN_AXES = ('X', 'Y', 'Z', 'RX', 'RY', 'RZ')

# 关节限位（度），来自 PAROL6 控制器
JOINT_LIMITS: Dict[str, Tuple[float, float]] = {
    'J1': (-123.046875, 123.046875),
    'J2': (-145.0088, -3.375),
    'J3': (107.866, 287.8675),
    'J4': (-105.46975, 105.46975),
    'J5': (-90.0, 90.0),
    'J6': (0.0, 360.0),
}

# 待机位（度）
STANDBY_POSITION: Dict[str, float] = {
    'J1': 0.0,
    'J2': -90.0,
    'J3': 180.0,
    'J4': 0.0,
    'J5': 0.0,
    'J6': 180.0,
}

# 姿态提取约定（与实物控制器逐项比对得到的标定值，不可重新推导）
# 最终角度 = sign * (raw - offset)
ORIENTATION_CONFIG = {
    'euler_order': 'ZXY',  # 内旋 R = Rz · Rx · Ry
    'offset': {'RX': 0.0, 'RY': 90.0, 'RZ': -180.0},
    'negate': {'RX': True, 'RY': True, 'RZ': False},
}

# 默认工具偏移（毫米，末端连杆 L6 坐标系）
DEFAULT_TOOL_OFFSET: Tuple[float, float, float] = (47.0, 0.0, -62.0)

# 末端连杆名称
TERMINAL_LINK = 'L6'

# 连杆几何（米）：每个关节之后的固定连杆 (名称, 偏移, 旋转轴, 旋转角/度)
# 由 DH 参数 Rz(θ)·Tz(d)·Tx(a)·Rx(α) 展开：关节节点负责 Rz(θ)，连杆节点负责其余部分
PAROL6_LINKS = (
    ('L1', (0.02342, 0.0, 0.1105), (1.0, 0.0, 0.0), -90.0),
    ('L2', (0.180, 0.0, 0.0), (1.0, 0.0, 0.0), 0.0),
    ('L3', (-0.0435, 0.0, 0.0), (1.0, 0.0, 0.0), 90.0),
    ('L4', (0.0, 0.0, -0.17635), (1.0, 0.0, 0.0), -90.0),
    ('L5', (0.0, 0.0, 0.0), (1.0, 0.0, 0.0), 90.0),
    # 末端法兰坐标系，工具偏移在此坐标系下表达
    ('L6', (0.0, 0.0, 0.0), (0.0, 0.0, 1.0), 180.0),
)
