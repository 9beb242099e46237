import numpy as np
import pytest

from parol6_ik.constants import JOINT_NAMES, STANDBY_POSITION
from parol6_ik.data_io import chain_from_dict
from parol6_ik.model import build_parol6_chain


HOME = [STANDBY_POSITION[name] for name in JOINT_NAMES]


@pytest.fixture
def chain():
    return build_parol6_chain()


@pytest.fixture
def home():
    return np.array(HOME, dtype=np.float64)


def _planar_skeleton():
    """六个绕 Z 轴的关节串联在 XY 平面内，无法产生 Z/RX/RY 方向的运动"""
    joints = [{'name': 'base', 'type': 'fixed', 'offset': [0, 0, 0]}]
    parent = 'base'
    for i in range(1, 7):
        joints.append({'name': f'J{i}', 'type': 'revolute', 'offset': [0, 0, 0],
                       'axis': [0, 0, 1], 'parent': parent})
        joints.append({'name': f'L{i}', 'type': 'fixed', 'offset': [0.05, 0, 0],
                       'parent': f'J{i}'})
        parent = f'L{i}'
    return {'root_name': 'base', 'joints': joints, 'terminal': 'L6'}


@pytest.fixture
def planar_skeleton():
    """返回构造函数，每次调用得到一份新的骨骼定义"""
    return _planar_skeleton


@pytest.fixture
def planar_chain():
    return chain_from_dict(_planar_skeleton())
