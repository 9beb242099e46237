"""
模型层 (Model Layer)
场景图与运动链，负责关节对象、父子层级以及角度制边界

- JointNode: 抽象基类
- FixedJoint: 固定关节（刚性连杆/坐标系）
- RevoluteJoint: 旋转关节，1自由度
- KinematicChain: 有序关节 + 末端连杆的只读封装
- build_parol6_chain: PAROL6 默认运动链
"""

from .joint import (
    JointNode,
    FixedJoint,
    RevoluteJoint
)
from .chain import KinematicChain
from .parol6 import build_parol6_chain

__all__ = [
    'JointNode',
    'FixedJoint',
    'RevoluteJoint',
    'KinematicChain',
    'build_parol6_chain'
]
