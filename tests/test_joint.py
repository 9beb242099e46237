import numpy as np
import pytest

from parol6_ik.model import FixedJoint, RevoluteJoint


def test_revolute_local_matrix_rotates_about_axis():
    joint = RevoluteJoint('J', np.array([0.1, 0.0, 0.0]), np.array([0.0, 0.0, 2.0]))
    joint.q = np.pi / 2

    local = joint.get_local_matrix()

    # 轴被归一化，x 轴转到 y 轴
    np.testing.assert_allclose(joint.axis, [0, 0, 1])
    np.testing.assert_allclose(local[:3, :3] @ [1, 0, 0], [0, 1, 0], atol=1e-12)
    np.testing.assert_allclose(local[:3, 3], [0.1, 0, 0])

def test_zero_axis_rejected():
    with pytest.raises(ValueError):
        RevoluteJoint('J', np.zeros(3), np.zeros(3))


def test_fixed_joint_quaternion_normalized():
    joint = FixedJoint('L', np.zeros(3), np.array([2.0, 0.0, 0.0, 0.0]))
    np.testing.assert_allclose(joint.quaternion, [1, 0, 0, 0])
    np.testing.assert_allclose(joint.get_local_matrix(), np.identity(4))

    with pytest.raises(ValueError):
        FixedJoint('L', np.zeros(3), np.zeros(4))


def test_global_transform_composes_parent_chain():
    root = FixedJoint('root', np.array([0.0, 0.0, 1.0]))
    joint = RevoluteJoint('J', np.zeros(3), np.array([0, 0, 1]))
    tip = FixedJoint('tip', np.array([1.0, 0.0, 0.0]))
    root.add_child(joint)
    joint.add_child(tip)

    joint.q = np.pi
    root.update_global_transform()

    np.testing.assert_allclose(tip.global_transform[:3, 3], [-1, 0, 1], atol=1e-12)
    assert root.find('tip') is tip
    assert root.find('missing') is None
    assert [node.name for node in root.walk()] == ['root', 'J', 'tip']
