import numpy as np
import pytest

from parol6_ik.model import KinematicChain, build_parol6_chain
from parol6_ik.solver import (
    extract_tcp_pose,
    forward_kinematics,
    rotation_to_euler,
    euler_to_rotation,
    quaternion_to_euler,
    tcp_poses_are_different
)
from parol6_ik.solver.ik_core import wrap_degrees
from parol6_ik.types import CartesianPose


def test_home_pose(chain):
    pose = extract_tcp_pose(chain)

    # 待机位：腕部 (-152.93, 0, 334)，工具偏移 (47, 0, -62) 在法兰系下指向 (-62, 0, -47)
    assert pose.x == pytest.approx(-214.93, abs=1e-6)
    assert pose.y == pytest.approx(0.0, abs=1e-6)
    assert pose.z == pytest.approx(287.0, abs=1e-6)
    assert pose.rx == pytest.approx(0.0, abs=1e-6)
    assert pose.ry == pytest.approx(0.0, abs=1e-6)
    assert wrap_degrees(pose.rz - 180.0) == pytest.approx(0.0, abs=1e-6)


def test_zero_tool_offset_reports_flange(chain):
    pose = extract_tcp_pose(chain, tool_offset=(0.0, 0.0, 0.0))
    np.testing.assert_allclose(pose.position, [-152.93, 0.0, 334.0], atol=1e-6)


def test_base_rotation_moves_tcp_and_rz(chain, home):
    angles = home.copy()
    angles[0] = 90.0
    pose = forward_kinematics(chain, angles)

    np.testing.assert_allclose(pose.position, [0.0, -214.93, 287.0], atol=1e-6)
    assert wrap_degrees(pose.rz - 270.0) == pytest.approx(0.0, abs=1e-6)


def test_forward_kinematics_restores_chain(chain, home):
    forward_kinematics(chain, [20, -70, 160, 10, 30, 200])
    np.testing.assert_allclose(chain.joint_angles(), home)


def test_viewport_and_robot_chains_agree(home):
    angles = [20, -70, 160, 10, 30, 200]
    viewport_pose = forward_kinematics(build_parol6_chain(viewport=True), angles)
    robot_pose = forward_kinematics(build_parol6_chain(viewport=False), angles)

    np.testing.assert_allclose(viewport_pose.as_array(), robot_pose.as_array(), atol=1e-9)


def test_pose_unavailable_when_terminal_missing(chain):
    unloaded = KinematicChain(chain.root, chain.joints, terminal_name='L7')
    assert extract_tcp_pose(unloaded) is None
    assert forward_kinematics(unloaded, [0, -90, 180, 0, 0, 180]) is None


def test_euler_convention_inverts():
    euler = np.array([12.0, -30.0, 75.0])
    rotation = euler_to_rotation(euler)
    np.testing.assert_allclose(rotation_to_euler(rotation.as_matrix()), euler, atol=1e-9)


def test_identity_quaternion_maps_to_calibrated_offsets():
    # 机器人基坐标系姿态：raw 全为 0 -> RX = 0, RY = -(0 - 90), RZ = 0 + 180
    np.testing.assert_allclose(quaternion_to_euler([1.0, 0.0, 0.0, 0.0]), [0.0, 90.0, 180.0], atol=1e-9)


def test_tcp_poses_are_different():
    a = CartesianPose(1, 2, 3, 4, 5, 6)
    assert not tcp_poses_are_different(a, CartesianPose(1.005, 2, 3, 4, 5, 6))
    assert tcp_poses_are_different(a, CartesianPose(1, 2, 3, 4, 5, 6.5))
    assert tcp_poses_are_different(a, None)
    assert tcp_poses_are_different(None, None)
