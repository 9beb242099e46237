import json

import numpy as np
import pytest

from parol6_ik.data_io import (
    chain_from_dict,
    decode_ik_request,
    encode_ik_result,
    export_results,
    load_chain,
    load_skeleton,
    load_targets,
    mask_from_wire,
    pose_from_wire,
    skeleton_from_dict,
    tool_offset_from_wire
)
from parol6_ik.types import AxisMask, CartesianPose, FailureReason, IKResult, JointConfiguration


def test_skeleton_builds_parent_links(planar_skeleton):
    root, joint_map = skeleton_from_dict(planar_skeleton())

    assert root.name == 'base'
    assert joint_map['L1'].parent is joint_map['J1']
    # 六段 0.05 m 连杆沿 X 轴伸直
    np.testing.assert_allclose(joint_map['L6'].global_transform[:3, 3], [0.3, 0, 0], atol=1e-12)


def test_skeleton_rejects_bad_definitions(planar_skeleton):
    data = planar_skeleton()
    data['joints'][1]['type'] = 'spherical'
    with pytest.raises(ValueError, match='Unknown joint type'):
        skeleton_from_dict(data)

    data = planar_skeleton()
    data['joints'][1]['parent'] = 'nowhere'
    with pytest.raises(ValueError, match='Parent'):
        skeleton_from_dict(data)

    data = planar_skeleton()
    data['root_name'] = 'nowhere'
    with pytest.raises(ValueError, match='Root'):
        skeleton_from_dict(data)


def test_chain_from_dict_uses_joint_order(planar_skeleton):
    data = planar_skeleton()
    data['joint_order'] = ['J1', 'J2', 'J3', 'J4', 'J5', 'J6']
    chain = chain_from_dict(data)

    assert chain.joint_names == data['joint_order']
    assert chain.terminal().name == 'L6'
    assert chain.viewport_frame is False

    data['joint_order'] = ['J1', 'J9']
    with pytest.raises(ValueError):
        chain_from_dict(data)


def test_load_chain_from_file(tmp_path, planar_skeleton):
    path = tmp_path / 'skeleton.json'
    path.write_text(json.dumps(planar_skeleton()), encoding='utf-8')

    chain = load_chain(str(path))
    assert chain.joint_count == 6


def test_pose_from_wire_with_quaternion():
    pose = pose_from_wire([100, 0, 200, 1, 2, 3], quaternion=[1, 0, 0, 0])
    np.testing.assert_allclose(pose.as_array(), [100, 0, 200, 0, 90, 180], atol=1e-9)

    with pytest.raises(ValueError):
        pose_from_wire([1, 2, 3])
    with pytest.raises(ValueError):
        pose_from_wire([1, 2, 3, 4, 5, 6], quaternion=[1, 0, 0])


def test_mask_from_wire():
    assert mask_from_wire(None) == AxisMask()
    assert mask_from_wire([1, 1, 1, 0, 0, 0]) == AxisMask.position_only()
    with pytest.raises(ValueError):
        mask_from_wire([1, 1, 1])
    with pytest.raises(ValueError):
        mask_from_wire([1, 1, 1, 2, 0, 0])


def test_decode_ik_request():
    target, seed, mask = decode_ik_request({
        'target_pose': [-214.93, 0, 287, 0, 0, 180],
        'current_joints': [0, -90, 180, 0, 0, 180],
        'axis_mask': [1, 1, 1, 1, 1, 0],
    })

    assert target == CartesianPose(-214.93, 0, 287, 0, 0, 180)
    assert seed == JointConfiguration(0, -90, 180, 0, 0, 180)
    assert mask == AxisMask(rz=False)

    with pytest.raises(ValueError, match='current_joints'):
        decode_ik_request({'target_pose': [0, 0, 0, 0, 0, 0]})
    with pytest.raises(ValueError):
        decode_ik_request(None)


def test_encode_ik_result():
    success = IKResult(success=True, iterations=4, residual=0.01, position_error=0.005,
                       joint_angles=JointConfiguration(0, -90, 180, 0, 0, 180))
    assert encode_ik_result(success) == {
        'success': True,
        'joints': [0, -90, 180, 0, 0, 180],
        'iterations': 4,
        'residual': 0.01,
        'error': None,
    }

    failure = encode_ik_result(IKResult.failure(FailureReason.INVALID_INPUT))
    assert failure['success'] is False
    assert failure['joints'] is None
    assert failure['residual'] is None
    assert failure['error'] == 'INVALID_INPUT'


def test_result_invariants_enforced():
    with pytest.raises(ValueError):
        IKResult(success=True, iterations=0, residual=0.0)
    with pytest.raises(ValueError):
        IKResult(success=False, iterations=0, residual=0.0)


def test_targets_and_export(tmp_path):
    targets_path = tmp_path / 'targets.json'
    targets_path.write_text(json.dumps([
        {'name': 'home', 'pose': [-214.93, 0, 287, 0, 0, 180]},
        {'pose': [-200, 10, 280, 0, 0, 180], 'axis_mask': [1, 1, 1, 0, 0, 0]},
    ]), encoding='utf-8')

    targets = load_targets(str(targets_path))
    assert [t['name'] for t in targets] == ['home', 'target_1']
    assert targets[1]['axis_mask'] == AxisMask.position_only()

    output_path = tmp_path / 'out' / 'results.json'
    export_results([{
        'name': 'home',
        'target': targets[0]['target'],
        'result': IKResult.failure(FailureReason.OUT_OF_REACH, 12, 50.0, 40.0),
    }], str(output_path))

    data = json.loads(output_path.read_text(encoding='utf-8'))
    assert data['results'][0]['name'] == 'home'
    assert data['results'][0]['error'] == 'OUT_OF_REACH'
    assert data['results'][0]['iterations'] == 12


def test_load_skeleton_from_file(tmp_path, planar_skeleton):
    path = tmp_path / 'skeleton.json'
    path.write_text(json.dumps(planar_skeleton()), encoding='utf-8')

    root, joint_map = load_skeleton(str(path))
    assert root.name == 'base'
    assert [name for name, node in joint_map.items() if node.get_dof() == 1] == \
        ['J1', 'J2', 'J3', 'J4', 'J5', 'J6']


def test_tool_offset_from_wire():
    assert tool_offset_from_wire(None, (47, 0, -62)) == [47.0, 0.0, -62.0]
    assert tool_offset_from_wire([1, 2, 3], (47, 0, -62)) == [1.0, 2.0, 3.0]
    for bad in (['a', 0, 0], 'abc', [1, 2], 5, [0, float('inf'), 0]):
        with pytest.raises((ValueError, TypeError)):
            tool_offset_from_wire(bad, (47, 0, -62))
