from flask import Blueprint, request, jsonify, current_app
import logging

from ..data_io import decode_ik_request, encode_ik_result, joints_from_wire, tool_offset_from_wire
from ..solver import solve_ik, forward_kinematics
from ..types import FailureReason, IKResult

ik_bp = Blueprint('ik', __name__)
logger = logging.getLogger(__name__)


def _chain_and_lock():
    return current_app.config['ik_chain'], current_app.config['ik_lock']


@ik_bp.route('', methods=['POST'])
def solve():
    payload = request.get_json(silent=True)
    try:
        target, seed, mask = decode_ik_request(payload)
        tool_offset = tool_offset_from_wire(payload.get('tool_offset'), current_app.config['ik_tool_offset'])
    except (ValueError, TypeError) as e:
        logger.warning("Rejected IK request: %s", e)
        result = encode_ik_result(IKResult.failure(FailureReason.INVALID_INPUT))
        result['message'] = str(e)
        return jsonify(result), 400

    chain, lock = _chain_and_lock()
    # 同一条运动链上的求解必须串行
    with lock:
        result = solve_ik(target, seed, chain, tool_offset=tool_offset, axis_mask=mask,
                          **current_app.config['ik_params'])
    logger.debug("IK request solved: success=%s iterations=%d", result.success, result.iterations)
    return jsonify(encode_ik_result(result))


@ik_bp.route('/fk', methods=['POST'])
def fk():
    payload = request.get_json(silent=True)
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        return jsonify({'error': 'FK request must be a JSON object'}), 400
    try:
        joints = joints_from_wire(payload.get('joints'))
        tool_offset = tool_offset_from_wire(payload.get('tool_offset'), current_app.config['ik_tool_offset'])
    except (ValueError, TypeError) as e:
        return jsonify({'error': str(e)}), 400

    chain, lock = _chain_and_lock()
    with lock:
        pose = forward_kinematics(chain, joints.as_array(), tool_offset)
    if pose is None:
        return jsonify({'error': 'Pose unavailable'}), 503
    return jsonify({'pose': pose.as_list()})


@ik_bp.route('/limits', methods=['GET'])
def limits():
    chain, _ = _chain_and_lock()
    return jsonify({
        name: {'min': float(lo), 'max': float(hi)}
        for name, (lo, hi) in zip(chain.joint_names, chain.limits)
    })
