import json

import pytest

from parol6_ik.config import DEFAULT_CONFIG, DEFAULT_SOLVER_PARAMS, load_config, solver_params


def _write(tmp_path, data):
    path = tmp_path / 'config.json'
    path.write_text(json.dumps(data), encoding='utf-8')
    return str(path)


def test_defaults_are_merged(tmp_path):
    config = load_config(_write(tmp_path, {'damping': 0.2, 'targets_path': 'poses.json'}))

    assert config['damping'] == 0.2
    assert config['targets_path'] == 'poses.json'
    assert config['max_iterations'] == DEFAULT_SOLVER_PARAMS['max_iterations']
    assert config['tool_offset'] == DEFAULT_CONFIG['tool_offset']


def test_unknown_keys_rejected(tmp_path):
    with pytest.raises(ValueError, match='dampnig'):
        load_config(_write(tmp_path, {'dampnig': 0.2}))


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / 'missing.json'))


def test_solver_params_only_carries_solver_keys(tmp_path):
    config = load_config(_write(tmp_path, {'max_step': 5.0}))
    params = solver_params(config)

    assert set(params) == set(DEFAULT_SOLVER_PARAMS)
    assert params['max_step'] == 5.0
    assert 'output_path' not in params
