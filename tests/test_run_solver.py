import json

from parol6_ik.run_solver import run_solver


def test_batch_run_writes_results(tmp_path):
    targets_path = tmp_path / 'targets.json'
    targets_path.write_text(json.dumps([
        {'name': 'home', 'pose': [-214.93, 0, 287, 0, 0, 180]},
        {'name': 'far', 'pose': [1000000, 0, 0, 0, 0, 0], 'axis_mask': [1, 1, 1, 0, 0, 0]},
    ]), encoding='utf-8')
    output_path = tmp_path / 'results.json'
    config_path = tmp_path / 'config.json'
    config_path.write_text(json.dumps({
        'targets_path': str(targets_path),
        'output_path': str(output_path),
        'max_iterations': 30,
    }), encoding='utf-8')

    assert run_solver(str(config_path)) == 0

    results = json.loads(output_path.read_text(encoding='utf-8'))['results']
    assert [r['name'] for r in results] == ['home', 'far']
    assert results[0]['success'] is True
    assert results[1]['error'] == 'OUT_OF_REACH'


def test_missing_config_fails(tmp_path):
    assert run_solver(str(tmp_path / 'nope.json')) == 1


def test_missing_targets_fails(tmp_path):
    config_path = tmp_path / 'config.json'
    config_path.write_text(json.dumps({'targets_path': str(tmp_path / 'none.json')}), encoding='utf-8')

    assert run_solver(str(config_path)) == 1
