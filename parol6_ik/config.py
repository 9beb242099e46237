"""
配置加载：JSON 配置文件 + 默认求解参数
"""
import json
import os
from typing import Any, Dict

from .constants import DEFAULT_TOOL_OFFSET

DEFAULT_SOLVER_PARAMS: Dict[str, Any] = {
    'max_iterations': 100,
    'position_tolerance': 0.1,
    'orientation_tolerance': 0.1,
    'damping': 0.05,
    'orientation_weight': 1.0,
    'epsilon': 1e-3,
    'max_step': 10.0,
    'line_search_alpha_min': 1e-2,
    'restarts': 6,
    'reach_threshold': 10.0,
    'singular_threshold': 1e-2,
    'singular_iterations': 3,
    'stall_iterations': 10,
    'stall_tolerance': 1e-5,
}

DEFAULT_CONFIG: Dict[str, Any] = {
    'skeleton_path': None,
    'targets_path': 'targets.json',
    'output_path': 'ik_results.json',
    'tool_offset': list(DEFAULT_TOOL_OFFSET),
    'seed': None,
    'log_level': 'INFO',
}


def load_config(config_path: str) -> Dict[str, Any]:
    """
    读取配置文件并与默认值合并

    :raises FileNotFoundError: 配置文件不存在
    :raises ValueError: 存在未知的求解参数
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(config_path)

    with open(config_path, 'r', encoding='utf-8') as f:
        user_config = json.load(f)

    config = dict(DEFAULT_CONFIG)
    config.update(DEFAULT_SOLVER_PARAMS)
    unknown = set(user_config) - set(config)
    if unknown:
        raise ValueError(f"Unknown config keys: {sorted(unknown)}")
    config.update(user_config)
    return config


def solver_params(config: Dict[str, Any]) -> Dict[str, Any]:
    """从配置中取出 solve_ik 的关键字参数"""
    return {key: config.get(key, default) for key, default in DEFAULT_SOLVER_PARAMS.items()}
