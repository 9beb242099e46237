"""
批量求解命令行入口：parol6-ik config.json

依次求解目标列表中的每个位姿，成功的结果作为下一个目标的初值（保持解的连续性）。
"""
import logging
import sys
import time

from .config import load_config, solver_params
from .data_io import load_chain, load_targets, export_results
from .model import build_parol6_chain
from .solver import solve_ik
from .types import JointConfiguration
from .utils.logger import setup_logging

logger = logging.getLogger(__name__)


def run_solver(config_path="config.json") -> int:
    # 1. 加载配置
    try:
        config = load_config(config_path)
    except FileNotFoundError:
        print(f"❌ 找不到配置文件: {config_path}")
        return 1
    except ValueError as e:
        print(f"❌ 配置文件无效: {e}")
        return 1

    setup_logging(level=getattr(logging, str(config['log_level']).upper(), logging.INFO))

    print("----------- PAROL6 IK Solver Headless -----------")
    print(f"配置加载: {config_path}")

    params = solver_params(config)
    tool_offset = config['tool_offset']

    # 2. 加载运动链
    skeleton_path = config['skeleton_path']
    try:
        if skeleton_path:
            print(f"正在加载骨骼: {skeleton_path} ...")
            chain = load_chain(skeleton_path)
        else:
            chain = build_parol6_chain()
    except (OSError, ValueError, KeyError) as e:
        print(f"❌ 骨骼加载失败: {e}")
        return 1
    print(f"运动链: {chain!r}")

    # 3. 加载目标列表
    targets_path = config['targets_path']
    print(f"正在加载目标: {targets_path} ...")
    try:
        targets = load_targets(targets_path)
    except (OSError, ValueError, KeyError) as e:
        print(f"❌ 目标加载失败: {e}")
        return 1
    print(f"目标加载成功，共 {len(targets)} 个")

    # 4. 逐个求解
    seed = config['seed'] if config['seed'] is not None else chain.joint_angles()
    seed = JointConfiguration.from_array(seed)
    results = []
    failures = 0
    start_time = time.time()

    for index, item in enumerate(targets):
        result = solve_ik(
            target=item['target'],
            seed=seed,
            chain=chain,
            tool_offset=tool_offset,
            axis_mask=item['axis_mask'],
            **params
        )
        if result.success:
            seed = result.joint_angles
        else:
            failures += 1
            logger.warning("%s: %s", item['name'], result.failure_reason.value)
        results.append({'name': item['name'], 'target': item['target'], 'result': result})

        sys.stdout.write(f"\r进度: {index + 1}/{len(targets)}")
        sys.stdout.flush()

    print()
    duration = time.time() - start_time
    print(f"求解完成，耗时: {duration:.2f} 秒，失败 {failures} 个")

    # 5. 导出结果
    output_path = config['output_path']
    print(f"正在导出到: {output_path} ...")
    export_results(results, output_path)
    print("✅ 任务完成！")
    return 0


def main():
    if len(sys.argv) > 1:
        sys.exit(run_solver(sys.argv[1]))
    sys.exit(run_solver())


if __name__ == "__main__":
    main()
