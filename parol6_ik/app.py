import argparse
import logging
import threading

from flask import Flask

from .api.ik_routes import ik_bp
from .config import DEFAULT_SOLVER_PARAMS, load_config, solver_params
from .constants import DEFAULT_TOOL_OFFSET
from .data_io import load_chain
from .model import build_parol6_chain
from .utils.logger import setup_logging

logger = logging.getLogger(__name__)


def create_app(chain=None, params=None, tool_offset=DEFAULT_TOOL_OFFSET):
    """
    HTTP IK 服务

    :param chain: KinematicChain，默认 PAROL6
    :param params: solve_ik 关键字参数，默认 DEFAULT_SOLVER_PARAMS
    :param tool_offset: 请求未指定时使用的工具偏移（毫米）
    """
    app = Flask(__name__)
    app.config['ik_chain'] = chain if chain is not None else build_parol6_chain()
    app.config['ik_lock'] = threading.Lock()
    app.config['ik_params'] = dict(params if params is not None else DEFAULT_SOLVER_PARAMS)
    app.config['ik_tool_offset'] = list(tool_offset)

    app.register_blueprint(ik_bp, url_prefix='/api/ik')
    logger.info("IK service ready on %r", app.config['ik_chain'])
    return app


def main():
    parser = argparse.ArgumentParser(description="Run the PAROL6 IK HTTP service")
    parser.add_argument('--config', help="JSON config file (skeleton_path, tool_offset, solver params)")
    parser.add_argument('--host', default='0.0.0.0')
    parser.add_argument('--port', type=int, default=5000)
    args = parser.parse_args()

    setup_logging()
    if args.config:
        config = load_config(args.config)
        chain = load_chain(config['skeleton_path']) if config['skeleton_path'] else None
        app = create_app(chain, solver_params(config), config['tool_offset'])
    else:
        app = create_app()
    app.run(host=args.host, port=args.port, debug=False)


if __name__ == "__main__":
    main()
