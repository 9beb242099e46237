import logging
import sys


def setup_logging(level=logging.INFO, component_levels=None):
    """
    配置根 logger，格式中包含 logger 名称

    :param level: 根 logger 的默认级别
    :param component_levels: 组件名到级别的映射，如 {'parol6_ik.solver': logging.DEBUG}
    """
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stdout
    )

    if component_levels:
        for component, comp_level in component_levels.items():
            logging.getLogger(component).setLevel(comp_level)
