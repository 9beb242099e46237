from .ik_routes import ik_bp

__all__ = ['ik_bp']
