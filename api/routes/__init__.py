"""API Routes"""

from . import configurators, health

__all__ = ["configurators", "health"]
