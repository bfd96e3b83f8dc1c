from . import orchestrator

__all__ = [orchestrator]
