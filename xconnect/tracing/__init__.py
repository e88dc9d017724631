from ._traced import get_tracer, traced

__all__ = ["get_tracer", "traced"]
