from . import (
    endpoints,
    icons,
)

__all__ = [
    endpoints,
    icons,
]
