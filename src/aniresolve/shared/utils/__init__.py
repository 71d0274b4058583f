"""Small helpers shared across AniResolve."""

from .iteration import chunked
from .serialization import to_dict

__all__ = ["chunked", "to_dict"]
