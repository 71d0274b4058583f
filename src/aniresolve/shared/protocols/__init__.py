"""Protocol definitions for dependency inversion.

Core modules depend on these interfaces instead of the services layer.
"""

from __future__ import annotations

from .services import CatalogueClientProtocol, TokenizerProtocol

__all__ = ["CatalogueClientProtocol", "TokenizerProtocol"]
