"""
Method catalog: registry structure and the bundled Anvil catalog.
"""

from __future__ import annotations

from rpcdeck.interfaces.services.transport import ITransport

from .anvil_methods import build_method_categories
from .registry import MethodRegistry


def build_registry(transport: ITransport) -> MethodRegistry:
    """Registry over the bundled catalog, bound to `transport`."""
    return MethodRegistry(build_method_categories(transport))


__all__ = ["MethodRegistry", "build_method_categories", "build_registry"]
