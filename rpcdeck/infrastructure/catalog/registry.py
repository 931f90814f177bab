"""
Method registry: categories of descriptors plus derived lookup views.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from rpcdeck.abstractions.dto.methods import MethodCategory, MethodDescriptor, MethodOption

logger = logging.getLogger(__name__)


class MethodRegistry:
    """
    Immutable view over an ordered list of method categories.

    - all_methods: flattened name -> descriptor across categories. Names are
      expected to be globally unique; on collision the later category wins and
      a warning is logged.
    - method_options: (value, label) pairs in catalog order for selectors.
    """

    def __init__(self, categories: Iterable[MethodCategory]):
        self._categories: Tuple[MethodCategory, ...] = tuple(categories)
        flat: Dict[str, MethodDescriptor] = {}
        for category in self._categories:
            for name, descriptor in category.methods.items():
                if name in flat:
                    logger.warning(
                        "Method '%s' declared again in category '%s'; the later declaration wins",
                        name,
                        category.key,
                    )
                flat[name] = descriptor
        self._all = flat
        self._options = tuple(MethodOption(value=name, label=name) for name in flat)

    @property
    def categories(self) -> Tuple[MethodCategory, ...]:
        return self._categories

    @property
    def all_methods(self) -> Dict[str, MethodDescriptor]:
        return dict(self._all)

    @property
    def method_options(self) -> Tuple[MethodOption, ...]:
        return self._options

    def names(self) -> List[str]:
        return list(self._all)

    def resolve(self, name: Optional[str]) -> Optional[MethodDescriptor]:
        """Descriptor for `name`, or None for unconfigured or unknown names."""
        if not name:
            return None
        return self._all.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._all

    def __len__(self) -> int:
        return len(self._all)


__all__ = ["MethodRegistry"]
