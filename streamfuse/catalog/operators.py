"""
Operator Catalog
================

Static metadata for every operator kind the optimizer may fuse.

A kind that is not registered is never fusible: the catalog never
invents a descriptor for an unknown name. Registration overwrites an
existing entry of the same name; nothing is ever removed.
"""

import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional

from streamfuse.core.types import (
    KindLike,
    Multiplicity,
    OperatorCategory,
    kind_name,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperatorDescriptor:
    """
    Metadata for one operator kind.

    ``fusible_after`` is the set of kinds that may directly follow this
    kind in a fusion (this kind first). ``fusible_before`` is the set of
    kinds that may directly precede it.
    """
    name: str
    category: OperatorCategory
    multiplicity: Multiplicity = Multiplicity.PRESERVE
    fusible_before: FrozenSet[str] = frozenset()
    fusible_after: FrozenSet[str] = frozenset()
    description: str = ''

    def __post_init__(self):
        name = kind_name(self.name)
        if not name:
            raise ValueError("Operator name must be a non-empty string")
        object.__setattr__(self, 'name', name)
        object.__setattr__(
            self, 'fusible_before', frozenset(kind_name(k) for k in self.fusible_before)
        )
        object.__setattr__(
            self, 'fusible_after', frozenset(kind_name(k) for k in self.fusible_after)
        )

    @property
    def is_stateful(self) -> bool:
        return self.category is OperatorCategory.STATEFUL


class OperatorCatalog:
    """
    Registry of operator descriptors keyed by name.

    Usage:
        >>> catalog = OperatorCatalog()
        >>> catalog.register(OperatorDescriptor(
        ...     name='map',
        ...     category=OperatorCategory.STATELESS,
        ...     fusible_after={'map'},
        ... ))
        >>> catalog.lookup('map').category
        <OperatorCategory.STATELESS: 1>
        >>> catalog.lookup('unknown') is None
        True
    """

    def __init__(self, descriptors: Iterable[OperatorDescriptor] = ()):
        self._descriptors: Dict[str, OperatorDescriptor] = {}
        for descriptor in descriptors:
            self.register(descriptor)

    def register(self, descriptor: OperatorDescriptor) -> OperatorDescriptor:
        if not isinstance(descriptor, OperatorDescriptor):
            raise TypeError(
                f"Expected OperatorDescriptor, got {type(descriptor).__name__}"
            )
        if descriptor.name in self._descriptors:
            logger.debug(f"Overwriting operator descriptor {descriptor.name!r}")
        self._descriptors[descriptor.name] = descriptor
        return descriptor

    def lookup(self, name: KindLike) -> Optional[OperatorDescriptor]:
        return self._descriptors.get(kind_name(name))

    def names(self) -> List[str]:
        return list(self._descriptors)

    def by_category(self, category: OperatorCategory) -> List[str]:
        return [d.name for d in self._descriptors.values() if d.category is category]

    def copy(self) -> 'OperatorCatalog':
        return OperatorCatalog(self._descriptors.values())

    def __contains__(self, name) -> bool:
        return kind_name(name) in self._descriptors

    def __iter__(self) -> Iterator[OperatorDescriptor]:
        return iter(list(self._descriptors.values()))

    def __len__(self) -> int:
        return len(self._descriptors)
