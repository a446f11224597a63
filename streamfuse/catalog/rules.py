"""
Fusion Rule Registry
====================

Decides whether two adjacent operator kinds may fuse and supplies the
builder that produces the fused transform.

A pair fuses only when all three hold:

  1. both kinds are in the catalog and B is in A.fusible_after
  2. the category table does not forbid it:

        A \\ B       Stateless                   Stateful
        Stateless   STATELESS_ONLY              STATELESS_BEFORE_STATEFUL
        Stateful    STATEFUL_BEFORE_STATELESS   NOT_FUSIBLE

  3. a builder is registered for the ordered pair of names

Condition 3 overrides the table: a legal-by-category pair without a
builder is NOT_FUSIBLE. Rules are keyed by ``(first, second)`` name
tuples resolved once at registration, never by string dispatch.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from streamfuse.catalog.builders import TransformBuilder
from streamfuse.catalog.operators import OperatorCatalog, OperatorDescriptor
from streamfuse.core.types import (
    FusionType,
    KindLike,
    OperatorCategory,
    StreamNode,
    kind_name,
)

logger = logging.getLogger(__name__)

RuleKey = Tuple[str, str]

_CATEGORY_TABLE: Dict[Tuple[OperatorCategory, OperatorCategory], FusionType] = {
    (OperatorCategory.STATELESS, OperatorCategory.STATELESS): FusionType.STATELESS_ONLY,
    (OperatorCategory.STATELESS, OperatorCategory.STATEFUL): FusionType.STATELESS_BEFORE_STATEFUL,
    (OperatorCategory.STATEFUL, OperatorCategory.STATELESS): FusionType.STATEFUL_BEFORE_STATELESS,
    (OperatorCategory.STATEFUL, OperatorCategory.STATEFUL): FusionType.NOT_FUSIBLE,
}


@dataclass(frozen=True)
class FusionRule:
    """
    A registered fusion for one ordered pair of operator kinds.

    ``result_kind`` is the kind of the fused node. When None the fused
    node's kind is its synthetic ``"first+second"`` label, which is not
    in the catalog, so the node is never fused again.
    """
    first: str
    second: str
    builder: TransformBuilder
    result_kind: Optional[str] = None
    description: str = ''

    @property
    def key(self) -> RuleKey:
        return (self.first, self.second)


@dataclass(frozen=True)
class FusionDecision:
    """A legal fusion: the rule to apply and its classification."""
    rule: FusionRule
    fusion_type: FusionType


@dataclass(frozen=True)
class FusibilityEntry:
    """One row of the fusibility matrix."""
    first: str
    second: str
    fusion_type: FusionType
    has_builder: bool

    @property
    def can_fuse(self) -> bool:
        return self.has_builder and self.fusion_type is not FusionType.NOT_FUSIBLE


class FusionRuleRegistry:
    """
    Ordered-pair rule table backed by an ``OperatorCatalog``.

    Usage:
        >>> registry = FusionRuleRegistry(catalog)
        >>> registry.register('map', 'map', fuse_map_map, result_kind='map')
        >>> registry.classify('map', 'map')
        <FusionType.STATELESS_ONLY: 'stateless-only'>
        >>> registry.resolve('map', 'map').rule.result_kind
        'map'
    """

    def __init__(self, catalog: OperatorCatalog, rules: Iterable[FusionRule] = ()):
        self.catalog = catalog
        self._rules: Dict[RuleKey, FusionRule] = {}
        for rule in rules:
            self._add(rule)

    def register(
        self,
        first: KindLike,
        second: KindLike,
        builder: TransformBuilder,
        result_kind: Optional[KindLike] = None,
        description: str = '',
    ) -> FusionRule:
        if not callable(builder):
            raise TypeError(f"Fusion builder must be callable, got {type(builder).__name__}")
        first, second = kind_name(first), kind_name(second)
        if not first or not second:
            raise ValueError("Fusion rule operator names must be non-empty")
        rule = FusionRule(
            first=first,
            second=second,
            builder=builder,
            result_kind=kind_name(result_kind) if result_kind is not None else None,
            description=description,
        )
        return self._add(rule)

    def _add(self, rule: FusionRule) -> FusionRule:
        if rule.key in self._rules:
            logger.debug(f"Overwriting fusion rule {rule.first}->{rule.second}")
        self._rules[rule.key] = rule
        return rule

    def rule_for(self, first: KindLike, second: KindLike) -> Optional[FusionRule]:
        return self._rules.get((kind_name(first), kind_name(second)))

    def can_fuse(self, first: KindLike, second: KindLike) -> bool:
        """Catalog adjacency only: both registered and ``second`` may follow ``first``."""
        a = self.catalog.lookup(first)
        b = self.catalog.lookup(second)
        if a is None or b is None:
            return False
        return b.name in a.fusible_after

    def classify(self, first: KindLike, second: KindLike) -> FusionType:
        """Category-table classification of a catalog-legal pair."""
        if not self.can_fuse(first, second):
            return FusionType.NOT_FUSIBLE
        a = self.catalog.lookup(first)
        b = self.catalog.lookup(second)
        return _CATEGORY_TABLE[(a.category, b.category)]

    def resolve(self, first: KindLike, second: KindLike) -> Optional[FusionDecision]:
        """
        Return the decision for an adjacent pair, or None if the pair
        must not fuse. Registry completeness gates the category table.
        """
        rule = self.rule_for(first, second)
        if rule is None:
            return None
        fusion_type = self.classify(first, second)
        if fusion_type is FusionType.NOT_FUSIBLE:
            return None
        return FusionDecision(rule=rule, fusion_type=fusion_type)

    def fusion_type(self, first: KindLike, second: KindLike) -> FusionType:
        """Effective classification, NOT_FUSIBLE when no builder exists."""
        decision = self.resolve(first, second)
        return decision.fusion_type if decision else FusionType.NOT_FUSIBLE

    def build_fused_transform(self, first: StreamNode, second: StreamNode) -> Optional[Callable]:
        decision = self.resolve(first.kind, second.kind)
        if decision is None:
            return None
        return decision.rule.builder(first, second)

    def combinations(self) -> List[FusibilityEntry]:
        """Every catalog-legal ordered pair with its classification."""
        entries = []
        for descriptor in self.catalog:
            for follower in sorted(descriptor.fusible_after):
                if follower not in self.catalog:
                    continue
                entries.append(FusibilityEntry(
                    first=descriptor.name,
                    second=follower,
                    fusion_type=self.classify(descriptor.name, follower),
                    has_builder=(descriptor.name, follower) in self._rules,
                ))
        return entries

    def rules(self) -> List[FusionRule]:
        return list(self._rules.values())

    def copy(self, catalog: Optional[OperatorCatalog] = None) -> 'FusionRuleRegistry':
        return FusionRuleRegistry(catalog if catalog is not None else self.catalog,
                                  self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)


class FusionEnvironment:
    """
    The catalog and rule registry one optimization run consults.

    Build it once at startup, register operators and rules, then pass it
    to every ``optimize`` call. Registration while another thread is
    optimizing against the same environment is not supported.
    """

    def __init__(
        self,
        catalog: Optional[OperatorCatalog] = None,
        registry: Optional[FusionRuleRegistry] = None,
    ):
        self.catalog = catalog if catalog is not None else OperatorCatalog()
        if registry is None:
            registry = FusionRuleRegistry(self.catalog)
        elif registry.catalog is not self.catalog:
            registry = registry.copy(self.catalog)
        self.registry = registry

    def register_operator(self, descriptor: OperatorDescriptor) -> OperatorDescriptor:
        return self.catalog.register(descriptor)

    def register_fusion_rule(
        self,
        first: KindLike,
        second: KindLike,
        builder: TransformBuilder,
        result_kind: Optional[KindLike] = None,
        description: str = '',
    ) -> FusionRule:
        return self.registry.register(first, second, builder, result_kind, description)

    def consistency_report(self) -> List[str]:
        """
        Pairs whose two descriptors disagree: ``second`` is listed in
        ``first.fusible_after`` but ``first`` is missing from
        ``second.fusible_before``.
        """
        problems = []
        for descriptor in self.catalog:
            for follower in sorted(descriptor.fusible_after):
                other = self.catalog.lookup(follower)
                if other is None:
                    problems.append(
                        f"{descriptor.name}: follower {follower!r} is not registered"
                    )
                elif descriptor.name not in other.fusible_before:
                    problems.append(
                        f"{descriptor.name}->{follower}: {follower!r} does not list "
                        f"{descriptor.name!r} in fusible_before"
                    )
        return problems

    def copy(self) -> 'FusionEnvironment':
        catalog = self.catalog.copy()
        return FusionEnvironment(catalog, self.registry.copy(catalog))
