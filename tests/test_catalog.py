"""
Tests for the operator catalog, fusion rule registry and environment.

Validates:
  - Descriptor normalization and catalog registration semantics
  - Directional fusibility and the category classification table
  - Registry completeness gating the category table
  - Built-in environment consistency
"""

import pytest

from streamfuse.catalog.builders import fuse_map_map
from streamfuse.catalog.defaults import default_environment
from streamfuse.catalog.operators import OperatorCatalog, OperatorDescriptor
from streamfuse.catalog.rules import FusionEnvironment, FusionRuleRegistry
from streamfuse.core.types import (
    FusionType,
    Multiplicity,
    OperatorCategory,
    OperatorKind,
    stream_node,
)

STATELESS = OperatorCategory.STATELESS
STATEFUL = OperatorCategory.STATEFUL


def first_transform(a, b):
    return a.transform


# ---------- Operator Catalog Tests ----------

class TestOperatorDescriptor:
    def test_names_normalized(self):
        d = OperatorDescriptor(
            name=OperatorKind.MAP,
            category=STATELESS,
            fusible_after={OperatorKind.FILTER, 'map'},
        )
        assert d.name == 'map'
        assert type(d.name) is str
        assert d.fusible_after == frozenset({'filter', 'map'})

    def test_empty_name_rejected(self):
        with pytest.raises(ValueError):
            OperatorDescriptor(name='', category=STATELESS)

    def test_is_stateful(self):
        assert OperatorDescriptor(name='scan', category=STATEFUL).is_stateful
        assert not OperatorDescriptor(name='map', category=STATELESS).is_stateful

    def test_immutable(self):
        d = OperatorDescriptor(name='map', category=STATELESS)
        with pytest.raises(AttributeError):
            d.name = 'filter'


class TestOperatorCatalog:
    def setup_method(self):
        self.catalog = OperatorCatalog()

    def test_register_and_lookup(self):
        d = OperatorDescriptor(name='map', category=STATELESS)
        self.catalog.register(d)
        assert self.catalog.lookup('map') is d
        assert self.catalog.lookup(OperatorKind.MAP) is d
        assert 'map' in self.catalog
        assert len(self.catalog) == 1

    def test_unknown_is_absent(self):
        assert self.catalog.lookup('debounce') is None
        assert 'debounce' not in self.catalog

    def test_register_overwrites(self):
        self.catalog.register(OperatorDescriptor(name='map', category=STATELESS))
        replacement = OperatorDescriptor(
            name='map', category=STATELESS, multiplicity=Multiplicity.INCREASE
        )
        self.catalog.register(replacement)
        assert self.catalog.lookup('map') is replacement
        assert len(self.catalog) == 1

    def test_register_rejects_non_descriptor(self):
        with pytest.raises(TypeError):
            self.catalog.register({'name': 'map'})

    def test_by_category(self):
        self.catalog.register(OperatorDescriptor(name='map', category=STATELESS))
        self.catalog.register(OperatorDescriptor(name='scan', category=STATEFUL))
        self.catalog.register(OperatorDescriptor(name='filter', category=STATELESS))
        assert self.catalog.by_category(STATELESS) == ['map', 'filter']
        assert self.catalog.by_category(STATEFUL) == ['scan']

    def test_copy_is_independent(self):
        self.catalog.register(OperatorDescriptor(name='map', category=STATELESS))
        clone = self.catalog.copy()
        clone.register(OperatorDescriptor(name='scan', category=STATEFUL))
        assert 'scan' in clone
        assert 'scan' not in self.catalog


# ---------- Fusion Rule Registry Tests ----------

class TestFusionRuleRegistry:
    def setup_method(self):
        self.catalog = OperatorCatalog([
            OperatorDescriptor(name='map', category=STATELESS,
                               fusible_before={'map'}, fusible_after={'map', 'scan'}),
            OperatorDescriptor(name='scan', category=STATEFUL,
                               fusible_before={'map', 'scan'}, fusible_after={'map', 'scan'}),
            OperatorDescriptor(name='filter', category=STATELESS, fusible_after={'map'}),
        ])
        self.registry = FusionRuleRegistry(self.catalog)

    def test_can_fuse_is_directional(self):
        assert self.registry.can_fuse('map', 'scan')
        assert self.registry.can_fuse('scan', 'map')
        assert self.registry.can_fuse('filter', 'map')
        assert not self.registry.can_fuse('map', 'filter')

    def test_unregistered_kind_never_fusible(self):
        assert not self.registry.can_fuse('map', 'debounce')
        assert not self.registry.can_fuse('debounce', 'map')
        assert self.registry.classify('debounce', 'map') is FusionType.NOT_FUSIBLE

    def test_classify_table(self):
        assert self.registry.classify('map', 'map') is FusionType.STATELESS_ONLY
        assert self.registry.classify('map', 'scan') is FusionType.STATELESS_BEFORE_STATEFUL
        assert self.registry.classify('scan', 'map') is FusionType.STATEFUL_BEFORE_STATELESS
        assert self.registry.classify('scan', 'scan') is FusionType.NOT_FUSIBLE
        assert self.registry.classify('map', 'filter') is FusionType.NOT_FUSIBLE

    def test_missing_builder_blocks_legal_pair(self):
        assert self.registry.classify('map', 'map') is FusionType.STATELESS_ONLY
        assert self.registry.resolve('map', 'map') is None
        assert self.registry.fusion_type('map', 'map') is FusionType.NOT_FUSIBLE

    def test_resolve_with_builder(self):
        rule = self.registry.register('map', 'map', fuse_map_map, result_kind='map')
        decision = self.registry.resolve('map', 'map')
        assert decision is not None
        assert decision.rule is rule
        assert decision.fusion_type is FusionType.STATELESS_ONLY

    def test_stateful_pair_not_fusible_even_with_builder(self):
        self.registry.register('scan', 'scan', first_transform)
        assert self.registry.can_fuse('scan', 'scan')
        assert self.registry.resolve('scan', 'scan') is None

    def test_builder_without_catalog_adjacency(self):
        self.registry.register('map', 'filter', first_transform)
        assert self.registry.resolve('map', 'filter') is None

    def test_register_validation(self):
        with pytest.raises(TypeError):
            self.registry.register('map', 'map', 'not callable')
        with pytest.raises(ValueError):
            self.registry.register('', 'map', first_transform)

    def test_rule_keys_normalized(self):
        self.registry.register(OperatorKind.MAP, OperatorKind.SCAN, first_transform,
                               result_kind=OperatorKind.SCAN)
        rule = self.registry.rule_for('map', 'scan')
        assert rule.key == ('map', 'scan')
        assert rule.result_kind == 'scan'

    def test_build_fused_transform(self):
        self.registry.register('map', 'map', fuse_map_map, result_kind='map')
        a = stream_node('map', lambda x: x + 1)
        b = stream_node('map', lambda x: x * 10)
        fused = self.registry.build_fused_transform(a, b)
        assert fused(1) == 20

        c = stream_node('filter', lambda x: True)
        assert self.registry.build_fused_transform(a, c) is None

    def test_combinations(self):
        self.registry.register('map', 'scan', first_transform)
        entries = {(e.first, e.second): e for e in self.registry.combinations()}
        assert set(entries) == {
            ('map', 'map'), ('map', 'scan'), ('scan', 'map'),
            ('scan', 'scan'), ('filter', 'map'),
        }
        assert entries[('map', 'scan')].can_fuse
        assert not entries[('map', 'map')].can_fuse
        assert entries[('scan', 'scan')].fusion_type is FusionType.NOT_FUSIBLE


# ---------- Environment Tests ----------

class TestFusionEnvironment:
    def test_default_environment_is_consistent(self):
        env = default_environment()
        assert env.consistency_report() == []

    def test_default_environment_is_fresh(self):
        env = default_environment()
        env.register_operator(OperatorDescriptor(name='debounce', category=STATEFUL))
        assert 'debounce' not in default_environment().catalog

    def test_default_rules_all_resolve(self):
        env = default_environment()
        for rule in env.registry.rules():
            assert env.registry.resolve(rule.first, rule.second) is not None, rule.key

    def test_default_stateful_pairs(self):
        env = default_environment()
        assert env.registry.resolve('scan', 'scan') is None
        assert env.registry.resolve('take', 'map') is None
        assert env.registry.fusion_type('map', 'scan') is FusionType.STATELESS_BEFORE_STATEFUL
        assert env.registry.fusion_type('scan', 'map') is FusionType.STATEFUL_BEFORE_STATELESS

    def test_consistency_report_flags_mismatch(self):
        env = FusionEnvironment()
        env.register_operator(OperatorDescriptor(
            name='a', category=STATELESS, fusible_after={'b', 'ghost'}))
        env.register_operator(OperatorDescriptor(name='b', category=STATELESS))
        problems = env.consistency_report()
        assert len(problems) == 2
        assert any('ghost' in p for p in problems)
        assert any('a->b' in p for p in problems)

    def test_copy_is_independent(self):
        env = default_environment()
        clone = env.copy()
        clone.register_fusion_rule('filter', 'filter', first_transform)
        assert clone.registry.rule_for('filter', 'filter').builder is first_transform
        assert env.registry.rule_for('filter', 'filter').builder is not first_transform
        assert clone.registry.catalog is clone.catalog

    def test_registry_rebound_to_catalog(self):
        catalog = OperatorCatalog([OperatorDescriptor(name='map', category=STATELESS)])
        other = FusionRuleRegistry(OperatorCatalog())
        env = FusionEnvironment(catalog, other)
        assert env.registry.catalog is catalog
