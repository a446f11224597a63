"""
Built-in operators and fusion rules.

``default_environment()`` returns a fresh ``FusionEnvironment`` each
call, so callers may extend it without affecting anyone else.
"""

from typing import List, Tuple

from streamfuse.catalog import builders
from streamfuse.catalog.operators import OperatorDescriptor
from streamfuse.catalog.rules import FusionEnvironment
from streamfuse.core.types import Multiplicity, OperatorCategory, OperatorKind as K

STATELESS = OperatorCategory.STATELESS
STATEFUL = OperatorCategory.STATEFUL


def default_descriptors() -> List[OperatorDescriptor]:
    return [
        OperatorDescriptor(
            name=K.MAP, category=STATELESS, multiplicity=Multiplicity.PRESERVE,
            fusible_before={K.MAP, K.FILTER, K.TAP, K.SCAN, K.FLAT_MAP},
            fusible_after={K.MAP, K.FILTER, K.SCAN, K.REDUCE, K.FLAT_MAP},
            description='Apply f to each element',
        ),
        OperatorDescriptor(
            name=K.FILTER, category=STATELESS, multiplicity=Multiplicity.DECREASE,
            fusible_before={K.MAP, K.FILTER},
            fusible_after={K.MAP, K.FILTER},
            description='Keep elements satisfying p',
        ),
        OperatorDescriptor(
            name=K.TAP, category=STATELESS, multiplicity=Multiplicity.PRESERVE,
            fusible_after={K.MAP},
            description='Run a side effect, pass the element through',
        ),
        OperatorDescriptor(
            name=K.SCAN, category=STATEFUL, multiplicity=Multiplicity.PRESERVE,
            fusible_before={K.MAP},
            fusible_after={K.MAP},
            description='Emit each running accumulation',
        ),
        OperatorDescriptor(
            name=K.FLAT_MAP, category=STATEFUL, multiplicity=Multiplicity.INCREASE,
            fusible_before={K.MAP},
            fusible_after={K.MAP},
            description='Expand each element to zero or more elements',
        ),
        OperatorDescriptor(
            name=K.REDUCE, category=STATEFUL, multiplicity=Multiplicity.DECREASE,
            fusible_before={K.MAP},
            description='Fold the stream to a single value',
        ),
        OperatorDescriptor(
            name=K.TAKE, category=STATEFUL, multiplicity=Multiplicity.DECREASE,
            description='First n elements',
        ),
        OperatorDescriptor(
            name=K.SKIP, category=STATEFUL, multiplicity=Multiplicity.DECREASE,
            description='Drop the first n elements',
        ),
        OperatorDescriptor(
            name=K.DISTINCT, category=STATEFUL, multiplicity=Multiplicity.DECREASE,
            description='Drop repeated elements',
        ),
    ]


# (first, second, builder, result kind, law)
DEFAULT_RULES: List[Tuple] = [
    (K.MAP, K.MAP, builders.fuse_map_map, K.MAP, 'map(f) ; map(g) = map(g . f)'),
    (K.MAP, K.FILTER, builders.fuse_map_filter, K.FILTER_MAP,
     'map(f) ; filter(p) = filterMap(f, p)'),
    (K.FILTER, K.MAP, builders.fuse_filter_map, K.FILTER_MAP,
     'filter(p) ; map(f) = filterMap(p, f)'),
    (K.FILTER, K.FILTER, builders.fuse_filter_filter, K.FILTER,
     'filter(p1) ; filter(p2) = filter(p1 and p2)'),
    (K.MAP, K.SCAN, builders.fuse_map_accumulate, K.SCAN,
     'map(f) ; scan(r) = scan((acc, x) -> r(acc, f(x)))'),
    (K.SCAN, K.MAP, builders.fuse_scan_map, K.SCAN_MAP,
     'scan(r) ; map(g) = scanMap(r, g)'),
    (K.MAP, K.REDUCE, builders.fuse_map_accumulate, K.REDUCE,
     'map(f) ; reduce(r) = reduce((acc, x) -> r(acc, f(x)))'),
    (K.MAP, K.FLAT_MAP, builders.fuse_map_flat_map, K.FLAT_MAP,
     'map(f) ; flatMap(h) = flatMap(h . f)'),
    (K.FLAT_MAP, K.MAP, builders.fuse_flat_map_map, K.FLAT_MAP,
     'flatMap(h) ; map(g) = flatMap(x -> map(g, h(x)))'),
    (K.TAP, K.MAP, builders.fuse_tap_map, K.MAP,
     'tap(t) ; map(g) = map(x -> t(x); g(x))'),
]


def default_environment() -> FusionEnvironment:
    """
    Environment with the built-in operators and fusion laws.

    Usage:
        >>> env = default_environment()
        >>> env.register_operator(OperatorDescriptor(name='debounce', ...))
        >>> result = optimize(pipeline, environment=env)
    """
    env = FusionEnvironment()
    for descriptor in default_descriptors():
        env.register_operator(descriptor)
    for first, second, builder, result_kind, law in DEFAULT_RULES:
        env.register_fusion_rule(first, second, builder, result_kind=result_kind, description=law)
    return env
