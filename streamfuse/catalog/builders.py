"""
Fusion Builders
===============

The algebraic fusion laws. Each builder takes the two adjacent nodes
and returns one transform equivalent to running the first node's
transform and then the second's on the same element.

Transform conventions per kind:

    map        f(x) -> y
    filter     p(x) -> bool
    filterMap  g(x) -> y, or SKIP when the element is dropped
    scan       r(acc, x) -> acc             args[0] is the seed
    scanMap    s(acc, x) -> (acc, emitted)  args[0] is the seed
    reduce     r(acc, x) -> acc             args[0] is the seed
    flatMap    h(x) -> iterable
    tap        t(x) -> ignored

Laws:

    map(f)     ; map(g)      = map(g . f)
    map(f)     ; filter(p)   = filterMap(y = f(x); y if p(y) else SKIP)
    filter(p)  ; map(f)      = filterMap(f(x) if p(x) else SKIP)
    filter(p1) ; filter(p2)  = filter(p1(x) and p2(x))
    map(f)     ; scan(r)     = scan((acc, x) -> r(acc, f(x)))
    scan(r)    ; map(g)      = scanMap((acc, x) -> (r(acc, x), g(r(acc, x))))
    map(f)     ; reduce(r)   = reduce((acc, x) -> r(acc, f(x)))
    map(f)     ; flatMap(h)  = flatMap(h . f)
    flatMap(h) ; map(g)      = flatMap(x -> map(g, h(x)))
    tap(t)     ; map(g)      = map(x -> t(x); g(x))

A fused accumulator keeps its seed at args[0]; any args of a
non-accumulating left operand follow it.

Every fused transform evaluates each operand transform at most once per
element and short-circuits when a filter drops the element.
"""

from typing import Any, Callable

from streamfuse.core.types import StreamNode


class _Skip:
    """Sentinel returned by a partial map for a dropped element."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return 'SKIP'


SKIP = _Skip()

TransformBuilder = Callable[[StreamNode, StreamNode], Callable]


def compose(first: Callable, second: Callable) -> Callable:
    """Compose two unary functions: ``second(first(x))``."""
    def composed(x):
        return second(first(x))
    return composed


def fuse_map_map(first: StreamNode, second: StreamNode) -> Callable:
    return compose(first.transform, second.transform)


def fuse_map_filter(first: StreamNode, second: StreamNode) -> Callable:
    mapper = first.transform
    predicate = second.transform

    def map_filter(x):
        y = mapper(x)
        return y if predicate(y) else SKIP

    return map_filter


def fuse_filter_map(first: StreamNode, second: StreamNode) -> Callable:
    predicate = first.transform
    mapper = second.transform

    def filter_map(x):
        if predicate(x):
            return mapper(x)
        return SKIP

    return filter_map


def fuse_filter_filter(first: StreamNode, second: StreamNode) -> Callable:
    p1 = first.transform
    p2 = second.transform

    def conjoined(x):
        return bool(p1(x)) and bool(p2(x))

    return conjoined


def fuse_map_accumulate(first: StreamNode, second: StreamNode) -> Callable:
    """map ; scan and map ; reduce: feed the mapped element to the reducer."""
    mapper = first.transform
    reducer = second.transform

    def accumulate(acc, x):
        return reducer(acc, mapper(x))

    return accumulate


def fuse_scan_map(first: StreamNode, second: StreamNode) -> Callable:
    # The accumulator keeps the scan value; only the emitted element is mapped.
    reducer = first.transform
    mapper = second.transform

    def scan_map(acc, x):
        new_acc = reducer(acc, x)
        return new_acc, mapper(new_acc)

    return scan_map


def fuse_map_flat_map(first: StreamNode, second: StreamNode) -> Callable:
    return compose(first.transform, second.transform)


def fuse_flat_map_map(first: StreamNode, second: StreamNode) -> Callable:
    expand = first.transform
    mapper = second.transform

    def flat_map_map(x) -> Any:
        return map(mapper, expand(x))

    return flat_map_map


def fuse_tap_map(first: StreamNode, second: StreamNode) -> Callable:
    effect = first.transform
    mapper = second.transform

    def tap_map(x):
        effect(x)
        return mapper(x)

    return tap_map
