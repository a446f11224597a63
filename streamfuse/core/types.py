"""
Pipeline Data Model
===================

The immutable records the fusion pass reads and produces.

A pipeline is an ordered list of ``StreamNode`` values. Each node names
its operator kind and carries an opaque ``transform`` that the optimizer
never inspects; only fusion-rule builders combine transforms.

Fusion never mutates an operand. It builds a new node whose
``fusion_metadata`` records provenance:

    map(f) , map(g)         -> map+map          history: [map+map]
    map+map , map+map       -> map+map+map+map  history: [map+map, map+map, (map+map)+(map+map)]

A leaf node (never fused) has ``fusion_metadata=None``, not an empty
history.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Optional, Tuple, Union


class OperatorKind(str, Enum):
    """Built-in operator kinds. Custom kinds are plain strings."""
    MAP = 'map'
    FILTER = 'filter'
    SCAN = 'scan'
    FLAT_MAP = 'flatMap'
    TAKE = 'take'
    SKIP = 'skip'
    DISTINCT = 'distinct'
    REDUCE = 'reduce'
    TAP = 'tap'
    # Composite kinds produced by fusion
    FILTER_MAP = 'filterMap'    # partial map: value or SKIP
    SCAN_MAP = 'scanMap'        # (acc, x) -> (new_acc, emitted)


KindLike = Union[OperatorKind, str]


def kind_name(kind: KindLike) -> str:
    """Normalize an ``OperatorKind`` or string to a plain string."""
    if isinstance(kind, OperatorKind):
        return kind.value
    return str(kind)


class OperatorCategory(Enum):
    STATELESS = auto()
    STATEFUL = auto()


class Multiplicity(Enum):
    """How many outputs one input element may yield."""
    PRESERVE = auto()
    INCREASE = auto()
    DECREASE = auto()


class FusionType(Enum):
    """Classification of an adjacent operator pair."""
    STATELESS_ONLY = 'stateless-only'
    STATELESS_BEFORE_STATEFUL = 'stateless-before-stateful'
    STATEFUL_BEFORE_STATELESS = 'stateful-before-stateless'
    NOT_FUSIBLE = 'not-fusible'


@dataclass(frozen=True)
class FusionTraceEntry:
    """One atomic pairwise fusion."""
    iteration: int
    step: int
    position: int
    operator1: str
    operator2: str
    fused_operator: str
    original_length: int
    new_length: int
    fusion_type: FusionType
    timestamp: int


@dataclass(frozen=True)
class FusionMetadata:
    """
    Provenance of a fused node.

    ``fusion_history`` lists every atomic fusion folded into the node,
    ancestors first and the fusion that created this node last, so its
    length is the transitive fusion count.
    """
    fusion_pass: int
    fusion_step: int
    original_operators: Tuple[str, str]
    original_positions: Tuple[int, int]
    fusion_type: FusionType
    fusion_timestamp: int
    fusion_history: Tuple[FusionTraceEntry, ...] = ()
    is_fused: bool = True


@dataclass(frozen=True)
class StreamNode:
    """
    One pipeline step.

    ``op`` is the display label (``"map"`` or a synthetic ``"map+filter"``);
    ``kind`` is the operator kind used for catalog lookups and defaults
    to ``op``.
    """
    op: str
    transform: Optional[Callable] = None
    args: Tuple[Any, ...] = ()
    fusion_metadata: Optional[FusionMetadata] = None
    kind: Optional[str] = field(default=None)

    def __post_init__(self):
        object.__setattr__(self, 'op', kind_name(self.op))
        object.__setattr__(self, 'args', tuple(self.args))
        if self.kind is None:
            object.__setattr__(self, 'kind', self.op)
        else:
            object.__setattr__(self, 'kind', kind_name(self.kind))

    @property
    def is_fused(self) -> bool:
        return self.fusion_metadata is not None and self.fusion_metadata.is_fused


def stream_node(op: KindLike, transform: Optional[Callable] = None, *args: Any) -> StreamNode:
    """
    Convenience constructor for leaf nodes.

    Usage:
        >>> stream_node('map', lambda x: x + 1)
        >>> stream_node(OperatorKind.SCAN, lambda acc, x: acc + x, 0)
    """
    return StreamNode(op=kind_name(op), transform=transform, args=args)
