"""
Fusion Metadata
===============

Builds the provenance record attached to every fused node, plus
read-only queries over that record.

Merge rule: the new node's history is the first operand's history, then
the second operand's history, then the entry for this fusion. Entries
are never dropped or reordered, so

    len(node.fusion_metadata.fusion_history)

always equals the number of atomic pairwise fusions folded into the
node. Histories are tuples; a merge builds a new tuple and never touches
the operands' records.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

from streamfuse.core.types import (
    FusionMetadata,
    FusionTraceEntry,
    FusionType,
    StreamNode,
)


class FusionMetadataTracker:
    """Stateless metadata construction used by the rewriter."""

    @staticmethod
    def history_of(node: StreamNode) -> Tuple[FusionTraceEntry, ...]:
        if node.fusion_metadata is None:
            return ()
        return node.fusion_metadata.fusion_history

    def merge(
        self,
        first: StreamNode,
        second: StreamNode,
        entry: FusionTraceEntry,
    ) -> FusionMetadata:
        history = self.history_of(first) + self.history_of(second) + (entry,)
        return FusionMetadata(
            fusion_pass=entry.iteration,
            fusion_step=entry.step,
            original_operators=(first.op, second.op),
            original_positions=(entry.position, entry.position + 1),
            fusion_type=entry.fusion_type,
            fusion_timestamp=entry.timestamp,
            fusion_history=history,
        )


# ---------- Queries ----------

def is_fused_node(node: StreamNode) -> bool:
    return node.is_fused


def fusion_history(node: StreamNode) -> List[FusionTraceEntry]:
    return list(FusionMetadataTracker.history_of(node))


def original_operators(node: StreamNode) -> List[str]:
    if node.fusion_metadata is None:
        return []
    return list(node.fusion_metadata.original_operators)


def fusion_lineage(node: StreamNode) -> List[str]:
    """One ``"op1+op2"`` label per atomic fusion, oldest first."""
    return [f"{e.operator1}+{e.operator2}" for e in fusion_history(node)]


def describe_node(node: StreamNode) -> str:
    meta = node.fusion_metadata
    if meta is None:
        return f"{node.op} (not fused)"

    operands = ' + '.join(meta.original_operators)
    count = len(meta.fusion_history)
    if count == 1:
        return f"{node.op} (fused from {operands} in pass {meta.fusion_pass})"
    return f"{node.op} (multi-fused from {operands} across {count} fusions)"


@dataclass
class FusionBreakdown:
    """Fused nodes of a pipeline grouped by pass and by fusion type."""
    fused_nodes: List[StreamNode] = field(default_factory=list)
    by_pass: Dict[int, List[StreamNode]] = field(default_factory=dict)
    by_type: Dict[FusionType, List[StreamNode]] = field(default_factory=dict)

    @property
    def total_fusions(self) -> int:
        return sum(len(n.fusion_metadata.fusion_history) for n in self.fused_nodes)


def extract_fusion_metadata(nodes: Sequence[StreamNode]) -> FusionBreakdown:
    by_pass: Dict[int, List[StreamNode]] = defaultdict(list)
    by_type: Dict[FusionType, List[StreamNode]] = defaultdict(list)
    fused = [n for n in nodes if n.is_fused]

    for node in fused:
        by_pass[node.fusion_metadata.fusion_pass].append(node)
        by_type[node.fusion_metadata.fusion_type].append(node)

    return FusionBreakdown(fused_nodes=fused, by_pass=dict(by_pass), by_type=dict(by_type))


def fusion_summary(nodes: Sequence[StreamNode]) -> Dict[str, object]:
    breakdown = extract_fusion_metadata(nodes)
    total_nodes = len(nodes)
    fused_count = len(breakdown.fused_nodes)

    return {
        'total_nodes': total_nodes,
        'fused_nodes': fused_count,
        'fusion_rate': (fused_count / total_nodes) * 100 if total_nodes else 0.0,
        'pass_distribution': {p: len(ns) for p, ns in sorted(breakdown.by_pass.items())},
        'type_distribution': {t: len(ns) for t, ns in breakdown.by_type.items()},
        'total_fusions': breakdown.total_fusions,
        'average_fusions_per_node': (
            breakdown.total_fusions / fused_count if fused_count else 0.0
        ),
    }
