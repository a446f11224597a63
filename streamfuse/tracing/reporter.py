"""
Reporter
========

Diagnostics over a finished optimization: summary statistics of a
trace and a text rendering of a pipeline plan. Nothing here modifies a
pipeline or a trace.

Timing aggregates are computed over the entry timestamps. With the
default ordinal clock these are event ordinals, not durations; they are
a proxy for relative cost only.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

import numpy as np
from tabulate import tabulate

from streamfuse.core.types import FusionTraceEntry, FusionType, StreamNode
from streamfuse.optimizer.metadata import fusion_lineage
from streamfuse.utils.helpers import format_ns


@dataclass
class FusionStatistics:
    total_fusions: int
    iterations: int
    fusion_type_counts: Dict[FusionType, int] = field(default_factory=dict)
    performance: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalFusions': self.total_fusions,
            'iterations': self.iterations,
            'fusionTypeCounts': {t.value: n for t, n in self.fusion_type_counts.items()},
            'performance': dict(self.performance),
        }


class Reporter:

    TABLE_FORMAT = 'simple'

    def summarize(self, trace: Sequence[FusionTraceEntry]) -> FusionStatistics:
        """
        Aggregate a trace.

        ``iterations`` is the number of passes that fused something:
        ``max(iteration) + 1``, or 0 for an empty trace.
        """
        if not trace:
            return FusionStatistics(
                total_fusions=0,
                iterations=0,
                performance={
                    'total_time': 0.0,
                    'average_time_per_fusion': 0.0,
                    'first_timestamp': 0.0,
                    'last_timestamp': 0.0,
                    'timestamp_span': 0.0,
                },
            )

        stamps = np.asarray([e.timestamp for e in trace], dtype=np.float64)
        counts = Counter(e.fusion_type for e in trace)

        return FusionStatistics(
            total_fusions=len(trace),
            iterations=max(e.iteration for e in trace) + 1,
            fusion_type_counts=dict(counts),
            performance={
                'total_time': float(np.sum(stamps)),
                'average_time_per_fusion': float(np.mean(stamps)),
                'first_timestamp': float(np.min(stamps)),
                'last_timestamp': float(np.max(stamps)),
                'timestamp_span': float(np.ptp(stamps)),
            },
        )

    def visualize(self, pipeline: Sequence[StreamNode]) -> str:
        """Render each node's label, kind and fusion lineage as a table."""
        rows = []
        for index, node in enumerate(pipeline):
            meta = node.fusion_metadata
            rows.append([
                index,
                node.op,
                node.kind,
                meta.fusion_pass if meta else '-',
                ' -> '.join(fusion_lineage(node)) if meta else '-',
            ])

        header = f"Pipeline plan ({len(pipeline)} nodes)"
        if not rows:
            return f"{header}\n(empty)"
        table = tabulate(
            rows,
            headers=['#', 'operator', 'kind', 'pass', 'lineage'],
            tablefmt=self.TABLE_FORMAT,
        )
        return f"{header}\n{table}"

    def format_summary(self, stats: FusionStatistics) -> str:
        rows: List[List[Any]] = [
            ['total fusions', stats.total_fusions],
            ['iterations', stats.iterations],
        ]
        for fusion_type, count in sorted(stats.fusion_type_counts.items(), key=lambda kv: kv[0].value):
            rows.append([f"  {fusion_type.value}", count])
        for name, value in stats.performance.items():
            rows.append([name.replace('_', ' '), f"{value:.2f}"])
        return tabulate(rows, headers=['metric', 'value'], tablefmt=self.TABLE_FORMAT)

    def describe_result(self, outcome) -> str:
        """Summary of an ``OptimizationResult`` including wall time."""
        lengths = ' -> '.join(str(n) for n in outcome.length_history)
        rows = [
            ['status', outcome.status.name.lower()],
            ['passes', outcome.passes],
            ['length', lengths],
            ['nodes eliminated', outcome.nodes_eliminated],
            ['wall time', format_ns(outcome.wall_time_ns)],
        ]
        summary = self.format_summary(self.summarize(outcome.trace))
        return tabulate(rows, tablefmt=self.TABLE_FORMAT) + '\n\n' + summary


def summarize(trace: Sequence[FusionTraceEntry]) -> FusionStatistics:
    return Reporter().summarize(trace)


def visualize_plan(pipeline: Sequence[StreamNode]) -> str:
    return Reporter().visualize(pipeline)
