"""
Pipeline Rewriter
=================

One greedy left-to-right fusion pass.

At position i the rewriter looks only at nodes[i] and nodes[i+1]. If the
registry resolves the pair, both are replaced by one fused node and the
scan jumps to i+2, so a consumed node is never examined twice in the
same pass. Otherwise nodes[i] is kept and the scan moves to i+1. Nodes
are never reordered and the rewriter never looks past i+1.

    [map, filter, map, filter]   ->  [map+filter, map+filter]
    [map, map, map]              ->  [map+map, map]
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from streamfuse.catalog.rules import FusionDecision, FusionEnvironment
from streamfuse.core.config import OptimizerConfig
from streamfuse.core.types import FusionTraceEntry, OperatorKind, StreamNode
from streamfuse.optimizer.metadata import FusionMetadataTracker
from streamfuse.tracing.recorder import TraceRecorder
from streamfuse.utils.helpers import OrdinalClock

logger = logging.getLogger(__name__)

# Kinds whose transform takes the accumulator seed from args[0]
ACCUMULATOR_KINDS = frozenset({
    OperatorKind.SCAN.value, OperatorKind.REDUCE.value, OperatorKind.SCAN_MAP.value,
})


@dataclass
class PassResult:
    """Output of one rewriter pass."""
    nodes: List[StreamNode]
    trace: List[FusionTraceEntry] = field(default_factory=list)
    fusions: int = 0


class PipelineRewriter:
    """
    Single-pass fuser.

    The clock and recorder are shared across the passes of one
    optimization run, so timestamps keep increasing from pass to pass.
    """

    def __init__(
        self,
        environment: FusionEnvironment,
        config: Optional[OptimizerConfig] = None,
        recorder: Optional[TraceRecorder] = None,
        clock: Optional[Callable[[], int]] = None,
        tracker: Optional[FusionMetadataTracker] = None,
    ):
        self.environment = environment
        self.config = config if config is not None else OptimizerConfig()
        self.recorder = recorder if recorder is not None else TraceRecorder.from_config(self.config)
        self.clock = clock if clock is not None else OrdinalClock()
        self.tracker = tracker if tracker is not None else FusionMetadataTracker()

    def rewrite(self, nodes: Sequence[StreamNode], iteration: int) -> PassResult:
        output: List[StreamNode] = []
        trace: List[FusionTraceEntry] = []
        original_length = len(nodes)
        step = 0
        i = 0

        while i < original_length:
            current = nodes[i]
            if i + 1 < original_length:
                following = nodes[i + 1]
                fused = self._try_fuse(current, following, iteration, step, i, original_length)
                if fused is not None:
                    output.append(fused)
                    entry = fused.fusion_metadata.fusion_history[-1]
                    if self.config.enable_tracing:
                        trace.append(entry)
                        self.recorder.record(entry)
                    step += 1
                    i += 2
                    continue

            output.append(current)
            i += 1

        logger.debug(
            f"Pass {iteration}: {original_length} -> {len(output)} nodes ({step} fusions)"
        )
        return PassResult(nodes=output, trace=trace, fusions=step)

    def _try_fuse(
        self,
        first: StreamNode,
        second: StreamNode,
        iteration: int,
        step: int,
        position: int,
        original_length: int,
    ) -> Optional[StreamNode]:
        decision = self.environment.registry.resolve(first.kind, second.kind)
        if decision is None:
            return None

        try:
            transform = decision.rule.builder(first, second)
        except Exception as e:
            logger.warning(
                f"Fusion builder for {first.kind}->{second.kind} failed, "
                f"leaving pair unfused: {e}"
            )
            return None

        return self._fused_node(first, second, transform, decision,
                                iteration, step, position, original_length)

    def _fused_node(
        self,
        first: StreamNode,
        second: StreamNode,
        transform: Callable,
        decision: FusionDecision,
        iteration: int,
        step: int,
        position: int,
        original_length: int,
    ) -> StreamNode:
        label = f"{first.op}+{second.op}"
        entry = FusionTraceEntry(
            iteration=iteration,
            step=step,
            position=position,
            operator1=first.op,
            operator2=second.op,
            fused_operator=label,
            original_length=original_length,
            new_length=original_length - (step + 1),
            fusion_type=decision.fusion_type,
            timestamp=self.clock(),
        )
        logger.debug(
            f"Fusing {first.op} + {second.op} at position {position} "
            f"({decision.fusion_type.value})"
        )
        return StreamNode(
            op=label,
            transform=transform,
            args=self._fused_args(first, second),
            fusion_metadata=self.tracker.merge(first, second, entry),
            kind=decision.rule.result_kind or label,
        )

    @staticmethod
    def _fused_args(first: StreamNode, second: StreamNode) -> tuple:
        # An accumulating right operand keeps its seed at args[0].
        if second.kind in ACCUMULATOR_KINDS and first.kind not in ACCUMULATOR_KINDS:
            return second.args + first.args
        return first.args + second.args
