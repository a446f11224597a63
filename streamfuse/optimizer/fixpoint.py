"""
Fixpoint Optimizer
==================

Repeats rewriter passes until the pipeline stops shrinking.

Convergence:
    Let L(P) be the pipeline length. Every pass satisfies

        L(R(P)) <= L(P)

    with strict inequality whenever the pass performs at least one
    fusion. L is a non-negative integer, so the sequence
    P, R(P), R²(P), ... reaches a pass with L(Rⁿ⁺¹(P)) = L(Rⁿ(P)) after
    at most L(P) - 1 shrinking passes. That pass is the fixpoint.

    ``max_iterations`` bounds the number of passes regardless of the
    rule set. Exhausting it is a budget limit, not an error: the
    partially optimized pipeline and its trace are returned.

Idempotence:
    Optimizing an already converged pipeline runs one pass that fuses
    nothing and returns the same nodes.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, List, Mapping, Optional, Sequence, Union

from streamfuse.catalog.defaults import default_environment
from streamfuse.catalog.rules import FusionEnvironment
from streamfuse.core.config import OptimizerConfig
from streamfuse.core.types import FusionTraceEntry, StreamNode
from streamfuse.optimizer.rewriter import PipelineRewriter
from streamfuse.tracing.recorder import TraceRecorder
from streamfuse.utils.helpers import OrdinalClock, Timer

logger = logging.getLogger(__name__)

ConfigLike = Union[OptimizerConfig, Mapping[str, Any], None]


class OptimizationStatus(Enum):
    CONVERGED = auto()          # A pass fused nothing
    MAX_ITERATIONS = auto()     # Pass budget exhausted first


@dataclass
class OptimizationResult:
    """Outcome of one ``optimize`` call."""
    result: List[StreamNode]
    trace: List[FusionTraceEntry]
    status: OptimizationStatus
    passes: int
    initial_length: int
    final_length: int
    length_history: List[int] = field(default_factory=list)
    wall_time_ns: int = 0

    @property
    def converged(self) -> bool:
        return self.status is OptimizationStatus.CONVERGED

    @property
    def nodes_eliminated(self) -> int:
        return self.initial_length - self.final_length


class FixpointOptimizer:
    """
    Drives ``PipelineRewriter`` passes to a fixpoint.

    Usage:
        >>> optimizer = FixpointOptimizer(default_environment())
        >>> outcome = optimizer.optimize([
        ...     stream_node('map', f), stream_node('map', g),
        ... ])
        >>> [n.op for n in outcome.result]
        ['map+map']
    """

    def __init__(
        self,
        environment: Optional[FusionEnvironment] = None,
        clock_factory: Optional[Callable[[], Callable[[], int]]] = None,
        stream=None,
    ):
        self.environment = environment if environment is not None else default_environment()
        self.clock_factory = clock_factory or OrdinalClock
        self.stream = stream

    def optimize(self, pipeline: Sequence[StreamNode], config: ConfigLike = None) -> OptimizationResult:
        config = OptimizerConfig.coerce(config)
        recorder = TraceRecorder.from_config(config, stream=self.stream)
        rewriter = PipelineRewriter(
            self.environment,
            config=config,
            recorder=recorder,
            clock=self.clock_factory(),
        )

        current = list(pipeline)
        lengths = [len(current)]
        trace: List[FusionTraceEntry] = []
        status = OptimizationStatus.MAX_ITERATIONS
        passes = 0

        if config.enable_tracing:
            recorder.optimization_started(len(current))

        with Timer() as timer:
            for iteration in range(config.max_iterations):
                outcome = rewriter.rewrite(current, iteration)
                passes += 1
                trace.extend(outcome.trace)
                if len(outcome.nodes) == len(current):
                    status = OptimizationStatus.CONVERGED
                    break
                current = outcome.nodes
                lengths.append(len(current))

        if status is OptimizationStatus.MAX_ITERATIONS:
            logger.debug(
                f"Pass budget of {config.max_iterations} exhausted at {len(current)} nodes"
            )
        if config.enable_tracing:
            recorder.optimization_finished(passes, len(pipeline), len(current))

        return OptimizationResult(
            result=current,
            trace=trace,
            status=status,
            passes=passes,
            initial_length=len(pipeline),
            final_length=len(current),
            length_history=lengths,
            wall_time_ns=timer.elapsed_ns,
        )


def optimize(
    pipeline: Sequence[StreamNode],
    config: ConfigLike = None,
    environment: Optional[FusionEnvironment] = None,
) -> OptimizationResult:
    """
    Fuse adjacent compatible operators until a fixpoint.

    Usage:
        >>> outcome = optimize(pipeline, {'enableTracing': True})
        >>> outcome.result, outcome.trace
    """
    return FixpointOptimizer(environment).optimize(pipeline, config)
