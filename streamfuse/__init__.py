"""
streamfuse: Operator Fusion for Declarative Stream Pipelines
============================================================

streamfuse rewrites a pipeline of stream operators (map, filter, scan,
flatMap, ...) by fusing adjacent, behaviorally compatible operators into
single combined operators, so fewer discrete steps run per element while
the external behavior stays the same.

Core Components:
    - catalog: operator metadata, fusion rules, fused-transform builders
    - optimizer: single-pass rewriter, fixpoint driver, provenance metadata
    - tracing: fusion trace recording, statistics and plan rendering

Usage:
    >>> import streamfuse
    >>> pipeline = [
    ...     streamfuse.stream_node('map', lambda x: x + 1),
    ...     streamfuse.stream_node('filter', lambda x: x > 0),
    ...     streamfuse.stream_node('map', lambda x: x * 2),
    ... ]
    >>> outcome = streamfuse.optimize(pipeline, {'enableTracing': True})
    >>> [node.op for node in outcome.result]
    ['map+filter', 'map']
    >>> print(streamfuse.visualize_plan(outcome.result))
"""

__version__ = "1.0.0"

from streamfuse.core.types import (
    FusionMetadata,
    FusionTraceEntry,
    FusionType,
    Multiplicity,
    OperatorCategory,
    OperatorKind,
    StreamNode,
    stream_node,
)
from streamfuse.core.config import LogLevel, OptimizerConfig
from streamfuse.catalog.builders import SKIP
from streamfuse.catalog.operators import OperatorCatalog, OperatorDescriptor
from streamfuse.catalog.rules import FusionEnvironment, FusionRule, FusionRuleRegistry
from streamfuse.catalog.defaults import default_environment
from streamfuse.optimizer.fixpoint import (
    FixpointOptimizer,
    OptimizationResult,
    OptimizationStatus,
    optimize,
)
from streamfuse.optimizer.rewriter import PipelineRewriter
from streamfuse.tracing.recorder import TraceRecorder
from streamfuse.tracing.reporter import FusionStatistics, Reporter, summarize, visualize_plan
