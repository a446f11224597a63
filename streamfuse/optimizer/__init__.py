from streamfuse.optimizer.metadata import FusionMetadataTracker
from streamfuse.optimizer.rewriter import PassResult, PipelineRewriter
from streamfuse.optimizer.fixpoint import (
    FixpointOptimizer,
    OptimizationResult,
    OptimizationStatus,
    optimize,
)

__all__ = [
    'FusionMetadataTracker',
    'PassResult',
    'PipelineRewriter',
    'FixpointOptimizer',
    'OptimizationResult',
    'OptimizationStatus',
    'optimize',
]
