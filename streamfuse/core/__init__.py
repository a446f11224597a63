from streamfuse.core.types import (
    FusionMetadata,
    FusionTraceEntry,
    FusionType,
    Multiplicity,
    OperatorCategory,
    OperatorKind,
    StreamNode,
    kind_name,
    stream_node,
)
from streamfuse.core.config import LogLevel, OptimizerConfig

__all__ = [
    'FusionMetadata',
    'FusionTraceEntry',
    'FusionType',
    'Multiplicity',
    'OperatorCategory',
    'OperatorKind',
    'StreamNode',
    'kind_name',
    'stream_node',
    'LogLevel',
    'OptimizerConfig',
]
