from streamfuse.tracing.recorder import TraceRecorder
from streamfuse.tracing.reporter import FusionStatistics, Reporter, summarize, visualize_plan

__all__ = [
    'TraceRecorder',
    'FusionStatistics',
    'Reporter',
    'summarize',
    'visualize_plan',
]
