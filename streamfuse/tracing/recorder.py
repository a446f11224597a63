"""
Trace Recorder
==============

Accumulates ``FusionTraceEntry`` records for one optimization run and
formats them per ``LogLevel``:

    basic     map + filter -> map+filter
    detailed  [t=3] map + filter -> map+filter (stateless-only)
    verbose   the detailed line plus position and pipeline length

Every formatted line goes to the module logger at DEBUG. With
``to_console`` set the line is also printed to ``stream``.
"""

import logging
import sys
from typing import List, Optional, TextIO

from streamfuse.core.config import LogLevel, OptimizerConfig
from streamfuse.core.types import FusionTraceEntry

logger = logging.getLogger(__name__)


class TraceRecorder:

    def __init__(
        self,
        log_level: LogLevel = LogLevel.BASIC,
        to_console: bool = False,
        stream: Optional[TextIO] = None,
    ):
        self.log_level = LogLevel.parse(log_level) or LogLevel.BASIC
        self.to_console = to_console
        self.stream = stream
        self.entries: List[FusionTraceEntry] = []

    @classmethod
    def from_config(cls, config: OptimizerConfig, stream: Optional[TextIO] = None) -> 'TraceRecorder':
        return cls(log_level=config.log_level, to_console=config.trace_to_console, stream=stream)

    def record(self, entry: FusionTraceEntry) -> None:
        self.entries.append(entry)
        self.emit(self.format_entry(entry))

    def format_entry(self, entry: FusionTraceEntry) -> str:
        fused = f"{entry.operator1} + {entry.operator2} -> {entry.fused_operator}"

        if self.log_level is LogLevel.BASIC:
            return fused

        detailed = f"[t={entry.timestamp}] {fused} ({entry.fusion_type.value})"
        if self.log_level is LogLevel.DETAILED:
            return detailed

        return '\n'.join([
            f"[t={entry.timestamp}] Iteration {entry.iteration}, Step {entry.step}:",
            f"   Position: {entry.position}",
            f"   Fused: {fused}",
            f"   Type: {entry.fusion_type.value}",
            f"   Length: {entry.original_length} -> {entry.new_length}",
        ])

    def emit(self, message: str) -> None:
        logger.debug(message)
        if self.to_console:
            print(message, file=self.stream if self.stream is not None else sys.stdout)

    def optimization_started(self, length: int) -> None:
        if self.to_console:
            self.emit(f"Starting pipeline optimization with {length} nodes")

    def optimization_finished(self, passes: int, initial_length: int, final_length: int) -> None:
        if self.to_console:
            self.emit(f"Optimization complete after {passes} passes")
            self.emit(f"Final result: {final_length} nodes (reduced from {initial_length})")

    def clear(self) -> None:
        self.entries = []

    def __len__(self) -> int:
        return len(self.entries)
