from streamfuse.catalog.builders import SKIP
from streamfuse.catalog.operators import OperatorCatalog, OperatorDescriptor
from streamfuse.catalog.rules import (
    FusibilityEntry,
    FusionDecision,
    FusionEnvironment,
    FusionRule,
    FusionRuleRegistry,
)
from streamfuse.catalog.defaults import default_environment

__all__ = [
    'SKIP',
    'OperatorCatalog',
    'OperatorDescriptor',
    'FusibilityEntry',
    'FusionDecision',
    'FusionEnvironment',
    'FusionRule',
    'FusionRuleRegistry',
    'default_environment',
]
