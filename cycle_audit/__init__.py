"""
Cycle Audit.

Replays candidate multi-hop arbitrage cycles against a controllable liquidity
environment and reports the real, gas-inclusive net profit of each.
"""

PROJECT_NAME = "cycle-audit"

from cycle_audit.version import __version__
from cycle_audit.auditor import CycleAuditor
from cycle_audit.config import AuditConfig, load_config
from cycle_audit.exceptions import (
    AuditError,
    ConfigError,
    DataError,
    ExecutionEnvironmentError,
    MalformedDecimal,
    PoolNotFound,
    RunFatalError,
    ValidationError,
)
from cycle_audit.types import (
    AuditSummary,
    CycleOutcome,
    CycleReport,
    CycleResult,
    CycleStage,
    CycleStatus,
    Opportunity,
    PoolRecord,
    Receipt,
)
from cycle_audit.units import from_minor_units, normalize

__all__ = [
    "PROJECT_NAME",
    "__version__",
    "CycleAuditor",
    "AuditConfig",
    "load_config",
    "AuditError",
    "ConfigError",
    "DataError",
    "ExecutionEnvironmentError",
    "MalformedDecimal",
    "PoolNotFound",
    "RunFatalError",
    "ValidationError",
    "AuditSummary",
    "CycleOutcome",
    "CycleReport",
    "CycleResult",
    "CycleStage",
    "CycleStatus",
    "Opportunity",
    "PoolRecord",
    "Receipt",
    "normalize",
    "from_minor_units",
]
