"""
Core data types for the cycle audit engine.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterator, List, Optional, Tuple

from .units import DEFAULT_DECIMALS, from_minor_units


@dataclass(frozen=True)
class PoolRecord:
    """
    Real-world liquidity snapshot for one unordered token pair.

    Attributes:
        token_a: Identifier of the first token (canonical orientation)
        token_b: Identifier of the second token
        reserve_a: Reserve of token_a as a decimal string
        reserve_b: Reserve of token_b as a decimal string
        decimals_a: Unit scale of token_a
        decimals_b: Unit scale of token_b
        pair_id: Pool identifier from the dataset, if any
    """

    token_a: str
    token_b: str
    reserve_a: str
    reserve_b: str
    decimals_a: int = DEFAULT_DECIMALS
    decimals_b: int = DEFAULT_DECIMALS
    pair_id: Optional[str] = None

    @property
    def pair_key(self) -> FrozenSet[str]:
        return frozenset((self.token_a, self.token_b))

    def oriented(self, hop_from: str) -> Tuple[str, str, int, int]:
        """
        Return (reserve_from, reserve_to, decimals_from, decimals_to) for a
        hop starting at hop_from.
        """
        if hop_from == self.token_a:
            return self.reserve_a, self.reserve_b, self.decimals_a, self.decimals_b
        if hop_from == self.token_b:
            return self.reserve_b, self.reserve_a, self.decimals_b, self.decimals_a
        raise ValueError(f"Token {hop_from} is not part of pool {self.pair_id}")


@dataclass(frozen=True)
class Opportunity:
    """
    A candidate arbitrage cycle.

    Attributes:
        path: Ordered token identifiers; first and last equal for a closed loop
        input_amount: Amount of the start token in natural units (decimal string)
        index: Position in the opportunity list (0-based)
        expected_profit: Net profit predicted by the search, in natural units
            (decimal string), when the opportunity file carries one
    """

    path: Tuple[str, ...]
    input_amount: str
    index: int = 0
    expected_profit: Optional[str] = None

    @property
    def hops(self) -> Iterator[Tuple[str, str]]:
        for i in range(len(self.path) - 1):
            yield self.path[i], self.path[i + 1]

    @property
    def tokens(self) -> List[str]:
        """Distinct identifiers in first-seen order."""
        return list(dict.fromkeys(self.path))

    @property
    def is_closed(self) -> bool:
        return len(self.path) >= 2 and self.path[0] == self.path[-1]


@dataclass(frozen=True)
class Receipt:
    """Outcome of a transaction in the execution environment."""

    gas_used: int
    status: int = 1
    tx_hash: Optional[str] = None


@dataclass(frozen=True)
class CycleResult:
    """
    Before/after state captured around one cycle execution.

    balance_after and gas_used are None when the cycle reverted.
    """

    balance_before: int
    balance_after: Optional[int] = None
    gas_used: Optional[int] = None
    reverted: bool = False
    error: Optional[str] = None


@dataclass(frozen=True)
class CycleReport:
    """Forensic accounting of a successfully executed cycle (minor units)."""

    index: int
    input_amount: str
    gross_gain_raw: int
    gas_cost_raw: int
    net_profit_raw: int
    gas_used: int
    profit_decimals: int = DEFAULT_DECIMALS
    expected_profit_raw: Optional[int] = None

    @property
    def gross_gain(self) -> Decimal:
        return from_minor_units(self.gross_gain_raw, self.profit_decimals)

    @property
    def gas_cost(self) -> Decimal:
        return from_minor_units(self.gas_cost_raw, self.profit_decimals)

    @property
    def net_profit(self) -> Decimal:
        return from_minor_units(self.net_profit_raw, self.profit_decimals)

    @property
    def is_profitable(self) -> bool:
        return self.net_profit_raw > 0

    @property
    def expected_profit(self) -> Optional[Decimal]:
        if self.expected_profit_raw is None:
            return None
        return from_minor_units(self.expected_profit_raw, self.profit_decimals)

    @property
    def profit_gap_raw(self) -> Optional[int]:
        """Verified minus expected net profit; None without an expectation."""
        if self.expected_profit_raw is None:
            return None
        return self.net_profit_raw - self.expected_profit_raw

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = {
            "cycle": self.index + 1,
            "input_amount": self.input_amount,
            "gross_gain": float(self.gross_gain),
            "gas_used": self.gas_used,
            "gas_cost": float(self.gas_cost),
            "net_profit": float(self.net_profit),
            "profitable": self.is_profitable,
            "gross_gain_raw": str(self.gross_gain_raw),
            "gas_cost_raw": str(self.gas_cost_raw),
            "net_profit_raw": str(self.net_profit_raw),
        }
        if self.expected_profit_raw is not None:
            data["expected_profit"] = float(self.expected_profit)
            data["expected_profit_raw"] = str(self.expected_profit_raw)
            data["profit_gap_raw"] = str(self.profit_gap_raw)
        return data


class CycleStatus(Enum):
    """Final status of one cycle attempt."""

    SUCCESS = "success"
    REVERTED = "reverted"
    FAILED = "failed"


class CycleStage(Enum):
    """
    Progression of a cycle through the audit.

    Values:
        MAPPING: Registering synthetic tokens for the path
        PROVISIONING: Setting pool reserves for every hop
        EXECUTING: Funding and running the swap path
        ACCOUNTING: Computing gross gain, gas cost and net profit
        DONE: Cycle fully processed
    """

    MAPPING = "mapping"
    PROVISIONING = "provisioning"
    EXECUTING = "executing"
    ACCOUNTING = "accounting"
    DONE = "done"


@dataclass(frozen=True)
class CycleOutcome:
    """Per-cycle result handed back to the orchestrator loop."""

    index: int
    status: CycleStatus
    stage: CycleStage
    report: Optional[CycleReport] = None
    error: Optional[str] = None


@dataclass
class AuditSummary:
    """
    Running totals for an audit run.

    total_net_profit_raw only accumulates profitable cycles; losses are
    counted but not netted against it.
    """

    attempted: int = 0
    succeeded: int = 0
    profitable: int = 0
    losses: int = 0
    reverted: int = 0
    failed: int = 0
    pools_missing: int = 0
    total_net_profit_raw: int = 0
    total_gross_gain_raw: int = 0
    total_gas_cost_raw: int = 0
    profit_decimals: int = DEFAULT_DECIMALS
    reports: List[CycleReport] = field(default_factory=list)

    @property
    def total_net_profit_eth(self) -> Decimal:
        return from_minor_units(self.total_net_profit_raw, self.profit_decimals)

    @property
    def total_gas_cost_eth(self) -> Decimal:
        return from_minor_units(self.total_gas_cost_raw, self.profit_decimals)

    @property
    def success_rate_pct(self) -> float:
        if self.attempted == 0:
            return 0.0
        return self.succeeded / self.attempted * 100

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "attempted": self.attempted,
            "succeeded": self.succeeded,
            "profitable": self.profitable,
            "losses": self.losses,
            "reverted": self.reverted,
            "failed": self.failed,
            "pools_missing": self.pools_missing,
            "success_rate_pct": self.success_rate_pct,
            "total_net_profit_eth": float(self.total_net_profit_eth),
            "total_gas_cost_eth": float(self.total_gas_cost_eth),
            "total_net_profit_raw": str(self.total_net_profit_raw),
            "reports": [r.to_dict() for r in self.reports],
        }
