"""
Audit orchestration: drives every cycle through mapping, provisioning,
execution and accounting, isolating failures per cycle.
"""

from typing import Callable, Iterable, List, Optional

from .accountant import ForensicAccountant
from .config import AuditConfig
from .environment import ExecutionEnvironment
from .exceptions import AuditError, ValidationError
from .executor import CycleExecutor
from .registry import TokenRegistry
from .synthesizer import PoolReserveSynthesizer
from .types import (
    AuditSummary,
    CycleOutcome,
    CycleStage,
    CycleStatus,
    Opportunity,
    PoolRecord,
)
from .units import to_minor_units
from .utils import get_logger

logger = get_logger(__name__)

OutcomeCallback = Callable[[Opportunity, CycleOutcome], None]


class CycleAuditor:
    """
    Sequential audit of candidate cycles against one execution environment.

    Owns the token registry and the run summary for the duration of the run.
    Cycles are processed one at a time in input order, since provisioning
    mutates environment state shared by all cycles.
    """

    def __init__(
        self,
        environment: ExecutionEnvironment,
        pools: Iterable[PoolRecord],
        config: Optional[AuditConfig] = None,
    ):
        self.environment = environment
        self.config = config or AuditConfig()

        self.summary = AuditSummary(profit_decimals=self.config.profit_decimals)
        self.registry = TokenRegistry(environment)
        self.synthesizer = PoolReserveSynthesizer(
            environment, self.registry, pools, strict=self.config.strict_pools
        )
        self.executor = CycleExecutor(environment)
        self.accountant = ForensicAccountant(
            self.summary,
            self.config.gas_price_per_unit,
            profit_decimals=self.config.profit_decimals,
        )
        self.outcomes: List[CycleOutcome] = []

    def audit_cycle(self, opportunity: Opportunity) -> CycleOutcome:
        """
        Run one cycle through all stages.

        Never raises for per-cycle problems: an error in any stage returns a
        FAILED outcome tagged with that stage.
        """
        index = opportunity.index
        log = get_logger(__name__, extra={"cycle": index + 1})
        stage = CycleStage.MAPPING

        try:
            if len(opportunity.path) < 2:
                raise ValidationError("Cycle path needs at least 2 tokens")
            if not opportunity.is_closed:
                log.warning("Path is not a closed loop, auditing anyway")

            for real_id in opportunity.tokens:
                self.registry.get_or_create(real_id)

            stage = CycleStage.PROVISIONING
            for hop_from, hop_to in opportunity.hops:
                if not self.synthesizer.provision(hop_from, hop_to):
                    self.summary.pools_missing += 1

            stage = CycleStage.EXECUTING
            synthetic_path = self.registry.translate(opportunity.path)
            amount_in = to_minor_units(
                opportunity.input_amount, self.config.profit_decimals
            )
            if amount_in <= 0:
                raise ValidationError(
                    f"Input amount must be positive, got {opportunity.input_amount!r}"
                )
            min_profit = amount_in if self.config.min_profit_mode == "break_even" else 0
            result = self.executor.run(synthetic_path, amount_in, min_profit)

            stage = CycleStage.ACCOUNTING
            expected = opportunity.expected_profit
            report = self.accountant.account(
                result,
                index,
                opportunity.input_amount,
                expected_profit_raw=(
                    None
                    if expected is None
                    else to_minor_units(expected, self.config.profit_decimals)
                ),
            )

        except AuditError as e:
            log.warning(f"Failed during {stage.value}: {e}")
            return CycleOutcome(index, CycleStatus.FAILED, stage, error=str(e))
        except Exception as e:
            log.exception(f"Unexpected error during {stage.value}")
            return CycleOutcome(
                index, CycleStatus.FAILED, stage, error=f"{type(e).__name__}: {e}"
            )

        if report is None:
            log.info("Reverted on execution (slippage/loss detected)")
            return CycleOutcome(
                index, CycleStatus.REVERTED, CycleStage.DONE, error=result.error
            )

        return CycleOutcome(index, CycleStatus.SUCCESS, CycleStage.DONE, report=report)

    def run(
        self,
        opportunities: Iterable[Opportunity],
        on_outcome: Optional[OutcomeCallback] = None,
    ) -> AuditSummary:
        """
        Audit every opportunity in order and return the finalized summary.

        Args:
            opportunities: Candidate cycles
            on_outcome: Called after each cycle, e.g. to print its report
        """
        for opportunity in opportunities:
            self.summary.attempted += 1
            outcome = self.audit_cycle(opportunity)
            if outcome.status is CycleStatus.FAILED:
                self.summary.failed += 1
            self.outcomes.append(outcome)

            if on_outcome is not None:
                on_outcome(opportunity, outcome)

        logger.info(
            f"Audit complete: {self.summary.succeeded}/{self.summary.attempted} "
            f"executed, {self.summary.profitable} profitable, "
            f"{self.summary.reverted} reverted, {self.summary.failed} failed"
        )
        return self.summary
