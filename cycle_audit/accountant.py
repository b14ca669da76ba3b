"""
Forensic accounting of executed cycles.

Every figure is computed in integer minor units of the profit asset:

    gross_gain = balance_after - balance_before
    gas_cost   = gas_used * gas_price
    net_profit = gross_gain - gas_cost

Decimal views for display are derived from these on CycleReport and
AuditSummary; nothing here touches floats.
"""

from decimal import Decimal
from typing import Optional, Union

from .types import AuditSummary, CycleReport, CycleResult
from .units import DEFAULT_DECIMALS, gas_price_to_minor_units
from .utils import get_logger

logger = get_logger(__name__)


class ForensicAccountant:
    """Turns CycleResults into CycleReports and folds them into a summary."""

    def __init__(
        self,
        summary: AuditSummary,
        gas_price_per_unit: Union[Decimal, str],
        profit_decimals: int = DEFAULT_DECIMALS,
    ):
        """
        Args:
            summary: Run summary to update (owned by the orchestrator)
            gas_price_per_unit: Price of one gas unit in natural units of the
                profit asset, e.g. Decimal("0.000000032") for 32 gwei
            profit_decimals: Unit scale of the profit asset
        """
        self.summary = summary
        self.profit_decimals = profit_decimals
        self.gas_price_raw = gas_price_to_minor_units(
            gas_price_per_unit, profit_decimals
        )

    def account(
        self,
        result: CycleResult,
        index: int = 0,
        input_amount: str = "",
        expected_profit_raw: Optional[int] = None,
    ) -> Optional[CycleReport]:
        """
        Compute the report for one cycle.

        Returns:
            CycleReport, or None when the cycle reverted (skipped: nothing is
            added to the profit totals)
        """
        if result.reverted:
            self.summary.reverted += 1
            return None

        gross_gain_raw = result.balance_after - result.balance_before
        gas_cost_raw = result.gas_used * self.gas_price_raw
        net_profit_raw = gross_gain_raw - gas_cost_raw

        report = CycleReport(
            index=index,
            input_amount=input_amount,
            gross_gain_raw=gross_gain_raw,
            gas_cost_raw=gas_cost_raw,
            net_profit_raw=net_profit_raw,
            gas_used=result.gas_used,
            profit_decimals=self.profit_decimals,
            expected_profit_raw=expected_profit_raw,
        )

        summary = self.summary
        summary.succeeded += 1
        summary.total_gross_gain_raw += gross_gain_raw
        summary.total_gas_cost_raw += gas_cost_raw
        if report.is_profitable:
            summary.profitable += 1
            summary.total_net_profit_raw += net_profit_raw
        else:
            summary.losses += 1
        summary.reports.append(report)

        logger.debug(
            f"Cycle #{index + 1}: gross={gross_gain_raw} gas={gas_cost_raw} "
            f"net={net_profit_raw}"
        )
        return report
