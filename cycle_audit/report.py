"""
Console and JSON reporting of audit results.

Profit and cost figures are shown with 6 decimals, the run total with 4.
"""

from pathlib import Path
from typing import List, Union

from .types import AuditSummary, CycleOutcome, CycleReport, CycleStatus, Opportunity
from .units import from_minor_units
from .utils import ensure_path_exists, format_amount, safe_json_dump

SEPARATOR = "-" * 51


def format_report(report: CycleReport, gas_price_gwei, asset: str = "ETH") -> List[str]:
    """Lines describing one executed cycle."""
    lines = [
        f"Cycle #{report.index + 1}: ON-CHAIN SUCCESS",
        f"   Input:       {report.input_amount} {asset}",
        f"   Gross Gain:  {format_amount(report.gross_gain)} {asset}",
        f"   Gas Used:    {report.gas_used} units",
        f"   Gas Cost:    -{format_amount(report.gas_cost)} {asset} (@ {gas_price_gwei.normalize():f} Gwei)",
    ]
    if report.is_profitable:
        lines.append(f" NET PROFIT: {format_amount(report.net_profit)} {asset}")
    else:
        lines.append(
            f" NET LOSS:   {format_amount(report.net_profit)} {asset} (Gas ate profit)"
        )
    if report.expected_profit_raw is not None:
        gap = from_minor_units(report.profit_gap_raw, report.profit_decimals)
        lines.append(
            f"   Expected:    {format_amount(report.expected_profit)} {asset} (gap {format_amount(gap)})"
        )
    lines.append(SEPARATOR)
    return lines


def format_outcome(
    opportunity: Opportunity,
    outcome: CycleOutcome,
    gas_price_gwei,
    show_reverted: bool = False,
    asset: str = "ETH",
) -> List[str]:
    """
    Lines for one cycle outcome. Reverted and failed cycles produce nothing
    unless show_reverted is set.
    """
    if outcome.status is CycleStatus.SUCCESS:
        return format_report(outcome.report, gas_price_gwei, asset)
    if not show_reverted:
        return []
    if outcome.status is CycleStatus.REVERTED:
        return [f"Cycle #{opportunity.index + 1}: Reverted (Slippage/Loss detected on-chain)"]
    return [
        f"Cycle #{opportunity.index + 1}: FAILED during {outcome.stage.value}: {outcome.error}"
    ]


def format_summary(summary: AuditSummary, asset: str = "ETH") -> List[str]:
    """Final run summary."""
    return [
        "",
        ">>> AUDIT COMPLETE <<<",
        f"Cycles:     {summary.attempted} audited, {summary.succeeded} executed, "
        f"{summary.reverted} reverted, {summary.failed} failed",
        f"Outcomes:   {summary.profitable} profitable, {summary.losses} losses",
        f"Gas Spent:  {format_amount(summary.total_gas_cost_eth)} {asset}",
        f"Total Verified Net Profit: {format_amount(summary.total_net_profit_eth, 4)} {asset}",
    ]


def write_json_report(summary: AuditSummary, path: Union[str, Path]) -> Path:
    """Write the summary and all cycle reports to a JSON file."""
    path = ensure_path_exists(path, is_file=True)
    path.write_text(safe_json_dump(summary.to_dict()), encoding="utf-8")
    return path
