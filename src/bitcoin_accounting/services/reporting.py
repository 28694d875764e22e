"""Period report generation and export."""

from __future__ import annotations

import csv
import json
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any

from bitcoin_accounting.domain.reports import Report, ReportLine, ReportTotals, RollForward
from bitcoin_accounting.domain.value_objects import fiat_value
from bitcoin_accounting.exceptions import InvalidDateRangeError
from bitcoin_accounting.logging_config import get_logger
from bitcoin_accounting.services.interfaces import ExchangeRateProvider
from bitcoin_accounting.services.ledger_state import LedgerState

logger = get_logger(__name__)


class ReportGenerator:
    """Builds acquisition/disposal reports over a date range.

    Each disposal in range is marked at the provider's price for its date.
    A missing price fails the whole report with RateUnavailableError rather
    than producing a report with gaps.
    """

    def __init__(self, state: LedgerState, rates: ExchangeRateProvider) -> None:
        self._state = state
        self._rates = rates

    def generate(self, start_date: date, end_date: date) -> Report:
        if start_date > end_date:
            raise InvalidDateRangeError(start_date, end_date)

        entries = self._state.entries()
        opening_balance = 0
        for entry in entries:
            if entry.date < start_date:
                opening_balance += entry.amount if entry.is_acquisition else -entry.amount

        in_range = sorted(
            (entry for entry in entries if start_date <= entry.date <= end_date),
            key=lambda entry: entry.sort_key,
        )

        prices: dict[date, Decimal] = {}
        lines: list[ReportLine] = []
        total_acquired = 0
        total_disposed = 0
        total_cost_basis = Decimal("0")
        total_proceeds = Decimal("0")
        net_gain_loss = Decimal("0")

        for entry in in_range:
            if entry.is_disposal:
                if entry.date not in prices:
                    prices[entry.date] = self._rates.price_at(entry.date)
                lines.append(
                    ReportLine(entry, fair_value=fiat_value(entry.amount, prices[entry.date]))
                )
                total_disposed += entry.amount
                total_cost_basis += entry.cost_basis or Decimal("0")
                total_proceeds += entry.proceeds or Decimal("0")
                net_gain_loss += entry.realized_gain_loss or Decimal("0")
            else:
                lines.append(ReportLine(entry))
                total_acquired += entry.amount

        report = Report(
            start_date=start_date,
            end_date=end_date,
            currency=self._state.currency,
            lines=tuple(lines),
            totals=ReportTotals(
                total_acquired=total_acquired,
                total_disposed=total_disposed,
                total_cost_basis=total_cost_basis,
                total_proceeds=total_proceeds,
                net_realized_gain_loss=net_gain_loss,
            ),
            roll_forward=RollForward(
                opening_balance=opening_balance,
                acquired=total_acquired,
                disposed=total_disposed,
            ),
        )
        logger.info(
            "report_generated",
            start_date=start_date.isoformat(),
            end_date=end_date.isoformat(),
            entries=len(lines),
        )
        return report

    def render_json(self, report: Report) -> str:
        """Deterministic JSON rendering of a report."""
        return json.dumps(report.to_dict(), indent=2, sort_keys=True)

    def export_report(
        self,
        report: Report,
        output_format: str,
        output_path: str | Path,
    ) -> Path:
        format_lower = output_format.lower()
        path = Path(output_path)

        if format_lower == "json":
            path.write_text(self.render_json(report) + "\n")
        elif format_lower == "csv":
            self._export_to_csv(report.to_dict(), path)
        else:
            raise ValueError(
                f"Unsupported format: {output_format}. Use 'json' or 'csv'."
            )

        return path

    def _export_to_csv(self, report_data: dict[str, Any], output_path: Path) -> None:
        """Export report rows to CSV, one row per entry."""
        rows: list[dict[str, Any]] = report_data.get("data", [])

        if not rows:
            with open(output_path, "w", newline="") as f:
                simple_writer = csv.writer(f)
                simple_writer.writerow(["report_name", report_data["report_name"]])
                simple_writer.writerow(["start_date", report_data["start_date"]])
                simple_writer.writerow(["end_date", report_data["end_date"]])
            return

        all_keys: list[str] = []
        for row in rows:
            for key in row:
                if key not in all_keys:
                    all_keys.append(key)

        with open(output_path, "w", newline="") as f:
            dict_writer = csv.DictWriter(f, fieldnames=all_keys, extrasaction="ignore")
            dict_writer.writeheader()
            for row in rows:
                dict_writer.writerow(
                    {k: "" if v is None else str(v) for k, v in row.items()}
                )
