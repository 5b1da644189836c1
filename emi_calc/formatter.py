"""Output helpers for the EMI calculator.

This module turns engine output into presentation rows and renders them as a
tab-separated text table, a CSV file or a JSON document. Every row has the
shape ``[date-or-year, principal, interest, balance]``; currency amounts are
rounded to whole units here, never in the engine. Plain ``print`` is used for
terminal output, as in the rest of the command-line interface.
"""

from __future__ import annotations

import csv
import json
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence

from .data_models import AmortizationResult, DatedPeriodRow, YearBucket

MONTHLY_HEADER = ["Date", "Principal", "Interest", "Balance"]
YEARLY_HEADER = ["Year", "Principal", "Interest", "Balance End"]


def round_whole(value: float) -> int:
    """Round a currency amount to the nearest whole unit, halves away from zero."""
    return int(Decimal(repr(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def round2(value: float) -> float:
    """Round a currency amount to two decimals, halves away from zero."""
    return float(Decimal(repr(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def monthly_rows(rows: Iterable[DatedPeriodRow]) -> List[List[Any]]:
    return [
        [
            row.calendar_date.isoformat(),
            round_whole(row.principal_component),
            round_whole(row.interest_component),
            round_whole(row.ending_balance),
        ]
        for row in rows
    ]


def yearly_rows(buckets: Iterable[YearBucket]) -> List[List[Any]]:
    return [
        [
            bucket.year,
            round_whole(bucket.principal_sum),
            round_whole(bucket.interest_sum),
            round_whole(bucket.ending_balance),
        ]
        for bucket in buckets
    ]


def summary_dict(result: AmortizationResult, principal: float, annual_rate_pct: float) -> Dict[str, Any]:
    """Collect the headline figures of a result into a serialisable dict."""
    return {
        "principal": principal,
        "annual_rate_pct": annual_rate_pct,
        "tenure_months": result.tenure_months,
        "tenure_clamped": result.tenure_clamped,
        "monthly_emi": round2(result.installment_amount),
        "total_interest": round_whole(result.total_interest),
        "total_payment": round_whole(result.total_payment),
    }


def print_summary(summary: Dict[str, Any]) -> None:
    """Print the headline loan figures in a human-readable format."""
    print("Summary")
    print("-" * 48)
    print(f"Principal          : {summary['principal']:.2f}")
    print(f"Rate (p.a.)        : {summary['annual_rate_pct']:.2f}%")
    print(f"Tenure             : {summary['tenure_months']} months")
    print(f"Monthly EMI        : {summary['monthly_emi']:.2f}")
    print(f"Total interest     : {summary['total_interest']}")
    print(f"Total payment      : {summary['total_payment']}")
    if summary.get("tenure_clamped"):
        print("Note               : tenure was adjusted to a whole number of months (minimum 1)")
    print("-" * 48)


def print_table(header: Sequence[str], rows: Iterable[Sequence[Any]]) -> None:
    """Print presentation rows as a tab-separated table."""
    print("\t".join(header))
    for row in rows:
        print("\t".join(str(cell) for cell in row))


def export_to_csv(path: Path, header: Sequence[str], rows: Iterable[Sequence[Any]]) -> None:
    """Write presentation rows to a CSV file."""
    with path.open("w", newline="", encoding="utf-8") as f:
        write_csv(f, header, rows)


def write_csv(stream, header: Sequence[str], rows: Iterable[Sequence[Any]]) -> None:
    writer = csv.writer(stream)
    writer.writerow(header)
    writer.writerows(rows)


def export_to_json(path: Path, summary: Dict[str, Any], header: Sequence[str], rows: List[List[Any]]) -> None:
    """Export the summary and presentation rows to a JSON file."""
    data = {
        "summary": summary,
        "schedule": rows_as_dicts(header, rows),
    }
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def _json_keys(header: Sequence[str]) -> List[str]:
    return [h.lower().replace(" ", "_") for h in header]


def rows_as_dicts(header: Sequence[str], rows: Iterable[Sequence[Any]]) -> List[Dict[str, Any]]:
    """Key each presentation row by its lower-cased column name."""
    keys = _json_keys(header)
    return [dict(zip(keys, row)) for row in rows]
