"""Command-line interface for the EMI calculator.

This module uses the ``click`` library to implement a multi-command
interface. Users can compute the full amortization schedule (monthly or
yearly) or view only the headline figures. Results can be printed to the
terminal or exported to JSON/CSV files.
"""

from __future__ import annotations

import json
import logging
import math
from datetime import date
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple

import click

from .aggregator import attach_dates, group_by_year
from .data_models import AmortizationResult, LoanTerms
from .engine import compute_schedule
from .formatter import (
    MONTHLY_HEADER,
    YEARLY_HEADER,
    export_to_csv,
    export_to_json,
    monthly_rows,
    print_summary,
    print_table,
    summary_dict,
    yearly_rows,
)
from .utils import OVERFLOW_RULES, ROLL, fits_calendar, parse_amount, parse_iso_date, years_to_months

logger = logging.getLogger(__name__)

MAX_PRINTED_ROWS = 120


def build_terms_from_options(
    principal: str,
    rate: float,
    term: Optional[int],
    years: Optional[float] = None,
) -> LoanTerms:
    """Validate raw option values and return the loan terms.

    The engine itself accepts degenerate terms; the command line does not.
    """
    try:
        principal_value = parse_amount(principal)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--principal")
    if principal_value <= 0:
        raise click.BadParameter("Principal must be positive", param_hint="--principal")
    if not math.isfinite(rate):
        raise click.BadParameter("Rate must be a finite number", param_hint="--rate")
    if rate < 0:
        raise click.BadParameter("Rate cannot be negative", param_hint="--rate")

    if term is None and years is None:
        raise click.UsageError("Provide the tenure with --term (months) or --years")
    if term is not None and years is not None:
        raise click.UsageError("Use either --term or --years, not both")
    if years is not None and not math.isfinite(years):
        raise click.BadParameter("Years must be a finite number", param_hint="--years")
    months = term if term is not None else years_to_months(years)
    if months < 1:
        raise click.BadParameter("Tenure must be at least one month", param_hint="--term/--years")

    return LoanTerms(principal=principal_value, annual_rate_pct=rate, tenure_months=months)


def parse_start_date(value: Optional[str]) -> date:
    if not value:
        return date.today()
    try:
        return parse_iso_date(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--start-date")


def compute_checked(terms: LoanTerms) -> AmortizationResult:
    """Run the engine, rejecting terms whose totals overflow a float."""
    result = compute_schedule(terms)
    if not math.isfinite(result.total_payment):
        raise click.UsageError("Loan figures are too large to compute; lower the principal or the rate")
    return result


def schedule_view(
    result: AmortizationResult, start: date, view: str, overflow: str = ROLL
) -> Tuple[List[str], List[List[Any]]]:
    """Return the header and presentation rows of the requested view."""
    dated = attach_dates(result.schedule, start, overflow)
    if view == "yearly":
        return YEARLY_HEADER, yearly_rows(group_by_year(dated))
    return MONTHLY_HEADER, monthly_rows(dated)


def loan_options(func: Callable) -> Callable:
    """Attach the options shared by every loan command."""
    options = [
        click.option("--principal", "-p", "principal", required=True, help="Loan amount (accepts 500k, 1.2m)"),
        click.option("--rate", "-r", "rate", required=True, type=float, help="Annual interest rate (percent)"),
        click.option("--term", "-t", "term", type=int, help="Loan tenure in months"),
        click.option("--years", "-y", "years", type=float, help="Loan tenure in years (alternative to --term)"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option(
    "--log-level",
    "log_level",
    envvar="EMI_CALC_LOG_LEVEL",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging verbosity",
)
def cli(log_level: str) -> None:
    """A command-line EMI calculator for fixed-rate personal loans."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@loan_options
@click.option("--start-date", "-s", "start_date", help="First installment date (YYYY-MM-DD); defaults to today")
@click.option("--view", "view", type=click.Choice(["monthly", "yearly"]), default="monthly", show_default=True)
@click.option(
    "--overflow",
    "overflow",
    type=click.Choice(list(OVERFLOW_RULES)),
    default=ROLL,
    show_default=True,
    help="Rule for start days the target month lacks (roll into next month or clamp to month end)",
)
@click.option("--output", "-o", "output", type=str, help="Output file path (.json or .csv)")
def schedule(
    principal: str,
    rate: float,
    term: Optional[int],
    years: Optional[float],
    start_date: Optional[str],
    view: str,
    overflow: str,
    output: Optional[str],
) -> None:
    """Compute and print the full amortization schedule."""
    terms = build_terms_from_options(principal, rate, term, years)
    start = parse_start_date(start_date)
    if not fits_calendar(start, terms.tenure_months, overflow):
        raise click.BadParameter("Schedule would run past the year 9999", param_hint="--start-date")
    result = compute_checked(terms)
    header, rows = schedule_view(result, start, view, overflow)
    summary_data = summary_dict(result, terms.principal, terms.annual_rate_pct)
    logger.info("Built %s schedule with %d rows starting %s", view, len(rows), start.isoformat())

    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, summary_data, header, rows)
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, header, rows)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv", param_hint="--output")
        click.echo(f"Schedule exported to {path}")
        return

    print_summary(summary_data)
    # Limit schedule length printed to avoid flooding the terminal
    if len(rows) > MAX_PRINTED_ROWS:
        click.echo(f"Schedule has {len(rows)} rows; showing first {MAX_PRINTED_ROWS} rows.")
        rows = rows[:MAX_PRINTED_ROWS]
    print_table(header, rows)


@cli.command()
@loan_options
@click.option("--output", "-o", "output", type=str, help="Output file path (.json)")
def summary(
    principal: str,
    rate: float,
    term: Optional[int],
    years: Optional[float],
    output: Optional[str],
) -> None:
    """Compute and print only the headline figures for a loan."""
    terms = build_terms_from_options(principal, rate, term, years)
    result = compute_checked(terms)
    summary_data = summary_dict(result, terms.principal, terms.annual_rate_pct)
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension", param_hint="--output")
        with path.open("w", encoding="utf-8") as f:
            json.dump({"summary": summary_data}, f, indent=2)
        click.echo(f"Summary exported to {path}")
    else:
        print_summary(summary_data)


if __name__ == "__main__":
    cli()
