import io
import logging
import math
import os
from datetime import date

from flask import Flask, Response, jsonify, render_template, request, url_for

from emi_calc.engine import compute_schedule
from emi_calc.data_models import LoanTerms
from emi_calc.formatter import round2, rows_as_dicts, summary_dict, write_csv
from emi_calc.main import schedule_view
from emi_calc.utils import fits_calendar, parse_amount, parse_iso_date, years_to_months

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config["ASSET_VERSION"] = os.environ.get("ASSET_VERSION", "1")
app.config["PREVIEW_ROWS"] = int(os.environ.get("EMI_CALC_PREVIEW_ROWS", "120"))

DEFAULT_AMOUNT = 50_000.0
DEFAULT_RATE = 10.0
DEFAULT_MONTHS = 60
MAX_MONTHS = 600
MAX_AMOUNT = 1e12
MAX_RATE_PCT = 100.0
TENURE_MODES = ("months", "years")
VIEWS = ("monthly", "yearly")


class InputError(ValueError):
    """A query parameter that cannot be turned into a usable loan term."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field


def _parse_field(args, name: str, parser, valid, default, strict: bool, notices: list):
    raw = args.get(name, "").strip()
    if not raw:
        return default
    try:
        value = parser(raw)
    except ValueError:
        value = None
    if value is not None and valid(value):
        return value
    if strict:
        raise InputError(name, f"invalid value {raw!r}")
    notices.append(name)
    return default


def read_loan_inputs(args, strict: bool = False) -> tuple[dict, list[str]]:
    """Read loan inputs from query parameters.

    Missing parameters take their defaults. An unusable value also falls back
    to the default and its name is reported in the returned notices, unless
    ``strict`` is set, in which case ``InputError`` is raised instead.
    """
    notices: list[str] = []
    amount = _parse_field(args, "amount", parse_amount, lambda v: 0 < v <= MAX_AMOUNT, DEFAULT_AMOUNT, strict, notices)
    rate = _parse_field(args, "rate", float, lambda v: 0 <= v <= MAX_RATE_PCT, DEFAULT_RATE, strict, notices)
    mode = args.get("mode", "months")
    if mode not in TENURE_MODES:
        mode = "months"
    if mode == "years":
        years = _parse_field(
            args,
            "years",
            float,
            lambda v: math.isfinite(v) and 1 <= years_to_months(v) <= MAX_MONTHS,
            DEFAULT_MONTHS / 12,
            strict,
            notices,
        )
        months = years_to_months(years)
    else:
        months = _parse_field(args, "months", int, lambda v: 1 <= v <= MAX_MONTHS, DEFAULT_MONTHS, strict, notices)
    start = _parse_field(
        args, "start", parse_iso_date, lambda v: fits_calendar(v, months), date.today(), strict, notices
    )
    view = args.get("view", "monthly")
    if view not in VIEWS:
        view = "monthly"
    inputs = {
        "amount": amount,
        "rate": rate,
        "months": months,
        "mode": mode,
        "start": start,
        "view": view,
    }
    return inputs, notices


def _run_analysis(inputs: dict):
    terms = LoanTerms(principal=inputs["amount"], annual_rate_pct=inputs["rate"], tenure_months=inputs["months"])
    result = compute_schedule(terms)
    header, rows = schedule_view(result, inputs["start"], inputs["view"])
    summary = summary_dict(result, terms.principal, terms.annual_rate_pct)
    return summary, header, rows


def _share_params(inputs: dict) -> dict:
    params = {
        "amount": f"{inputs['amount']:.15g}",
        "rate": f"{inputs['rate']:.15g}",
        "months": inputs["months"],
        "mode": inputs["mode"],
        "start": inputs["start"].isoformat(),
        "view": inputs["view"],
    }
    if inputs["mode"] == "years":
        params["years"] = f"{round2(inputs['months'] / 12):.15g}"
    return params


@app.route("/", methods=["GET"])
def index():
    inputs, notices = read_loan_inputs(request.args)
    summary, header, rows = _run_analysis(inputs)
    preview_rows = app.config["PREVIEW_ROWS"]
    truncated = max(0, len(rows) - preview_rows)
    share_params = _share_params(inputs)

    return render_template(
        "index.html",
        inputs=inputs,
        years_value=round2(inputs["months"] / 12),
        notices=notices,
        summary=summary,
        header=header,
        rows=rows[:preview_rows],
        truncated=truncated,
        share_url=url_for("index", **share_params),
        csv_url=url_for("export_csv", **share_params),
        monthly_url=url_for("index", **{**share_params, "view": "monthly"}),
        yearly_url=url_for("index", **{**share_params, "view": "yearly"}),
        asset_version=app.config["ASSET_VERSION"],
    )


@app.get("/api/schedule")
def api_schedule():
    try:
        inputs, _ = read_loan_inputs(request.args, strict=True)
    except InputError as exc:
        logger.info("Rejected schedule request: %s", exc)
        return jsonify({"error": str(exc), "field": exc.field}), 400
    summary, header, rows = _run_analysis(inputs)
    return jsonify(
        {
            "summary": summary,
            "start": inputs["start"].isoformat(),
            "view": inputs["view"],
            "schedule": rows_as_dicts(header, rows),
        }
    )


@app.get("/export.csv")
def export_csv():
    try:
        inputs, _ = read_loan_inputs(request.args, strict=True)
    except InputError as exc:
        return jsonify({"error": str(exc), "field": exc.field}), 400
    _, header, rows = _run_analysis(inputs)
    buffer = io.StringIO()
    write_csv(buffer, header, rows)
    filename = f"emi-schedule-{inputs['view']}.csv"
    return Response(
        buffer.getvalue(),
        mimetype="text/csv",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


if __name__ == "__main__":
    logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())
    print("Starting EMI Calculator web app...")
    app.run(host="0.0.0.0", port=8710, debug=True)
