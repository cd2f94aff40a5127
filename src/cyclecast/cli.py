"""CLI for the cyclecast cycle analysis engine."""

from __future__ import annotations

import logging
from datetime import date

import click

from cyclecast.analytics.report import CycleReport


def _parse_date(ctx: click.Context, param: click.Parameter, value: str | None) -> date | None:
    if value is None:
        return None
    from cyclecast.history import parse_date

    day = parse_date(value)
    if day is None:
        raise click.BadParameter(f"not a date: {value!r} (expected YYYY-MM-DD)")
    return day


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _print_report(report: CycleReport) -> None:
    stats = report.statistics
    pred = report.prediction
    window = report.fertility_window

    click.echo(f"\n{'=' * 60}")
    click.echo(f"  Cycle Report ({stats.total_cycles} cycles, {stats.data_quality} data)")
    click.echo(f"{'=' * 60}")
    click.echo(f"  Average:     {stats.average_length:.1f} days "
               f"(sd {stats.standard_deviation:.1f}, "
               f"irregularity {stats.irregularity_score:.1f}%)")
    click.echo(f"  Next cycle:  {pred.next_cycle_start} "
               f"(~{pred.next_cycle_length} days)")
    click.echo(f"  Ovulation:   {pred.ovulation_date}")
    click.echo(f"  Fertile:     {window.window_start} .. {window.window_end}")
    click.echo(f"  Confidence:  {report.confidence:.0%}")
    if report.profile is not None:
        click.echo(f"  Profile:     {report.profile.regularity}, "
                   f"{report.profile.length_category}, "
                   f"health score {report.profile.health_score}/100")
    for risk in report.risks:
        click.echo(f"  Risk:        {risk.condition} ({risk.risk_level})")
    for insight in report.insights:
        click.echo(f"  [{insight.severity}] {insight.title}: {insight.message}")
    for rec in report.recommendations:
        click.echo(f"  * {rec.message}")
    click.echo(f"{'=' * 60}")


def _write_outputs(report: CycleReport, history: list, output: str | None, csv_path: str | None) -> None:
    if output:
        with open(output, "w") as f:
            f.write(report.to_json())
        click.echo(f"\nReport written to {output}")
    if csv_path:
        with open(csv_path, "w", newline="") as f:
            f.write(report.to_csv(history))
        click.echo(f"CSV written to {csv_path}")


def _analysis_options(func):
    """Options shared by the analysis commands."""
    options = [
        click.option("--luteal", default=14, type=click.IntRange(8, 18),
                     help="Luteal phase length in days."),
        click.option("--advanced", is_flag=True,
                     help="Weight the three most recent cycles for the next start."),
        click.option("--symptom", "symptoms", multiple=True,
                     type=click.Choice(["severe_pain"]), help="Symptom flag (repeatable)."),
        click.option("--today", default=None, callback=_parse_date,
                     help="Reference date for the no-history forecast."),
        click.option("--output", "-o", default=None, help="Write the report as JSON."),
        click.option("--csv", "csv_path", default=None, help="Write history + forecast as CSV."),
        click.option("--verbose", "-v", is_flag=True, help="Enable debug logging."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
def main() -> None:
    """cyclecast: cycle statistics, forecasts and health insights."""


@main.command("analyze")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@_analysis_options
def analyze_cmd(
    file: str,
    luteal: int,
    advanced: bool,
    symptoms: tuple[str, ...],
    today: date | None,
    output: str | None,
    csv_path: str | None,
    verbose: bool,
) -> None:
    """Analyze a file of logged period start dates."""
    from cyclecast.analytics.pipeline import analyze_history
    from cyclecast.config import Settings
    from cyclecast.history import history_from_starts, load_start_dates

    _setup_logging(verbose)

    starts = load_start_dates(file)
    history = history_from_starts(starts)
    click.echo(f"Loaded {len(starts)} start dates ({len(history)} cycles) from {file}")

    report = analyze_history(
        history,
        settings=Settings(luteal_length=luteal, advanced_estimation=advanced),
        symptoms=set(symptoms),
        today=today,
        current_cycle_start=max(starts) if starts else None,
    )
    _print_report(report)
    _write_outputs(report, history, output, csv_path)


@main.command("predict")
@click.option("--anchor", required=True, callback=_parse_date,
              help="Start date of the most recent period.")
@click.option("--length", default=28, type=int, help="Usual cycle length in days.")
@_analysis_options
def predict_cmd(
    anchor: date,
    length: int,
    luteal: int,
    advanced: bool,
    symptoms: tuple[str, ...],
    today: date | None,
    output: str | None,
    csv_path: str | None,
    verbose: bool,
) -> None:
    """Forecast from a single anchor date and a configured cycle length."""
    from cyclecast.analytics.pipeline import analyze_history
    from cyclecast.config import Settings
    from cyclecast.history import history_from_anchor

    _setup_logging(verbose)

    history = history_from_anchor(anchor, length)
    report = analyze_history(
        history,
        settings=Settings(luteal_length=luteal, advanced_estimation=advanced),
        symptoms=set(symptoms),
        today=today,
        current_cycle_start=anchor,
    )
    _print_report(report)
    _write_outputs(report, history, output, csv_path)


if __name__ == "__main__":
    main()
