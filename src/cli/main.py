"""Command line entry point for the market-cma application."""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import click
import structlog

from market_cma.config import AppSettings, SettingsStore
from market_cma.data import (
    DatasetParseError,
    LoadedDatasetBundle,
    NoCommonRegionsError,
    load_bundle_sync,
)
from market_cma.data.files import DATASETS
from market_cma.data.models import RegionMarketRecordSchema
from market_cma.logging import configure_logging
from market_cma.output import ChartConfig, format_change, generate_metric_chart
from market_cma.series import TIME_PERIODS, series_names
from market_cma.session import CHARTS, MarketSession, chart_spec
from market_cma.share import decode_share_link, encode_share_link

LOG_FORMAT_CHOICES = ("console", "json")
LOG_LEVEL_CHOICES = ("critical", "error", "warning", "info", "debug")
CHART_METRICS = tuple(spec.metric for spec in CHARTS)
DEFAULT_SHARE_URL = "http://localhost:8000/"

# CLI flag name for each dataset key.
DATASET_FLAGS = {
    "sale_price": "sale-price",
    "list_price": "list-price",
    "sale_to_list_ratio": "sale-to-list",
    "days_to_pending": "days-to-pending",
    "new_listings": "new-listings",
    "inventory": "inventory",
}

logger = structlog.get_logger(__name__)


def dataset_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach one required ``--<dataset>`` path option per Zillow CSV."""
    for spec in reversed(DATASETS):
        flag = DATASET_FLAGS[spec.key]
        func = click.option(
            f"--{flag}",
            spec.key,
            type=click.Path(exists=True, dir_okay=False, path_type=Path),
            envvar=f"MARKET_CMA_{spec.key.upper()}",
            required=True,
            help=f"{spec.title} CSV. {spec.description}",
        )(func)
    return func


def selection_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the primary/comparison region and time window options."""
    func = click.option(
        "--period",
        type=click.Choice(TIME_PERIODS, case_sensitive=False),
        default="1Y",
        show_default=True,
        help="Chart window measured back from each series' latest observation.",
    )(func)
    func = click.option("--compare", "comparison", default=None, help="Comparison region.")(func)
    func = click.option(
        "--region",
        default=None,
        help="Primary region. Defaults to the first region alphabetically.",
    )(func)
    return func


def _dataset_paths(kwargs: dict[str, Any]) -> dict[str, Path]:
    """Pull the six dataset paths out of a command's keyword arguments."""
    return {spec.key: kwargs.pop(spec.key) for spec in DATASETS}


def _load_bundle(paths: dict[str, Path]) -> LoadedDatasetBundle:
    """Load all six datasets, translating domain failures into CLI errors."""
    try:
        return load_bundle_sync(paths)
    except DatasetParseError as exc:
        raise click.ClickException(str(exc)) from exc
    except NoCommonRegionsError as exc:
        raise click.ClickException(str(exc)) from exc


def _settings(ctx: click.Context) -> AppSettings:
    """Load settings through the store configured on the group."""
    ctx.ensure_object(dict)
    store: SettingsStore = ctx.obj["settings_store"]
    try:
        return store.load()
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc


def _build_session(
    ctx: click.Context,
    paths: dict[str, Path],
    *,
    region: str | None,
    comparison: str | None,
    period: str,
) -> MarketSession:
    """Create a session, load the datasets and apply the requested selection."""
    session = MarketSession(settings=_settings(ctx))
    session.load_bundle(_load_bundle(paths))
    try:
        if region:
            session.select_primary(region)
        session.select_comparison(comparison)
        session.set_period(period)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc
    return session


def _card_payload(session: MarketSession) -> list[dict[str, object]]:
    return [
        {
            "label": card.label,
            "metric": card.metric,
            "value": card.value,
            "yoy_change": card.change,
            "direction": card.direction,
        }
        for card in session.stat_cards()
    ]


@click.group()
@click.option(
    "--settings-file",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="MARKET_CMA_SETTINGS",
    default=None,
    help="Settings JSON holding the Gemini API key. Defaults to the per-user app directory.",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVEL_CHOICES, case_sensitive=False),
    envvar="MARKET_CMA_LOG_LEVEL",
    default="warning",
    show_default=True,
    help="Verbosity for structured logs.",
)
@click.option(
    "--log-format",
    type=click.Choice(LOG_FORMAT_CHOICES, case_sensitive=False),
    envvar="MARKET_CMA_LOG_FORMAT",
    default="console",
    show_default=True,
    help="Render logs as console-friendly text or JSON.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    settings_file: Path | None,
    log_level: str,
    log_format: str,
) -> None:
    """Analyze Zillow market datasets and generate AI market reports."""
    configure_logging(level=log_level, json_output=log_format.lower() == "json")
    ctx.ensure_object(dict)
    store = SettingsStore(path=settings_file) if settings_file else SettingsStore()
    ctx.obj.update({"settings_store": store})
    logger.bind(command_group="market-cma").debug(
        "cli.initialized",
        settings_file=str(store.path),
        log_level=log_level.lower(),
        log_format=log_format.lower(),
    )


@cli.command("regions")
@dataset_options
@click.option("--json", "as_json", is_flag=True, default=False, help="Emit a JSON array.")
def regions(*, as_json: bool, **kwargs: Any) -> None:
    """List the regions present in all six datasets."""
    bundle = _load_bundle(_dataset_paths(kwargs))
    session = MarketSession()
    session.load_bundle(bundle)
    if as_json:
        click.echo(json.dumps(session.regions, indent=2))
        return
    for name in session.regions:
        click.echo(name)


@cli.command("summary")
@dataset_options
@selection_options
@click.option("--json", "as_json", is_flag=True, default=False, help="Emit JSON instead of text.")
@click.pass_context
def summary(
    ctx: click.Context,
    *,
    region: str | None,
    comparison: str | None,
    period: str,
    as_json: bool,
    **kwargs: Any,
) -> None:
    """Show latest values and YoY changes for the primary market."""
    session = _build_session(
        ctx, _dataset_paths(kwargs), region=region, comparison=comparison, period=period
    )
    record = session.primary_record
    if record is None:
        raise click.ClickException(f"No sale-price data found for {session.primary_region}.")
    cards = _card_payload(session)
    if as_json:
        payload = {
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "region": record.region_name,
            "state": record.state_name,
            "comparison": session.comparison_region,
            "cards": cards,
        }
        click.echo(json.dumps(payload, indent=2))
        return
    heading = f"{record.region_name} ({record.state_name})" if record.state_name else record.region_name
    click.echo(heading)
    for card in session.stat_cards():
        change = format_change(card.change)
        click.echo(f"  {card.label}: {card.value}" + (f"  {change}" if change else ""))


@cli.command("chart")
@dataset_options
@selection_options
@click.option(
    "--metric",
    "metrics",
    type=click.Choice(CHART_METRICS, case_sensitive=False),
    multiple=True,
    help="Metric(s) to chart. Defaults to all four charted metrics.",
)
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("out"),
    show_default=True,
    help="Directory for chart PNGs.",
)
@click.option(
    "--export",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write the merged chart rows to a .csv or .parquet file.",
)
@click.pass_context
def chart(
    ctx: click.Context,
    *,
    region: str | None,
    comparison: str | None,
    period: str,
    metrics: tuple[str, ...],
    output_dir: Path,
    export: Path | None,
    **kwargs: Any,
) -> None:
    """Render comparative line charts over the selected window."""
    session = _build_session(
        ctx, _dataset_paths(kwargs), region=region, comparison=comparison, period=period
    )
    cmd_log = logger.bind(command="chart", region=session.primary_region, period=period)
    cmd_log.info("command.start", metrics=list(metrics) or list(CHART_METRICS))

    export_rows: list[dict[str, object]] = []
    for metric in metrics or CHART_METRICS:
        spec = chart_spec(metric.lower())
        named = session.chart_series(spec.metric)
        rows = session.chart_data(spec.metric)
        if not rows:
            click.echo(f"Skipping {spec.title}: no data in the selected window.")
            continue
        report = generate_metric_chart(
            rows,
            series_names(named),
            output_dir=output_dir,
            filename=f"{spec.metric}.png",
            config=ChartConfig(title=spec.title, format_as=spec.format_as),
        )
        click.echo(f"Wrote {spec.title} chart to {report.path}")
        for row in rows:
            export_rows.append(
                {"metric": spec.metric, **{k: (v.isoformat() if k == "date" else v) for k, v in row.items()}}
            )

    if export:
        if not export_rows:
            raise click.ClickException("No chart rows were produced for export.")
        export.parent.mkdir(parents=True, exist_ok=True)
        if export.suffix.lower() == ".csv":
            _write_csv(export_rows, export)
        elif export.suffix.lower() in {".parquet", ".pq"}:
            _write_parquet(export_rows, export)
        else:
            raise click.BadParameter("Export path must end with .csv or .parquet", param_hint="--export")
        click.echo(f"Chart rows written to {export}")
    cmd_log.info("command.completed", rows=len(export_rows))


@cli.command("export")
@dataset_options
@selection_options
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Optional path for the JSON snapshot; prints to stdout otherwise.",
)
@click.pass_context
def export_records(
    ctx: click.Context,
    *,
    region: str | None,
    comparison: str | None,
    period: str,
    output: Path | None,
    **kwargs: Any,
) -> None:
    """Dump the primary, comparison and national records as JSON."""
    session = _build_session(
        ctx, _dataset_paths(kwargs), region=region, comparison=comparison, period=period
    )
    schema = RegionMarketRecordSchema()
    records = {
        "primary": session.primary_record,
        "comparison": session.comparison_record,
        "national": session.national_record,
    }
    payload = {key: schema.dump(record) if record else None for key, record in records.items()}
    document = json.dumps(payload, indent=2)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(document)
        click.echo(f"Wrote market records to {output}")
    else:
        click.echo(document)


@cli.command("report")
@click.argument("query")
@dataset_options
@selection_options
@click.pass_context
def report(
    ctx: click.Context,
    *,
    query: str,
    region: str | None,
    comparison: str | None,
    period: str,
    **kwargs: Any,
) -> None:
    """Ask the AI analyst a question about the selected markets."""
    session = _build_session(
        ctx, _dataset_paths(kwargs), region=region, comparison=comparison, period=period
    )
    reply = session.send_message(query)
    if reply is None:
        raise click.ClickException("A report request is already in progress.")
    click.echo(reply.text)
    for source in reply.sources or ():
        click.echo(f"- {source.title}: {source.uri}")


@cli.command("configure")
@click.option(
    "--api-key",
    prompt="Gemini API key",
    hide_input=True,
    help="Gemini API key used for report generation.",
)
@click.option("--model", default=None, help="Gemini model name.")
@click.pass_context
def configure(ctx: click.Context, *, api_key: str, model: str | None) -> None:
    """Save the Gemini API key (and optionally model) to the settings file."""
    store: SettingsStore = ctx.obj["settings_store"]
    current = _settings(ctx)
    settings = AppSettings(gemini_api_key=api_key, model=model or current.model)
    if not settings.has_api_key:
        raise click.BadParameter("The API key cannot be blank.", param_hint="--api-key")
    path = store.save(settings)
    click.echo(f"Saved settings to {path}")


@cli.command("share")
@click.argument("text")
@click.option("--base-url", default=DEFAULT_SHARE_URL, show_default=True, help="App URL to share.")
def share(*, text: str, base_url: str) -> None:
    """Print a link that embeds a report's text."""
    click.echo(encode_share_link(text, base_url))


@cli.command("open-share")
@click.argument("url")
def open_share(*, url: str) -> None:
    """Print the report text embedded in a share link."""
    content = decode_share_link(url)
    if content is None:
        raise click.ClickException("The link does not contain a readable shared report.")
    click.echo(content)


def _write_csv(rows: list[dict[str, object]], path: Path) -> None:
    """Write chart rows to CSV via pandas."""
    import pandas as pd  # type: ignore

    df = pd.DataFrame(rows)
    df.to_csv(path, index=False)


def _write_parquet(rows: list[dict[str, object]], path: Path) -> None:
    """Write chart rows to parquet via pandas/pyarrow."""
    import pandas as pd  # type: ignore

    df = pd.DataFrame(rows)
    try:
        df.to_parquet(path, index=False)
    except (ImportError, ValueError) as exc:  # pragma: no cover - optional deps
        raise click.ClickException(
            "Writing parquet requires pandas with pyarrow or fastparquet installed."
        ) from exc


if __name__ == "__main__":
    cli()
