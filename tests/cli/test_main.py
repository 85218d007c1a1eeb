"""Tests for the command line interface."""

import csv
import json
from pathlib import Path

import pytest
from click.testing import CliRunner

import cli.main as cli_mod
from market_cma.output.plots import ChartReport
from market_cma.report.client import Citation, ReportResult
from market_cma.session import NEED_KEY


@pytest.fixture
def dataset_args(csv_paths):
    args = []
    for key, path in csv_paths.items():
        args.extend([f"--{cli_mod.DATASET_FLAGS[key]}", str(path)])
    return args


@pytest.fixture
def settings_args(tmp_path):
    return ["--settings-file", str(tmp_path / "settings.json")]


@pytest.fixture
def fake_chart(monkeypatch):
    """Avoid matplotlib; record each requested chart."""
    calls = []

    def _fake(rows, names, *, output_dir, filename, config):
        path = Path(output_dir) / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"")
        calls.append((filename, list(names), config.format_as))
        return ChartReport(path=path, series=tuple(names), dates=len(rows))

    monkeypatch.setattr(cli_mod, "generate_metric_chart", _fake)
    return calls


def invoke(*args, **kwargs):
    return CliRunner().invoke(cli_mod.cli, [str(arg) for arg in args], **kwargs)


def test_regions(settings_args, dataset_args):
    r = invoke(*settings_args, "regions", *dataset_args)
    assert r.exit_code == 0, r.output
    assert r.output.splitlines() == ["Austin", "Denver"]


def test_regions_json(settings_args, dataset_args):
    r = invoke(*settings_args, "regions", *dataset_args, "--json")
    assert r.exit_code == 0, r.output
    assert json.loads(r.output) == ["Austin", "Denver"]


def test_summary_text(settings_args, dataset_args):
    r = invoke(*settings_args, "summary", *dataset_args)
    assert r.exit_code == 0, r.output
    lines = r.output.splitlines()
    assert lines[0] == "Austin (TX)"
    assert "  Median Sale Price: $330,000  ▲ 10.0% YoY" in lines
    assert "  Sale-to-List Ratio: 99.0%  ▲ 2.1% YoY" in lines


def test_summary_json_for_selected_region(settings_args, dataset_args):
    r = invoke(*settings_args, "summary", *dataset_args, "--region", "Denver", "--json")
    assert r.exit_code == 0, r.output
    payload = json.loads(r.output)
    assert payload["region"] == "Denver"
    assert payload["state"] == "CO"
    price = payload["cards"][0]
    assert price["value"] == "$510,000"
    assert price["yoy_change"] == pytest.approx(2.0)


def test_summary_rejects_unknown_region(settings_args, dataset_args):
    r = invoke(*settings_args, "summary", *dataset_args, "--region", "Boise")
    assert r.exit_code == 2
    assert "not available" in r.output


def test_chart_writes_pngs_and_csv(settings_args, dataset_args, tmp_path, fake_chart):
    export = tmp_path / "rows.csv"
    r = invoke(
        *settings_args,
        "chart",
        *dataset_args,
        "--compare",
        "Denver",
        "--period",
        "max",
        "--metric",
        "median_sale_price",
        "--output-dir",
        tmp_path / "charts",
        "--export",
        export,
    )
    assert r.exit_code == 0, r.output
    assert fake_chart == [("median_sale_price.png", ["Austin", "Denver", "US Average"], "currency")]
    assert (tmp_path / "charts" / "median_sale_price.png").exists()
    with export.open() as handle:
        rows = list(csv.DictReader(handle))
    assert len(rows) == 3
    assert rows[-1]["date"] == "2024-01-28"
    assert float(rows[-1]["Denver"]) == 510000.0


def test_chart_defaults_to_all_charted_metrics(settings_args, dataset_args, tmp_path, fake_chart):
    r = invoke(*settings_args, "chart", *dataset_args, "--output-dir", tmp_path)
    assert r.exit_code == 0, r.output
    assert [call[0] for call in fake_chart] == [
        "median_sale_price.png",
        "sale_to_list_ratio.png",
        "median_days_to_pending.png",
        "active_inventory.png",
    ]


def test_chart_rejects_unknown_export_suffix(settings_args, dataset_args, tmp_path, fake_chart):
    r = invoke(*settings_args, "chart", *dataset_args, "--output-dir", tmp_path, "--export", tmp_path / "rows.txt")
    assert r.exit_code == 2
    assert ".csv or .parquet" in r.output


def test_export_records(settings_args, dataset_args, tmp_path):
    output = tmp_path / "records.json"
    r = invoke(*settings_args, "export", *dataset_args, "--compare", "Denver", "--output", output)
    assert r.exit_code == 0, r.output
    payload = json.loads(output.read_text())
    assert payload["primary"]["region_name"] == "Austin"
    assert payload["comparison"]["region_name"] == "Denver"
    assert payload["national"]["median_sale_price"]["latest_value"] == 420000.0


def test_report_without_key(settings_args, dataset_args):
    r = invoke(*settings_args, "report", "How is Austin?", *dataset_args)
    assert r.exit_code == 0, r.output
    assert NEED_KEY in r.output


def test_report_prints_text_and_sources(mocker, settings_args, dataset_args):
    generate = mocker.patch(
        "market_cma.session.generate_report",
        return_value=ReportResult(text="Austin is cooling.", sources=(Citation("Zillow", "https://z"),)),
    )
    r = invoke(
        *settings_args,
        "report",
        "How is Austin?",
        *dataset_args,
        env={"MARKET_CMA_GEMINI_API_KEY": "key"},
    )
    assert r.exit_code == 0, r.output
    assert "Austin is cooling." in r.output
    assert "- Zillow: https://z" in r.output
    assert generate.call_args.kwargs["api_key"] == "key"


def test_configure_saves_key(settings_args, tmp_path):
    r = invoke(*settings_args, "configure", "--api-key", " abc ", "--model", "gemini-x")
    assert r.exit_code == 0, r.output
    saved = json.loads((tmp_path / "settings.json").read_text())
    assert saved == {"gemini_api_key": "abc", "model": "gemini-x"}


def test_configure_rejects_blank_key(settings_args):
    r = invoke(*settings_args, "configure", "--api-key", "   ")
    assert r.exit_code == 2


def test_share_round_trip(settings_args):
    r = invoke(*settings_args, "share", "Great report", "--base-url", "https://app.example/")
    assert r.exit_code == 0, r.output
    link = r.output.strip()
    assert link.startswith("https://app.example/?share=")

    r = invoke(*settings_args, "open-share", link)
    assert r.exit_code == 0, r.output
    assert r.output.strip() == "Great report"


def test_open_share_without_report(settings_args):
    r = invoke(*settings_args, "open-share", "https://app.example/")
    assert r.exit_code == 1
    assert "does not contain" in r.output


def test_parse_error_is_reported(settings_args, csv_paths, dataset_args):
    csv_paths["list_price"].write_bytes(b"RegionName\n\xff\n")
    r = invoke(*settings_args, "regions", *dataset_args)
    assert r.exit_code == 1
    assert "CSV parsing error in list_price.csv" in r.output


def test_no_common_regions_is_reported(settings_args, csv_paths, dataset_args, make_csv):
    csv_paths["inventory"].write_text(make_csv({"Boise": ("1", "2", "3")}))
    r = invoke(*settings_args, "regions", *dataset_args)
    assert r.exit_code == 1
    assert "No common cities were found" in r.output
