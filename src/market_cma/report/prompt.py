"""Build the structured market summary and prompt sent to the report model."""

import json
from typing import Any

import marshmallow as ma

from ..data.models import Metric, RegionMarketRecord

SYSTEM_INSTRUCTION = """You are a professional real-estate analyst. Your goal is to generate a concise, insightful, and data-driven market report summary based *only* on the data provided.
- Analyze the provided JSON data, which includes a primary market, an optional comparison market, and the national average.
- If a comparison market is provided, focus on the similarities and differences between it and the primary market.
- Use the national average data as a benchmark for context.
- Be positive and professional in your tone.
- Use bullet points, bold text, and relevant emojis for readability.
- Do not output JSON code blocks or markdown code fences. Your entire response must be a formatted text summary.
- Do not use any external tools or knowledge outside of the provided data. Address the user's query directly using the data."""  # noqa: E501


class MetricSummaryField(ma.fields.Field):
    """Dump a :class:`Metric` as ``{"latestValue": ...}``; empty series report ``None``."""

    def _serialize(self, value: Metric | None, attr: str | None, obj: Any, **kwargs: Any) -> dict:
        return metric_summary(value)


class RegionSummarySchema(ma.Schema):
    """Serialize a :class:`RegionMarketRecord` into the compact prompt payload."""

    region_name = ma.fields.Str(data_key="name")
    median_sale_price = MetricSummaryField(data_key="medianSalePrice")
    median_list_price = MetricSummaryField(data_key="medianListPrice")
    sale_to_list_ratio = MetricSummaryField(data_key="saleToListRatio")
    median_days_to_pending = MetricSummaryField(data_key="medianDaysOnMarket")
    new_listings = MetricSummaryField(data_key="newListings")
    active_inventory = MetricSummaryField(data_key="activeInventory")


def metric_summary(metric: Metric | None) -> dict[str, float | None]:
    """Reduce a metric to its latest value for the prompt."""
    if metric is None or not metric.series:
        return {"latestValue": None}
    return {"latestValue": metric.latest_value}


def region_summary(record: RegionMarketRecord) -> dict[str, Any]:
    """Return the region name plus each metric's latest value."""
    return RegionSummarySchema().dump(record)


def build_payload(
    primary: RegionMarketRecord,
    comparison: RegionMarketRecord | None = None,
    national: RegionMarketRecord | None = None,
) -> dict[str, Any]:
    """Assemble the JSON payload describing every market in the report."""
    payload: dict[str, Any] = {"primaryMarket": region_summary(primary)}
    if comparison is not None:
        payload["comparisonMarket"] = region_summary(comparison)
    if national is not None:
        payload["nationalAverage"] = region_summary(national)
    return payload


def build_prompt(
    query: str,
    primary: RegionMarketRecord,
    comparison: RegionMarketRecord | None = None,
    national: RegionMarketRecord | None = None,
) -> str:
    """Combine the user's query with the market data payload."""
    payload = build_payload(primary, comparison, national)
    return (
        f'User Query: "{query}"\n\n'
        "Market Data (JSON):\n"
        f"{json.dumps(payload, indent=2)}\n"
    )


__all__ = [
    "SYSTEM_INSTRUCTION",
    "RegionSummarySchema",
    "build_payload",
    "build_prompt",
    "metric_summary",
    "region_summary",
]
