"""Session controller tying loaded datasets, selections, charts and chat together.

Every derived value (region records, windowed series, chart rows, stat cards)
is recomputed from the current inputs on demand. Nothing derived is patched in
place, so changing a selection or reloading the bundle can never leave stale
figures behind.
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass
from typing import Literal

import structlog
from attrs import define, field

from .config import AppSettings
from .data.assemble import build_region_record
from .data.files import NATIONAL_LABEL, NATIONAL_REGION
from .data.models import LoadedDatasetBundle, RegionMarketRecord
from .data.regions import find_common_regions
from .math.stats import yoy_change
from .output.utils import format_value
from .report.client import Citation
from .report.service import ClientFactory, default_client_factory, generate_report
from .series.merge import ChartRow, NamedSeries, merge_series
from .series.window import DEFAULT_PERIOD, TimePeriod, filter_by_period, parse_period

logger = structlog.get_logger(__name__)

Sender = Literal["user", "ai"]

WELCOME_NO_KEY = "Welcome! Please enter your Gemini API key in settings to get started."
WELCOME = (
    "Welcome! I'm your AI real estate analyst. "
    "Please upload the required Zillow data files to begin."
)
NEED_KEY = "Please set your Gemini API key in settings first."
NEED_DATA = "Please upload data and select a city before asking for analysis."
NO_COMMON_REGIONS = (
    "I couldn't find any common cities across the uploaded files. "
    "Please ensure they cover the same geographic areas."
)


@define(slots=True, frozen=True)
class ChatMessage:
    """One entry in the conversation with the report assistant."""

    sender: Sender
    text: str
    sources: tuple[Citation, ...] | None = None
    id: str = field(factory=lambda: uuid.uuid4().hex)


@dataclass(frozen=True)
class StatCard:
    """Headline figure for one metric of the primary region."""

    label: str
    metric: str
    value: str
    change: float | None
    direction: Literal["up", "down"]

    @property
    def is_favorable(self) -> bool | None:
        """True when the change moves in the metric's good direction; None when flat or unknown."""
        if self.change is None or self.change == 0:
            return None
        return (self.change > 0) == (self.direction == "up")


@dataclass(frozen=True)
class CardSpec:
    label: str
    metric: str
    format_as: str
    direction: Literal["up", "down"]


STAT_CARDS: tuple[CardSpec, ...] = (
    CardSpec("Median Sale Price", "median_sale_price", "currency", "up"),
    CardSpec("Sale-to-List Ratio", "sale_to_list_ratio", "percent", "up"),
    CardSpec("Days to Pending", "median_days_to_pending", "days", "down"),
    CardSpec("Median List Price", "median_list_price", "currency", "up"),
    CardSpec("New Listings", "new_listings", "integer", "up"),
    CardSpec("For Sale Inventory", "active_inventory", "integer", "down"),
)


@dataclass(frozen=True)
class ChartSpec:
    title: str
    metric: str
    format_as: str


CHARTS: tuple[ChartSpec, ...] = (
    ChartSpec("Median Sale Price", "median_sale_price", "currency"),
    ChartSpec("Sale-to-List Price Ratio", "sale_to_list_ratio", "percent"),
    ChartSpec("Median Days to Pending", "median_days_to_pending", "days"),
    ChartSpec("For Sale Inventory", "active_inventory", "integer"),
)


def chart_spec(metric: str) -> ChartSpec:
    """Return the chart definition for ``metric``."""
    for spec in CHARTS:
        if spec.metric == metric:
            return spec
    raise KeyError(f"No chart defined for metric {metric!r}")


@define(slots=True)
class MarketSession:
    """Explicit state for one analysis session."""

    settings: AppSettings = field(factory=AppSettings)
    client_factory: ClientFactory | None = None
    bundle: LoadedDatasetBundle | None = field(default=None, init=False)
    regions: list[str] = field(factory=list, init=False)
    primary_region: str | None = field(default=None, init=False)
    comparison_region: str | None = field(default=None, init=False)
    period: TimePeriod = field(default=DEFAULT_PERIOD, init=False)
    messages: list[ChatMessage] = field(factory=list, init=False)
    _report_lock: threading.Lock = field(factory=threading.Lock, init=False, repr=False)

    def __attrs_post_init__(self) -> None:
        """Greet the user according to whether a key is configured."""
        self._post(WELCOME if self.settings.has_api_key else WELCOME_NO_KEY)

    # Data lifecycle -----------------------------------------------------

    def load_bundle(self, bundle: LoadedDatasetBundle) -> bool:
        """Adopt a freshly parsed bundle; returns False when no region is shared."""
        regions = find_common_regions(bundle.datasets())
        if not regions:
            logger.warning("session.no_common_regions", files=bundle.file_names())
            self._post(NO_COMMON_REGIONS)
            self.clear()
            return False
        self.bundle = bundle
        self.regions = regions
        self.primary_region = regions[0]
        self.comparison_region = None
        self.period = DEFAULT_PERIOD
        logger.info("session.bundle_loaded", regions=len(regions), primary=self.primary_region)
        return True

    def clear(self) -> None:
        """Drop the bundle and every selection derived from it."""
        self.bundle = None
        self.regions = []
        self.primary_region = None
        self.comparison_region = None
        logger.debug("session.cleared")

    def select_primary(self, region: str) -> None:
        """Choose the primary market; an equal comparison selection is dropped."""
        self._require_region(region)
        self.primary_region = region
        if self.comparison_region == region:
            self.comparison_region = None

    def select_comparison(self, region: str | None) -> None:
        """Choose (or clear, with ``None``) the comparison market."""
        if region is None:
            self.comparison_region = None
            return
        self._require_region(region)
        if region == self.primary_region:
            raise ValueError("The comparison market must differ from the primary market.")
        self.comparison_region = region

    def set_period(self, period: TimePeriod | str) -> None:
        """Change the active chart window."""
        self.period = parse_period(period)

    def _require_region(self, region: str) -> None:
        if self.bundle is None:
            raise ValueError("No datasets are loaded.")
        if region not in self.regions:
            raise ValueError(f"Region {region!r} is not available in every dataset.")

    # Derived records ----------------------------------------------------

    def _record(self, region: str | None) -> RegionMarketRecord | None:
        if self.bundle is None or region is None:
            return None
        return build_region_record(region, self.bundle)

    @property
    def primary_record(self) -> RegionMarketRecord | None:
        """Full (unwindowed) record for the primary market."""
        return self._record(self.primary_region)

    @property
    def comparison_record(self) -> RegionMarketRecord | None:
        """Full (unwindowed) record for the comparison market."""
        return self._record(self.comparison_region)

    @property
    def national_record(self) -> RegionMarketRecord | None:
        """Full record for the national aggregate row, when the files carry one."""
        return self._record(NATIONAL_REGION)

    def stat_cards(self) -> list[StatCard]:
        """Headline cards for the primary market; YoY uses the full series."""
        record = self.primary_record
        if record is None:
            return []
        cards = []
        for spec in STAT_CARDS:
            metric = record.metric(spec.metric)
            cards.append(
                StatCard(
                    label=spec.label,
                    metric=spec.metric,
                    value=format_value(metric.latest_value, spec.format_as),
                    change=yoy_change(metric.series),
                    direction=spec.direction,
                )
            )
        return cards

    def chart_series(self, metric: str) -> list[NamedSeries]:
        """Windowed primary, comparison and national series for ``metric``."""
        named: list[NamedSeries] = []
        for record, label in (
            (self.primary_record, None),
            (self.comparison_record, None),
            (self.national_record, NATIONAL_LABEL),
        ):
            if record is None:
                continue
            series = filter_by_period(record.metric(metric).series, self.period)
            named.append((label or record.region_name, series))
        return named

    def chart_data(self, metric: str) -> list[ChartRow]:
        """Merged, chart-ready rows for ``metric`` over the active window."""
        return merge_series(self.chart_series(metric))

    # Chat ---------------------------------------------------------------

    @property
    def is_busy(self) -> bool:
        """True while a report request is outstanding."""
        return self._report_lock.locked()

    def send_message(self, text: str) -> ChatMessage | None:
        """Ask for a report; returns the reply, or None if a request is already in flight."""
        if not self._report_lock.acquire(blocking=False):
            logger.warning("session.report_in_flight")
            return None
        try:
            return self._send(text)
        finally:
            self._report_lock.release()

    def _send(self, text: str) -> ChatMessage:
        self.messages.append(ChatMessage(sender="user", text=text))
        primary = self.primary_record
        if primary is None or not self.settings.has_api_key:
            return self._post(NEED_KEY if not self.settings.has_api_key else NEED_DATA)

        factory: ClientFactory = self.client_factory or (
            lambda key: default_client_factory(key, self.settings.model)
        )
        result = generate_report(
            text,
            primary,
            self.comparison_record,
            self.national_record,
            api_key=self.settings.gemini_api_key,
            client_factory=factory,
        )
        return self._post(result.text, sources=result.sources)

    def _post(self, text: str, *, sources: tuple[Citation, ...] | None = None) -> ChatMessage:
        message = ChatMessage(sender="ai", text=text, sources=sources)
        self.messages.append(message)
        return message


__all__ = [
    "CHARTS",
    "ChatMessage",
    "MarketSession",
    "STAT_CARDS",
    "StatCard",
    "chart_spec",
]
