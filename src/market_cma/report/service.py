"""Generate market reports, recovering locally from any service failure."""

from collections.abc import Callable

import requests
import structlog

from ..data.models import RegionMarketRecord
from .client import DEFAULT_MODEL, GeminiClient, ReportResult
from .prompt import SYSTEM_INSTRUCTION, build_prompt

logger = structlog.get_logger(__name__)

MISSING_KEY_MESSAGE = "Cannot generate report: Gemini API key is missing."
FAILURE_MESSAGE = (
    "I'm sorry, but I was unable to generate a report at this time. "
    "There might be an issue with the connection or your API key."
)

ClientFactory = Callable[[str], GeminiClient]


def default_client_factory(api_key: str, model: str = DEFAULT_MODEL) -> GeminiClient:
    """Create a :class:`GeminiClient` for ``api_key``."""
    return GeminiClient(api_key=api_key, model=model)


def generate_report(
    query: str,
    primary: RegionMarketRecord,
    comparison: RegionMarketRecord | None,
    national: RegionMarketRecord | None,
    *,
    api_key: str | None,
    client_factory: ClientFactory = default_client_factory,
) -> ReportResult:
    """Ask the model for a report on ``primary`` (optionally vs. ``comparison``).

    Never raises for service problems: network errors, rejected keys and
    malformed responses all come back as an apologetic plain-text result.
    """
    if not api_key:
        return ReportResult(text=MISSING_KEY_MESSAGE)

    report_log = logger.bind(
        primary=primary.region_name,
        comparison=comparison.region_name if comparison else None,
        national=national is not None,
    )
    report_log.info("report.request_start")
    prompt = build_prompt(query, primary, comparison, national)
    client = client_factory(api_key)
    try:
        result = client.generate(prompt, system_instruction=SYSTEM_INSTRUCTION)
    except (requests.RequestException, ValueError, KeyError, TypeError):
        report_log.error("report.request_failed", exc_info=True)
        return ReportResult(text=FAILURE_MESSAGE)
    finally:
        client.close()
    report_log.info("report.request_complete", sources=len(result.sources or ()))
    return result


__all__ = ["FAILURE_MESSAGE", "MISSING_KEY_MESSAGE", "default_client_factory", "generate_report"]
