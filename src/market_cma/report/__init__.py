"""Natural-language market reports backed by Gemini."""

from .client import Citation, GeminiClient, ReportResult
from .prompt import SYSTEM_INSTRUCTION, build_payload, build_prompt, region_summary
from .service import FAILURE_MESSAGE, MISSING_KEY_MESSAGE, generate_report

__all__ = [
    "Citation",
    "FAILURE_MESSAGE",
    "GeminiClient",
    "MISSING_KEY_MESSAGE",
    "ReportResult",
    "SYSTEM_INSTRUCTION",
    "build_payload",
    "build_prompt",
    "generate_report",
    "region_summary",
]
