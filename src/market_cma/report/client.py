"""HTTP client for the Gemini ``generateContent`` endpoint."""

from typing import Any

import requests
import structlog
from attrs import define, field

logger = structlog.get_logger(__name__)

BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models/"
DEFAULT_MODEL = "gemini-2.5-flash"


@define(slots=True, frozen=True)
class Citation:
    """A web source the model grounded part of its answer on."""

    title: str
    uri: str


@define(slots=True, frozen=True)
class ReportResult:
    """Free-text report plus optional citations."""

    text: str
    sources: tuple[Citation, ...] | None = None


def _mapping(value: Any) -> dict[str, Any]:
    """Return ``value`` when it is a JSON object, else an empty dict."""
    return value if isinstance(value, dict) else {}


def _first_candidate(payload: Any) -> dict[str, Any]:
    """Return the first candidate object, rejecting bodies of the wrong shape."""
    if not isinstance(payload, dict):
        raise ValueError(f"Gemini response body is not an object: {type(payload).__name__}.")
    candidates = payload.get("candidates") or []
    if not isinstance(candidates, list) or not candidates:
        raise ValueError("Gemini response contained no candidates.")
    candidate = candidates[0]
    if not isinstance(candidate, dict):
        raise ValueError(f"Gemini candidate is not an object: {type(candidate).__name__}.")
    return candidate


def _extract_text(candidate: dict[str, Any]) -> str:
    """Join the text parts of a candidate."""
    parts = _mapping(candidate.get("content")).get("parts") or []
    if not isinstance(parts, list):
        return ""
    texts = [str(part.get("text", "")) for part in parts if isinstance(part, dict)]
    return "".join(texts)


def _extract_sources(candidate: dict[str, Any]) -> tuple[Citation, ...] | None:
    """Collect ``{title, uri}`` pairs from grounding chunks, dropping entries without a URI."""
    chunks = _mapping(candidate.get("groundingMetadata")).get("groundingChunks") or []
    if not isinstance(chunks, list):
        return None
    sources = []
    for chunk in chunks:
        web = _mapping(_mapping(chunk).get("web"))
        uri = web.get("uri") or ""
        if not uri:
            continue
        sources.append(Citation(title=web.get("title") or "Untitled", uri=uri))
    return tuple(sources) or None


@define(slots=True)
class GeminiClient:
    """Thin HTTP wrapper around the Gemini REST API."""

    api_key: str = field(repr=False)
    model: str = DEFAULT_MODEL
    base_url: str = BASE_URL
    timeout: float = 60.0
    temperature: float = 0.5
    session: requests.Session = field(factory=requests.Session)
    headers: dict[str, str] = field(
        factory=lambda: {
            "Content-Type": "application/json",
            "Accept": "application/json",
        },
    )

    @property
    def endpoint(self) -> str:
        """Return the ``generateContent`` URL for the configured model."""
        return f"{self.base_url}{self.model}:generateContent"

    def generate(self, prompt: str, *, system_instruction: str | None = None) -> ReportResult:
        """Send ``prompt`` to the model and return its text and citations."""
        body: dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": self.temperature},
        }
        if system_instruction:
            body["systemInstruction"] = {"parts": [{"text": system_instruction}]}

        log = logger.bind(model=self.model)
        log.debug("http.generate_start", timeout=self.timeout, prompt_chars=len(prompt))
        try:
            response = self.session.post(
                self.endpoint,
                params={"key": self.api_key},
                json=body,
                headers=self.headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            log.error("http.generate_failed", status=status, exc_info=True)
            raise
        payload = response.json()
        candidate = _first_candidate(payload)
        result = ReportResult(text=_extract_text(candidate), sources=_extract_sources(candidate))
        log.debug(
            "http.generate_success",
            chars=len(result.text),
            sources=len(result.sources or ()),
        )
        return result

    def close(self) -> None:
        """Release the underlying HTTP session."""
        self.session.close()
        logger.debug("http.session_closed")


__all__ = ["BASE_URL", "Citation", "DEFAULT_MODEL", "GeminiClient", "ReportResult"]
