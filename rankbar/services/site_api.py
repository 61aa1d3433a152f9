"""
Async client for the site analysis API.

Wraps the three remote operations the command palette consumes:
site analysis, content idea generation and the user's site list. Every
failure (network, status, payload shape) is raised as an ``ApiError``
subclass so callers only need one except clause.
"""

import logging
from typing import Any, Optional

import httpx

from ..config.constants import (
    ANALYZE_ENDPOINT,
    DEFAULT_IDEA_COUNT,
    GENERATE_ENDPOINT,
    SITES_ENDPOINT,
)
from ..config.settings import get_api_timeout, get_api_token, get_api_url
from ..exceptions import (
    ApiConnectionError,
    ApiResponseError,
    ApiTimeoutError,
)
from .types import AnalysisReport, Idea, IssueCounts, QuickWin, Site

logger = logging.getLogger(__name__)

# Legacy flat score fields -> scoring dimension
_LEGACY_SCORE_FIELDS = {"seoScore": "seo", "aioScore": "geo", "geoScore": "geo"}


class SiteApiClient:
    """HTTP client for the analysis backend."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or get_api_url()).rstrip("/")
        self.token = token if token is not None else get_api_token()
        self.timeout = timeout if timeout is not None else get_api_timeout()
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def _request(
        self,
        method: str,
        endpoint: str,
        failure_message: str,
        json: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Send a request and return the decoded ``data`` field of the body."""
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._headers(),
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(method, endpoint, json=json)
        except httpx.TimeoutException as e:
            raise ApiTimeoutError(
                f"{failure_message}: request timed out", timeout_seconds=self.timeout
            ) from e
        except httpx.HTTPError as e:
            raise ApiConnectionError(
                f"{failure_message}: could not reach {self.base_url}", endpoint=endpoint
            ) from e

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_error:
            message = failure_message
            if isinstance(body, dict) and body.get("error"):
                message = str(body["error"])
            logger.debug(f"{method} {endpoint} -> {response.status_code}: {message}")
            raise ApiResponseError(message, status_code=response.status_code)

        if not isinstance(body, (dict, list)):
            raise ApiResponseError(
                f"{failure_message}: response was not JSON", status_code=response.status_code
            )
        if isinstance(body, dict) and body.get("success") is False:
            raise ApiResponseError(
                str(body.get("error") or failure_message), status_code=response.status_code
            )

        data = body.get("data") if isinstance(body, dict) else body
        if data is None:
            raise ApiResponseError(
                f"{failure_message}: response had no data", status_code=response.status_code
            )
        return data

    async def analyze_site(self, identifier: str) -> AnalysisReport:
        """Crawl and score a site by domain or URL."""
        data = await self._request(
            "POST", ANALYZE_ENDPOINT, "Analysis failed", json={"url": identifier}
        )
        if not isinstance(data, dict):
            raise ApiResponseError("Analysis failed: unexpected response shape")
        return parse_analysis(data)

    async def generate_ideas(self, topic: str, count: int = DEFAULT_IDEA_COUNT) -> list[Idea]:
        """Ask the generator for content ideas about ``topic``."""
        data = await self._request(
            "POST",
            GENERATE_ENDPOINT,
            "Generation failed",
            json={"type": "ideas", "topic": topic, "options": {"count": count}},
        )
        return parse_ideas(data)

    async def list_sites(self) -> list[Site]:
        """Fetch the current user's sites."""
        data = await self._request("GET", SITES_ENDPOINT, "Could not load sites")
        if isinstance(data, dict):
            data = data.get("sites", [])
        if not isinstance(data, list):
            raise ApiResponseError("Could not load sites: unexpected response shape")
        return [site for site in (parse_site(raw) for raw in data) if site is not None]


def _as_int(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def parse_analysis(data: dict[str, Any]) -> AnalysisReport:
    """Build an ``AnalysisReport`` from an analysis payload.

    Scores come either as a ``scores`` mapping or as flat legacy fields
    (``seoScore``, ``aioScore``).
    """
    scores: dict[str, int] = {}
    raw_scores = data.get("scores")
    if isinstance(raw_scores, dict):
        for name, value in raw_scores.items():
            if value is not None:
                scores[str(name).lower()] = _as_int(value)
    for field_name, dimension in _LEGACY_SCORE_FIELDS.items():
        if data.get(field_name) is not None and dimension not in scores:
            scores[dimension] = _as_int(data[field_name])

    issues = None
    raw_issues = data.get("issues")
    if isinstance(raw_issues, dict):
        issues = IssueCounts(
            critical=_as_int(raw_issues.get("critical")),
            warnings=_as_int(raw_issues.get("warnings")),
        )

    quick_wins = tuple(
        QuickWin(title=str(win["title"]), impact=str(win.get("impact") or ""))
        for win in data.get("quickWins") or []
        if isinstance(win, dict) and win.get("title")
    )

    site_id = data.get("siteId")
    return AnalysisReport(
        scores=scores,
        issues=issues,
        quick_wins=quick_wins,
        site_id=str(site_id) if site_id is not None else None,
    )


def parse_ideas(data: Any) -> list[Idea]:
    """Accept ideas as a top-level array or nested under ``ideas``."""
    if isinstance(data, dict):
        data = data.get("ideas") or []
    if not isinstance(data, list):
        raise ApiResponseError("Generation failed: unexpected response shape")

    ideas = []
    for raw in data:
        if isinstance(raw, str):
            ideas.append(Idea(title=raw))
        elif isinstance(raw, dict) and raw.get("title"):
            keyword = raw.get("keyword")
            ideas.append(Idea(title=str(raw["title"]), keyword=str(keyword) if keyword else None))
    return ideas


def parse_site(raw: Any) -> Optional[Site]:
    if not isinstance(raw, dict) or raw.get("id") is None:
        return None
    domain = raw.get("domain") or raw.get("displayName") or raw.get("name") or str(raw["id"])
    return Site(id=str(raw["id"]), domain=str(domain))
