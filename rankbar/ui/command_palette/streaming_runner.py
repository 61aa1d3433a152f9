"""
Streaming operation runner for the command palette.

Runs one long operation at a time (site analysis or idea generation) and
appends typed results to an append-only log as they become available.
Remote failures never escape ``run()``: they end the log with a single
``error`` result.

Each run is tagged with a generation number. Starting a new run or calling
``reset()`` bumps it, and anything a superseded run tries to append
afterwards is dropped.
"""

import asyncio
import logging
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Optional, Protocol

from rankbar.config.constants import (
    DEFAULT_IDEA_COUNT,
    DEFAULT_SCORE_SUBTITLES,
    GOOD_SCORE_THRESHOLD,
    MAX_IDEAS,
    MAX_QUICK_WINS,
    PROGRESS_PAUSE_SECONDS,
    SCORE_DIMENSIONS,
)
from rankbar.exceptions import RankbarError
from rankbar.services.site_registry import SiteRegistry
from rankbar.services.types import AnalysisReport, Idea

from .input_classifier import InputMode, normalize_url

logger = logging.getLogger(__name__)


class ResultKind(Enum):
    """Kinds of streamed results. Closed set."""

    PROGRESS = "progress"
    SCORE = "score"
    ISSUE = "issue"
    CONTENT = "content"
    SUCCESS = "success"
    ERROR = "error"

    @property
    def activatable(self) -> bool:
        return self in (ResultKind.CONTENT, ResultKind.SUCCESS)

    @property
    def terminal(self) -> bool:
        return self in (ResultKind.SUCCESS, ResultKind.ERROR)


class RunStatus(Enum):
    IDLE = "idle"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class StreamingResult:
    """One entry of the result log."""

    kind: ResultKind
    message: str
    payload: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    created_at: float = 0.0  # Ordering only

    @property
    def activatable(self) -> bool:
        return self.kind.activatable

    @property
    def subtitle(self) -> Optional[str]:
        value = self.payload.get("subtitle")
        return str(value) if value else None


class AnalysisApi(Protocol):
    async def analyze_site(self, identifier: str) -> AnalysisReport: ...

    async def generate_ideas(self, topic: str, count: int = ...) -> list[Idea]: ...


def _score_result_text(dimension: str, score: int) -> tuple[str, str]:
    label, good, needs_work = SCORE_DIMENSIONS.get(
        dimension, (dimension.upper(), *DEFAULT_SCORE_SUBTITLES)
    )
    subtitle = good if score >= GOOD_SCORE_THRESHOLD else needs_work
    return f"{label} Score: {score}/100", subtitle


class OperationRunner:
    """Executes palette runs and owns the result log."""

    def __init__(
        self,
        api: AnalysisApi,
        registry: Optional[SiteRegistry] = None,
        on_result: Optional[Callable[[StreamingResult], None]] = None,
        on_running_change: Optional[Callable[[bool], None]] = None,
        progress_pause: float = PROGRESS_PAUSE_SECONDS,
        idea_count: int = DEFAULT_IDEA_COUNT,
    ):
        self.api = api
        self.registry = registry
        self.on_result = on_result
        self.on_running_change = on_running_change
        self.progress_pause = progress_pause
        self.idea_count = idea_count
        self._log: list[StreamingResult] = []
        self._is_running = False
        self._status = RunStatus.IDLE
        self._generation = 0
        self._last_created_at = 0.0

    @property
    def log(self) -> tuple[StreamingResult, ...]:
        return tuple(self._log)

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def status(self) -> RunStatus:
        return self._status

    @property
    def generation(self) -> int:
        return self._generation

    def reset(self) -> None:
        """Forget the current run. A late response from it will be ignored."""
        self._generation += 1
        self._log = []
        self._status = RunStatus.IDLE
        self._set_running(False)

    def _set_running(self, running: bool) -> None:
        if running == self._is_running:
            return
        self._is_running = running
        if self.on_running_change:
            self.on_running_change(running)

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _timestamp(self) -> float:
        now = time.monotonic()
        if now <= self._last_created_at:
            now = self._last_created_at + 1e-6
        self._last_created_at = now
        return now

    def _emit(self, generation: int, kind: ResultKind, message: str, **payload: Any) -> bool:
        """Append a result if ``generation`` is still current."""
        if not self._is_current(generation):
            logger.debug(f"Dropping {kind.value} result from stale run {generation}")
            return False
        result = StreamingResult(
            kind=kind,
            message=message,
            payload=MappingProxyType({k: v for k, v in payload.items() if v is not None}),
            created_at=self._timestamp(),
        )
        self._log.append(result)
        if kind is ResultKind.SUCCESS:
            self._status = RunStatus.SUCCEEDED
        elif kind is ResultKind.ERROR:
            self._status = RunStatus.FAILED
        if self.on_result:
            self.on_result(result)
        return True

    async def run(self, mode: InputMode, text: str) -> None:
        """Start a run for ``text``, replacing any previous log.

        Returns once the run has finished. Never raises for remote failures.
        """
        if mode is InputMode.SEARCH:
            raise ValueError("Search input does not start a run")

        self._generation += 1
        generation = self._generation
        self._log = []
        self._status = RunStatus.RUNNING
        self._set_running(True)
        logger.info(f"Run {generation} started ({mode.value}): {text.strip()[:80]}")

        fallback = (
            "Analysis failed. Please try again." if mode is InputMode.URL
            else "Failed to generate ideas"
        )
        try:
            if mode is InputMode.URL:
                await self._analyze(generation, text)
            else:
                await self._generate_ideas(generation, text)
        except RankbarError as e:
            logger.warning(f"Run {generation} failed: {e}")
            self._emit(generation, ResultKind.ERROR, e.message or fallback)
        except Exception as e:
            logger.exception(f"Run {generation} failed unexpectedly")
            self._emit(generation, ResultKind.ERROR, str(e) or fallback)
        finally:
            if self._is_current(generation):
                self._set_running(False)
                logger.info(f"Run {generation} finished: {self._status.value}")

    async def _analyze(self, generation: int, text: str) -> None:
        _, domain = normalize_url(text)

        self._emit(generation, ResultKind.PROGRESS, f"Connecting to {domain}...")
        if self.progress_pause:
            await asyncio.sleep(self.progress_pause)
        if not self._emit(
            generation, ResultKind.PROGRESS, "Crawling pages and analyzing structure..."
        ):
            return

        report = await self.api.analyze_site(domain)
        if not self._is_current(generation):
            logger.debug(f"Discarding analysis of {domain} from stale run {generation}")
            return

        for dimension, score in report.scores.items():
            message, subtitle = _score_result_text(dimension, score)
            self._emit(
                generation, ResultKind.SCORE, message,
                subtitle=subtitle, dimension=dimension, score=score,
            )

        if report.issues and report.issues.total > 0:
            self._emit(
                generation,
                ResultKind.ISSUE,
                f"Found {report.issues.critical} critical issues & "
                f"{report.issues.warnings} warnings",
                subtitle="View all issues once the analysis completes",
                critical=report.issues.critical,
                warnings=report.issues.warnings,
            )

        for win in report.quick_wins[:MAX_QUICK_WINS]:
            self._emit(
                generation, ResultKind.CONTENT, win.title,
                subtitle=f"Impact: {win.impact}" if win.impact else None,
            )

        self._emit(
            generation,
            ResultKind.SUCCESS,
            f"Analysis complete for {domain}",
            subtitle="Select to view the full report",
            site_id=report.site_id,
        )
        await self._sync_sites(generation, report.site_id)

    async def _sync_sites(self, generation: int, site_id: Optional[str]) -> None:
        """Reload the site list so the new site shows up, then select it."""
        if self.registry is None:
            return
        try:
            await self.registry.refresh()
        except Exception as e:
            logger.warning(f"Could not refresh sites after analysis: {e}")
        if site_id and self._is_current(generation):
            self.registry.select(site_id)

    async def _generate_ideas(self, generation: int, text: str) -> None:
        topic = text.strip()
        self._emit(generation, ResultKind.PROGRESS, f'Researching "{topic}"...')

        ideas = await self.api.generate_ideas(topic, count=self.idea_count)
        if not self._is_current(generation):
            logger.debug(f"Discarding ideas for {topic!r} from stale run {generation}")
            return

        for idea in ideas[:MAX_IDEAS]:
            self._emit(
                generation,
                ResultKind.CONTENT,
                idea.title,
                subtitle="Select to generate the full article",
                keyword=idea.keyword or topic,
            )

        self._emit(
            generation,
            ResultKind.SUCCESS,
            f"{len(ideas)} content ideas generated",
            subtitle="Select any idea to create an article",
        )
