"""Records returned by the analysis API."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Site:
    """A site owned by the current user."""

    id: str
    domain: str


@dataclass(frozen=True)
class QuickWin:
    title: str
    impact: str = ""


@dataclass(frozen=True)
class IssueCounts:
    critical: int = 0
    warnings: int = 0

    @property
    def total(self) -> int:
        return self.critical + self.warnings


@dataclass(frozen=True)
class AnalysisReport:
    """Result of analyzing a site."""

    scores: dict[str, int] = field(default_factory=dict)  # dimension -> 0..100
    issues: IssueCounts | None = None
    quick_wins: tuple[QuickWin, ...] = ()
    site_id: str | None = None


@dataclass(frozen=True)
class Idea:
    """A generated content idea."""

    title: str
    keyword: str | None = None
