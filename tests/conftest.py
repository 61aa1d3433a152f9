"""Shared pytest fixtures for rankbar tests."""

import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from rankbar.services.site_registry import SiteRegistry
from rankbar.services.types import AnalysisReport, Idea, IssueCounts, QuickWin, Site
from rankbar.ui.command_palette.palette_presenter import PalettePresenter


@pytest.fixture(autouse=True)
def restore_package_logger():
    """Undo handlers installed by setup_logging during a test."""
    logger = logging.getLogger("rankbar")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


@pytest.fixture
def sample_report():
    """A successful analysis with two scores, issues and four quick wins."""
    return AnalysisReport(
        scores={"seo": 82, "geo": 45},
        issues=IssueCounts(critical=2, warnings=1),
        quick_wins=(
            QuickWin("Add meta descriptions", "high"),
            QuickWin("Compress hero images", "medium"),
            QuickWin("Fix broken links", "high"),
            QuickWin("Add FAQ schema", "low"),
        ),
        site_id="site-42",
    )


@pytest.fixture
def sample_ideas():
    return [
        Idea("Best CRM for startups", "best crm"),
        Idea("CRM migration checklist", "crm migration"),
        Idea("Why spreadsheets fail as a CRM"),
    ]


@pytest.fixture
def mock_api(sample_report, sample_ideas):
    """Async API double with canned responses."""
    api = MagicMock()
    api.analyze_site = AsyncMock(return_value=sample_report)
    api.generate_ideas = AsyncMock(return_value=sample_ideas)
    api.list_sites = AsyncMock(
        return_value=[Site("site-1", "example.org"), Site("site-42", "acme.com")]
    )
    return api


@pytest.fixture
def sites():
    return [Site("site-1", "example.org"), Site("site-2", "shop.example.net")]


@pytest.fixture
def registry(mock_api, sites):
    return SiteRegistry(source=mock_api, sites=sites)


@pytest.fixture
def navigate():
    return MagicMock()


@pytest.fixture
def presenter(mock_api, registry, navigate):
    """An open palette with no progress pauses."""
    palette = PalettePresenter(
        mock_api,
        registry=registry,
        navigate=navigate,
        progress_pause=0,
    )
    palette.open()
    return palette
