"""
Pytest Configuration and Fixtures.
===================================

Shared fixtures for all test modules:
- Chapter page HTML fixtures
- Fake HTTP responses and sessions
- Scraping configuration pointing at test hosts
- Temporary directories
"""

import os
import tempfile
from pathlib import Path
from typing import Generator, Optional
from unittest.mock import MagicMock

import pytest

# Keep developer overrides out of the test run
for _var in ("SCRAPE_VOL1_URL", "SCRAPE_VOL2_URL", "SCRAPE_VOL3_URL", "LOG_LEVEL"):
    os.environ.pop(_var, None)


# ─────────────────────────────────────────────────────────────────────────────
# Path Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


# ─────────────────────────────────────────────────────────────────────────────
# HTML Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def chapter_html() -> str:
    """A chapter introduction page with both equation and formula-block markup."""
    return """
    <!DOCTYPE html>
    <html>
    <head><title>Units and Measurement</title></head>
    <body>
        <h1>Units and Measurement</h1>
        <p>Measurements are the foundation of physics. This chapter introduces
        the SI system of units.</p>
        <div class="section">
            Newton's second law: force equals mass times acceleration.
            <div data-type="equation" data-math="F = m a"></div>
        </div>
        <div class="section">
            <span class="equation"><span data-math="v = d / t"></span></span>
        </div>
        <div class="section">
            <math>E=mc^2</math>
        </div>
        <div class="section">
            <span class="os-equation">x</span>
        </div>
        <div class="formula">
            <span class="title">Heat transfer</span>
            Q = mcΔT
            <p>Heat needed to change the temperature of a mass m.</p>
        </div>
    </body>
    </html>
    """


@pytest.fixture
def empty_html() -> str:
    """A page with no title, no paragraphs and no formulas."""
    return "<html><body><div>Nothing here</div></body></html>"


# ─────────────────────────────────────────────────────────────────────────────
# HTTP Fixtures
# ─────────────────────────────────────────────────────────────────────────────


def make_response(status_code: int = 200, text: str = "<html></html>") -> MagicMock:
    """Build a fake requests.Response."""
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    return response


@pytest.fixture
def fake_session() -> MagicMock:
    """A fake requests.Session returning an empty 200 page."""
    session = MagicMock()
    session.headers = {}
    session.get.return_value = make_response()
    return session


class SleepRecorder:
    """Stand-in for time.sleep that records requested delays."""

    def __init__(self):
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()


class FakeFetcher:
    """Fetcher double serving canned HTML per URL and recording visits."""

    def __init__(self, pages: Optional[dict] = None, default_html: str = "<html></html>"):
        self.pages = pages or {}
        self.default_html = default_html
        self.visited: list[str] = []

    def fetch(self, url: str) -> str:
        self.visited.append(url)
        page = self.pages.get(url, self.default_html)
        if isinstance(page, Exception):
            raise page
        return page

    def close(self) -> None:
        pass


# ─────────────────────────────────────────────────────────────────────────────
# Configuration Fixtures
# ─────────────────────────────────────────────────────────────────────────────


@pytest.fixture
def scraping_config():
    """Scraping config pointing at test hosts, with the default chapter rules."""
    from openstax_ingest.shared.config import ScrapingConfig, VolumeConfig

    return ScrapingConfig(
        rate_limit=1.0,
        volumes=[
            VolumeConfig(id="VOL1", base_url="https://books.test/vol1/pages/", chapters="all"),
            VolumeConfig(id="VOL2", base_url="https://books.test/vol2/pages/", chapters=[1, 2, 3, 4]),
            VolumeConfig(id="VOL3", base_url="https://books.test/vol3/pages/", chapters=[1, 2, 3, 4]),
        ],
    )


@pytest.fixture(autouse=True)
def reset_settings():
    """Clear the cached settings singleton between tests."""
    from openstax_ingest.shared.config import get_settings

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )


@pytest.fixture
def fetcher_factory():
    """Factory for FakeFetcher instances."""
    return FakeFetcher


@pytest.fixture
def response_factory():
    """Factory for fake HTTP responses."""
    return make_response
