"""Shared test fixtures for folio."""

import json

import pytest

SAMPLE_PROJECTS = [
    {
        "id": 1,
        "title": "Weather Board",
        "headline": "Forecast dashboard",
        "overview": "Shows a five-day forecast.",
        "imageSrc": "images/weather.png",
        "techStack": ["HTML", "CSS", "JavaScript"],
        "category": ["web"],
        "links": {"github": "https://github.com/me/weather", "site": "https://me.dev/weather"},
    },
    {
        "id": 2,
        "title": "Step Counter",
        "headline": "Pedometer app",
        "overview": "Counts steps.",
        "imageSrc": "images/steps.png",
        "techStack": ["React Native"],
        "category": ["mobile"],
        "links": {"github": "https://github.com/me/steps", "site": ""},
    },
    {
        "id": 5,
        "title": "Shop Front",
        "headline": "Store landing page",
        "overview": "Responsive product page.",
        "imageSrc": "images/shop.png",
        "techStack": ["Tailwind CSS"],
        "category": ["web", "clone"],
        "links": {"github": "https://github.com/me/shop", "site": "https://me.dev/shop"},
    },
]


@pytest.fixture
def sample_projects():
    """A fresh copy of the sample project documents."""
    return json.loads(json.dumps(SAMPLE_PROJECTS))


@pytest.fixture
def seed_file(tmp_path, sample_projects):
    """Write the sample projects as a site projects.json seed file."""
    file_path = tmp_path / "projects.json"
    file_path.write_text(json.dumps(sample_projects, indent=2))
    return file_path


@pytest.fixture
def sample_projects_db(tmp_path, sample_projects):
    """Create a projects_db.json holding the sample projects."""
    data = {
        "_comment": "Test projects",
        "_schema_version": "1.0",
        "projects": sample_projects,
    }
    file_path = tmp_path / "projects_db.json"
    file_path.write_text(json.dumps(data, indent=2))
    return file_path


@pytest.fixture
def mock_site_root(tmp_path, monkeypatch):
    """Create a mock site with a .folio/ directory."""
    data_dir = tmp_path / ".folio"
    data_dir.mkdir()
    (data_dir / "backups" / "projects").mkdir(parents=True)

    from folio.core import config

    config.get_site_root.cache_clear()
    monkeypatch.setattr(config, "get_site_root", lambda: tmp_path)

    return tmp_path


@pytest.fixture
def site_with_projects(mock_site_root, sample_projects):
    """A mock site whose projects_db.json holds the sample projects."""
    db_path = mock_site_root / ".folio" / "projects_db.json"
    db_path.write_text(json.dumps({"_schema_version": "1.0", "projects": sample_projects}, indent=2))
    return mock_site_root


class RecordingRenderer:
    """Renderer that remembers every frame it was given."""

    def __init__(self):
        self.frames = []

    def render(self, visible, show_admin_controls):
        self.frames.append(([r.id for r in visible], show_admin_controls))

    @property
    def last(self):
        return self.frames[-1]


@pytest.fixture
def renderer():
    return RecordingRenderer()


@pytest.fixture
def make_renderer():
    """Factory for extra renderers when a test runs several apps."""
    return RecordingRenderer
