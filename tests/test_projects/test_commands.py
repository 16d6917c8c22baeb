"""CLI integration tests for the projects command group."""

import json

import pytest
from click.testing import CliRunner

from folio.projects.commands import parse_record_id, projects


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def obj():
    return type("Ctx", (), {"dry_run": False})()


@pytest.fixture
def logged_in(site_with_projects):
    """Site with the sample projects and an active admin session."""
    session = site_with_projects / ".folio" / "session.json"
    session.write_text(json.dumps({"user": "admin"}))
    return site_with_projects


def _read_db(root):
    return json.loads((root / ".folio" / "projects_db.json").read_text())["projects"]


def test_parse_record_id():
    assert parse_record_id("12") == 12
    assert parse_record_id("a1b2") == "a1b2"


# ---------------------------------------------------------------------------
# Read-only commands
# ---------------------------------------------------------------------------


class TestList:
    def test_list_json(self, runner, site_with_projects):
        result = runner.invoke(projects, ["list", "--json"])

        assert result.exit_code == 0
        assert [p["id"] for p in json.loads(result.output)] == [1, 2, 5]

    def test_list_json_filtered(self, runner, site_with_projects):
        result = runner.invoke(projects, ["list", "--json", "-f", "web"])

        assert [p["title"] for p in json.loads(result.output)] == ["Weather Board", "Shop Front"]

    def test_list_table(self, runner, site_with_projects):
        result = runner.invoke(projects, ["list", "--filter", "mobile"])

        assert result.exit_code == 0
        assert "Step Counter" in result.output
        assert "Weather Board" not in result.output

    def test_list_empty(self, runner, mock_site_root):
        result = runner.invoke(projects, ["list"])

        assert result.exit_code == 0
        assert "No projects to display." in result.output

    def test_admin_column_only_when_logged_in(self, runner, logged_in):
        result = runner.invoke(projects, ["list", "-f", "mobile"])

        assert "Admin" in result.output
        assert "delete 2" in result.output

    def test_no_admin_column_when_logged_out(self, runner, site_with_projects):
        result = runner.invoke(projects, ["list", "-f", "mobile"])

        assert "Admin" not in result.output


class TestShow:
    def test_show(self, runner, site_with_projects):
        result = runner.invoke(projects, ["show", "2"])

        assert result.exit_code == 0
        assert "Step Counter" in result.output

    def test_show_missing(self, runner, site_with_projects):
        result = runner.invoke(projects, ["show", "99"])

        assert result.exit_code == 1
        assert "not_found" in result.output


class TestQueries:
    def test_categories(self, runner, site_with_projects):
        result = runner.invoke(projects, ["categories"])

        assert result.output.split() == ["all", "clone", "mobile", "web"]

    def test_stats(self, runner, site_with_projects):
        result = runner.invoke(projects, ["stats"])

        assert result.exit_code == 0
        assert "Total projects:" in result.output
        assert "web (2)" in result.output

    def test_fields(self, runner):
        result = runner.invoke(projects, ["fields"])

        assert "techStack" in result.output

    def test_seed(self, runner, mock_site_root, seed_file):
        (mock_site_root / ".folio" / "config.yaml").write_text("projects:\n  seed: projects.json\n")

        result = runner.invoke(projects, ["seed"])

        assert result.exit_code == 0
        assert "3 projects loaded" in result.output
        assert len(_read_db(mock_site_root)) == 3

    def test_seed_unavailable_warns(self, runner, mock_site_root):
        (mock_site_root / ".folio" / "config.yaml").write_text("projects:\n  seed: missing.json\n")

        result = runner.invoke(projects, ["seed"])

        assert "WARNING" in result.output
        assert "0 projects loaded" in result.output


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


class TestAdd:
    def test_requires_login(self, runner, site_with_projects, obj):
        result = runner.invoke(projects, ["add", "--title", "Nope"], obj=obj)

        assert result.exit_code == 1
        assert "permission_denied" in result.output
        assert len(_read_db(site_with_projects)) == 3

    def test_add(self, runner, logged_in, obj):
        result = runner.invoke(
            projects,
            ["add", "--title", "Blog", "--category", "web, writing", "--tech", "Hugo", "--site", "https://me.dev/blog"],
            obj=obj,
        )

        assert result.exit_code == 0, result.output
        added = _read_db(logged_in)[-1]
        assert added["id"] == 6
        assert added["category"] == ["web", "writing"]
        assert added["links"] == {"github": "", "site": "https://me.dev/blog"}

    def test_dry_run(self, runner, logged_in):
        obj = type("Ctx", (), {"dry_run": True})()

        result = runner.invoke(projects, ["add", "--title", "Blog"], obj=obj)

        assert "Would add" in result.output
        assert len(_read_db(logged_in)) == 3


class TestSet:
    def test_set_title(self, runner, logged_in, obj):
        result = runner.invoke(projects, ["set", "1", "title", "Storm Board"], obj=obj)

        assert result.exit_code == 0, result.output
        assert _read_db(logged_in)[0]["title"] == "Storm Board"

    def test_set_link(self, runner, logged_in, obj):
        runner.invoke(projects, ["set", "2", "links.site", "https://steps.app"], obj=obj)

        assert _read_db(logged_in)[1]["links"] == {"github": "https://github.com/me/steps", "site": "https://steps.app"}

    def test_set_missing_id(self, runner, logged_in, obj):
        result = runner.invoke(projects, ["set", "42", "title", "Ghost"], obj=obj)

        assert result.exit_code == 0
        assert "nothing changed" in result.output

    def test_set_unknown_field(self, runner, logged_in, obj):
        result = runner.invoke(projects, ["set", "1", "stars", "5"], obj=obj)

        assert result.exit_code == 1
        assert "Unknown field" in result.output

    def test_set_requires_login(self, runner, site_with_projects, obj):
        result = runner.invoke(projects, ["set", "1", "title", "x"], obj=obj)

        assert result.exit_code == 1
        assert _read_db(site_with_projects)[0]["title"] == "Weather Board"

    def test_set_dry_run(self, runner, logged_in):
        obj = type("Ctx", (), {"dry_run": True})()

        result = runner.invoke(projects, ["set", "1", "title", "x"], obj=obj)

        assert "Dry run" in result.output
        assert _read_db(logged_in)[0]["title"] == "Weather Board"


class TestDelete:
    def test_delete(self, runner, logged_in, obj):
        result = runner.invoke(projects, ["delete", "5", "-y"], obj=obj)

        assert result.exit_code == 0
        assert [p["id"] for p in _read_db(logged_in)] == [1, 2]

    def test_delete_cancelled(self, runner, logged_in, obj):
        result = runner.invoke(projects, ["delete", "5"], obj=obj, input="n\n")

        assert "Cancelled" in result.output
        assert len(_read_db(logged_in)) == 3

    def test_clear(self, runner, logged_in, obj):
        result = runner.invoke(projects, ["clear", "--yes"], obj=obj)

        assert result.exit_code == 0
        assert _read_db(logged_in) == []

    def test_clear_backs_up_database(self, runner, logged_in, obj):
        runner.invoke(projects, ["clear", "--yes"], obj=obj)

        backups = list((logged_in / ".folio" / "backups" / "projects").glob("projects_db_*.json"))
        assert len(backups) == 1
