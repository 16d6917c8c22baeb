"""CLI tests for folio.auth.commands."""

import pytest
import yaml
from click.testing import CliRunner

from folio.auth.authenticator import pwd_context
from folio.auth.commands import auth


@pytest.fixture
def runner():
    return CliRunner()


def _session_path(root):
    return root / ".folio" / "session.json"


class TestLogin:
    def test_login_default_password(self, runner, mock_site_root):
        result = runner.invoke(auth, ["login", "--user", "admin", "--password", "1234"])

        assert result.exit_code == 0, result.output
        assert "Logged in as admin" in result.output
        assert _session_path(mock_site_root).exists()

    def test_wrong_password(self, runner, mock_site_root):
        result = runner.invoke(auth, ["login", "--user", "admin", "--password", "0000"])

        assert result.exit_code == 1
        assert "Login failed" in result.output
        assert not _session_path(mock_site_root).exists()

    def test_already_logged_in(self, runner, mock_site_root):
        runner.invoke(auth, ["login", "--user", "admin", "--password", "1234"])

        result = runner.invoke(auth, ["login", "--user", "admin", "--password", "1234"])

        assert "Already logged in" in result.output


class TestLogoutAndStatus:
    def test_status_logged_out(self, runner, mock_site_root):
        result = runner.invoke(auth, ["status"])

        assert "Logged out" in result.output

    def test_round_trip(self, runner, mock_site_root):
        runner.invoke(auth, ["login", "--user", "admin", "--password", "1234"])
        assert "Logged in as admin" in runner.invoke(auth, ["status"]).output

        result = runner.invoke(auth, ["logout"])

        assert "Logged out" in result.output
        assert not _session_path(mock_site_root).exists()

    def test_logout_when_logged_out(self, runner, mock_site_root):
        result = runner.invoke(auth, ["logout"])

        assert "Not logged in" in result.output

    def test_login_and_logout_leave_project_store_alone(self, runner, mock_site_root, seed_file):
        """Signing in or out must not load, seed or write the project store."""
        from folio.config.commands import set_config_value

        set_config_value("projects.seed", str(seed_file))
        db_path = mock_site_root / ".folio" / "projects_db.json"

        login = runner.invoke(auth, ["login", "--user", "admin", "--password", "1234"])
        assert login.exit_code == 0, login.output
        assert not db_path.exists()

        logout = runner.invoke(auth, ["logout"])
        assert "Logged out" in logout.output
        assert not db_path.exists()
        assert not _session_path(mock_site_root).exists()


class TestHashPassword:
    def test_prints_hash(self, runner, mock_site_root):
        result = runner.invoke(auth, ["hash-password", "--password", "hunter2"])

        assert result.exit_code == 0
        assert pwd_context.verify("hunter2", result.output.strip())

    def test_save_then_login(self, runner, mock_site_root):
        runner.invoke(auth, ["hash-password", "--password", "hunter2", "--save"])

        cfg = yaml.safe_load((mock_site_root / ".folio" / "config.yaml").read_text())
        assert cfg["auth"]["password_hash"].startswith("$pbkdf2-sha256$")

        assert runner.invoke(auth, ["login", "--user", "admin", "--password", "1234"]).exit_code == 1
        assert runner.invoke(auth, ["login", "--user", "admin", "--password", "hunter2"]).exit_code == 0

    def test_empty_password(self, runner, mock_site_root):
        result = runner.invoke(auth, ["hash-password", "--password", ""])

        assert result.exit_code == 1
