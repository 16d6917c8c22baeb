"""Tests for folio.core.errors module."""

import pytest

from folio.core.errors import (
    AuthFailure,
    BootstrapUnavailable,
    FolioError,
    NotFound,
    Outcome,
    PermissionDenied,
    StorageUnavailable,
)


@pytest.mark.parametrize(
    "error_cls, reason",
    [
        (NotFound, "not_found"),
        (BootstrapUnavailable, "bootstrap_unavailable"),
        (StorageUnavailable, "storage_unavailable"),
        (AuthFailure, "auth_failure"),
        (PermissionDenied, "permission_denied"),
    ],
)
def test_reasons(error_cls, reason):
    assert issubclass(error_cls, FolioError)
    assert error_cls.reason == reason


class TestOutcome:
    def test_success(self):
        outcome = Outcome.success(42, message="done")

        assert outcome
        assert outcome.reason == "ok"
        assert outcome.value == 42

    def test_failure(self):
        outcome = Outcome.failure(StorageUnavailable("disk full"))

        assert not outcome
        assert outcome.reason == "storage_unavailable"
        assert outcome.message == "disk full"
        assert outcome.value is None
