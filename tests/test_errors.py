"""Tests for the exception hierarchy and its HTTP mapping."""

import pytest

from errors import BillingError, NotFoundError, PersistenceError, ValidationError


class TestExceptionHierarchy:
    def test_billing_error_is_exception(self) -> None:
        assert isinstance(BillingError("test"), Exception)

    @pytest.mark.parametrize("cls", [NotFoundError, ValidationError, PersistenceError])
    def test_subclasses(self, cls) -> None:
        assert isinstance(cls("test"), BillingError)

    def test_exception_message(self) -> None:
        assert str(NotFoundError("Customer C1 tidak ditemukan.")) == "Customer C1 tidak ditemukan."


class TestHttpMapping:
    def test_persistence_error_hides_detail(self, app, client, repo, monkeypatch) -> None:
        def boom():
            raise PersistenceError("password authentication failed for user billing")

        monkeypatch.setattr(repo, "list_customers", boom)
        resp = client.get("/api/customers")
        assert resp.status_code == 500
        assert "password" not in resp.get_json()["error"]
