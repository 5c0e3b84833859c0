"""Tests for principal services."""

import pytest

from django_bookings.exceptions import DuplicateName, InvalidInput, InvalidPrincipal
from django_bookings.services import (
    authenticate_principal,
    change_password,
    create_principal,
    resolve_principal,
)


@pytest.mark.django_db
class TestResolvePrincipal:
    """Tests for resolve_principal()."""

    def test_resolves_active_principal(self, principal):
        assert resolve_principal(principal.pk) == principal

    def test_accepts_string_id(self, principal):
        assert resolve_principal(str(principal.pk)) == principal

    @pytest.mark.parametrize("value", [None, 999, "abc", True])
    def test_invalid_ids_rejected(self, principal, value):
        with pytest.raises(InvalidPrincipal):
            resolve_principal(value)

    def test_inactive_principal_rejected(self, principal):
        principal.is_active = False
        principal.save()

        with pytest.raises(InvalidPrincipal):
            resolve_principal(principal.pk)


@pytest.mark.django_db
class TestAuthenticatePrincipal:
    """Tests for authenticate_principal()."""

    def test_valid_credentials(self, principal):
        assert authenticate_principal("admin", "admin-pass-123") == principal

    def test_wrong_password(self, principal):
        with pytest.raises(InvalidPrincipal):
            authenticate_principal("admin", "nope")

    def test_missing_credentials(self, db):
        with pytest.raises(InvalidPrincipal):
            authenticate_principal("", "")


@pytest.mark.django_db
class TestCreatePrincipal:
    """Tests for create_principal() and change_password()."""

    def test_creates_principal_with_hashed_password(self):
        created = create_principal("desk", "desk-pass-1", full_name="Front Desk", email="desk@example.com")

        assert created.first_name == "Front"
        assert created.last_name == "Desk"
        assert created.password != "desk-pass-1"
        assert created.check_password("desk-pass-1")

    def test_duplicate_username_rejected(self, principal):
        with pytest.raises(DuplicateName):
            create_principal("admin", "another-pass")

    def test_duplicate_email_rejected(self, principal):
        with pytest.raises(DuplicateName):
            create_principal("other", "another-pass", email="ADMIN@example.com")

    def test_blank_username_rejected(self, db):
        with pytest.raises(InvalidInput):
            create_principal("  ", "pass")

    def test_change_password(self, principal):
        change_password(principal.pk, "new-pass-456")

        assert authenticate_principal("admin", "new-pass-456") == principal
        with pytest.raises(InvalidPrincipal):
            authenticate_principal("admin", "admin-pass-123")

    def test_change_password_requires_value(self, principal):
        with pytest.raises(InvalidInput):
            change_password(principal.pk, "")

    def test_change_password_unknown_principal(self, db):
        with pytest.raises(InvalidPrincipal):
            change_password(999, "whatever")
