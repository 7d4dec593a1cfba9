"""Tests for the credential entity."""

from datetime import datetime, timedelta

import pytest

from src.core.entities.credential import Credential

NOW = datetime(2026, 1, 1, 12, 0, 0)


def make_credential(expires_in: timedelta) -> Credential:
    return Credential(access_token="a", refresh_token="r", expires_at=NOW + expires_in)


class TestCredential:
    def test_not_expired(self):
        assert not make_credential(timedelta(hours=1)).is_expired(NOW)

    def test_expired(self):
        assert make_credential(timedelta(seconds=-1)).is_expired(NOW)

    def test_expiry_instant_counts_as_expired(self):
        assert make_credential(timedelta(0)).is_expired(NOW)

    def test_margin(self):
        credential = make_credential(timedelta(seconds=200))
        assert credential.is_expired(NOW, margin_seconds=300)
        assert not credential.is_expired(NOW, margin_seconds=100)

    def test_hours_until_expiry(self):
        assert make_credential(timedelta(hours=3)).hours_until_expiry(NOW) == pytest.approx(3.0)
        assert make_credential(timedelta(hours=-3)).hours_until_expiry(NOW) == 0.0
