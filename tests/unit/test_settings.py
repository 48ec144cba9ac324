"""Unit tests for settings validation."""

import pytest
from pydantic import ValidationError

from partnerconnector.config.settings import Settings


def build(**overrides):
    """Build settings without reading .env."""
    values = {"database_url": "sqlite+aiosqlite:///:memory:"}
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestSettings:
    """Test Settings validators."""

    def test_defaults(self):
        settings = build(environment="test")

        assert settings.default_currency == "GBP"
        assert settings.transfer_reference_prefix == "PAY"

    def test_rejects_unknown_database_driver(self):
        with pytest.raises(ValidationError):
            build(database_url="mysql://user@localhost/db")

    def test_debug_forbidden_in_production(self):
        with pytest.raises(ValidationError):
            build(environment="production", debug=True)

    def test_log_level_normalized(self):
        assert build(environment="test", log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level(self):
        with pytest.raises(ValidationError):
            build(environment="test", log_level="verbose")

    def test_currency_normalized(self):
        assert build(environment="test", default_currency="eur").default_currency == "EUR"

    def test_invalid_currency(self):
        with pytest.raises(ValidationError):
            build(environment="test", default_currency="POUNDS")
