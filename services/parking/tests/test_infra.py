"""
Infrastructure tests: settings, Sentry scrubbing, engine URL, table schema.
"""

from unittest.mock import patch

import pytest
from pydantic import ValidationError

from services.parking.config import Settings
from services.parking.db.engine import _async_url
from services.parking.db.models import Base, ParkingLot, Slot
from services.parking.middleware import sentry as sentry_mw


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("PROXIMITY_RADIUS_KM", raising=False)
        s = Settings(_env_file=None)
        assert s.proximity_radius_km == 10.0
        assert s.cors_origins == ["*"]
        assert s.db_create_tables is False

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("PROXIMITY_RADIUS_KM", "2.5")
        monkeypatch.setenv("CORS_ORIGINS", '["https://app.example.com"]')
        s = Settings(_env_file=None)
        assert s.proximity_radius_km == 2.5
        assert s.cors_origins == ["https://app.example.com"]

    def test_radius_must_be_positive(self, monkeypatch):
        monkeypatch.setenv("PROXIMITY_RADIUS_KM", "0")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_unknown_environment_rejected(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "qa")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)


class TestSentry:
    def test_request_headers_filtered(self):
        event = {
            "request": {
                "headers": {"Authorization": "Bearer x", "X-Device-Key": "k", "Accept": "*/*"},
            }
        }
        out = sentry_mw._strip_sensitive_data(event, {})
        headers = out["request"]["headers"]
        assert headers["Authorization"] == "[FILTERED]"
        assert headers["X-Device-Key"] == "[FILTERED]"
        assert headers["Accept"] == "*/*"

    def test_breadcrumb_headers_filtered(self):
        event = {"breadcrumbs": {"values": [{"data": {"headers": {"cookie": "sid=1"}}}]}}
        out = sentry_mw._strip_sensitive_data(event, {})
        assert out["breadcrumbs"]["values"][0]["data"]["headers"]["cookie"] == "[FILTERED]"

    def test_no_dsn_skips_init(self):
        with patch.object(sentry_mw.settings, "sentry_dsn", ""), \
                patch.object(sentry_mw.sentry_sdk, "init") as init:
            assert sentry_mw.setup_sentry() is False
        init.assert_not_called()

    def test_dsn_initialises(self):
        with patch.object(sentry_mw.settings, "sentry_dsn", "https://key@sentry.example.com/1"), \
                patch.object(sentry_mw.sentry_sdk, "init") as init:
            assert sentry_mw.setup_sentry() is True
        kwargs = init.call_args.kwargs
        assert kwargs["before_send"] is sentry_mw._strip_sensitive_data
        assert kwargs["send_default_pii"] is False


class TestEngineUrl:
    def test_plain_postgres_gets_asyncpg(self):
        assert _async_url("postgresql://u:p@h/db") == "postgresql+asyncpg://u:p@h/db"

    def test_explicit_driver_untouched(self):
        assert _async_url("postgresql+asyncpg://u:p@h/db") == "postgresql+asyncpg://u:p@h/db"
        assert _async_url("sqlite+aiosqlite:///x.db") == "sqlite+aiosqlite:///x.db"


class TestSchema:
    def test_tables(self):
        assert set(Base.metadata.tables) == {"parking_lots", "slots"}

    def test_lot_name_unique(self):
        assert ParkingLot.__table__.c.name.unique is True

    def test_slot_number_unique_per_lot(self):
        constraints = [
            tuple(c.name for c in uc.columns)
            for uc in Slot.__table__.constraints
            if uc.__class__.__name__ == "UniqueConstraint"
        ]
        assert ("parkingLotId", "slotNumber") in constraints

    def test_slots_cascade_with_lot(self):
        (fk,) = Slot.__table__.c.parkingLotId.foreign_keys
        assert fk.column.table.name == "parking_lots"
        assert fk.ondelete == "CASCADE"
