"""
Tests for proxy_key_client.core.models module.
"""

import dataclasses

import pytest

from proxy_key_client.core.exceptions import ServerError
from proxy_key_client.core.models import KeyRecord

from .conftest import key_entry


class TestKeyRecord:
    """Tests for KeyRecord."""

    def test_from_wire_maps_fields(self):
        entry = key_entry("4", "office")

        record = KeyRecord.from_wire(entry, bytes_used=77)

        assert record == KeyRecord(
            id="4",
            name="office",
            secret=entry["password"],
            port=entry["port"],
            cipher=entry["method"],
            access_uri=entry["accessUrl"],
            bytes_used=77,
            data_limit_bytes=None,
        )

    def test_absent_name_becomes_empty(self):
        entry = key_entry("4")
        del entry["name"]

        assert KeyRecord.from_wire(entry).name == ""

    def test_numeric_id_becomes_string(self):
        assert KeyRecord.from_wire(key_entry(12)).id == "12"

    def test_data_limit_is_read(self):
        record = KeyRecord.from_wire(key_entry("4", dataLimit={"bytes": 0}))
        assert record.data_limit_bytes == 0

    def test_data_limit_can_be_ignored(self):
        record = KeyRecord.from_wire(key_entry("4", dataLimit={"bytes": 10}), with_limit=False)
        assert record.data_limit_bytes is None

    @pytest.mark.parametrize("limit", [{"bytes": -5}, {"value": 3}, 100, {"bytes": "100"}])
    def test_malformed_data_limit(self, limit):
        with pytest.raises(ServerError):
            KeyRecord.from_wire(key_entry("4", dataLimit=limit))

    @pytest.mark.parametrize("field", ["id", "password", "port", "method", "accessUrl"])
    def test_missing_field(self, field):
        entry = key_entry("4")
        del entry[field]

        with pytest.raises(ServerError) as exc_info:
            KeyRecord.from_wire(entry)
        assert field in exc_info.value.message

    @pytest.mark.parametrize("key_id", [None, True, "", 1.5, {"id": "4"}])
    def test_invalid_id(self, key_id):
        with pytest.raises(ServerError):
            KeyRecord.from_wire(key_entry(key_id))

    def test_entry_must_be_object(self):
        with pytest.raises(ServerError):
            KeyRecord.from_wire(["4"])

    def test_record_is_immutable(self):
        record = KeyRecord.from_wire(key_entry("4"))
        with pytest.raises(dataclasses.FrozenInstanceError):
            record.id = "5"

    def test_negative_usage_rejected(self):
        with pytest.raises(ServerError):
            KeyRecord("1", "", "s", 1, "m", "ss://", bytes_used=-1)

    def test_to_dict(self):
        record = KeyRecord.from_wire(key_entry("4", "office"), bytes_used=3)
        data = record.to_dict()

        assert data["id"] == "4"
        assert data["bytes_used"] == 3
        assert data["data_limit_bytes"] is None
