"""Tests for the endpoint record store."""

import json
import os
import stat

import pytest

from icinga2_downtime.client import PreconditionError
from icinga2_downtime.credentials import config_path, load_endpoint, save_endpoint


class TestEndpointStore:
    def test_round_trip(self, tmp_path, endpoint):
        path = save_endpoint(endpoint, tmp_path / "endpoint.json")

        loaded = load_endpoint(path)

        assert loaded == endpoint
        assert loaded.password.get_secret_value() == "s3cret"

    def test_round_trip_keeps_timeout(self, tmp_path, endpoint):
        endpoint = endpoint.model_copy(update={"timeout": 5.0, "verify_ssl": True})
        path = save_endpoint(endpoint, tmp_path / "endpoint.json")

        loaded = load_endpoint(path)

        assert loaded.timeout == 5.0
        assert loaded.verify_ssl is True

    @pytest.mark.skipif(os.name != "posix", reason="POSIX permissions")
    def test_existing_file_made_private(self, tmp_path, endpoint):
        path = tmp_path / "endpoint.json"
        path.write_text("{}")
        path.chmod(0o644)

        save_endpoint(endpoint, path)

        assert stat.S_IMODE(path.stat().st_mode) == 0o600
        assert json.loads(path.read_text())["password"] == "s3cret"

    @pytest.mark.skipif(os.name != "posix", reason="POSIX permissions")
    def test_saved_file_is_private(self, tmp_path, endpoint):
        path = save_endpoint(endpoint, tmp_path / "nested" / "endpoint.json")
        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_missing_record_is_precondition_error(self, tmp_path):
        with pytest.raises(PreconditionError, match="No Icinga2 endpoint configured"):
            load_endpoint(tmp_path / "missing.json")

    def test_incomplete_record(self, tmp_path):
        path = tmp_path / "endpoint.json"
        path.write_text(json.dumps({"host": "icinga", "port": 5665}))

        with pytest.raises(PreconditionError, match="Invalid Icinga2 endpoint record"):
            load_endpoint(path)

    def test_config_path_from_environment(self, tmp_path, monkeypatch, endpoint):
        target = tmp_path / "custom.json"
        monkeypatch.setenv("ICINGA2_DOWNTIME_CONFIG", str(target))

        assert config_path() == target
        save_endpoint(endpoint)
        assert load_endpoint().host == "icinga.example.com"

    def test_environment_variables(self, monkeypatch):
        monkeypatch.setenv("ICINGA2_API_HOST", "monitor.local")
        monkeypatch.setenv("ICINGA2_API_PORT", "8443")
        monkeypatch.setenv("ICINGA2_API_USER", "api")
        monkeypatch.setenv("ICINGA2_API_PASSWORD", "pw")
        monkeypatch.setenv("ICINGA2_VERIFY_SSL", "true")

        endpoint = load_endpoint()

        assert endpoint.base_url == "https://monitor.local:8443"
        assert endpoint.username == "api"
        assert endpoint.verify_ssl is True
