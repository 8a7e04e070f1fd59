"""
Tests for utils/config.py — ClientConfig.from_env and the Config base
"""
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from utils.config import ClientConfig, Config, LocationSelection

_ENV_VARS = (
    "PMIS_API_BASE_URL", "PMIS_API_TOKEN", "PMIS_API_TIMEOUT", "PMIS_PAGE_SIZE",
    "PMIS_SEARCH_DEBOUNCE_MS", "PMIS_LOG_FORMAT", "PMIS_LOG_LEVEL",
    "PMIS_FILTER_STORE", "PMIS_API_HOST", "PMIS_API_PORT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestClientConfigDefaults:
    def test_defaults(self):
        cfg = ClientConfig.from_env()
        assert cfg.api_base_url == "http://127.0.0.1:8000"
        assert cfg.api_token is None
        assert cfg.request_timeout == 30.0
        assert cfg.page_size == 10
        assert cfg.search_debounce_ms == 350
        assert cfg.search_debounce_seconds == pytest.approx(0.35)
        assert cfg.log_format == "text"
        assert cfg.log_level == "INFO"
        assert cfg.filter_store is None
        assert cfg.api_port == 8000

    def test_headers_without_token(self):
        headers = ClientConfig.from_env().auth_headers()
        assert "Authorization" not in headers
        assert headers["Accept"] == "application/json"


class TestClientConfigEnv:
    def test_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("PMIS_API_BASE_URL", "https://pmis.example.org/")
        monkeypatch.setenv("PMIS_API_TOKEN", "abc123")
        monkeypatch.setenv("PMIS_PAGE_SIZE", "25")
        monkeypatch.setenv("PMIS_SEARCH_DEBOUNCE_MS", "300")
        monkeypatch.setenv("PMIS_LOG_FORMAT", "JSON")
        monkeypatch.setenv("PMIS_FILTER_STORE", str(tmp_path / "f.json"))
        cfg = ClientConfig.from_env()
        assert cfg.api_base_url == "https://pmis.example.org"
        assert cfg.auth_headers()["Authorization"] == "Bearer abc123"
        assert cfg.page_size == 25
        assert cfg.search_debounce_seconds == pytest.approx(0.3)
        assert cfg.log_format == "json"
        assert cfg.filter_store == tmp_path / "f.json"

    @pytest.mark.parametrize("name,value", [
        ("PMIS_PAGE_SIZE", "0"),
        ("PMIS_PAGE_SIZE", "ten"),
        ("PMIS_API_TIMEOUT", "soon"),
        ("PMIS_SEARCH_DEBOUNCE_MS", "-5"),
    ])
    def test_invalid_values_raise(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)
        with pytest.raises(ValueError, match=name):
            ClientConfig.from_env()


class TestConfigBase:
    def test_round_trip_json(self, tmp_path):
        cfg = ClientConfig.from_env()
        path = tmp_path / "cfg.json"
        cfg.save_json(path)
        loaded = Config.load_json(path)
        assert loaded.page_size == cfg.page_size
        assert loaded.api_base_url == cfg.api_base_url

    def test_to_dict_skips_private(self):
        cfg = Config()
        cfg.visible = 1
        cfg._hidden = 2
        assert cfg.to_dict() == {"visible": 1}

    def test_from_dict_rejects_non_object(self):
        with pytest.raises(ValueError, match="JSON object"):
            Config.from_dict(["region", "1"])


class TestLocationSelection:
    def test_saved_as_flat_object(self, tmp_path):
        path = tmp_path / "nested" / "filters.json"
        LocationSelection(region="1", district="10").save_json(path)
        loaded = LocationSelection.load_json(path)
        assert isinstance(loaded, LocationSelection)
        assert (loaded.region, loaded.district, loaded.station) == ("1", "10", "")

    def test_missing_keys_default_blank(self, tmp_path):
        path = tmp_path / "filters.json"
        path.write_text('{"station": "100"}')
        loaded = LocationSelection.load_json(path)
        assert loaded.to_dict() == {"region": "", "district": "", "station": "100"}

    def test_non_object_file_rejected(self, tmp_path):
        path = tmp_path / "filters.json"
        path.write_text('["1", "10"]')
        with pytest.raises(ValueError):
            LocationSelection.load_json(path)
