import pytest

from app.core import rate_limit
from app.core.config import settings
from app.core.rate_limit import get_client_ip, get_storage_uri


@pytest.mark.unit
class TestStorageUri:
    def test_memory_without_redis(self, monkeypatch):
        monkeypatch.setattr(settings, "REDIS_URL", None)

        assert get_storage_uri() == "memory://"

    def test_redis_url_from_settings(self, monkeypatch):
        monkeypatch.setattr(settings, "REDIS_URL", "redis://cache:6379/0")

        assert get_storage_uri() == "redis://cache:6379/0"

    def test_empty_redis_url_falls_back_to_memory(self, monkeypatch):
        monkeypatch.setattr(settings, "REDIS_URL", "")

        assert get_storage_uri() == "memory://"

    def test_module_reads_settings_not_environment(self):
        assert not hasattr(rate_limit, "os")


@pytest.mark.unit
class TestClientIp:
    class _Request:
        def __init__(self, headers, host="10.0.0.9"):
            self.headers = headers
            self.client = type("Client", (), {"host": host})()

    def test_first_forwarded_address_wins(self):
        request = self._Request({"X-Forwarded-For": "203.0.113.7, 10.0.0.1"})

        assert get_client_ip(request) == "203.0.113.7"

    def test_direct_connection(self):
        assert get_client_ip(self._Request({})) == "10.0.0.9"
