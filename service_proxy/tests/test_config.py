"""
Unit tests for proxy configuration loading.
"""

import pytest

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from shared.config import ProxyConfig, get_proxy_config
from shared.test_helpers import ProxyTestEnvironment


class TestProxyConfig:
    """Test cases for ProxyConfig."""

    @pytest.fixture
    def mock_env(self, monkeypatch):
        """Populate the environment the way a deployment does."""
        for key in ("REDIS_URL", "CORS_ALLOWED_ORIGINS", "BC_AUTHORITY_TENANT_ID", "PORT"):
            monkeypatch.delenv(key, raising=False)
        for key, value in ProxyTestEnvironment.get_mock_env().items():
            monkeypatch.setenv(key, value)

    def test_reads_environment(self, mock_env):
        config = get_proxy_config(_env_file=None)

        assert config.service_name == "proxy"
        assert config.base_url == "https://api.businesscentral.dynamics.com"
        assert config.company_id == "company-guid"
        assert config.client_secret == "client-secret"
        assert config.env == "test"

    def test_defaults(self, mock_env):
        config = get_proxy_config(_env_file=None)

        assert config.port == 5000
        assert config.request_timeout == 30.0
        assert config.api_publisher == "alletec"
        assert config.api_group == "learning"
        assert config.scope == "https://api.businesscentral.dynamics.com/.default"
        assert config.flatten_success_status is False

    def test_cache_disabled_without_redis_url(self, mock_env):
        config = get_proxy_config(_env_file=None)
        assert config.cache_enabled is False

    def test_cache_enabled_with_redis_url(self, mock_env, monkeypatch):
        monkeypatch.setenv("REDIS_URL", "redis://cache:6379/0")
        config = get_proxy_config(_env_file=None)

        assert config.cache_enabled is True
        assert config.redis_url == "redis://cache:6379/0"

    def test_cors_allow_list_parsing(self, mock_env, monkeypatch):
        monkeypatch.setenv(
            "CORS_ALLOWED_ORIGINS",
            "https://academy.example.com, http://localhost:4028,,"
        )
        config = get_proxy_config(_env_file=None)

        assert config.cors_origins == ["https://academy.example.com", "http://localhost:4028"]

    def test_cors_disabled_when_unset(self, mock_env):
        assert get_proxy_config(_env_file=None).cors_origins is None

    def test_authority_tenant_falls_back_to_tenant(self, mock_env, monkeypatch):
        config = get_proxy_config(_env_file=None)
        assert config.authority_tenant == "tenant-guid"

        monkeypatch.setenv("BC_AUTHORITY_TENANT_ID", "other-tenant")
        assert get_proxy_config(_env_file=None).authority_tenant == "other-tenant"

    def test_port_and_flags_from_environment(self, mock_env, monkeypatch):
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("BC_FLATTEN_SUCCESS_STATUS", "true")
        config = get_proxy_config(_env_file=None)

        assert config.port == 8080
        assert config.flatten_success_status is True

    def test_field_names_accepted_directly(self):
        config = ProxyConfig(_env_file=None, service_name="proxy", base_url="https://bc.example.com")
        assert config.base_url == "https://bc.example.com"
