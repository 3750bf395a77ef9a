"""Test configuration construction and validation."""

import dataclasses

import pytest

from zetascan.config import ApiConfig, init_config
from zetascan.errors import ConfigurationError


class TestInitConfig:
    """Test the configuration constructor."""

    def test_defaults(self):
        config = init_config()

        assert config.api_key is None
        assert config.host == "api.zetascan.com"
        assert config.protocol == "https"
        assert config.method == "http"
        assert config.version == "v2"
        assert config.dns_method == "nameserver"
        assert config.dns_type == "A"
        assert config.dns_retries == 3
        assert config.lenient_numeric_parsing is True

    def test_key_over_https(self):
        config = init_config(api_key="secret")

        assert config.get_conf() == "secret"
        assert config.ssl

    def test_key_over_http_without_ip_check(self):
        """Test a clear text key without IP authorization is rejected."""
        with pytest.raises(ConfigurationError, match="https required"):
            init_config(api_key="secret", ssl=False)

    def test_key_over_http_with_ip_check(self):
        config = init_config(api_key="secret", ssl=False, ip_check=True)
        assert config.protocol == "http"

    def test_no_key_over_http(self):
        """Test IP authorization alone may use plain http."""
        assert init_config(ssl=False).protocol == "http"

    def test_empty_key_is_no_key(self):
        assert init_config(api_key="", ssl=False).api_key is None

    @pytest.mark.parametrize("overrides", [
        {"method": "xml"},
        {"protocol": "ftp"},
        {"dns_method": "doh"},
        {"dns_type": "MX"},
        {"dns_type": "TXT"},
        {"dns_retries": 0},
        {"method": "dns", "dns_method": "zone"},
    ])
    def test_invalid_values(self, overrides):
        with pytest.raises(ConfigurationError):
            ApiConfig(**overrides)

    def test_explicit_protocol(self):
        """Test protocol may be given directly instead of through ssl."""
        assert init_config(protocol="http").protocol == "http"
        assert init_config(ssl=False, protocol="https").protocol == "https"

    def test_explicit_protocol_still_validated(self):
        with pytest.raises(ConfigurationError, match="https required"):
            init_config(api_key="secret", protocol="http")

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            init_config(method="bogus")


class TestImmutability:
    """Test derived configurations are copies."""

    def test_frozen(self):
        config = init_config()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.method = "json"

    def test_with_method(self):
        config = init_config()
        derived = config.with_method("json")

        assert derived.method == "json"
        assert config.method == "http"

    def test_with_method_validates(self):
        with pytest.raises(ConfigurationError):
            init_config().with_method("xml")

    def test_toggle_ssl_validates(self):
        """Test dropping TLS re-checks the key rule."""
        config = init_config(api_key="secret")

        with pytest.raises(ConfigurationError):
            config.toggle_ssl(False)

        assert init_config().toggle_ssl(False).protocol == "http"


class TestFromEnv:
    """Test loading configuration from the environment."""

    def test_reads_variables(self, monkeypatch):
        monkeypatch.setenv("ZETASCAN_API_KEY", "secret")
        monkeypatch.setenv("ZETASCAN_METHOD", "JSON")
        monkeypatch.setenv("ZETASCAN_HOST", "restlb.zetascan.com")
        monkeypatch.delenv("ZETASCAN_SSL", raising=False)

        config = ApiConfig.from_env()

        assert config.api_key == "secret"
        assert config.method == "json"
        assert config.host == "restlb.zetascan.com"
        assert config.protocol == "https"

    def test_insecure_key_rejected(self, monkeypatch):
        monkeypatch.setenv("ZETASCAN_API_KEY", "secret")
        monkeypatch.setenv("ZETASCAN_SSL", "false")
        monkeypatch.delenv("ZETASCAN_IP_CHECK", raising=False)

        with pytest.raises(ConfigurationError):
            ApiConfig.from_env()

    def test_defaults_without_variables(self, monkeypatch):
        for name in ("ZETASCAN_API_KEY", "ZETASCAN_METHOD", "ZETASCAN_HOST", "ZETASCAN_SSL", "ZETASCAN_IP_CHECK"):
            monkeypatch.delenv(name, raising=False)

        assert ApiConfig.from_env() == init_config()
