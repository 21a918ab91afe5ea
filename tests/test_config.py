"""Tests for environment configuration."""

import pytest

from secure_envelope import ConfigError
from secure_envelope.config import DEFAULT_PORT, Settings, load_settings, parse_master_key


class TestParseMasterKey:
    def test_valid_key(self):
        assert parse_master_key("00" * 32) == bytes(32)
        assert parse_master_key("AB" * 32) == b"\xab" * 32

    @pytest.mark.parametrize("value", [None, ""])
    def test_missing(self, value):
        with pytest.raises(ConfigError, match="not set"):
            parse_master_key(value)

    @pytest.mark.parametrize("value", ["00" * 16, "00" * 33])
    def test_wrong_length(self, value):
        with pytest.raises(ConfigError, match="64-character"):
            parse_master_key(value)

    def test_not_hex(self):
        with pytest.raises(ConfigError, match="hexadecimal"):
            parse_master_key("zz" * 32)

    def test_key_not_in_message(self):
        secret = "g" + "a" * 63
        with pytest.raises(ConfigError) as exc_info:
            parse_master_key(secret)
        assert secret not in str(exc_info.value)


class TestLoadSettings:
    def test_reads_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("MASTER_KEY", "11" * 32)
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("CORS_ORIGINS", "https://a.example, https://b.example")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = load_settings(tmp_path / "missing.env")

        assert settings.master_key() == b"\x11" * 32
        assert settings.port == 8080
        assert settings.cors_origins == ["https://a.example", "https://b.example"]
        assert settings.log_level == "DEBUG"

    def test_reads_dotenv_file(self, monkeypatch, tmp_path):
        monkeypatch.delenv("MASTER_KEY", raising=False)
        monkeypatch.delenv("PORT", raising=False)
        env_file = tmp_path / ".env"
        env_file.write_text(f"MASTER_KEY={'22' * 32}\n")

        settings = load_settings(env_file)

        assert settings.master_key() == b"\x22" * 32
        assert settings.port == DEFAULT_PORT

    def test_invalid_port(self, monkeypatch, tmp_path):
        monkeypatch.setenv("PORT", "not-a-port")
        with pytest.raises(ConfigError, match="PORT"):
            load_settings(tmp_path / "missing.env")

    def test_master_key_hidden_from_repr(self):
        settings = Settings(master_key_hex="33" * 32)
        assert "33" * 32 not in repr(settings)
