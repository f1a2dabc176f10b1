"""Tests for config loader module."""

from pathlib import Path

import pytest

from site_backup_ng.config.loader import (
    ConfigError,
    find_config_file,
    generate_example_config,
    load_config,
)
from site_backup_ng.config.schema import DEFAULT_API_URL


class TestFindConfigFile:
    """Tests for find_config_file function."""

    def test_explicit_path_exists(self, config_file):
        """Test finding explicitly specified config file."""
        result = find_config_file(str(config_file))
        assert result == config_file

    def test_explicit_path_not_exists(self, tmp_path):
        """Test error when explicit path doesn't exist."""
        with pytest.raises(ConfigError, match="not found"):
            find_config_file(str(tmp_path / "nonexistent.toml"))

    def test_search_paths(self, tmp_path, monkeypatch, sample_config_toml):
        """Test the first existing search path wins."""
        first = tmp_path / "first.toml"
        second = tmp_path / "second.toml"
        second.write_text(sample_config_toml)
        monkeypatch.setattr(
            "site_backup_ng.config.loader.CONFIG_PATHS", [first, second]
        )

        assert find_config_file(None) == second

    def test_no_config_found(self, tmp_path, monkeypatch):
        """Test returning None when no search path exists."""
        monkeypatch.setattr(
            "site_backup_ng.config.loader.CONFIG_PATHS", [tmp_path / "missing.toml"]
        )
        assert find_config_file(None) is None


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_valid_config(self, config_file):
        """Test loading a valid configuration file."""
        config, warnings = load_config(config_file)

        assert config.api.base_url == "https://api.example.test/api/"
        assert config.api.timeout == 15.0
        assert config.api.verify_ssl is True
        assert config.session.file == "/tmp/session.json"
        assert config.global_config.cache_dir == "/tmp/site-backup-ng-test-cache"
        assert config.global_config.log_file == "/tmp/site-backup-ng-test.log"
        assert warnings == []

    def test_load_backup_defaults(self, config_file):
        """Test that backup defaults are loaded correctly."""
        config, _ = load_config(config_file)

        assert config.backup.element == "database"
        assert config.backup.changes == "skip"
        assert config.backup.env == "live"
        assert config.backup.keep_for == 30

    def test_empty_config(self, tmp_config_dir):
        """Test loading an empty config file gives defaults."""
        empty_config = tmp_config_dir / "empty.toml"
        empty_config.write_text("")

        config, warnings = load_config(empty_config)
        assert config.api.base_url == DEFAULT_API_URL
        assert config.backup.element == "all"
        assert config.backup.changes == "commit"
        assert config.backup.env == "all"
        assert config.backup.keep_for == 365

    def test_load_nonexistent_file(self, tmp_path):
        """Test error when loading nonexistent file."""
        with pytest.raises(ConfigError, match="Cannot read config file"):
            load_config(tmp_path / "nonexistent.toml")

    def test_load_invalid_toml(self, tmp_config_dir):
        """Test error when loading invalid TOML."""
        bad_config = tmp_config_dir / "bad.toml"
        bad_config.write_text("this is not valid [ toml")

        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_config(bad_config)

    @pytest.mark.parametrize(
        "body,match",
        [
            ('[backup]\nelement = "db"\n', "element"),
            ('[backup]\nchanges = "push"\n', "changes"),
            ("[backup]\nkeep_for = 0\n", "keep_for"),
            ('[backup]\nkeep_for = "long"\n', "keep_for"),
            ('[api]\nbase_url = "ftp://example.test"\n', "base_url"),
            ("[api]\ntimeout = -1\n", "timeout"),
            ("[api]\ntimeout = true\n", "timeout"),
            ('[api]\nverify_ssl = "yes"\n', "verify_ssl"),
            ("[session]\nfile = 3\n", "file"),
            ("[global]\ncache_dir = 1\n", "cache_dir"),
        ],
    )
    def test_invalid_values(self, tmp_config_dir, body, match):
        """Test invalid values raise ConfigError naming the key."""
        bad_config = tmp_config_dir / "invalid.toml"
        bad_config.write_text(body)

        with pytest.raises(ConfigError, match=match):
            load_config(bad_config)

    def test_example_config_loads(self, tmp_config_dir):
        """Test that the generated example is itself valid."""
        example = tmp_config_dir / "example.toml"
        example.write_text(generate_example_config())

        config, warnings = load_config(example)
        assert config.backup.keep_for == 365
        assert warnings == []


class TestConfigWarnings:
    """Tests for configuration warnings."""

    def test_warning_for_unknown_section(self, tmp_config_dir):
        """Test warning for an unknown section."""
        config_path = tmp_config_dir / "unknown.toml"
        config_path.write_text("[volumes]\npath = '/home'\n")

        _, warnings = load_config(config_path)
        assert any("[volumes]" in w for w in warnings)

    def test_warning_for_plain_http(self, tmp_config_dir):
        """Test warning for a plain http API URL."""
        config_path = tmp_config_dir / "http.toml"
        config_path.write_text('[api]\nbase_url = "http://localhost:8080/"\n')

        _, warnings = load_config(config_path)
        assert any("https" in w for w in warnings)

    def test_warning_for_disabled_tls(self, tmp_config_dir):
        """Test warning when TLS verification is disabled."""
        config_path = tmp_config_dir / "notls.toml"
        config_path.write_text("[api]\nverify_ssl = false\n")

        _, warnings = load_config(config_path)
        assert any("verification" in w for w in warnings)

    def test_empty_cache_dir_disables_cache(self, tmp_config_dir):
        """Test an empty cache_dir disables the cache with a warning."""
        config_path = tmp_config_dir / "nocache.toml"
        config_path.write_text('[global]\ncache_dir = ""\n')

        config, warnings = load_config(config_path)
        assert config.global_config.cache_dir is None
        assert any("cache" in w.lower() for w in warnings)

    def test_path_object_accepted(self, config_file):
        """Test load_config accepts a Path object."""
        config, _ = load_config(Path(config_file))
        assert config.backup.env == "live"
