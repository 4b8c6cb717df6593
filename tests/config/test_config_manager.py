"""Tests for configuration management."""

from pathlib import Path

import pytest
import yaml

from sheet_importer.config.config_manager import ConfigManager
from sheet_importer.models.data_models import Config, ConfigurationError


class TestConfigManager:
    """Test cases for ConfigManager class."""

    def test_defaults(self, monkeypatch, temp_dir: Path):
        """Test built-in defaults when no file exists."""
        monkeypatch.chdir(temp_dir)

        config = ConfigManager().load_config()

        assert isinstance(config, Config)
        assert config.import_settings.delete_after_finished is False
        assert config.import_settings.lift_resource_limits is False
        assert config.import_settings.output_format == "json"
        assert config.logging.level == "INFO"
        assert config.logging.file_enabled is False

    def test_default_yaml_in_working_directory(self, monkeypatch, temp_dir: Path):
        """Test config/default.yaml is picked up when no path is given."""
        (temp_dir / "config").mkdir()
        (temp_dir / "config" / "default.yaml").write_text(
            yaml.dump({"import": {"output_format": "csv"}})
        )
        monkeypatch.chdir(temp_dir)

        config = ConfigManager().load_config()

        assert config.import_settings.output_format == "csv"

    def test_load_file_merges_with_defaults(self, sample_config_file: Path):
        """Test file values override defaults and missing keys keep defaults."""
        config = ConfigManager().load_config(sample_config_file)

        assert config.import_settings.delete_after_finished is True
        assert config.import_settings.output_format == "csv"
        assert config.import_settings.lift_resource_limits is False
        assert config.logging.level == "DEBUG"
        assert config.logging.console_enabled is True

    def test_missing_file(self, temp_dir: Path):
        """Test an explicit path that does not exist."""
        with pytest.raises(ConfigurationError, match="not found"):
            ConfigManager().load_config(temp_dir / "missing.yaml")

    def test_invalid_yaml(self, temp_dir: Path):
        """Test malformed YAML raises ConfigurationError."""
        config_file = temp_dir / "bad.yaml"
        config_file.write_text("import: [unclosed")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            ConfigManager().load_config(config_file)

    def test_non_mapping_yaml(self, temp_dir: Path):
        """Test a YAML list at the root is rejected."""
        config_file = temp_dir / "list.yaml"
        config_file.write_text("- a\n- b\n")

        with pytest.raises(ConfigurationError, match="mapping"):
            ConfigManager().load_config(config_file)

    def test_invalid_values(self, temp_dir: Path):
        """Test validation errors are reported as ConfigurationError."""
        config_file = temp_dir / "invalid.yaml"
        config_file.write_text(yaml.dump({"logging": {"level": "LOUD"}}))

        with pytest.raises(ConfigurationError, match="level"):
            ConfigManager().load_config(config_file)

    def test_invalid_output_format(self, temp_dir: Path):
        """Test an unsupported output format is rejected."""
        config_file = temp_dir / "invalid.yaml"
        config_file.write_text(yaml.dump({"import": {"output_format": "xml"}}))

        with pytest.raises(ConfigurationError, match="output_format"):
            ConfigManager().load_config(config_file)

    def test_env_overrides(self, sample_config_file: Path, env_override):
        """Test SHEET_IMPORTER_* variables win over file values."""
        env_override.set("SHEET_IMPORTER_DELETE_AFTER_FINISHED", "false")
        env_override.set("SHEET_IMPORTER_LIFT_RESOURCE_LIMITS", "true")
        env_override.set("SHEET_IMPORTER_LOG_LEVEL", "warning")
        env_override.set("SHEET_IMPORTER_OUTPUT_FORMAT", "JSON")

        config = ConfigManager().load_config(sample_config_file)

        assert config.import_settings.delete_after_finished is False
        assert config.import_settings.lift_resource_limits is True
        assert config.logging.level == "WARNING"
        assert config.import_settings.output_format == "json"

    def test_env_overrides_disabled(self, sample_config_file: Path, env_override):
        """Test use_env_overrides=False ignores the environment."""
        env_override.set("SHEET_IMPORTER_OUTPUT_FORMAT", "json")

        config = ConfigManager().load_config(sample_config_file, use_env_overrides=False)

        assert config.import_settings.output_format == "csv"

    @pytest.mark.parametrize("value", ["0", "no", "off", "False", " false "])
    def test_env_disables_deletion(self, sample_config_file: Path, env_override, value):
        """Test every false spelling turns a configured deletion off."""
        env_override.set("SHEET_IMPORTER_DELETE_AFTER_FINISHED", value)

        config = ConfigManager().load_config(sample_config_file)

        assert config.import_settings.delete_after_finished is False

    @pytest.mark.parametrize("value", ["1", "yes", "on", "TRUE"])
    def test_env_enables_lifting(self, monkeypatch, temp_dir: Path, env_override, value):
        """Test every true spelling turns a boolean setting on."""
        monkeypatch.chdir(temp_dir)
        env_override.set("SHEET_IMPORTER_LIFT_RESOURCE_LIMITS", value)

        config = ConfigManager().load_config()

        assert config.import_settings.lift_resource_limits is True

    def test_env_ambiguous_boolean(self, monkeypatch, temp_dir: Path, env_override):
        """Test an unrecognized boolean value is rejected."""
        monkeypatch.chdir(temp_dir)
        env_override.set("SHEET_IMPORTER_DELETE_AFTER_FINISHED", "maybe")

        with pytest.raises(ConfigurationError, match="SHEET_IMPORTER_DELETE_AFTER_FINISHED"):
            ConfigManager().load_config()

    def test_yaml_ambiguous_boolean(self, temp_dir: Path):
        """Test a non-boolean YAML value for a boolean setting is rejected."""
        config_file = temp_dir / "invalid.yaml"
        config_file.write_text(yaml.dump({"import": {"delete_after_finished": "sometimes"}}))

        with pytest.raises(ConfigurationError, match="import.delete_after_finished"):
            ConfigManager().load_config(config_file)

    def test_yaml_integer_boolean(self, temp_dir: Path):
        """Test 0 in YAML means false rather than a truthy value."""
        config_file = temp_dir / "zero.yaml"
        config_file.write_text(yaml.dump({"import": {"delete_after_finished": 0}}))

        config = ConfigManager().load_config(config_file)

        assert config.import_settings.delete_after_finished is False

    def test_log_file_path_override(self, env_override, monkeypatch, temp_dir: Path):
        """Test the log file can be set from the environment."""
        monkeypatch.chdir(temp_dir)
        env_override.set("SHEET_IMPORTER_LOG_FILE_ENABLED", "true")
        env_override.set("SHEET_IMPORTER_LOG_FILE_PATH", str(temp_dir / "run.log"))

        config = ConfigManager().load_config()

        assert config.logging.file_enabled is True
        assert config.logging.file_path == temp_dir / "run.log"

    def test_cache(self, sample_config_file: Path):
        """Test repeated loads return the cached object until cleared."""
        manager = ConfigManager()

        first = manager.load_config(sample_config_file)
        assert manager.load_config(sample_config_file) is first

        manager.clear_cache()
        assert manager.load_config(sample_config_file) is not first

    def test_defaults_are_not_mutated(self, monkeypatch, temp_dir: Path, env_override):
        """Test env overrides do not leak into DEFAULT_CONFIG."""
        monkeypatch.chdir(temp_dir)
        env_override.set("SHEET_IMPORTER_LOG_LEVEL", "ERROR")

        ConfigManager().load_config()

        assert ConfigManager.DEFAULT_CONFIG["logging"]["level"] == "INFO"

    def test_to_dict(self, sample_config_file: Path):
        """Test the plain dictionary view of a config."""
        data = ConfigManager().load_config(sample_config_file).to_dict()

        assert data["import"]["output_format"] == "csv"
        assert data["logging"]["level"] == "DEBUG"
