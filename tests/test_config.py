"""Tests for configuration loading and option validation."""

import pytest

from deadwood.config import CycleOptions, DeletionOptions, MetricsOptions, load_config
from deadwood.exceptions import ConfigurationError, ConflictingOptionsError, ValidationError


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestDefaults:
    def test_defaults(self):
        config = load_config()
        assert config.cycles.max_length == 12
        assert config.metrics.hub_threshold == 5
        assert config.deletion.confidence_threshold == 0.90
        assert config.deletion.is_preview

    def test_execute_leaves_preview(self):
        assert not DeletionOptions(execute=True).is_preview
        assert DeletionOptions(execute=True, dry_run=True).is_preview


class TestSources:
    def test_project_config_is_discovered(self, tmp_path):
        (tmp_path / "deadwood.toml").write_text("[metrics]\nhub_threshold = 8\n")
        assert load_config().metrics.hub_threshold == 8

    def test_explicit_file_overrides_project_config(self, tmp_path):
        (tmp_path / "deadwood.toml").write_text("[metrics]\nhub_threshold = 8\n")
        explicit = tmp_path / "other.toml"
        explicit.write_text("[metrics]\nhub_threshold = 12\n")
        assert load_config(explicit).metrics.hub_threshold == 12

    def test_lists_become_tuples(self, tmp_path):
        path = tmp_path / "lists.toml"
        path.write_text('[deletion]\nexclude_patterns = ["migrations/*"]\n')
        assert load_config(path).deletion.exclude_patterns == ("migrations/*",)

    def test_env_vars_apply_to_deletion(self, monkeypatch):
        monkeypatch.setenv("DEADWOOD_MAX_FUNCTIONS_PER_BATCH", "3")
        monkeypatch.setenv("DEADWOOD_INCLUDE_EXPORTS", "yes")
        config = load_config()
        assert config.deletion.max_functions_per_batch == 3
        assert config.deletion.include_exports is True

    def test_overrides_win_and_none_is_ignored(self, monkeypatch):
        monkeypatch.setenv("DEADWOOD_MAX_FUNCTIONS_PER_BATCH", "3")
        config = load_config(
            deletion={"max_functions_per_batch": 7, "test_command": None},
            cycles={"exclude_recursive": True},
        )
        assert config.deletion.max_functions_per_batch == 7
        assert config.deletion.test_command == ""
        assert config.cycles.exclude_recursive


class TestErrors:
    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(tmp_path / "missing.toml")

    def test_invalid_toml(self, tmp_path):
        path = tmp_path / "broken.toml"
        path.write_text("[deletion\n")
        with pytest.raises(ConfigurationError, match="Invalid config file"):
            load_config(path)

    def test_unknown_section(self, tmp_path):
        path = tmp_path / "extra.toml"
        path.write_text("[server]\nport = 1\n")
        with pytest.raises(ConfigurationError, match="Unknown section"):
            load_config(path)

    def test_unknown_key(self, tmp_path):
        path = tmp_path / "typo.toml"
        path.write_text("[metrics]\nhub_treshold = 3\n")
        with pytest.raises(ConfigurationError, match=r"Invalid \[metrics\]"):
            load_config(path)

    def test_backup_cannot_be_switched_off(self, tmp_path):
        path = tmp_path / "nobackup.toml"
        path.write_text("[deletion]\ncreate_backup = false\n")
        with pytest.raises(ConfigurationError, match=r"Invalid \[deletion\]"):
            load_config(path)

    def test_bad_env_value(self, monkeypatch):
        monkeypatch.setenv("DEADWOOD_INCLUDE_EXPORTS", "maybe")
        with pytest.raises(ConfigurationError, match="DEADWOOD_INCLUDE_EXPORTS"):
            load_config()


class TestValidation:
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"min_size": 0},
            {"max_cycles": 0},
            {"min_size": 5, "max_length": 4},
            {"source_root": ""},
        ],
    )
    def test_cycle_options(self, kwargs):
        with pytest.raises(ValidationError):
            CycleOptions(**kwargs)

    def test_conflicting_recursive_filters(self):
        with pytest.raises(ConflictingOptionsError):
            CycleOptions(exclude_recursive=True, recursive_only=True)

    def test_metrics_options(self):
        with pytest.raises(ValidationError):
            MetricsOptions(hub_threshold=0)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"confidence_threshold": 1.5},
            {"protection_threshold": -0.1},
            {"max_functions_per_batch": 0},
            {"validation_timeout_seconds": 0},
            {"backup_dir": ""},
        ],
    )
    def test_deletion_options(self, kwargs):
        with pytest.raises(ValidationError):
            DeletionOptions(**kwargs)

    def test_validation_error_carries_key(self):
        with pytest.raises(ValidationError) as exc_info:
            DeletionOptions(confidence_threshold=2.0)
        assert exc_info.value.key == "confidence_threshold"
