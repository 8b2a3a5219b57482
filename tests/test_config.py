"""
Tests for playtpl.yaml loading and EngineConfig validation.
"""

from pathlib import Path

import pytest

from playtpl.config import EngineConfig, load_config
from playtpl.errors import ConfigLoadError, PlaytplUserError

from tests.infrastructure import write


class TestLoadConfig:

    def test_missing_file_gives_defaults(self, tmp_path: Path):
        assert load_config(tmp_path / "playtpl.yaml") == EngineConfig()

    def test_empty_file_gives_defaults(self, tmp_path: Path):
        cfg = load_config(write(tmp_path / "playtpl.yaml", ""))
        assert cfg == EngineConfig()

    def test_values_override_defaults(self, tmp_path: Path):
        cfg = load_config(write(tmp_path / "playtpl.yaml", """
schema_version: 1
strict_abort: true
line_marker: "<!-- {line} -->"
script_timeout: 2
"""))
        assert cfg.strict_abort is True
        assert cfg.swallow_comment_newline is True
        assert cfg.line_marker == "<!-- {line} -->"
        assert cfg.script_timeout == 2.0
        assert cfg.await_spawned_tasks is True

    def test_unsupported_schema_version(self, tmp_path: Path):
        with pytest.raises(ConfigLoadError, match="schema"):
            load_config(write(tmp_path / "playtpl.yaml", "schema_version: 7\n"))

    def test_not_a_mapping(self, tmp_path: Path):
        with pytest.raises(ConfigLoadError, match="mapping"):
            load_config(write(tmp_path / "playtpl.yaml", "- a\n- b\n"))

    def test_invalid_yaml(self, tmp_path: Path):
        with pytest.raises(ConfigLoadError, match="invalid YAML"):
            load_config(write(tmp_path / "playtpl.yaml", "strict_abort: [unclosed\n"))

    def test_error_is_user_facing(self, tmp_path: Path):
        with pytest.raises(PlaytplUserError):
            load_config(write(tmp_path / "playtpl.yaml", "bogus: 1\n"))


class TestEngineConfigValidation:

    def test_unknown_key(self):
        with pytest.raises(ConfigLoadError, match="unknown config keys: bogus"):
            EngineConfig.from_dict({"bogus": True})

    @pytest.mark.parametrize("key", ["strict_abort", "swallow_comment_newline", "await_spawned_tasks"])
    def test_flags_must_be_bool(self, key):
        with pytest.raises(ConfigLoadError, match=key):
            EngineConfig.from_dict({key: "yes"})

    def test_marker_needs_placeholder(self):
        with pytest.raises(ConfigLoadError, match="line_marker"):
            EngineConfig.from_dict({"line_marker": "// here"})

    @pytest.mark.parametrize("value", [0, -1, "5", True])
    def test_timeout_must_be_positive_number(self, value):
        with pytest.raises(ConfigLoadError, match="script_timeout"):
            EngineConfig.from_dict({"script_timeout": value})

    def test_config_error_is_value_error(self):
        with pytest.raises(ValueError):
            EngineConfig.from_dict({"script_timeout": -3})
