"""
Unit tests for core.yaml module.
"""

import pytest

from nostrwriter.core.yaml import load_yaml
from nostrwriter.exceptions import ConfigurationError


class TestLoadYaml:
    def test_mapping(self, tmp_path):
        path = tmp_path / "writer.yaml"
        path.write_text("relays:\n  - wss://nos.lol\npublish_timeout: 3\n", encoding="utf-8")
        assert load_yaml(path) == {"relays": ["wss://nos.lol"], "publish_timeout": 3}

    def test_accepts_str_path(self, tmp_path):
        path = tmp_path / "writer.yaml"
        path.write_text("a: 1\n", encoding="utf-8")
        assert load_yaml(str(path)) == {"a": 1}

    def test_empty_file(self, tmp_path):
        path = tmp_path / "writer.yaml"
        path.write_text("", encoding="utf-8")
        assert load_yaml(path) == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            load_yaml(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "writer.yaml"
        path.write_text("relays: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_yaml(path)

    def test_top_level_list_rejected(self, tmp_path):
        path = tmp_path / "writer.yaml"
        path.write_text("- wss://nos.lol\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_yaml(path)

    def test_unsafe_tags_rejected(self, tmp_path):
        path = tmp_path / "writer.yaml"
        path.write_text("a: !!python/object/apply:os.system ['true']\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_yaml(path)
