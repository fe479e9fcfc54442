# tests/test_config.py
"""
Tests for RuleConfiguration.
"""

import json

import pytest

from tsdata_shims.config import RuleConfiguration
from tsdata_shims.errors import ConfigurationError


class TestRuleConfiguration:

    def test_defaults(self):
        config = RuleConfiguration()
        assert config.allow_annotation_from_any is False
        assert config.validate() == []

    @pytest.mark.parametrize("key", [
        "allowAnnotationFromAny",
        "allow_annotation_from_any",
    ])
    def test_from_options(self, key):
        config = RuleConfiguration.from_options({key: True})
        assert config.allow_annotation_from_any is True

    def test_from_empty_options(self):
        assert RuleConfiguration.from_options(None) == RuleConfiguration()

    def test_unknown_option(self):
        with pytest.raises(ConfigurationError, match="unknown option"):
            RuleConfiguration.from_options({"allowAny": True})

    def test_non_boolean_option(self):
        with pytest.raises(ConfigurationError, match="must be a boolean"):
            RuleConfiguration.from_options({"allowAnnotationFromAny": "yes"})

    def test_is_immutable(self):
        config = RuleConfiguration()
        with pytest.raises(AttributeError):
            config.allow_annotation_from_any = True

    def test_merged_ignores_none(self):
        config = RuleConfiguration(allow_annotation_from_any=True)
        assert config.merged(allow_annotation_from_any=None) == config
        assert config.merged(allow_annotation_from_any=False) == RuleConfiguration()

    def test_validate_warns_when_enabled(self):
        warnings = RuleConfiguration(allow_annotation_from_any=True).validate()
        assert len(warnings) == 1
        assert "allow_annotation_from_any" in warnings[0]


class TestConfigurationFile:

    def test_plain_options_object(self, tmp_path):
        path = tmp_path / "rule.json"
        path.write_text(json.dumps({"allowAnnotationFromAny": True}))
        assert RuleConfiguration.from_json_file(path).allow_annotation_from_any

    def test_nested_under_rule_id(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps({"no-unsafe-any": {"allowAnnotationFromAny": True}}))
        assert RuleConfiguration.from_json_file(path).allow_annotation_from_any

    @pytest.mark.parametrize("content", [
        "{not json",
        "[1, 2]",
        '{"no-unsafe-any": true}',
    ])
    def test_invalid_file(self, tmp_path, content):
        path = tmp_path / "bad.json"
        path.write_text(content)
        with pytest.raises(ConfigurationError):
            RuleConfiguration.from_json_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="cannot read"):
            RuleConfiguration.from_json_file(tmp_path / "absent.json")
