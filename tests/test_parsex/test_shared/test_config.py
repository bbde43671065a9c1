"""Tests for the configuration system."""

import json

import pytest

from parsex.shared.config import (
    DEFAULT_INLINE_TAGS,
    ConfigError,
    ConfigValidationError,
    ParserConfig,
    RenderConfig,
    TokenizerConfig,
)


class TestTokenizerConfig:
    """Test suite for TokenizerConfig."""

    def test_default_configuration(self):
        """Test default tokenizer configuration values."""
        config = TokenizerConfig()

        assert config.strict is False
        assert config.max_nodes is None
        assert config.record_diagnostics is True

    def test_max_nodes_must_be_positive(self):
        """Test max_nodes validation."""
        with pytest.raises(ValueError, match="max_nodes must be > 0"):
            TokenizerConfig(max_nodes=0)

        with pytest.raises(ValueError, match="max_nodes must be > 0"):
            TokenizerConfig(max_nodes=-5)


class TestRenderConfig:
    """Test suite for RenderConfig."""

    def test_default_configuration(self):
        """Test default render configuration values."""
        config = RenderConfig()

        assert config.indent == 2
        assert config.inline_tags == DEFAULT_INLINE_TAGS
        assert config.collapse_blank_lines is True

    def test_negative_indent_rejected(self):
        """Test indent validation."""
        with pytest.raises(ValueError, match="indent must be >= 0"):
            RenderConfig(indent=-1)

    def test_inline_tags_normalized_to_frozenset(self):
        """Test that list input becomes a frozenset."""
        config = RenderConfig(inline_tags=["b", "i"])

        assert config.inline_tags == frozenset({"b", "i"})

    def test_is_inline_ignores_case(self):
        """Test inline lookup on upper-case tag names."""
        config = RenderConfig()

        assert config.is_inline("A")
        assert config.is_inline("span")
        assert not config.is_inline("div")
        assert not config.is_inline("p")


class TestParserConfig:
    """Test suite for the top-level ParserConfig."""

    def test_default_configuration(self):
        """Test default parser configuration."""
        config = ParserConfig()

        assert config.strict is False
        assert config.logging_level == "WARNING"
        assert config.name is None

    def test_config_is_frozen(self):
        """Test that ParserConfig cannot be mutated in place."""
        config = ParserConfig()

        with pytest.raises(Exception):
            config.logging_level = "DEBUG"  # type: ignore

    def test_invalid_logging_level(self):
        """Test logging level validation."""
        with pytest.raises(ConfigValidationError, match="logging_level must be one of"):
            ParserConfig(logging_level="LOUD")

    def test_validation_error_is_value_error(self):
        """Test the configuration exception hierarchy."""
        assert issubclass(ConfigValidationError, ConfigError)
        assert issubclass(ConfigError, ValueError)

    def test_presets(self):
        """Test preset factory methods."""
        assert ParserConfig.lenient().strict is False
        assert ParserConfig.lenient().name == "lenient"

        strict = ParserConfig.strict_mode()
        assert strict.strict is True
        assert strict.name == "strict"

        pretty = ParserConfig.pretty(indent=4)
        assert pretty.render.indent == 4
        assert pretty.strict is False

    def test_override_component_fields(self):
        """Test overrides addressed as component__field."""
        base = ParserConfig()
        config = base.override(tokenizer__strict=True, render__indent=4)

        assert config.strict is True
        assert config.render.indent == 4
        # Original is untouched
        assert base.strict is False
        assert base.render.indent == 2

    def test_override_top_level_field(self):
        """Test overriding a top-level field."""
        config = ParserConfig().override(logging_level="DEBUG", name="debug")

        assert config.logging_level == "DEBUG"
        assert config.name == "debug"

    def test_override_unknown_component(self):
        """Test override with an unknown component name."""
        with pytest.raises(ConfigValidationError) as exc_info:
            ParserConfig().override(parser__strict=True)

        assert exc_info.value.field_name == "parser"
        assert "tokenizer" in exc_info.value.suggestions

    def test_override_invalid_values(self):
        """Test override validation of component values."""
        with pytest.raises(ConfigValidationError):
            ParserConfig().override(render__indent=-1)

        with pytest.raises(ConfigValidationError):
            ParserConfig().override(tokenizer__unknown_field=1)

    def test_to_dict(self):
        """Test dictionary conversion."""
        data = ParserConfig.strict_mode().to_dict()

        assert data["tokenizer"]["strict"] is True
        assert data["render"]["indent"] == 2
        assert data["render"]["inline_tags"] == sorted(DEFAULT_INLINE_TAGS)
        assert data["name"] == "strict"

    def test_json_round_trip(self):
        """Test to_json / from_json preserve the configuration."""
        config = ParserConfig(
            tokenizer=TokenizerConfig(strict=True, max_nodes=100),
            render=RenderConfig(indent=4, inline_tags=frozenset({"b"})),
            logging_level="INFO",
            name="custom",
        )

        restored = ParserConfig.from_json(config.to_json())

        assert restored == config
        assert json.loads(config.to_json())["tokenizer"]["max_nodes"] == 100

    def test_from_dict_partial(self):
        """Test that missing sections keep their defaults."""
        config = ParserConfig.from_dict({"render": {"indent": 3}})

        assert config.render.indent == 3
        assert config.tokenizer == TokenizerConfig()

    def test_from_dict_rejects_unknown_keys(self):
        """Test that typos in configuration data surface."""
        with pytest.raises(ConfigValidationError, match="Unknown configuration key"):
            ParserConfig.from_dict({"tokeniser": {}})

    def test_from_dict_rejects_bad_sections(self):
        """Test invalid component sections."""
        with pytest.raises(ConfigValidationError, match="must be an object"):
            ParserConfig.from_dict({"tokenizer": 5})

        with pytest.raises(ConfigValidationError):
            ParserConfig.from_dict({"tokenizer": {"max_nodes": 0}})

    def test_from_json_errors(self):
        """Test malformed configuration JSON."""
        with pytest.raises(ConfigValidationError, match="Invalid configuration JSON"):
            ParserConfig.from_json("{not json")

        with pytest.raises(ConfigValidationError, match="must be an object"):
            ParserConfig.from_json("[1, 2]")
