"""Configuration classes for markup parsing and rendering.

This module provides configuration objects for the tokenizer and the
renderers, plus an immutable top-level ParserConfig with presets, overrides
and JSON round-tripping.
"""

import json
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional

# Tags rendered compactly (no surrounding newline/indentation) by rebuild()
DEFAULT_INLINE_TAGS: FrozenSet[str] = frozenset({
    "a", "abbr", "b", "bdi", "bdo", "cite", "code", "del", "dfn", "em",
    "h1", "h2", "h3", "h4", "h5", "h6", "i", "ins", "kbd", "label", "li",
    "mark", "q", "s", "samp", "small", "span", "strong", "sub", "sup",
    "td", "th", "time", "title", "u", "var",
})

VALID_LOGGING_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class ConfigError(ValueError):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass
class TokenizerConfig:
    """Configuration for tag discovery and close-tag matching.

    ``strict`` turns the tolerated anomalies (unmatched closing tags and
    duplicate attribute keys) into exceptions.
    """

    strict: bool = False
    max_nodes: Optional[int] = None
    record_diagnostics: bool = True

    def __post_init__(self) -> None:
        """Validate tokenizer configuration."""
        if self.max_nodes is not None and self.max_nodes <= 0:
            raise ValueError("max_nodes must be > 0 or None")


@dataclass
class RenderConfig:
    """Configuration for the pretty rebuild."""

    indent: int = 2
    inline_tags: FrozenSet[str] = DEFAULT_INLINE_TAGS
    collapse_blank_lines: bool = True

    def __post_init__(self) -> None:
        """Validate render configuration."""
        if self.indent < 0:
            raise ValueError("indent must be >= 0")
        if not isinstance(self.inline_tags, frozenset):
            self.inline_tags = frozenset(self.inline_tags)

    def is_inline(self, tag: str) -> bool:
        """Check whether a tag is rendered compactly."""
        return tag.lower() in self.inline_tags


@dataclass(frozen=True)
class ParserConfig:
    """Complete configuration for parsing, querying and rendering.

    Immutable; use ``override`` to derive variants.
    """

    tokenizer: TokenizerConfig = field(default_factory=TokenizerConfig)
    render: RenderConfig = field(default_factory=RenderConfig)
    logging_level: str = "WARNING"
    name: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete parser configuration."""
        try:
            self.tokenizer.__post_init__()
            self.render.__post_init__()
            if self.logging_level not in VALID_LOGGING_LEVELS:
                raise ValueError(
                    f"logging_level must be one of {VALID_LOGGING_LEVELS}"
                )
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

    @property
    def strict(self) -> bool:
        """Shortcut for the tokenizer strictness flag."""
        return self.tokenizer.strict

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Field overrides; component fields use ``component__field``

        Returns:
            New ParserConfig instance with overrides applied

        Example:
            >>> config = ParserConfig()
            >>> strict = config.override(tokenizer__strict=True, render__indent=4)
        """
        nested_overrides: Dict[str, Dict[str, Any]] = {}
        top_level: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                top_level[key] = value

        new_fields: Dict[str, Any] = dict(top_level)
        for component, overrides in nested_overrides.items():
            if component not in ("tokenizer", "render"):
                raise ConfigValidationError(
                    f"Unknown configuration component: {component}",
                    field_name=component,
                    suggestions=["tokenizer", "render"],
                )
            try:
                new_fields[component] = replace(getattr(self, component), **overrides)
            except (TypeError, ValueError) as e:
                raise ConfigValidationError(str(e), field_name=component) from e

        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        def _dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                return {
                    name: _dataclass_to_dict(getattr(obj, name))
                    for name in obj.__dataclass_fields__
                }
            if isinstance(obj, Enum):
                return obj.name
            if isinstance(obj, (set, frozenset)):
                return sorted(obj)
            if isinstance(obj, (list, tuple)):
                return [_dataclass_to_dict(item) for item in obj]
            return obj

        return _dataclass_to_dict(self)

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserConfig":
        """Create configuration from dictionary.

        Unknown keys are rejected so that typos in configuration files surface.
        """
        components = {"tokenizer": TokenizerConfig, "render": RenderConfig}
        values: Dict[str, Any] = {}
        for key, value in data.items():
            if key in components:
                if not isinstance(value, dict):
                    raise ConfigValidationError(
                        f"{key} must be an object", field_name=key
                    )
                try:
                    values[key] = components[key](**value)
                except (TypeError, ValueError) as e:
                    raise ConfigValidationError(str(e), field_name=key) from e
            elif key in cls.__dataclass_fields__:
                values[key] = value
            else:
                raise ConfigValidationError(
                    f"Unknown configuration key: {key}", field_name=key
                )
        return cls(**values)

    @classmethod
    def from_json(cls, json_str: str) -> "ParserConfig":
        """Create configuration from JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid configuration JSON: {e}") from e
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration JSON must be an object")
        return cls.from_dict(data)

    # Preset factory methods
    @classmethod
    def lenient(cls) -> "ParserConfig":
        """Tolerate unmatched closing tags and duplicate attributes."""
        return cls(name="lenient")

    @classmethod
    def strict_mode(cls) -> "ParserConfig":
        """Reject unmatched closing tags and duplicate attributes."""
        return cls(tokenizer=TokenizerConfig(strict=True), name="strict")

    @classmethod
    def pretty(cls, indent: int = 2) -> "ParserConfig":
        """Lenient parsing with a custom rebuild indentation width."""
        return cls(render=RenderConfig(indent=indent), name="pretty")
