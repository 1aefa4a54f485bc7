"""Configuration classes for the managed XML facade.

This module provides configuration objects for parsing, serialization, XPath
evaluation and logging. ``FacadeConfig`` aggregates them and is immutable, so a
single instance can be shared by every document built from it.
"""

import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

_COMPONENTS = ("parsing", "serialization", "xpath", "global_")


@dataclass(frozen=True)
class ParsingConfig:
    """Options handed to the native engine's XML parser."""

    remove_blank_text: bool = False
    remove_comments: bool = False
    remove_pis: bool = False
    strip_cdata: bool = True
    resolve_entities: bool = False
    no_network: bool = True
    huge_tree: bool = False
    recover: bool = False
    max_input_size_bytes: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate parsing configuration."""
        if self.max_input_size_bytes is not None and self.max_input_size_bytes <= 0:
            raise ValueError("max_input_size_bytes must be > 0 or None")


@dataclass(frozen=True)
class SerializationConfig:
    """Options controlling how trees are rendered back to text."""

    xml_declaration: bool = False
    encoding: str = "utf-8"
    pretty_print: bool = False
    with_tail: bool = False

    def __post_init__(self) -> None:
        """Validate serialization configuration."""
        if not self.encoding:
            raise ValueError("encoding cannot be empty")
        if self.encoding.lower() == "unicode":
            raise ValueError("encoding must name a byte encoding, not 'unicode'")


@dataclass(frozen=True)
class XPathConfig:
    """Options for XPath evaluation."""

    # Also bind prefixes declared in scope at the context node
    use_ambient_namespaces: bool = False
    smart_strings: bool = True
    max_results: Optional[int] = None

    def __post_init__(self) -> None:
        """Validate XPath configuration."""
        if not self.smart_strings:
            raise ValueError(
                "smart_strings must stay enabled to project attribute and text matches"
            )
        if self.max_results is not None and self.max_results <= 0:
            raise ValueError("max_results must be > 0 or None")


@dataclass(frozen=True)
class GlobalConfig:
    """Global settings that apply across all components."""

    logging_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    enable_correlation_tracking: bool = True
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate global configuration."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.logging_level not in valid_levels:
            raise ValueError(f"logging_level must be one of {valid_levels}")


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class FacadeConfig:
    """Complete configuration for documents, nodes and the native engine.

    Thread-safe due to frozen dataclass implementation.
    """

    parsing: ParsingConfig = field(default_factory=ParsingConfig)
    serialization: SerializationConfig = field(default_factory=SerializationConfig)
    xpath: XPathConfig = field(default_factory=XPathConfig)
    global_: GlobalConfig = field(default_factory=GlobalConfig)

    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate cross-component settings."""
        if self.parsing.recover and self.parsing.resolve_entities:
            raise ConfigValidationError(
                "Recovering parser must not resolve entities",
                field_name="parsing",
                suggestions=["Disable parsing.recover",
                             "Disable parsing.resolve_entities"]
            )

    @property
    def correlation_id(self) -> Optional[str]:
        """Correlation ID to attach to log records, if tracking is enabled."""
        if not self.global_.enable_correlation_tracking:
            return None
        return self.global_.correlation_id

    def override(self, **kwargs: Any) -> "FacadeConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Fields to override; component fields use the
                ``component__field`` notation

        Returns:
            New FacadeConfig instance with overrides applied

        Example:
            >>> config = FacadeConfig()
            >>> pretty = config.override(serialization__pretty_print=True)
        """
        nested_overrides: Dict[str, Dict[str, Any]] = {}
        top_level: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.split("__", 1)
                if component not in _COMPONENTS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=list(_COMPONENTS)
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                top_level[key] = value

        new_fields: Dict[str, Any] = {}
        try:
            for component, overrides in nested_overrides.items():
                new_fields[component] = replace(getattr(self, component), **overrides)
            new_fields.update(top_level)
            return replace(self, **new_fields)
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(str(e)) from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        result: Dict[str, Any] = {}
        for component in _COMPONENTS:
            section = getattr(self, component)
            result[component] = {
                name: getattr(section, name)
                for name in section.__dataclass_fields__
            }
        result["name"] = self.name
        result["description"] = self.description
        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FacadeConfig":
        """Create configuration from dictionary.

        Args:
            data: Dictionary as produced by ``to_dict``; missing keys keep
                their defaults

        Returns:
            FacadeConfig instance created from dictionary
        """
        section_types = {
            "parsing": ParsingConfig,
            "serialization": SerializationConfig,
            "xpath": XPathConfig,
            "global_": GlobalConfig,
        }
        kwargs: Dict[str, Any] = {}
        try:
            for component, section_type in section_types.items():
                if component in data:
                    kwargs[component] = section_type(**data[component])
            for key in ("name", "description"):
                if key in data:
                    kwargs[key] = data[key]
            return cls(**kwargs)
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(f"Invalid configuration data: {e}") from e

    @classmethod
    def from_json(cls, json_str: str) -> "FacadeConfig":
        """Create configuration from JSON string."""
        return cls.from_dict(json.loads(json_str))

    # Preset factory methods
    @classmethod
    def default(cls) -> "FacadeConfig":
        """Create the default configuration."""
        return cls(name="default")

    @classmethod
    def strict(cls) -> "FacadeConfig":
        """Create a preset that keeps every node and refuses huge inputs."""
        return cls(
            parsing=ParsingConfig(
                strip_cdata=False,
                max_input_size_bytes=10 * 1024 * 1024
            ),
            name="strict",
            description="Exact tree fidelity with bounded input size"
        )

    @classmethod
    def lenient(cls) -> "FacadeConfig":
        """Create a preset whose parser recovers from malformed input."""
        return cls(
            parsing=ParsingConfig(recover=True, huge_tree=True),
            name="lenient",
            description="Recovering parser for damaged input"
        )

    @classmethod
    def pretty(cls) -> "FacadeConfig":
        """Create a preset producing indented output with an XML declaration."""
        return cls(
            parsing=ParsingConfig(remove_blank_text=True),
            serialization=SerializationConfig(
                xml_declaration=True,
                pretty_print=True
            ),
            name="pretty",
            description="Human-readable serialization"
        )
