"""Tests for the configuration system."""

import json

import pytest

from managed_xml.shared.config import (
    ConfigError,
    ConfigValidationError,
    FacadeConfig,
    GlobalConfig,
    ParsingConfig,
    SerializationConfig,
    XPathConfig,
)


class TestParsingConfig:
    """Test suite for ParsingConfig."""

    def test_default_configuration(self):
        """Test default parsing configuration values."""
        config = ParsingConfig()

        assert config.remove_blank_text is False
        assert config.remove_comments is False
        assert config.remove_pis is False
        assert config.strip_cdata is True
        assert config.resolve_entities is False
        assert config.no_network is True
        assert config.huge_tree is False
        assert config.recover is False
        assert config.max_input_size_bytes is None

    def test_validation_failures(self):
        """Test invalid input size limits are rejected."""
        with pytest.raises(ValueError, match="max_input_size_bytes must be > 0"):
            ParsingConfig(max_input_size_bytes=0)

        with pytest.raises(ValueError, match="max_input_size_bytes must be > 0"):
            ParsingConfig(max_input_size_bytes=-5)

    def test_immutability(self):
        """Test parsing configuration is frozen."""
        config = ParsingConfig()
        with pytest.raises(AttributeError):
            config.recover = True


class TestSerializationConfig:
    """Test suite for SerializationConfig."""

    def test_default_configuration(self):
        """Test default serialization configuration values."""
        config = SerializationConfig()

        assert config.xml_declaration is False
        assert config.encoding == "utf-8"
        assert config.pretty_print is False
        assert config.with_tail is False

    def test_validation_failures(self):
        """Test invalid encodings are rejected."""
        with pytest.raises(ValueError, match="encoding cannot be empty"):
            SerializationConfig(encoding="")

        with pytest.raises(ValueError, match="byte encoding"):
            SerializationConfig(encoding="unicode")


class TestXPathConfig:
    """Test suite for XPathConfig."""

    def test_default_configuration(self):
        """Test default XPath configuration values."""
        config = XPathConfig()

        assert config.use_ambient_namespaces is False
        assert config.smart_strings is True
        assert config.max_results is None

    def test_validation_failures(self):
        """Test invalid XPath settings are rejected."""
        with pytest.raises(ValueError, match="smart_strings must stay enabled"):
            XPathConfig(smart_strings=False)

        with pytest.raises(ValueError, match="max_results must be > 0"):
            XPathConfig(max_results=0)


class TestGlobalConfig:
    """Test suite for GlobalConfig."""

    def test_default_configuration(self):
        """Test default global configuration values."""
        config = GlobalConfig()

        assert config.logging_level == "INFO"
        assert config.enable_correlation_tracking is True
        assert config.correlation_id is None

    def test_validation_failures(self):
        """Test invalid logging levels are rejected."""
        with pytest.raises(ValueError, match="logging_level must be one of"):
            GlobalConfig(logging_level="INVALID")


class TestFacadeConfig:
    """Test suite for the aggregate FacadeConfig."""

    def test_default_configuration(self):
        """Test default aggregate configuration."""
        config = FacadeConfig()

        assert isinstance(config.parsing, ParsingConfig)
        assert isinstance(config.serialization, SerializationConfig)
        assert isinstance(config.xpath, XPathConfig)
        assert isinstance(config.global_, GlobalConfig)
        assert config.name is None

    def test_recover_with_entities_rejected(self):
        """Test the recovering parser cannot resolve entities."""
        with pytest.raises(ConfigValidationError) as exc_info:
            FacadeConfig(parsing=ParsingConfig(recover=True, resolve_entities=True))

        assert exc_info.value.field_name == "parsing"
        assert len(exc_info.value.suggestions) == 2

    def test_correlation_id_tracking(self):
        """Test correlation ID is hidden when tracking is disabled."""
        tracked = FacadeConfig(global_=GlobalConfig(correlation_id="abc"))
        untracked = FacadeConfig(
            global_=GlobalConfig(correlation_id="abc", enable_correlation_tracking=False)
        )

        assert tracked.correlation_id == "abc"
        assert untracked.correlation_id is None

    def test_override_nested_fields(self):
        """Test component__field overrides create a new configuration."""
        config = FacadeConfig()
        pretty = config.override(
            serialization__pretty_print=True,
            xpath__max_results=5,
            name="custom"
        )

        assert pretty.serialization.pretty_print is True
        assert pretty.xpath.max_results == 5
        assert pretty.name == "custom"
        # Original untouched
        assert config.serialization.pretty_print is False

    def test_override_unknown_component(self):
        """Test unknown components are reported with suggestions."""
        with pytest.raises(ConfigValidationError) as exc_info:
            FacadeConfig().override(tokenization__enabled=True)

        assert exc_info.value.field_name == "tokenization__enabled"
        assert "parsing" in exc_info.value.suggestions

    def test_override_invalid_values(self):
        """Test invalid override values raise ConfigValidationError."""
        with pytest.raises(ConfigValidationError):
            FacadeConfig().override(parsing__max_input_size_bytes=0)

        with pytest.raises(ConfigValidationError):
            FacadeConfig().override(parsing__no_such_field=True)

    def test_config_error_hierarchy(self):
        """Test ConfigValidationError is a ConfigError."""
        assert issubclass(ConfigValidationError, ConfigError)

    def test_dict_round_trip(self):
        """Test to_dict/from_dict preserve every setting."""
        config = FacadeConfig.strict()
        restored = FacadeConfig.from_dict(config.to_dict())

        assert restored == config

    def test_json_round_trip(self):
        """Test to_json/from_json preserve every setting."""
        config = FacadeConfig.pretty()
        data = json.loads(config.to_json())

        assert data["serialization"]["pretty_print"] is True
        assert FacadeConfig.from_json(config.to_json()) == config

    def test_from_dict_partial(self):
        """Test missing sections keep their defaults."""
        config = FacadeConfig.from_dict({"xpath": {"max_results": 3}})

        assert config.xpath.max_results == 3
        assert config.parsing == ParsingConfig()

    def test_from_dict_invalid(self):
        """Test malformed dictionaries raise ConfigValidationError."""
        with pytest.raises(ConfigValidationError, match="Invalid configuration data"):
            FacadeConfig.from_dict({"parsing": {"unknown": 1}})

    def test_presets(self):
        """Test preset factory methods."""
        assert FacadeConfig.default().name == "default"

        strict = FacadeConfig.strict()
        assert strict.parsing.strip_cdata is False
        assert strict.parsing.max_input_size_bytes == 10 * 1024 * 1024

        lenient = FacadeConfig.lenient()
        assert lenient.parsing.recover is True
        assert lenient.parsing.resolve_entities is False

        pretty = FacadeConfig.pretty()
        assert pretty.serialization.xml_declaration is True
        assert pretty.parsing.remove_blank_text is True
