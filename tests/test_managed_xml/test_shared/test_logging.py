"""Tests for correlation-aware logging."""

import logging

from managed_xml.shared.logging import (
    PACKAGE_LOGGER,
    CorrelationLogger,
    configure_logging,
    get_logger,
)


class TestCorrelationLogger:
    """Test CorrelationLogger record enrichment."""

    def test_records_carry_component_and_correlation_id(self, caplog) -> None:
        """Test every record carries the component and correlation ID."""
        logger = get_logger("managed_xml.test", "req-1", "document")

        with caplog.at_level(logging.INFO, logger="managed_xml.test"):
            logger.info("Document parsed", extra={"root_tag": "root"})

        record = caplog.records[-1]
        assert record.getMessage() == "Document parsed"
        assert record.component == "document"
        assert record.correlation_id == "req-1"
        assert record.root_tag == "root"

    def test_component_defaults_to_module_name(self) -> None:
        """Test the component falls back to the last name segment."""
        logger = CorrelationLogger("managed_xml.tree.document")

        assert logger.component == "document"
        assert logger.correlation_id is None

    def test_bind_keeps_correlation_id(self) -> None:
        """Test bind() switches component but keeps the correlation ID."""
        logger = get_logger("managed_xml.test", "req-2", "document")
        bound = logger.bind("xpath")

        assert bound.component == "xpath"
        assert bound.correlation_id == "req-2"
        assert bound.logger is logger.logger

    def test_disabled_level_is_skipped(self, caplog) -> None:
        """Test messages below the logger level are not emitted."""
        logger = get_logger("managed_xml.test.quiet", None, "quiet")

        with caplog.at_level(logging.WARNING, logger="managed_xml.test.quiet"):
            logger.debug("hidden")
            logger.warning("shown")

        messages = [record.getMessage() for record in caplog.records]
        assert "hidden" not in messages
        assert "shown" in messages

    def test_exception_includes_traceback(self, caplog) -> None:
        """Test exception() attaches exc_info."""
        logger = get_logger("managed_xml.test", None, "errors")

        with caplog.at_level(logging.ERROR, logger="managed_xml.test"):
            try:
                raise RuntimeError("boom")
            except RuntimeError:
                logger.exception("Operation failed")

        assert caplog.records[-1].exc_info is not None


class TestConfigureLogging:
    """Test package logger configuration."""

    def test_sets_package_level(self) -> None:
        """Test configure_logging applies the level to the package logger."""
        package_logger = logging.getLogger(PACKAGE_LOGGER)
        previous = package_logger.level
        try:
            result = configure_logging("DEBUG")

            assert result is package_logger
            assert package_logger.level == logging.DEBUG
        finally:
            package_logger.setLevel(previous)
