"""
Unit tests for the shared structured logging configuration.
"""

import json
import logging

import pytest
import structlog

from shared.logging import clear_context, configure_logging, set_operation, set_request_id


def render(logger_name: str, method_name: str, event: str, **fields) -> dict:
    """Run one event through the configured processor chain."""
    logger = logging.getLogger(logger_name)
    event_dict = dict(fields, event=event)
    for processor in structlog.get_config()["processors"]:
        event_dict = processor(logger, method_name, event_dict)
    return json.loads(event_dict)


class TestLoggingConfiguration:
    """Test cases for configure_logging."""

    @pytest.fixture(autouse=True)
    def configured(self):
        """Configure logging and reset correlation context afterwards."""
        configure_logging("directory", "info")
        yield
        clear_context()

    def test_timestamp_is_iso_string(self):
        """The rendered timestamp is the ISO string, not an epoch float."""
        entry = render("directory.refs.cache", "warning", "Reference build failed")

        assert isinstance(entry["timestamp"], str)
        assert "T" in entry["timestamp"]

    def test_service_and_level_added(self):
        """Service name comes from the logger name prefix."""
        entry = render("directory.refs.fetcher", "warning", "Store query raised", category="city")

        assert entry["service"] == "directory"
        assert entry["level"] == "warning"
        assert entry["logger"] == "directory.refs.fetcher"
        assert entry["category"] == "city"

    def test_correlation_context_added(self):
        """Request id and operation tag every line in the current context."""
        set_request_id("req-42")
        set_operation("list_employees_with_city_name")

        entry = render("directory.employees", "warning", "Listing")

        assert entry["request_id"] == "req-42"
        assert entry["operation"] == "list_employees_with_city_name"
