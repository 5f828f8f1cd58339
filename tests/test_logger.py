"""Unit tests for the JSON log formatter."""
import sys
import json
import logging
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from logger import JSONFormatter, setup_logging


def make_record(**extra):
    record = logging.LogRecord(
        name="services.chat_service",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Answered query over %d chunks",
        args=(2,),
        exc_info=None
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_basic_fields():
    data = json.loads(JSONFormatter().format(make_record()))

    assert data["level"] == "INFO"
    assert data["logger"] == "services.chat_service"
    assert data["message"] == "Answered query over 2 chunks"
    assert data["timestamp"].endswith("Z")
    assert "pdf_id" not in data


def test_structured_fields_pass_through():
    record = make_record(pdf_id="abc", depth="deep", page_references=[3, 7], unrelated="dropped")

    data = json.loads(JSONFormatter().format(record))

    assert data["pdf_id"] == "abc"
    assert data["depth"] == "deep"
    assert data["page_references"] == [3, 7]
    assert "unrelated" not in data


def test_exception_is_included():
    try:
        raise RuntimeError("Failed to search vector store: down")
    except RuntimeError:
        record = make_record(exc_info=sys.exc_info())

    data = json.loads(JSONFormatter().format(record))

    assert "RuntimeError: Failed to search vector store: down" in data["exception"]


def test_setup_logging_installs_single_json_handler():
    root_logger = logging.getLogger()
    saved_handlers, saved_level = list(root_logger.handlers), root_logger.level
    try:
        setup_logging("DEBUG")

        assert root_logger.level == logging.DEBUG
        assert len(root_logger.handlers) == 1
        assert isinstance(root_logger.handlers[0].formatter, JSONFormatter)
    finally:
        root_logger.handlers = saved_handlers
        root_logger.setLevel(saved_level)
