import io
import json
import logging
from contextlib import redirect_stderr, redirect_stdout

import pytest

from mcp_cosmic_reach_versions.logging_config import configure_logging


@pytest.fixture(autouse=True)
def clean_root_logger():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    for h in saved_handlers:
        root.removeHandler(h)
    yield root
    for h in list(root.handlers):
        root.removeHandler(h)
    for h in saved_handlers:
        root.addHandler(h)
    root.setLevel(saved_level)


def test_records_go_to_stderr_only():
    out, err = io.StringIO(), io.StringIO()

    with redirect_stdout(out), redirect_stderr(err):
        configure_logging("INFO")
        logging.getLogger("registry").info("built version registry")

    assert "built version registry" in err.getvalue()
    assert out.getvalue() == ""


def test_repeated_configuration_keeps_one_handler(clean_root_logger):
    err = io.StringIO()

    with redirect_stderr(err):
        configure_logging("INFO")
        configure_logging("WARNING", json_logs=True)
        configure_logging("INFO")
        logging.getLogger("dup").info("once")

    ours = [h for h in clean_root_logger.handlers if h.name == "cosmic_reach_versions_stderr"]
    assert len(ours) == 1
    lines = [ln for ln in err.getvalue().splitlines() if ln.strip()]
    assert len(lines) == 1


def test_json_lines_carry_extra_fields():
    err = io.StringIO()

    with redirect_stderr(err):
        configure_logging("INFO", json_logs=True)
        logging.getLogger("manifest").info(
            "fetched version manifest", extra={"op": "version_manifest", "count": 30}
        )

    obj = json.loads(err.getvalue().strip())
    assert obj["level"] == "INFO"
    assert obj["logger"] == "manifest"
    assert obj["message"] == "fetched version manifest"
    assert obj["op"] == "version_manifest"
    assert obj["count"] == 30
    assert "timestamp" in obj
    assert "args" not in obj and "msg" not in obj


def test_json_lines_include_exceptions():
    err = io.StringIO()

    with redirect_stderr(err):
        configure_logging("INFO", json_logs=True)
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            logging.getLogger("x").exception("failed")

    obj = json.loads(err.getvalue().strip())
    assert "RuntimeError: boom" in obj["exc_info"]


def test_level_is_applied_and_unknown_level_falls_back(clean_root_logger):
    configure_logging("warning")
    assert clean_root_logger.level == logging.WARNING

    configure_logging("chatty")
    assert clean_root_logger.level == logging.INFO


def test_http_libraries_are_quiet_unless_debug():
    configure_logging("INFO")
    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("httpcore").level == logging.WARNING

    configure_logging("DEBUG")
    assert logging.getLogger("httpx").level == logging.DEBUG
    assert logging.getLogger("httpcore").level == logging.DEBUG
