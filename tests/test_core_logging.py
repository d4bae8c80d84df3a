from __future__ import annotations

import io
import json
import logging
from pathlib import Path

from core.logging_utils import configure_logging


def test_configure_logging_is_idempotent(tmp_path: Path) -> None:
    stream = io.StringIO()
    json_path = tmp_path / "logs" / "run.jsonl"
    name = "vitebackup_logging_test"

    logger = configure_logging(logging.INFO, json_path=json_path, stream=stream, name=name)
    configure_logging(logging.INFO, json_path=json_path, stream=stream, name=name)
    try:
        assert len(logger.handlers) == 2

        logger.warning("archive failed", extra={"project": "app"})

        assert "WARNING archive failed" in stream.getvalue()
        record = json.loads(json_path.read_text(encoding="utf-8").strip())
        assert record["level"] == "WARNING"
        assert record["message"] == "archive failed"
        assert record["project"] == "app"
        assert "args" not in record
    finally:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
