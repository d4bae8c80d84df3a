from __future__ import annotations

import json
import logging
import os
import sys
import time
from pathlib import Path
from typing import Any, Dict, Optional, TextIO

_CONSOLE_FORMAT = "%(levelname)s %(message)s"


class JsonLogFormatter(logging.Formatter):
    _RESERVED = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: Dict[str, Any] = {
            "ts": time.time(),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        for key, value in getattr(record, "__dict__", {}).items():
            if key.startswith("_") or key in self._RESERVED:
                continue
            if key in payload:
                continue
            try:
                json.dumps(value)
            except TypeError:
                continue
            payload[key] = value
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(
    level: int | str = logging.INFO,
    *,
    json_path: Optional[Path] = None,
    stream: Optional[TextIO] = None,
    name: str = "vitebackup",
) -> logging.Logger:
    """Attach a console handler and, optionally, a JSON-lines file handler.

    Repeated calls reuse existing handlers instead of stacking new ones.
    """

    logger = logging.getLogger(name)
    logger.setLevel(level)
    target = stream if stream is not None else sys.stderr
    for handler in logger.handlers:
        if getattr(handler, "_vitebackup_console", False):
            handler.setStream(target)
            break
    else:
        console = logging.StreamHandler(target)
        console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
        console._vitebackup_console = True  # type: ignore[attr-defined]
        logger.addHandler(console)

    if json_path is not None:
        json_path = Path(json_path)
        json_path.parent.mkdir(parents=True, exist_ok=True)
        for handler in logger.handlers:
            if isinstance(handler, logging.FileHandler) and getattr(handler, "baseFilename", None) == os.path.abspath(json_path):
                break
        else:
            file_handler = logging.FileHandler(json_path, encoding="utf-8")
            file_handler.setFormatter(JsonLogFormatter())
            logger.addHandler(file_handler)
    logger.propagate = False
    return logger


__all__ = ["JsonLogFormatter", "configure_logging"]
