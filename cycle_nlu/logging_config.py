import logging
import os
import sys

from pythonjsonlogger.json import JsonFormatter


def configure_logging(
    level: str = "INFO", json_format: bool = True, log_file: str = "data/cycle_nlu.log"
) -> None:
    root = logging.getLogger()
    root.setLevel(level.upper())

    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    stream_handler = logging.StreamHandler(sys.stderr)
    file_handler = logging.FileHandler(log_file, encoding="utf-8")

    formatter: logging.Formatter
    if json_format:
        formatter = JsonFormatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            rename_fields={"asctime": "timestamp", "levelname": "level", "name": "logger"},
        )
    else:
        formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    stream_handler.setFormatter(formatter)
    file_handler.setFormatter(formatter)

    root.handlers.clear()
    root.addHandler(stream_handler)
    root.addHandler(file_handler)

    # Silence noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
