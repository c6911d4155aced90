# spinglobe/utils/logging_setup.py
from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import Optional

FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
DATEFMT = "%H:%M:%S"


def configure_logging(
    level: int = logging.INFO,
    *,
    log_to_file: bool = False,
    log_dir: str = "logs",
) -> Optional[str]:
    """
    Configure root logging with a readable format and optional file sink.
    Silences noisy third-party loggers by default.

    Returns the log file path when a file sink was added.
    """
    logging.basicConfig(level=level, format=FORMAT, datefmt=DATEFMT)
    logging.getLogger().setLevel(level)

    # Tone down chatty libraries
    for noisy in ("PIL", "matplotlib", "urllib3", "asyncio"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    if not log_to_file:
        return None

    os.makedirs(log_dir, exist_ok=True)
    ts = datetime.now().strftime("%Y%m%d-%H%M%S")
    path = os.path.join(log_dir, f"spinglobe-{ts}.log")
    fh = logging.FileHandler(path, encoding="utf-8")
    fh.setLevel(level)
    fh.setFormatter(logging.Formatter(FORMAT, DATEFMT))
    logging.getLogger().addHandler(fh)
    return path
