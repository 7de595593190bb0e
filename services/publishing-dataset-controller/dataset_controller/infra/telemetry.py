# services/publishing-dataset-controller/dataset_controller/infra/telemetry.py
from __future__ import annotations
import logging
import time
from contextlib import contextmanager
from typing import Iterator

@contextmanager
def timer(metric_name: str, logger: logging.Logger) -> Iterator[None]:
    """
    Times the wrapped block and logs the duration at DEBUG, even when the block raises.
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        dur_ms = (time.perf_counter() - start) * 1000.0
        logger.debug("%s took %.1fms", metric_name, dur_ms)
