from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import TypeVar

from loguru import logger

from src.application.dtos.job_dto import JobReport

T = TypeVar("T")
R = TypeVar("R", bound=JobReport)

PROCESSED: Mapping[str, int] = {"processed": 1}
SKIPPED: Mapping[str, int] = {"skipped": 1}


class ItemFailed(Exception):
    """Expected per-item failure (missing file, unrecoverable legacy image, ...)."""


def run_batch(
    items: Iterable[T],
    handle: Callable[[T], Mapping[str, int]],
    describe: Callable[[T], str],
    report: R,
    workers: int = 1,
) -> R:
    """Run ``handle`` on every item and fold the returned counters into ``report``.

    A failing item increments ``failed`` and adds ``"<describe(item)>: <error>"``
    to ``errors``; it never stops the other items. With ``workers > 1`` items run
    on a bounded thread pool; counters are still folded on the calling thread.
    """

    def fold(item: T, counters: Mapping[str, int] | None, exc: Exception | None) -> None:
        if exc is not None:
            report.failed += 1
            report.errors.append(f"{describe(item)}: {exc}")
            if isinstance(exc, ItemFailed):
                logger.warning("{}: {}", describe(item), exc)
            else:
                logger.opt(exception=exc).error("{} failed", describe(item))
            return
        for name, value in (counters or {}).items():
            setattr(report, name, getattr(report, name) + value)

    if workers <= 1:
        for item in items:
            try:
                counters = handle(item)
            except Exception as exc:
                fold(item, None, exc)
            else:
                fold(item, counters, None)
        return report

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {executor.submit(handle, item): item for item in items}
        for future in as_completed(futures):
            item = futures[future]
            try:
                counters = future.result()
            except Exception as exc:
                fold(item, None, exc)
            else:
                fold(item, counters, None)
    return report
