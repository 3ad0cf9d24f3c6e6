import pytest

from src.application.dtos.job_dto import CleanupReport, JobReport
from src.application.use_cases.batch_runner import PROCESSED, SKIPPED, ItemFailed, run_batch


def _handle(item):
    if item == "missing":
        raise ItemFailed("File not found")
    if item == "boom":
        raise RuntimeError("unexpected")
    return SKIPPED if item == "skip" else PROCESSED


@pytest.mark.parametrize("workers", [1, 4])
def test_failures_are_collected_not_raised(workers):
    items = ["a", "skip", "missing", "b", "boom"]
    report = run_batch(items, _handle, lambda i: f"item {i}", JobReport(), workers=workers)

    assert (report.processed, report.skipped, report.failed) == (2, 1, 2)
    assert sorted(report.errors) == ["item boom: unexpected", "item missing: File not found"]
    assert report.message == "Processed 2 images, 1 skipped, 2 failed"


def test_custom_counters_fold_into_report():
    report = run_batch(
        [1, 2, 3],
        lambda n: {"checked": 1, "broken": n % 2, "references_removed": n},
        str,
        CleanupReport(),
    )
    assert (report.checked, report.broken, report.references_removed) == (3, 2, 6)


def test_empty_batch():
    report = run_batch([], _handle, str, JobReport())
    assert report == JobReport()
