# tests/unit/core/test_correlation.py
"""Tests for correlation id propagation."""

import threading

import structlog

from steadycall.core.correlation import correlation_scope, generate_correlation_id, get_correlation_id


def test_generated_ids_are_unique_and_prefixed() -> None:
    first = generate_correlation_id()
    second = generate_correlation_id()

    assert first.startswith("corr-")
    assert first != second


def test_unset_outside_scope() -> None:
    assert get_correlation_id() == ""


def test_scope_sets_and_restores() -> None:
    with correlation_scope("corr-outer") as outer:
        assert outer == "corr-outer"
        assert get_correlation_id() == "corr-outer"
        with correlation_scope("corr-inner"):
            assert get_correlation_id() == "corr-inner"
        assert get_correlation_id() == "corr-outer"

    assert get_correlation_id() == ""


def test_scope_generates_id_when_none_given() -> None:
    with correlation_scope() as value:
        assert value.startswith("corr-")
        assert get_correlation_id() == value


def test_scope_binds_structlog_context() -> None:
    with correlation_scope("corr-log"):
        assert structlog.contextvars.get_contextvars()["correlation_id"] == "corr-log"

    assert "correlation_id" not in structlog.contextvars.get_contextvars()


def test_restored_after_exception() -> None:
    try:
        with correlation_scope("corr-err"):
            raise RuntimeError("boom")
    except RuntimeError:
        pass

    assert get_correlation_id() == ""


def test_threads_do_not_share_ids() -> None:
    seen: dict[str, str] = {}

    def worker(name: str) -> None:
        with correlation_scope(f"corr-{name}"):
            seen[name] = get_correlation_id()

    with correlation_scope("corr-main"):
        threads = [threading.Thread(target=worker, args=(str(i),)) for i in range(5)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        assert get_correlation_id() == "corr-main"

    assert seen == {str(i): f"corr-{i}" for i in range(5)}
