import threading

import pytest

from reviewhound.models import Diagnostic, FilteredDiagnostic
from reviewhound.resultmap import (
    FilteredResult,
    FilteredResultMap,
    Result,
    ResultMap,
)


def test_store_and_load_roundtrip():
    rm = ResultMap()
    result = Result(name="lint", level="warning", diagnostics=[Diagnostic(message="m")])
    rm.store("lint", result)
    assert rm.load("lint") is result
    assert len(rm) == 1


def test_load_missing_key_raises():
    rm = ResultMap()
    with pytest.raises(KeyError, match="fail to get the value of key"):
        rm.load("missing")


def test_store_replaces_value():
    rm = ResultMap()
    rm.store("a", Result(name="first"))
    rm.store("a", Result(name="second"))
    assert rm.load("a").name == "second"
    assert len(rm) == 1


def test_items_lists_all_entries():
    rm = ResultMap()
    first = Result(name="x")
    second = Result(name="y")
    rm.store("x", first)
    rm.store("y", second)
    assert dict(rm.items()) == {"x": first, "y": second}


def test_store_rejects_wrong_type():
    rm = ResultMap()
    with pytest.raises(TypeError):
        rm.store("a", FilteredResult())
    assert len(rm) == 0


def test_concurrent_stores():
    rm = ResultMap()

    def worker(i):
        rm.store(f"key{i}", Result(name=f"key{i}"))

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(50)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(rm) == 50
    assert all(key == value.name for key, value in rm.items())


def test_check_unexpected_failure_raises_without_diagnostics():
    result = Result(name="tool", cmd_err=RuntimeError("exit status 1"))
    with pytest.raises(RuntimeError, match="tool failed with zero findings"):
        result.check_unexpected_failure()


def test_check_unexpected_failure_with_findings_is_fine():
    result = Result(
        name="tool",
        cmd_err=RuntimeError("exit status 1"),
        diagnostics=[Diagnostic(message="found")],
    )
    result.check_unexpected_failure()
    assert result.diagnostics[0].message == "found"


def test_filtered_result_map_roundtrip():
    frm = FilteredResultMap()
    fr = FilteredResult(level="error", filtered_diagnostics=[FilteredDiagnostic()])
    frm.store("t", fr)
    assert frm.load("t") is fr
    assert frm.items() == [("t", fr)]
    with pytest.raises(KeyError):
        frm.load("other")
    with pytest.raises(TypeError):
        frm.store("x", Result())