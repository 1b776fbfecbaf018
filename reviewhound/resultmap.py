"""Thread-safe maps of results produced by concurrently running tools."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from reviewhound.models import Diagnostic, FilteredDiagnostic


@dataclass
class Result:
    """Diagnostics reported by one tool run."""

    name: str = ""
    level: str = ""
    diagnostics: list[Diagnostic] = field(default_factory=list)
    # An error from running the command does not mean failure: linters
    # commonly exit non-zero when they find something.
    cmd_err: BaseException | None = None

    def check_unexpected_failure(self) -> None:
        """Raise if the command failed and produced no diagnostics."""
        if self.cmd_err is not None and not self.diagnostics:
            raise RuntimeError(
                f"{self.name} failed with zero findings: The command itself "
                f"failed ({self.cmd_err}) or reviewhound cannot parse the results"
            )


@dataclass
class FilteredResult:
    """Diagnostics of one tool run after filtering them by the diff."""

    level: str = ""
    filtered_diagnostics: list[FilteredDiagnostic] = field(default_factory=list)


class _LockedStore:
    """Lock-guarded dictionary shared by the result maps."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._data: dict[str, Any] = {}

    def _put(self, key: str, value: Any, kind: type) -> None:
        if not isinstance(value, kind):
            raise TypeError(
                f"stored type in {type(self).__name__} is invalid: "
                f"{type(value).__name__}"
            )
        with self._lock:
            self._data[key] = value

    def _get(self, key: str) -> Any:
        with self._lock:
            try:
                return self._data[key]
            except KeyError:
                raise KeyError(
                    f"fail to get the value of key {key!r} from results"
                ) from None

    def _snapshot(self) -> list[tuple[str, Any]]:
        with self._lock:
            return list(self._data.items())

    def _size(self) -> int:
        with self._lock:
            return len(self._data)


class ResultMap(_LockedStore):
    """Thread-safe map from a tool name to its Result."""

    def store(self, key: str, result: Result) -> None:
        """Save a result under key, replacing any earlier one."""
        self._put(key, result, Result)

    def load(self, key: str) -> Result:
        """Return the result stored under key."""
        return self._get(key)

    def items(self) -> list[tuple[str, Result]]:
        """Snapshot of all stored keys and results."""
        return self._snapshot()

    def __len__(self) -> int:
        return self._size()


class FilteredResultMap(_LockedStore):
    """Thread-safe map from a tool name to its FilteredResult."""

    def store(self, key: str, result: FilteredResult) -> None:
        """Save a filtered result under key, replacing any earlier one."""
        self._put(key, result, FilteredResult)

    def load(self, key: str) -> FilteredResult:
        """Return the filtered result stored under key."""
        return self._get(key)

    def items(self) -> list[tuple[str, FilteredResult]]:
        """Snapshot of all stored keys and filtered results."""
        return self._snapshot()

    def __len__(self) -> int:
        return self._size()