"""Scope guard marking the checks inside a ``with`` block as expected to fail."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

from .errors import UsageError

if TYPE_CHECKING:
    from .models import RunState


class ExpectedFailure:
    """Expect failure in every check performed while the scope is active.

    Used through ``Tester.expect_fail``::

        with self.expect_fail("Not implemented yet."):
            self.verify(is_future_clear())

    A failing check inside the scope is reported as XFAIL and the case goes
    on; a passing one is reported as XPASS and ends the case as failed. A
    scope created with a false ``condition`` does nothing. Only one enabled
    scope may be active at a time.
    """

    def __init__(self, state: "RunState", message: str, condition: Any = True) -> None:
        self._state = state
        self._message = message
        self._enabled = bool(condition)
        self._active = False

    @property
    def message(self) -> str:
        return self._message

    @property
    def enabled(self) -> bool:
        return self._enabled

    def __enter__(self) -> "ExpectedFailure":
        if not self._enabled:
            return self
        current: Optional[ExpectedFailure] = self._state.expected_failure
        if current is not None:
            raise UsageError(
                f"Expected failure '{self._message}' entered while "
                f"'{current.message}' is still active; scopes cannot be nested"
            )
        self._state.expected_failure = self
        self._active = True
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._active and self._state.expected_failure is self:
            self._state.expected_failure = None
        self._active = False
