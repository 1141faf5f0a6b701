"""Exception editing session: load, edit a local snapshot, persist the diff.

States::

    idle -> loading -> success | error
    success | error -> editing            (begin_edit snapshots ``original``)
    editing -> persisting -> success      (done: diff, persist, re-fetch)
                          -> error        (any call failed; data stays viewable)
    editing -> success                    (cancel_edit restores ``original``)
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from enum import Enum
from typing import Any

from availability_primitives.client import BackendError, CalendarClient
from availability_primitives.exceptions import dedupe_exceptions, localize_exceptions, reconcile
from availability_primitives.persistence import persist_reconciliation
from availability_primitives.types import ExceptionDate, LocaleContext, PersistReport
from availability_primitives.weekly import WeeklySchedule

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    EDITING = "editing"
    PERSISTING = "persisting"
    ERROR = "error"


class SessionStateError(RuntimeError):
    """Raised when an operation is not allowed in the current state."""


class ExceptionEditingSession:
    """Owns one screen's exception snapshots and weekly base schedule."""

    def __init__(
        self,
        client: CalendarClient,
        ctx: LocaleContext,
        *,
        detect_updates: bool = False,
    ) -> None:
        self.client = client
        self.ctx = ctx
        self.detect_updates = detect_updates
        self.state = SessionState.IDLE
        self.error: str | None = None
        self.exceptions: list[ExceptionDate] = []
        self.original: list[ExceptionDate] | None = None
        self.schedule = WeeklySchedule()
        self.last_report: PersistReport | None = None

    def _require(self, *states: SessionState) -> None:
        if self.state not in states:
            allowed = ", ".join(s.value for s in states)
            raise SessionStateError(f"cannot do that while {self.state.value} (needs {allowed})")

    async def load(self) -> None:
        """Fetch exceptions (and the weekly base schedule) from the server.

        On failure the current snapshots are left untouched.
        """
        self.state = SessionState.LOADING
        try:
            records = await self.client.get_exception_dates()
        except BackendError as exc:
            self.state = SessionState.ERROR
            self.error = str(exc) or "Failed to fetch exception dates"
            logger.error("exceptions_load_failed", exc_info=exc)
            return

        self.exceptions = localize_exceptions(records, self.ctx)
        self.error = None
        self.state = SessionState.SUCCESS

        try:
            slots = await self.client.get_weekly_availability()
        except BackendError as exc:
            # The fallback for removals degrades, but the exceptions stay usable.
            logger.warning("weekly_availability_refresh_failed", exc_info=exc)
        else:
            self.schedule = WeeklySchedule.from_utc_slots(slots, self.ctx)

    def begin_edit(self) -> None:
        self._require(SessionState.SUCCESS, SessionState.ERROR)
        self.original = list(self.exceptions)
        self.state = SessionState.EDITING

    def add(self, record: ExceptionDate) -> None:
        self._require(SessionState.EDITING)
        self.exceptions.append(record)

    def update(self, index: int, **changes: Any) -> ExceptionDate:
        self._require(SessionState.EDITING)
        updated = replace(self.exceptions[index], **changes)
        self.exceptions[index] = updated
        return updated

    def remove(self, index: int) -> ExceptionDate:
        self._require(SessionState.EDITING)
        return self.exceptions.pop(index)

    def cancel_edit(self) -> None:
        self._require(SessionState.EDITING)
        self.exceptions = list(self.original or [])
        self.original = None
        self.state = SessionState.SUCCESS

    async def done(self, cancel: asyncio.Event | None = None) -> PersistReport:
        """Persist the diff between ``original`` and the edited snapshot.

        Always re-fetches afterwards; the server, not the local snapshot,
        is the truth once this returns.
        """
        self._require(SessionState.EDITING)
        self.state = SessionState.PERSISTING

        current = dedupe_exceptions(self.exceptions)
        result = reconcile(self.original or [], current, detect_updates=self.detect_updates)
        report = await persist_reconciliation(
            self.client, result, self.schedule, self.ctx, cancel=cancel,
        )
        self.last_report = report
        self.original = None

        await self.load()
        if not report.ok:
            self.state = SessionState.ERROR
            self.error = report.error_message
        return report
