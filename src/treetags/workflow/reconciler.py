"""Turns executor outcomes into a report and store updates."""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Awaitable, Callable, List, Literal, Optional, Sequence, Union

from ..exceptions import RemoteFetchError
from ..tags import READY_FOR_SALE, TagStatus
from .executor import TransitionOutcome
from .selection import SelectionSet
from .store import TagCollectionStore

logger = logging.getLogger(__name__)


ReportKind = Literal["success", "partial", "failed", "cancelled"]
TagsChangedListener = Callable[[], Union[None, Awaitable[None]]]


@dataclass(frozen=True)
class Notification:
    """Time-limited message pointing the user to another view."""

    message: str
    link: str
    expires_at: datetime

    def is_active(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now < self.expires_at


@dataclass
class TransitionReport:
    kind: ReportKind
    target: TagStatus
    succeeded: int = 0
    failed: int = 0
    failures: List[str] = field(default_factory=list)
    notification: Optional[Notification] = None
    reload_error: Optional[str] = None
    listener_errors: List[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        if self.kind == "cancelled":
            return "cancelled; no tags changed"
        if self.kind == "success":
            return f"{self.succeeded} succeeded"
        summary = f"{self.succeeded} succeeded, {self.failed} failed"
        if self.failures:
            summary += ": " + "; ".join(self.failures)
        return summary

    def as_dict(self) -> dict:
        payload = {
            "kind": self.kind,
            "target": self.target.value,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "failures": list(self.failures),
            "message": self.message,
        }
        if self.notification is not None:
            payload["notification"] = {
                "message": self.notification.message,
                "link": self.notification.link,
                "expires_at": self.notification.expires_at.isoformat(),
            }
        if self.reload_error is not None:
            payload["reload_error"] = self.reload_error
        if self.listener_errors:
            payload["listener_errors"] = list(self.listener_errors)
        return payload


class OutcomeReconciler:
    def __init__(
        self,
        store: TagCollectionStore,
        selection: SelectionSet,
        *,
        sample_size: int = 3,
        notice_seconds: float = 6.0,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._store = store
        self._selection = selection
        self._sample_size = sample_size
        self._notice = timedelta(seconds=notice_seconds)
        self._clock = clock
        self._listeners: List[TagsChangedListener] = []

    def add_listener(self, listener: TagsChangedListener) -> None:
        self._listeners.append(listener)

    async def reconcile(
        self, target: TagStatus, outcomes: Sequence[TransitionOutcome]
    ) -> TransitionReport:
        successes = [outcome for outcome in outcomes if outcome.ok]
        failures = [outcome for outcome in outcomes if not outcome.ok]

        if not failures:
            kind: ReportKind = "success"
        elif successes:
            kind = "partial"
        else:
            kind = "failed"

        report = TransitionReport(
            kind=kind,
            target=target,
            succeeded=len(successes),
            failed=len(failures),
            failures=[
                outcome.error or "unknown error"
                for outcome in failures[: self._sample_size]
            ],
        )

        if kind == "success" and target is READY_FOR_SALE:
            report.notification = Notification(
                message=f"{len(successes)} tag(s) are ready for sale; review them in the stock view",
                link="/stock",
                expires_at=self._clock() + self._notice,
            )

        logger.info("bulk status change to %s: %s", target.value, report.message)

        if successes:
            self._selection.clear()
            try:
                await self._store.reload()
            except RemoteFetchError as exc:
                logger.warning("reload after status change failed: %s", exc)
                report.reload_error = str(exc)
            report.listener_errors = await self._notify_listeners()

        return report

    async def _notify_listeners(self) -> List[str]:
        errors: List[str] = []
        for listener in self._listeners:
            try:
                result = listener()
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:
                logger.exception("tags-changed listener %r failed", listener)
                errors.append(str(exc) or exc.__class__.__name__)
        return errors
