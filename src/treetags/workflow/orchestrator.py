"""Bulk tag status transition orchestration for one zone session."""

from __future__ import annotations

import inspect
import logging
from typing import Awaitable, Callable, Iterable, List, Optional, Union

from ..config import Settings
from ..exceptions import BusyError, RemoteCallError
from ..remote import DataService
from ..tags import TagRecord, TagStatus
from .executor import TransitionExecutor
from .policy import TransitionPolicy
from .reconciler import OutcomeReconciler, TagsChangedListener, TransitionReport
from .selection import SelectionSet
from .store import TagCollectionStore

logger = logging.getLogger(__name__)


ConfirmCallback = Callable[[str], Union[bool, Awaitable[bool]]]


class TagStatusOrchestrator:
    """Owns the store and selection of one zone and runs bulk transitions.

    Normal-mode transitions must be confirmed, either through the *confirm*
    callback or by passing ``confirmed=True``; an unconfirmed request comes
    back as a ``cancelled`` report without touching the backend.
    """

    def __init__(
        self,
        service: DataService,
        settings: Optional[Settings] = None,
        *,
        confirm: Optional[ConfirmCallback] = None,
    ) -> None:
        settings = settings or Settings()
        self.settings = settings
        self._service = service
        self._confirm = confirm
        self._busy = False
        self.store = TagCollectionStore(service, settings.workflow.tags_view)
        self.selection = SelectionSet()
        self.policy = TransitionPolicy(settings.workflow.violation_sample_size)
        self.executor = TransitionExecutor(
            service,
            procedures=settings.procedures,
            workflow=settings.workflow,
        )
        self.reconciler = OutcomeReconciler(
            self.store,
            self.selection,
            sample_size=settings.workflow.failure_sample_size,
            notice_seconds=settings.workflow.ready_notice_seconds,
        )

    @property
    def busy(self) -> bool:
        return self._busy or self.executor.running

    def ensure_idle(self) -> None:
        if self.busy:
            raise BusyError("a bulk status change is already running")

    def add_listener(self, listener: TagsChangedListener) -> None:
        self.reconciler.add_listener(listener)

    async def open_zone(self, zone_id: str) -> List[TagRecord]:
        if zone_id != self.store.zone_id:
            self.selection.clear()
        return await self.store.load(zone_id)

    async def request_transition(
        self,
        target: TagStatus | str,
        *,
        correction: bool = False,
        note: Optional[str] = None,
        selection: Optional[Iterable[str]] = None,
        confirmed: bool = False,
    ) -> TransitionReport:
        """Run one bulk status change end to end.

        The orchestrator stays busy from the first check until the store has
        been reloaded and every listener notified.
        """

        self.ensure_idle()
        self._busy = True
        try:
            return await self._run_transition(
                target,
                correction=correction,
                note=note,
                selection=selection,
                confirmed=confirmed,
            )
        finally:
            self._busy = False

    async def delete_tag(self, tag_id: str) -> None:
        self.ensure_idle()
        self._busy = True
        try:
            result = await self._service.delete(self.settings.workflow.tags_table, tag_id)
            if not result.ok:
                raise RemoteCallError(tag_id, result.error or "delete failed")
            logger.info("deleted tag %s", tag_id)
            self.selection.discard(tag_id)
            await self.store.reload()
        finally:
            self._busy = False

    async def _run_transition(
        self,
        target: TagStatus | str,
        *,
        correction: bool,
        note: Optional[str],
        selection: Optional[Iterable[str]],
        confirmed: bool,
    ) -> TransitionReport:
        target = self.policy.resolve_target(target)

        if selection is not None:
            self.selection.select_all(selection)
        self.selection.validate_against(self.store.ids)

        records = [
            record for record in self.store.records if record.id in self.selection
        ]
        request = self.policy.evaluate(
            records, target, correction=correction, note=note
        )

        prompt = self.policy.confirmation_prompt(request)
        if prompt is not None and not confirmed:
            if not await self._ask(prompt):
                logger.info("bulk status change to %s declined", target.value)
                return TransitionReport(kind="cancelled", target=target)

        logger.info(
            "changing %d tag(s) to %s%s",
            len(request.tag_ids),
            target.value,
            " (correction)" if request.correction else "",
        )
        outcomes = await self.executor.execute(request)
        return await self.reconciler.reconcile(target, outcomes)

    async def _ask(self, prompt: str) -> bool:
        if self._confirm is None:
            return False
        answer = self._confirm(prompt)
        if inspect.isawaitable(answer):
            answer = await answer
        return bool(answer)
