"""Concurrent per-tag status change calls."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..config import ProceduresConfig, WorkflowConfig
from ..exceptions import BusyError
from ..remote import DataService
from .policy import TransitionRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransitionOutcome:
    tag_id: str
    ok: bool
    error: Optional[str] = None


class TransitionExecutor:
    """Issues one remote call per tag and collects every outcome."""

    def __init__(
        self,
        service: DataService,
        *,
        procedures: Optional[ProceduresConfig] = None,
        workflow: Optional[WorkflowConfig] = None,
    ) -> None:
        self._service = service
        self._procedures = procedures or ProceduresConfig()
        self._workflow = workflow or WorkflowConfig()
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def ensure_idle(self) -> None:
        if self._running:
            raise BusyError("a bulk status change is already running")

    async def execute(self, request: TransitionRequest) -> List[TransitionOutcome]:
        self.ensure_idle()
        self._running = True
        try:
            calls = [self._transition_one(tag_id, request) for tag_id in request.tag_ids]
            return list(await asyncio.gather(*calls))
        finally:
            self._running = False

    def procedure_for(self, request: TransitionRequest, tag_id: str) -> tuple[str, Dict[str, Any]]:
        if request.correction:
            return self._procedures.correct_status, {
                "p_tag_id": tag_id,
                "p_to_status": request.target.value,
                "p_source": self._workflow.correction_source_tag,
                "p_notes": request.note,
            }
        return self._procedures.set_status, {
            "p_tag_id": tag_id,
            "p_to_status": request.target.value,
            "p_notes": request.note,
            "p_source": self._workflow.source_tag,
            "p_changed_by": None,
        }

    async def _transition_one(self, tag_id: str, request: TransitionRequest) -> TransitionOutcome:
        procedure, args = self.procedure_for(request, tag_id)
        try:
            result = await self._service.call(procedure, args)
        except Exception as exc:  # one failing tag must not abort the batch
            logger.info("%s raised for tag %s: %s", procedure, tag_id, exc)
            return TransitionOutcome(tag_id, ok=False, error=str(exc) or exc.__class__.__name__)

        if not result.ok:
            logger.info("%s failed for tag %s: %s", procedure, tag_id, result.error)
            return TransitionOutcome(tag_id, ok=False, error=result.error)
        return TransitionOutcome(tag_id, ok=True)
