"""Bulk tag status transition workflow."""

from .executor import TransitionExecutor, TransitionOutcome
from .orchestrator import ConfirmCallback, TagStatusOrchestrator
from .policy import REQUIRED_PRIOR, TransitionPolicy, TransitionRequest
from .reconciler import Notification, OutcomeReconciler, TransitionReport
from .selection import SelectionSet
from .store import TAG_ORDERING, TagCollectionStore

__all__ = [
    "ConfirmCallback",
    "Notification",
    "OutcomeReconciler",
    "REQUIRED_PRIOR",
    "SelectionSet",
    "TAG_ORDERING",
    "TagCollectionStore",
    "TagStatusOrchestrator",
    "TransitionExecutor",
    "TransitionOutcome",
    "TransitionPolicy",
    "TransitionReport",
    "TransitionRequest",
]
