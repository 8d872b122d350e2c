"""Failure types raised while syncing notebook sources.

Only lookup, action and workflow failures are exceptions. Hitting the round cap
is reported through ``ReconcileStatus.ROUND_LIMIT_EXCEEDED`` instead.
"""


class NotebookSyncError(RuntimeError):
    """Base class for every failure raised by the sync tool."""


class LookupFailure(NotebookSyncError):
    """A page title could not be fetched; callers degrade to an empty title."""


class ActionFailure(NotebookSyncError):
    """A single document interaction (click, fill, wait) did not complete."""


class WorkflowFailure(NotebookSyncError):
    """A multi-step UI workflow could not reach its next stage."""
