"""Reconciliation engine between local dotenv files and a remote store.

Store readers feed the diff engine, whose divergence records are resolved
interactively or in bulk and then executed by the apply engine. The
deletion workflow is an independent remote clean-up flow.
"""

from envsync.services.envsync.apply import ApplyEngine
from envsync.services.envsync.deletion import (
    DeletionCandidate,
    DeletionReport,
    DeletionWorkflow,
)
from envsync.services.envsync.diff import compute_diff, summarize_sync_state
from envsync.services.envsync.exceptions import (
    EnvSyncError,
    LocalStoreError,
    OperationCancelledError,
)
from envsync.services.envsync.exclusions import ExclusionPolicy
from envsync.services.envsync.local_store import LocalEnvStore
from envsync.services.envsync.models import (
    ABSENT,
    OPAQUE,
    Action,
    ApplyReport,
    DivergenceRecord,
    Environment,
    Known,
)
from envsync.services.envsync.reconciler import EnvironmentSyncResult, Reconciler
from envsync.services.envsync.remote_store import (
    AddOutcome,
    RemoteReadStatus,
    RemoteSnapshot,
    RemoteStore,
)
from envsync.services.envsync.resolution import ResolutionWorkflow, SyncMode

__all__ = [
    "ABSENT",
    "OPAQUE",
    "Action",
    "AddOutcome",
    "ApplyEngine",
    "ApplyReport",
    "DeletionCandidate",
    "DeletionReport",
    "DeletionWorkflow",
    "DivergenceRecord",
    "EnvSyncError",
    "Environment",
    "EnvironmentSyncResult",
    "ExclusionPolicy",
    "Known",
    "LocalEnvStore",
    "LocalStoreError",
    "OperationCancelledError",
    "Reconciler",
    "RemoteReadStatus",
    "RemoteSnapshot",
    "RemoteStore",
    "ResolutionWorkflow",
    "SyncMode",
    "compute_diff",
    "summarize_sync_state",
]
