"""Activity sync - GitHub to database synchronization.

Services:
- RepositorySyncService: One repository, all stages (prune → dedup → fetch → persist)
- MultiRepoOrchestrator: Sync cycle over every tracked repository
- WatermarkTracker: Per-kind fetch lower bounds
- Deduplicator: Natural-key filtering and duplicate cleanup
- RetentionPruner: Deletes activity past the retention horizon
- BatchWriter: Bulk inserts with single-row fallback
"""

from .dedup import Deduplicator, natural_keys
from .enums import OutputFormat, SyncStage
from .multi_repo_orchestrator import MultiRepoOrchestrator
from .persistence import BatchWriter, WriteResult
from .repository_sync import RepositorySyncService
from .results import KindSyncResult, MultiRepoSyncResult, RepoSyncResult
from .retention import RetentionPruner
from .watermark import WatermarkTracker

__all__ = [
    # Orchestration
    "MultiRepoOrchestrator",
    "RepositorySyncService",
    # Results
    "KindSyncResult",
    "MultiRepoSyncResult",
    "RepoSyncResult",
    # Stages
    "BatchWriter",
    "Deduplicator",
    "RetentionPruner",
    "WatermarkTracker",
    "WriteResult",
    "natural_keys",
    # Enums
    "OutputFormat",
    "SyncStage",
]
