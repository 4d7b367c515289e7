"""Link extraction, task synchronization and invocation orchestration."""

from asana_pr_sync.engine.extractor import extract_task_ids, find_task_links
from asana_pr_sync.engine.orchestrator import SyncOrchestrator
from asana_pr_sync.engine.synchronizer import TaskSynchronizer

__all__ = ["SyncOrchestrator", "TaskSynchronizer", "extract_task_ids", "find_task_links"]
