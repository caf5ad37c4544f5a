"""Post persistence and reconciliation"""

from sync.loaders.post_repository import PostRepository
from sync.loaders.reconciler import SyncReconciler

__all__ = ["PostRepository", "SyncReconciler"]
