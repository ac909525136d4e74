"""
Runtime installation management.

This package contains the store of installed versions, the acquisition
pipeline that fills it, and the self-updater.
"""

from .linking import DefaultLinkManager
from .pipeline import AcquisitionPipeline, AddResult, PipelineState, RemoveResult
from .store import DEFAULT_LINK, Installation, Store
from .upgrader import RELEASE_FEED, SelfUpdater, UpdateInfo, UpdateResult

__all__ = [
    "DefaultLinkManager",
    "AcquisitionPipeline",
    "AddResult",
    "PipelineState",
    "RemoveResult",
    "DEFAULT_LINK",
    "Installation",
    "Store",
    "RELEASE_FEED",
    "SelfUpdater",
    "UpdateInfo",
    "UpdateResult",
]
