"""
Synchronization module exports.
"""

from railsync.sync.batch import SyncTarget, run_sync
from railsync.sync.case_synchronizer import CaseSynchronizer
from railsync.sync.suite_resolver import SuiteResolver

__all__ = [
    "SuiteResolver",
    "CaseSynchronizer",
    "SyncTarget",
    "run_sync",
]
