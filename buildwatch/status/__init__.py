from buildwatch.status.actions import ActionId
from buildwatch.status.cache import StatusCache
from buildwatch.status.credentials import BaseCredentialStore, MemoryCredentialStore
from buildwatch.status.notifications import BaseNotifier, LoggingNotifier
from buildwatch.status.summary import (
    BaseSummaryPresenter,
    ProjectSummaryStatus,
    resolve_summary_status,
)

__all__ = [
    "ActionId",
    "BaseCredentialStore",
    "BaseNotifier",
    "BaseSummaryPresenter",
    "LoggingNotifier",
    "MemoryCredentialStore",
    "ProjectSummaryStatus",
    "StatusCache",
    "resolve_summary_status",
]
