from .administration import BroadcastCreate, BroadcastRead, StatisticsRead
from .notification import InboxEntryRead, InboxPageRead, MarkAllReadResult, UnreadCountRead
from .preference import PreferenceRead, PreferenceUpdate, ThresholdPayload

__all__ = [
    "BroadcastCreate",
    "BroadcastRead",
    "InboxEntryRead",
    "InboxPageRead",
    "MarkAllReadResult",
    "PreferenceRead",
    "PreferenceUpdate",
    "StatisticsRead",
    "ThresholdPayload",
    "UnreadCountRead",
]
