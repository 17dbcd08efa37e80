from .confluent import BROKER, SCHEMA_REGISTRY, confluent_tracked_secrets, create_confluent_watcher
from .rotation import RotationCallback, RotationWatcher, WatcherState
from .timers import AsyncioTimer, ManualTimer
from .tracked import TrackedSecret

__all__ = [
    "BROKER",
    "SCHEMA_REGISTRY",
    "confluent_tracked_secrets",
    "create_confluent_watcher",
    "RotationCallback",
    "RotationWatcher",
    "WatcherState",
    "AsyncioTimer",
    "ManualTimer",
    "TrackedSecret",
]
