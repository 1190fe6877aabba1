from .app import create_app
from .snapshot import Snapshot, capture_snapshot, load_snapshot

__all__ = ["create_app", "Snapshot", "capture_snapshot", "load_snapshot"]
