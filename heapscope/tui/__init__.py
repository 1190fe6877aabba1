from .app import HeapApp, TuiSink

__all__ = ["HeapApp", "TuiSink"]
