"""Test helper utilities for job tracker tests."""

from .fake_collection import FakeCollection
from .observers import RecordingObserver, wait_for_messages

__all__ = ["FakeCollection", "RecordingObserver", "wait_for_messages"]
