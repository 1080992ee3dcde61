"""Test utilities for trellis engines and route trees.

    from trellis.testing import TestClient, RecordingTarget
"""

from trellis.testing.client import TestClient
from trellis.testing.recorder import RecordingTarget

__all__ = ["RecordingTarget", "TestClient"]
