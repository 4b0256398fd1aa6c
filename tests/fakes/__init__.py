"""
Utility fakes for service-layer tests.
"""

from .comms import FakeTransport

__all__ = ["FakeTransport"]
