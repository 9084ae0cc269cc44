"""
TestRail integration exports.
"""

from railsync.testrail.client import TestRailClient

__all__ = ["TestRailClient"]
