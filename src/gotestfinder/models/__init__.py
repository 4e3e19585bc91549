"""Data models for discovered tests."""

from gotestfinder.models.test_record import TestRecord

__all__ = ["TestRecord"]
