"""Tests for service feedback helpers."""
from wealth_tracker.messages import MessageLevel, ServiceMessage, error, info, warning


class TestMessageHelpers:
    def test_levels(self):
        assert info("saved") == ServiceMessage(MessageLevel.INFO, "saved")
        assert warning("no price") == ServiceMessage(MessageLevel.WARNING, "no price")
        assert error("bad backup") == ServiceMessage(MessageLevel.ERROR, "bad backup")

    def test_levels_serialize_as_plain_strings(self):
        assert MessageLevel.WARNING == "warning"
