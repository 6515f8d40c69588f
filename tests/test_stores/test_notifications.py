"""Tests for the Notifier queue."""

from __future__ import annotations

import logging

from product_tracker.notifications import NotificationLevel, Notifier


class TestNotifier:
    def test_emission_order(self):
        notifier = Notifier()
        notifier.success("saved")
        notifier.error("failed")
        notifier.info("fyi")
        assert [(n.level, n.message) for n in notifier.pending] == [
            (NotificationLevel.SUCCESS, "saved"),
            (NotificationLevel.ERROR, "failed"),
            (NotificationLevel.INFO, "fyi"),
        ]

    def test_drain_clears(self):
        notifier = Notifier()
        notifier.success("saved")
        assert len(notifier.drain()) == 1
        assert notifier.pending == []
        assert notifier.drain() == []

    def test_pending_is_copy(self):
        notifier = Notifier()
        notifier.info("x")
        notifier.pending.clear()
        assert len(notifier.pending) == 1

    def test_errors_logged_as_warnings(self, caplog):
        notifier = Notifier()
        with caplog.at_level(logging.INFO, logger="product_tracker.notifications"):
            notifier.error("Failed to add product")
        assert caplog.records[-1].levelno == logging.WARNING
        assert "Failed to add product" in caplog.records[-1].getMessage()
