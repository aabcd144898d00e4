"""
Unit tests for the in-memory activity signal source.
"""

import pytest

from spheregrid.modules.session.signals import ActivityKind, InMemorySignalSource, Subscription
from spheregrid.modules.shared.exceptions import InvalidArgumentError


@pytest.mark.unit
@pytest.mark.session
class TestInMemorySignalSource:
    """Test subscription and event delivery."""

    def test_activity_delivered_to_subscribers(self, mocker):
        # Arrange
        source = InMemorySignalSource()
        handler = mocker.Mock()
        source.subscribe_activity(handler)

        # Act
        source.emit_activity(ActivityKind.SCROLL)
        source.emit_activity("keyboard")

        # Assert
        assert handler.call_args_list == [
            mocker.call(ActivityKind.SCROLL),
            mocker.call(ActivityKind.KEYBOARD),
        ]

    def test_unknown_activity_kind_rejected(self):
        with pytest.raises(ValueError):
            InMemorySignalSource().emit_activity("telepathy")

    def test_visibility_notifies_only_on_change(self, mocker):
        source = InMemorySignalSource()
        handler = mocker.Mock()
        source.subscribe_visibility(handler)

        source.set_hidden(False)
        source.set_hidden(True)
        source.set_hidden(True)
        source.set_hidden(False)

        assert handler.call_args_list == [mocker.call(True), mocker.call(False)]
        assert not source.is_hidden()

    def test_initially_hidden(self):
        assert InMemorySignalSource(hidden=True).is_hidden()

    def test_cancel_detaches(self, mocker):
        # Arrange
        source = InMemorySignalSource()
        handler = mocker.Mock()
        subscription = source.subscribe_activity(handler)

        # Act
        subscription.cancel()
        subscription.cancel()
        source.emit_activity()

        # Assert
        handler.assert_not_called()
        assert not subscription.active
        assert source.subscriber_count == 0

    def test_handler_may_unsubscribe_while_notified(self, mocker):
        source = InMemorySignalSource()
        other = mocker.Mock()
        subscription: Subscription

        def _once(kind):
            subscription.cancel()

        subscription = source.subscribe_activity(_once)
        source.subscribe_activity(other)

        source.emit_activity()
        source.emit_activity()

        assert other.call_count == 2
        assert source.subscriber_count == 1

    def test_non_callable_handler_rejected(self):
        with pytest.raises(InvalidArgumentError):
            InMemorySignalSource().subscribe_visibility(None)
