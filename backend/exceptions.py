"""Errors raised by the order, growth and verification workflows.

Input problems use Django's own ``ValidationError`` (re-exported here) so that
model ``clean()`` methods and workflow methods report them the same way.
"""

from django.core.exceptions import ValidationError  # noqa: F401


class IllegalTransition(Exception):
    """A state change was requested that the current state does not allow."""

    def __init__(self, message, current_status=None):
        super().__init__(message)
        self.message = message
        self.current_status = current_status


class ConcurrentModification(IllegalTransition):
    """The record changed between the legality check and the conditional update."""


class DuplicateRequest(Exception):
    """An order with the same idempotency key already exists."""

    def __init__(self, message, existing_id=None):
        super().__init__(message)
        self.message = message
        self.existing_id = existing_id


class PersistenceError(Exception):
    """The database call underneath a workflow operation failed."""


class NotificationDispatchError(Exception):
    """An email notification could not be sent."""


def validation_messages(exc):
    """Flatten a Django ValidationError into something JSON serialisable."""
    if hasattr(exc, 'message_dict'):
        return exc.message_dict
    return exc.messages
