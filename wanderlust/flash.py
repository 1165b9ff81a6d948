"""Single-use, per-session message relay.

Messages are queued per category in the session and handed out by
``drain``, which empties the category. A message is therefore shown on at
most one rendered response.
"""

from flask import session

SESSION_KEY = "flash"

SUCCESS = "success"
ERROR = "error"


class FlashQueue:
    """Category -> list of messages, backed by a session mapping."""

    def __init__(self, store):
        self._store = store

    def _queues(self) -> dict:
        return self._store.get(SESSION_KEY) or {}

    def push(self, category: str, message: str) -> None:
        queues = dict(self._queues())
        queues[category] = list(queues.get(category, [])) + [message]
        self._store[SESSION_KEY] = queues

    def peek(self, category: str) -> list[str]:
        return list(self._queues().get(category, []))

    def drain(self, category: str) -> list[str]:
        """Returns and clears the queued messages for ``category``."""
        queues = dict(self._queues())
        messages = queues.pop(category, [])
        if messages:
            if queues:
                self._store[SESSION_KEY] = queues
            else:
                self._store.pop(SESSION_KEY, None)
        return list(messages)


def flash_queue() -> FlashQueue:
    """The queue bound to the current request's session."""
    return FlashQueue(session)


def flash_success(message):
    flash_queue().push(SUCCESS, message)


def flash_error(message):
    flash_queue().push(ERROR, message)
