"""
In-memory, append-only conversation log for one operator session.

The store is the single source of conversation context: the orchestrator appends the
operator's message and the agent's reply to it, and the reply chain reads the most recent
messages back as context for the next reply. Messages are never edited or removed, and
insertion order is the only ordering. Nothing is persisted; the log lives exactly as long
as the process (or the application instance that owns it).
"""
import threading
from typing import Iterator, List

from shared.models import Message


class ConversationStore:
    """
    Append-only ordered log of `Message` objects.

    The store refuses anything that is not a `Message` and refuses a message whose id was
    already appended, so ids stay unique for the whole session. A lock guards the list
    because the web layer may read it from worker threads while a command is running.
    """

    def __init__(self) -> None:
        self._messages: List[Message] = []
        self._ids = set()
        self._lock = threading.Lock()

    def append(self, message: Message) -> None:
        """
        Append one message at the end of the log.

        Args:
            message (Message): The message to store.

        Raises:
            TypeError: If `message` is not a `Message`.
            ValueError: If a message with the same id is already stored.
        """
        if not isinstance(message, Message):
            raise TypeError(f"ConversationStore only accepts Message objects, got {type(message).__name__}")
        with self._lock:
            if message.id in self._ids:
                raise ValueError(f"Message id already stored: {message.id}")
            self._ids.add(message.id)
            self._messages.append(message)

    def recent(self, n: int) -> List[Message]:
        """
        Return the last `n` messages in insertion order.

        Args:
            n (int): How many messages to return. Zero or negative values return an empty list;
                values larger than the log return the whole log.

        Returns:
            List[Message]: A new list; mutating it does not affect the store.
        """
        if n <= 0:
            return []
        with self._lock:
            return list(self._messages[-n:])

    def all(self) -> List[Message]:
        """Return every stored message in insertion order."""
        with self._lock:
            return list(self._messages)

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self.all())
