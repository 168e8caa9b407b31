"""In-process conversation history, owned per session by the caller.

The pipeline appends each answered exchange to the history object it is given;
it does not read history back into prompts. SessionStore keeps one history per
client session id so concurrent sessions never interleave turns. It holds at
most max_sessions histories and evicts the least recently used one beyond that.
"""
import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import List, Literal, Optional

logger = logging.getLogger(__name__)

Role = Literal["user", "model"]

DEFAULT_SESSION_ID = "default"


@dataclass(frozen=True)
class ConversationTurn:
    role: Role
    text: str


class ConversationHistory:
    """Ordered turns capped at max_turns.

    When an append pushes the size over the cap, the two oldest turns (one
    user/model exchange) are dropped together until it fits again.
    """

    def __init__(self, max_turns: int = 20) -> None:
        self.max_turns = max_turns
        self._turns: List[ConversationTurn] = []

    def append_exchange(self, question: str, answer: str) -> None:
        """Record a user question and the model answer, then enforce the cap."""
        self._turns.append(ConversationTurn(role="user", text=question))
        self._turns.append(ConversationTurn(role="model", text=answer))
        while len(self._turns) > self.max_turns:
            del self._turns[:2]

    @property
    def turns(self) -> List[ConversationTurn]:
        return list(self._turns)

    def __len__(self) -> int:
        return len(self._turns)


class SessionStore:
    """Maps session ids to their ConversationHistory, least recently used first out."""

    def __init__(self, max_turns: int = 20, max_sessions: int = 1000) -> None:
        self.max_turns = max_turns
        self.max_sessions = max(1, max_sessions)
        self._sessions: "OrderedDict[str, ConversationHistory]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, session_id: Optional[str] = None) -> ConversationHistory:
        """History for session_id (created on first use; blank means the default session)."""
        key = (session_id or "").strip() or DEFAULT_SESSION_ID
        with self._lock:
            history = self._sessions.get(key)
            if history is None:
                history = ConversationHistory(self.max_turns)
                self._sessions[key] = history
                while len(self._sessions) > self.max_sessions:
                    evicted, _ = self._sessions.popitem(last=False)
                    logger.info("Evicted conversation session %s", evicted)
            else:
                self._sessions.move_to_end(key)
            return history

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
