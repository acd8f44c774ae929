"""In-memory session and round repositories.

Both stores are process-scoped: created once by the app factory and handed
to the lifecycle controller. The store-level lock only guards the id map;
mutations of a single session or round take that entity's own lock so
unrelated games never contend.
"""
import logging
import threading
from typing import Dict

from .errors import NotFound
from .identifiers import new_round_id, new_session_code
from .models import Round, Session

logger = logging.getLogger(__name__)


class SessionStore:

    def __init__(self, code_length: int = 4):
        self.code_length = code_length
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()

    def create(self) -> Session:
        with self._lock:
            while True:
                code = new_session_code(self.code_length)
                if code not in self._sessions:
                    break
                logger.debug(f"[code-collision] game={code} rerolling")
            session = Session(id=code)
            self._sessions[code] = session
        return session

    def fetch(self, session_id: str) -> Session:
        with self._lock:
            session = self._sessions.get((session_id or '').lower())
        if session is None:
            raise NotFound(f'game id {session_id} does not exist')
        return session

    def add_player(self, session_id: str, player_id: str) -> bool:
        """Append player_id; returns True when this player is the leader."""
        session = self.fetch(session_id)
        with session.lock:
            leader = len(session.player_ids) == 0
            session.player_ids.append(player_id)
        return leader

    def add_subscriber(self, session_id: str, connection) -> bool:
        """Register connection once; False when it is already subscribed."""
        session = self.fetch(session_id)
        with session.lock:
            if connection in session.subscribers:
                return False
            session.subscribers.append(connection)
        return True

    def remove_subscriber(self, session_id: str, connection) -> bool:
        session = self.fetch(session_id)
        with session.lock:
            try:
                session.subscribers.remove(connection)
            except ValueError:
                return False
        return True

    def add_round(self, session_id: str, round_id: str) -> int:
        session = self.fetch(session_id)
        with session.lock:
            session.round_ids.append(round_id)
            return len(session.round_ids)


class RoundStore:

    def __init__(self):
        self._rounds: Dict[str, Round] = {}
        self._lock = threading.Lock()

    def create(self, prompt_text: str, session_id: str) -> Round:
        rnd = Round(id=new_round_id(), prompt=prompt_text, session_id=session_id)
        with self._lock:
            self._rounds[rnd.id] = rnd
        return rnd

    def fetch(self, round_id: str) -> Round:
        with self._lock:
            rnd = self._rounds.get(round_id)
        if rnd is None:
            raise NotFound(f'prompt id {round_id} does not exist')
        return rnd

    def record_response(self, round_id: str, player_id: str, text: str) -> int:
        rnd = self.fetch(round_id)
        with rnd.lock:
            rnd.responses[player_id] = text
            return rnd.response_count

    def record_vote(self, round_id: str, candidate_id: str) -> int:
        rnd = self.fetch(round_id)
        with rnd.lock:
            rnd.votes[candidate_id] = rnd.votes.get(candidate_id, 0) + 1
            return rnd.total_votes
