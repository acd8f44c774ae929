import logging
from typing import List, Optional

from promptparty import events
from promptparty.broadcast import BroadcastHub, Connection
from promptparty.errors import Conflict, InternalError, InvalidInput, NotFound, require
from promptparty.models import Round, Session
from promptparty.stores import RoundStore, SessionStore
from .scoring import session_scores

logger = logging.getLogger(__name__)


class RoundLifecycleController:
    """Join/start/advance/respond/vote against the session and round stores.

    Every mutation runs under the lock of the entity it touches. Threshold
    checks and the one-time transition flag are flipped in the same critical
    section as the mutation; the resulting event is broadcast after the lock
    is released.
    """

    def __init__(self, sessions: SessionStore, rounds: RoundStore, hub: BroadcastHub,
                 prompt_source, rounds_per_game: int = 5):
        self.sessions = sessions
        self.rounds = rounds
        self.hub = hub
        self.prompt_source = prompt_source
        # 0 or less means the leader may advance forever
        self.rounds_per_game = rounds_per_game

    # ---- helpers ----

    def _subscribers(self, session: Session) -> List[Connection]:
        with session.lock:
            return list(session.subscribers)

    def _publish(self, session: Session, event: dict) -> None:
        self.hub.broadcast(self._subscribers(session), event)

    def _fetch_round(self, session: Session, round_id: str) -> Round:
        rnd = self.rounds.fetch(round_id)
        if rnd.session_id != session.id:
            raise NotFound(f'prompt id {round_id} does not exist in game {session.id}')
        return rnd

    def _open_round(self, session: Session) -> Round:
        text = self.prompt_source.next_prompt_text()
        rnd = self.rounds.create(text, session.id)
        number = self.sessions.add_round(session.id, rnd.id)
        logger.info(f"[round-created] game={session.id} round={rnd.id} number={number}")
        return rnd

    def _roster(self, session: Session):
        # Lock order is round then session; nothing takes them the other way round
        with session.lock:
            return len(session.player_ids), set(session.player_ids)

    # ---- commands ----

    def create_session(self) -> Session:
        session = self.sessions.create()
        logger.info(f"[game-created] game={session.id}")
        return session

    def join_session(self, session_id: str, player_id: str) -> bool:
        require(player_id, 'player_id')
        session = self.sessions.fetch(session_id)
        leader = self.sessions.add_player(session.id, player_id)
        logger.info(f"[joined] game={session.id} player={player_id} leader={leader}")
        self._publish(session, events.joined(player_id))
        return leader

    def subscribe(self, session_id: str, connection: Connection) -> Session:
        session = self.sessions.fetch(session_id)
        if not self.sessions.add_subscriber(session.id, connection):
            logger.debug(f"[subscribe-duplicate] game={session.id} conn={connection!r}")
            return session
        logger.info(f"[subscribed] game={session.id} conn={connection!r}")
        return session

    def unsubscribe(self, session_id: str, connection: Connection) -> bool:
        session = self.sessions.fetch(session_id)
        removed = self.sessions.remove_subscriber(session.id, connection)
        if removed:
            logger.info(f"[unsubscribed] game={session.id} conn={connection!r}")
        return removed

    def start_game(self, session_id: str) -> Round:
        session = self.sessions.fetch(session_id)
        with session.lock:
            if session.round_ids:
                raise Conflict(f'game {session.id} has already started')
            rnd = self._open_round(session)
        self._publish(session, events.prompt(rnd.id, rnd.prompt))
        return rnd

    def advance_game(self, session_id: str) -> Optional[Round]:
        """Open the next round, or end the game once the round limit is hit.

        Returns the new round, or None when the game is over. The end event
        is broadcast once; later calls return None silently.
        """
        session = self.sessions.fetch(session_id)
        with session.lock:
            if session.finished:
                return None
            limit = self.rounds_per_game
            if limit > 0 and len(session.round_ids) >= limit:
                session.finished = True
                rnd = None
                logger.info(f"[finish] game={session.id} rounds={len(session.round_ids)}")
            else:
                rnd = self._open_round(session)
        if rnd is None:
            self._publish(session, events.end(session.id))
            return None
        self._publish(session, events.prompt(rnd.id, rnd.prompt))
        return rnd

    def submit_response(self, session_id: str, round_id: str, player_id: str, text: str) -> int:
        require(round_id, 'prompt_id')
        require(player_id, 'player_id')
        require(text, 'response')
        session = self.sessions.fetch(session_id)
        rnd = self._fetch_round(session, round_id)

        event = None
        with rnd.lock:
            # Roster is read under the round lock so the threshold matches this mutation
            player_count, roster = self._roster(session)
            if player_id not in roster:
                raise InvalidInput(f'player {player_id} has not joined game {session.id}')
            count = self.rounds.record_response(rnd.id, player_id, text)
            if rnd.responses_complete(player_count) and rnd.claim(events.RESPONSES_SUBMITTED):
                event = events.responses_submitted(rnd.id, rnd.responses)
        if event is not None:
            logger.info(f"[responses-submitted] game={session.id} round={rnd.id} count={count}")
            self._publish(session, event)
        return count

    def submit_vote(self, session_id: str, round_id: str, candidate_id: str) -> int:
        require(round_id, 'prompt_id')
        require(candidate_id, 'vote')
        session = self.sessions.fetch(session_id)
        rnd = self._fetch_round(session, round_id)

        event = None
        with rnd.lock:
            player_count, roster = self._roster(session)
            if candidate_id not in roster:
                raise InvalidInput(f'player {candidate_id} has not joined game {session.id}')
            if rnd.total_votes >= player_count:
                raise Conflict(f'all votes are already in for prompt {rnd.id}')
            total = self.rounds.record_vote(rnd.id, candidate_id)
            if rnd.votes_complete(player_count) and rnd.claim(events.VOTES_SUBMITTED):
                event = events.votes_submitted(rnd.id, rnd.votes)
        if event is not None:
            logger.info(f"[votes-submitted] game={session.id} round={rnd.id} total={total}")
            self._publish(session, event)
        return total

    # ---- read views ----

    def scores(self, session_id: str):
        session = self.sessions.fetch(session_id)
        return session_scores(session, self.rounds)

    def state(self, session_id: str) -> dict:
        session = self.sessions.fetch(session_id)
        payload = session.to_dict()
        payload['rounds_per_game'] = self.rounds_per_game
        current_id = payload['current_round_id']
        payload['current_round'] = None
        if current_id:
            try:
                payload['current_round'] = self.rounds.fetch(current_id).to_dict()
            except NotFound as exc:
                logger.error(f"[state-missing-round] game={session.id} round={current_id}")
                raise InternalError(f"round {current_id} listed by game {session.id} is missing") from exc
        payload['scores'] = session_scores(session, self.rounds)
        return payload
