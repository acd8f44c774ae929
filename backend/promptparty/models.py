import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List

from .events import RESPONSES_SUBMITTED, VOTES_SUBMITTED


@dataclass
class Session:
    id: str
    player_ids: List[str] = field(default_factory=list)
    subscribers: List[Any] = field(default_factory=list)
    round_ids: List[str] = field(default_factory=list)
    finished: bool = False
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    @property
    def player_count(self) -> int:
        return len(self.player_ids)

    @property
    def current_round_id(self):
        return self.round_ids[-1] if self.round_ids else None

    def to_dict(self):
        with self.lock:
            return {
                'game_code': self.id,
                'player_ids': list(self.player_ids),
                'round_ids': list(self.round_ids),
                'current_round_id': self.current_round_id,
                'subscriber_count': len(self.subscribers),
                'finished': self.finished,
            }


@dataclass
class Round:
    """One prompt-response-vote cycle, owned by exactly one session."""

    id: str
    prompt: str
    session_id: str
    responses: Dict[str, str] = field(default_factory=dict)
    votes: Dict[str, int] = field(default_factory=dict)
    responses_announced: bool = False
    votes_announced: bool = False
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    @property
    def response_count(self) -> int:
        return len(self.responses)

    @property
    def total_votes(self) -> int:
        return sum(self.votes.values())

    def responses_complete(self, player_count: int) -> bool:
        return player_count > 0 and self.response_count == player_count

    def votes_complete(self, player_count: int) -> bool:
        return player_count > 0 and self.total_votes == player_count

    def claim(self, transition: str) -> bool:
        """Flip the one-time flag for transition; True only for the first caller.

        Must be called with self.lock held, in the same critical section as
        the mutation that reached the threshold.
        """
        if transition == RESPONSES_SUBMITTED:
            if self.responses_announced:
                return False
            self.responses_announced = True
            return True
        if transition == VOTES_SUBMITTED:
            if self.votes_announced:
                return False
            self.votes_announced = True
            return True
        raise ValueError(f'unknown transition {transition!r}')

    def to_dict(self):
        with self.lock:
            return {
                'id': self.id,
                'prompt': self.prompt,
                'responses': dict(self.responses),
                'votes': dict(self.votes),
                'responses_submitted': self.responses_announced,
                'votes_submitted': self.votes_announced,
            }
