from typing import Dict

from promptparty.errors import InternalError, NotFound
from promptparty.models import Session
from promptparty.stores import RoundStore


def session_scores(session: Session, rounds: RoundStore) -> Dict[str, int]:
    """Sum vote counts per candidate across every round of the session.

    Scores are a derived view; nothing is stored. A round id listed by the
    session but missing from the round store is an internal inconsistency
    and fails only this request.
    """
    with session.lock:
        round_ids = list(session.round_ids)
    scores: Dict[str, int] = {}
    for round_id in round_ids:
        try:
            rnd = rounds.fetch(round_id)
        except NotFound as exc:
            raise InternalError(f'round {round_id} listed by game {session.id} is missing') from exc
        with rnd.lock:
            for candidate_id, count in rnd.votes.items():
                scores[candidate_id] = scores.get(candidate_id, 0) + count
    return scores
