"""Outbound event payloads.

Every event is a plain dict with a stable ``type`` key. Maps are copied
so later mutations of a round never leak into an already-issued event.
"""

JOINED = 'joined'
PROMPT = 'prompt'
RESPONSES_SUBMITTED = 'responses_submitted'
VOTES_SUBMITTED = 'votes_submitted'
END = 'end'


def joined(player_id):
    return {'type': JOINED, 'player_id': player_id}


def prompt(round_id, text):
    return {'type': PROMPT, 'id': round_id, 'prompt': text}


def responses_submitted(round_id, responses):
    return {'type': RESPONSES_SUBMITTED, 'id': round_id, 'responses': dict(responses)}


def votes_submitted(round_id, votes):
    return {'type': VOTES_SUBMITTED, 'id': round_id, 'votes': dict(votes)}


def end(session_id):
    return {'type': END, 'id': session_id}
