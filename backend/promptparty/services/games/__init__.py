"""Game domain services: round lifecycle and scoring.

This package contains the core game mechanics that HTTP routes and socket
handlers call into, keeping transport concerns separated from the session
and round state machine.
"""
from .lifecycle import RoundLifecycleController
from .scoring import session_scores

__all__ = ['RoundLifecycleController', 'session_scores']
