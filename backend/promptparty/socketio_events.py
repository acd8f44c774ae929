from flask import current_app, request
from flask_socketio import emit
from promptparty import get_controller, socketio
from promptparty.broadcast import SocketIOConnection
from promptparty.errors import NotFound, PromptPartyError
from typing import Dict, Set


# sid -> game codes the socket subscribed to, so disconnects can prune every handle
_sid_to_games: Dict[str, Set[str]] = {}


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _connection(sid: str) -> SocketIOConnection:
    return SocketIOConnection(socketio, sid, namespace=request.namespace)


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_disconnect(*args):
    sid = _get_sid()
    for game_code in sorted(_sid_to_games.pop(sid, set())):
        try:
            get_controller().unsubscribe(game_code, _connection(sid))
        except NotFound:
            current_app.logger.info(f"[disconnect] sid={sid} game={game_code} already gone")


def handle_subscribe(data):
    game_code = (data or {}).get('game_code')
    if not game_code:
        emit('error', {'message': 'game_code is required'})
        return
    sid = _get_sid()
    try:
        session = get_controller().subscribe(game_code, _connection(sid))
    except PromptPartyError as exc:
        emit('error', exc.to_dict())
        return
    _sid_to_games.setdefault(sid, set()).add(session.id)
    emit('subscribed', {'game_code': session.id})


def handle_unsubscribe(data):
    game_code = (data or {}).get('game_code')
    if not game_code:
        emit('error', {'message': 'game_code is required'})
        return
    sid = _get_sid()
    try:
        get_controller().unsubscribe(game_code, _connection(sid))
    except PromptPartyError as exc:
        emit('error', exc.to_dict())
        return
    _sid_to_games.get(sid, set()).discard(game_code.lower())
    emit('unsubscribed', {'game_code': game_code.lower()})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
        socketio.on_event('subscribe', handle_subscribe, namespace=namespace)
        socketio.on_event('unsubscribe', handle_unsubscribe, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)
