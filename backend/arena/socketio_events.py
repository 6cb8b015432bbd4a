from flask import current_app, request
from flask_socketio import emit
from functools import wraps

from arena import socketio
from arena.protocol import (
    ACCEPT_REMATCH,
    CHAT_MESSAGE,
    CREATE_GAME,
    GET_GAMES,
    GET_LEADERBOARD,
    GET_STATS,
    JOIN_GAME,
    LEAVE_GAME,
    MAKE_MOVE,
    PROTOCOL_VERSION,
    REGISTER,
    REJECT_REMATCH,
    REQUEST_REMATCH,
    ChatMessage,
    CreateGame,
    GetLeaderboard,
    GetStats,
    MakeMove,
    MatchRef,
    Register,
    parse,
)
from arena.services import ArenaError, SessionCoordinator


def _coordinator() -> SessionCoordinator:
    return current_app.extensions['arena']


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _guarded(handler):
    """Report rejected requests to the sender only; never let a handler crash."""
    @wraps(handler)
    def wrapper(data=None):
        try:
            handler(data)
        except ArenaError as exc:
            current_app.logger.info(f"[rejected] handler={handler.__name__} sid={_get_sid()} code={exc.code}")
            emit('error', exc.to_dict())
        except Exception:
            current_app.logger.exception(f"[handler-error] handler={handler.__name__} sid={_get_sid()}")
            emit('error', {'code': 'InternalError', 'message': 'Something went wrong'})
    return wrapper


def handle_connect(auth=None):
    emit('connected', {'message': f'Connected to {request.namespace}', 'protocolVersion': PROTOCOL_VERSION})
    emit('games-list', _coordinator().lobby.snapshot())


def handle_disconnect(*args):
    sid = _get_sid()
    try:
        _coordinator().handle_disconnect(sid)
    except Exception:
        current_app.logger.exception(f"[disconnect-error] sid={sid}")


@_guarded
def handle_register(data):
    payload = parse(Register, data)
    _coordinator().register(_get_sid(), payload.display_name)


@_guarded
def handle_create_game(data):
    payload = parse(CreateGame, data)
    _coordinator().create_match(_get_sid(), payload.name)


@_guarded
def handle_join_game(data):
    payload = parse(MatchRef, data)
    _coordinator().join_match(_get_sid(), payload.match_id)


@_guarded
def handle_make_move(data):
    payload = parse(MakeMove, data)
    _coordinator().apply_move(_get_sid(), payload.match_id, payload.cell_index)


@_guarded
def handle_leave_game(data):
    payload = parse(MatchRef, data)
    _coordinator().leave_match(_get_sid(), payload.match_id)


@_guarded
def handle_request_rematch(data):
    payload = parse(MatchRef, data)
    _coordinator().request_rematch(_get_sid(), payload.match_id)


@_guarded
def handle_accept_rematch(data):
    payload = parse(MatchRef, data)
    _coordinator().accept_rematch(_get_sid(), payload.match_id)


@_guarded
def handle_reject_rematch(data):
    payload = parse(MatchRef, data)
    _coordinator().reject_rematch(_get_sid(), payload.match_id)


@_guarded
def handle_chat_message(data):
    payload = parse(ChatMessage, data)
    _coordinator().relay_chat(_get_sid(), payload.match_id, payload.text)


@_guarded
def handle_get_games(data):
    _coordinator().publish_games(_get_sid())


@_guarded
def handle_get_stats(data):
    payload = parse(GetStats, data)
    _coordinator().send_stats(_get_sid(), payload.username)


@_guarded
def handle_get_leaderboard(data):
    payload = parse(GetLeaderboard, data)
    _coordinator().send_leaderboard(_get_sid(), payload.limit)


EVENT_HANDLERS = {
    REGISTER: handle_register,
    CREATE_GAME: handle_create_game,
    JOIN_GAME: handle_join_game,
    MAKE_MOVE: handle_make_move,
    LEAVE_GAME: handle_leave_game,
    REQUEST_REMATCH: handle_request_rematch,
    ACCEPT_REMATCH: handle_accept_rematch,
    REJECT_REMATCH: handle_reject_rematch,
    CHAT_MESSAGE: handle_chat_message,
    GET_GAMES: handle_get_games,
    GET_STATS: handle_get_stats,
    GET_LEADERBOARD: handle_get_leaderboard,
}


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register Socket.IO event handlers on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    for event, handler in EVENT_HANDLERS.items():
        socketio.on_event(event, handler, namespace=namespace)
