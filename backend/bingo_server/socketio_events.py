from flask_socketio import join_room, leave_room, close_room, emit
from flask import current_app, request
from bingo_server import socketio, get_registry
from bingo_server.auth import check_admin_credentials
from bingo_server.services.bingo.errors import BingoError
from bingo_server.services.bingo.scheduler import schedule_win_check
from typing import Any, Dict
import functools


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _reports_errors(handler):
    """Send domain errors back to the caller only, as an `error` event."""
    @functools.wraps(handler)
    def wrapper(*args, **kwargs):
        try:
            return handler(*args, **kwargs)
        except BingoError as exc:
            current_app.logger.info(f"[rejected] event={handler.__name__} sid={_get_sid()} reason={exc.message}")
            emit('error', {'message': exc.message})
    return wrapper


def _send_players_list(room_code: str, admin_sid) -> None:
    if not admin_sid:
        return
    registry = get_registry()
    socketio.emit('room:playersList', {'players': registry.roster(room_code)}, to=admin_sid)


def _announce_departure(result) -> None:
    if result is None or result.was_admin:
        return
    socketio.emit('player:left', {
        'playerCount': result.player_count,
        'playerId': result.player_id,
        'playerName': result.player_name,
    }, to=result.room_code)
    if result.admin_sid:
        socketio.emit('room:playersList', {'players': result.roster}, to=result.admin_sid)


def _switch_rooms(left, room_code: str) -> None:
    if left is not None:
        leave_room(left.room_code)
        _announce_departure(left)
    join_room(room_code)


def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")


def handle_disconnect(reason=None):
    registry = get_registry()
    result = registry.detach(_get_sid())
    current_app.logger.info(f"[disconnect] sid={_get_sid()} reason={reason}")
    _announce_departure(result)


def handle_admin_login(data):
    data = data or {}
    username = data.get('username')
    if check_admin_credentials(username, data.get('password')):
        get_registry().login_admin(_get_sid(), username)
        emit('admin:loginSuccess', {'isAdmin': True, 'username': username})
        return
    current_app.logger.info(f"[admin-login-failed] sid={_get_sid()}")
    emit('admin:loginError', {'message': 'Invalid credentials'})


@_reports_errors
def handle_room_create(data):
    existing_code = (data or {}).get('roomId')
    registry = get_registry()
    result = registry.create_room(_get_sid(), existing_code)
    room = result.room
    _switch_rooms(result.left, room.code)
    payload: Dict[str, Any] = {
        'roomId': room.code,
        'playerCount': room.player_count,
        'reconnected': result.reconnected,
    }
    if result.reconnected:
        payload['drawnNumbers'] = result.drawn_numbers
    emit('room:created', payload)
    _send_players_list(room.code, room.admin_sid)


@_reports_errors
def handle_room_join(data):
    data = data or {}
    room_code = data.get('roomId')
    registry = get_registry()
    result = registry.join_room(_get_sid(), room_code, data.get('playerName'), data.get('playerSessionId'))
    profile = result.profile
    _switch_rooms(result.left, room_code)
    emit('room:joined', {
        'roomId': room_code,
        'playerCount': result.player_count,
        'isAdmin': result.is_admin,
        'drawnNumbers': result.drawn_numbers,
        'playerId': profile.id,
        'playerName': profile.name,
        'bingoCard': profile.card,
    })
    socketio.emit('player:joined', {
        'playerCount': result.player_count,
        'playerId': profile.id,
        'playerName': profile.name,
    }, to=room_code)
    _send_players_list(room_code, result.room.admin_sid)


@_reports_errors
def handle_bingo_card(data):
    data = data or {}
    registry = get_registry()
    room, profile = registry.submit_card(_get_sid(), data.get('roomId'), data.get('bingoCard'), data.get('playerId'))
    if room.admin_sid:
        socketio.emit('player:bingoCard', {
            'playerId': profile.id,
            'playerName': profile.name,
            'bingoCard': profile.card,
        }, to=room.admin_sid)
    _send_players_list(room.code, room.admin_sid)


@_reports_errors
def handle_draw_number(data=None):
    registry = get_registry()
    result = registry.draw_number(_get_sid())
    socketio.emit('game:numberDrawn', {
        'number': result.number,
        'startTime': result.start_time,
        'drawnNumbers': result.drawn_numbers,
    }, to=result.room_code)
    schedule_win_check(current_app._get_current_object(), registry, result.room_code)


@_reports_errors
def handle_room_close(data):
    room_code = (data or {}).get('roomId')
    registry = get_registry()
    result = registry.close_room(_get_sid(), room_code)
    socketio.emit('room:closed', {'message': result.message}, to=room_code)
    close_room(room_code)


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers.

    Event names and payloads are the wire contract shared with the
    browser clients, so they live on the default namespace.
    """
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('admin:login', handle_admin_login, namespace=namespace)
    socketio.on_event('room:create', handle_room_create, namespace=namespace)
    socketio.on_event('room:join', handle_room_join, namespace=namespace)
    socketio.on_event('player:bingoCard', handle_bingo_card, namespace=namespace)
    socketio.on_event('game:drawNumber', handle_draw_number, namespace=namespace)
    socketio.on_event('room:close', handle_room_close, namespace=namespace)
