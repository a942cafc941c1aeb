from bingo_server import socketio
from bingo_server.services.bingo.scheduler import schedule_win_check

SAM_ROW = [5, 12, 23, 41, 67]


def capture_background_task(flask_app, registry, monkeypatch, room_code):
    calls = []
    monkeypatch.setattr(socketio, 'start_background_task', lambda fn, *args: calls.append((fn, args)))
    monkeypatch.setitem(flask_app.config, 'TESTING', False)
    monkeypatch.setitem(flask_app.config, 'WIN_CHECK_DELAY_MS', 1500)
    schedule_win_check(flask_app, registry, room_code)
    assert len(calls) == 1
    return calls[0]


def record_socket_calls(monkeypatch):
    sleeps, emitted = [], []
    monkeypatch.setattr(socketio, 'sleep', lambda seconds: sleeps.append(seconds))
    monkeypatch.setattr(socketio, 'emit', lambda event, data, **kwargs: emitted.append((event, data, kwargs)))
    return sleeps, emitted


def test_win_check_runs_as_background_task(flask_app, registry, monkeypatch):
    registry.code_factory = lambda: 'AB12CD'
    registry.login_admin('admin-1', 'admin')
    room = registry.create_room('admin-1').room
    registry.join_room('p1', room.code, 'Sam')
    registry.submit_card('p1', room.code, [SAM_ROW])

    worker, args = capture_background_task(flask_app, registry, monkeypatch, 'AB12CD')
    assert args == ('AB12CD', 1.5)

    # Numbers drawn after scheduling are still seen when the timer fires
    room.drawn_numbers.extend(SAM_ROW)
    sleeps, emitted = record_socket_calls(monkeypatch)
    worker(*args)

    assert sleeps == [1.5]
    assert emitted == [(
        'game:rowCompleted',
        {'playerName': 'Sam', 'rowNumber': 1, 'numbers': SAM_ROW},
        {'to': 'AB12CD'},
    )]
    assert room.over is True
    assert room.winner.player_name == 'Sam'


def test_background_check_for_closed_room_is_noop(flask_app, registry, monkeypatch):
    registry.code_factory = lambda: 'AB12CD'
    registry.login_admin('admin-1', 'admin')
    registry.create_room('admin-1')

    worker, args = capture_background_task(flask_app, registry, monkeypatch, 'AB12CD')
    registry.close_room('admin-1', 'AB12CD')

    sleeps, emitted = record_socket_calls(monkeypatch)
    worker(*args)
    assert sleeps == [1.5]
    assert emitted == []


def test_late_win_check_on_missing_room_is_noop(flask_app, registry, monkeypatch):
    emitted = []
    monkeypatch.setattr(socketio, 'emit', lambda *args, **kwargs: emitted.append(args))
    schedule_win_check(flask_app, registry, 'GONE00')
    assert emitted == []
