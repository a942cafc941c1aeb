from bingo_server import socketio


def schedule_win_check(app, registry, room_code: str) -> None:
    """Schedule a row-completion pass for the given room.

    - One independent timer per draw; timers are never cancelled
    - The pass reads the room's drawn numbers when it fires, so it may see
      numbers drawn after the draw that scheduled it
    - A room closed in the meantime turns the pass into a no-op
    - Runs inline in TESTING mode
    """
    delay_ms = int(app.config.get('WIN_CHECK_DELAY_MS', 1500))

    def _worker(code: str, delay: float):
        if delay:
            socketio.sleep(delay)
        completions = registry.check_rows(code)
        if completions is None:
            app.logger.info(f"[win-check-skip] room={code} no longer exists")
            return
        for completion in completions:
            socketio.emit('game:rowCompleted', {
                'playerName': completion['playerName'],
                'rowNumber': completion['rowNumber'],
                'numbers': completion['numbers'],
            }, to=code)
            app.logger.info(
                f"[row-completed] room={code} player={completion['playerName']} "
                f"row={completion['rowNumber']} numbers={completion['numbers']}"
            )

    if app.config.get('TESTING'):
        _worker(room_code, delay_ms / 1000.0)
    else:
        socketio.start_background_task(_worker, room_code, delay_ms / 1000.0)
