from typing import Iterable, List, Optional

from .session import Room

ROW_WIDTH = 5


def completed_numbers(row, drawn: Iterable[int]) -> Optional[List[int]]:
    """Return the row's numbers if the row is complete, else None.

    A row counts only when it holds exactly ROW_WIDTH numbers and every one
    of them has been drawn. Blank slots (None) are ignored.
    """
    if not row:
        return None
    drawn_set = set(drawn)
    numbers = [num for num in row if num is not None]
    if len(numbers) != ROW_WIDTH:
        return None
    if all(num in drawn_set for num in numbers):
        return numbers
    return None


def scan_completed_rows(room: Room) -> List[dict]:
    """Collect rows that completed since the last scan.

    Players are visited in join order and rows in index order, so the first
    entry is the tie-break winner when several rows complete together.
    Every returned (player, row) pair is recorded in ``room.notified_rows``.
    """
    completions = []
    drawn = set(room.drawn_numbers)
    for player_id, profile in room.players.items():
        if not profile.card:
            continue
        for row_index, row in enumerate(profile.card):
            numbers = completed_numbers(row, drawn)
            if numbers is None:
                continue
            key = (player_id, row_index)
            if key in room.notified_rows:
                continue
            room.notified_rows.add(key)
            completions.append({
                'playerId': player_id,
                'playerName': profile.name,
                'rowNumber': row_index + 1,
                'numbers': numbers,
            })
    return completions


def apply_completions(room: Room, completions: List[dict]) -> None:
    """End the game on the first completion and remember who won."""
    if not completions:
        return
    first = completions[0]
    if not room.over:
        room.over = True
    room.declare_winner(first['playerId'], first['playerName'], first['rowNumber'], first['numbers'])
