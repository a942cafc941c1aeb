"""Errors raised by the bingo coordinator.

Each error carries the message that is sent back to the requesting
connection in an ``error`` event.
"""


class BingoError(Exception):
    default_message = 'Invalid request'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotAuthorized(BingoError):
    default_message = 'Not authorized'


class RoomNotFound(BingoError):
    default_message = 'Room not found'


class ValidationError(BingoError):
    default_message = 'Please enter your name'


class NameTaken(BingoError):
    default_message = 'This name is already taken. Please choose another name.'


class GameOver(BingoError):
    default_message = 'Game is over! A winner has been declared.'


class PoolExhausted(BingoError):
    default_message = 'All numbers have been drawn!'


class InvalidRequest(BingoError):
    default_message = 'Invalid request'


class AuthError(BingoError):
    default_message = 'Invalid credentials'


class InvalidToken(BingoError):
    default_message = 'Invalid token'
