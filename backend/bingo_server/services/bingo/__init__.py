"""Bingo domain services: rooms, draws, win detection and history.

This package contains pure(ish) domain logic that is driven by the
Socket.IO handlers and HTTP routes, keeping transport concerns separated
from core game mechanics.
"""
from .errors import BingoError
from .registry import SessionRegistry

__all__ = ['BingoError', 'SessionRegistry']
