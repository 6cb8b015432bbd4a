"""Errors raised by the session core.

Each error is non-fatal: the Socket.IO layer reports it to the originating
connection as an ``error`` event and leaves all state untouched.
"""


class ArenaError(Exception):
    code = 'ArenaError'
    message = 'Request rejected'

    def __init__(self, message: str = None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_dict(self):
        return {'code': self.code, 'message': self.message}


# Input errors

class InvalidName(ArenaError):
    code = 'InvalidName'
    message = 'Name must be at least 2 characters'


class InvalidCellIndex(ArenaError):
    code = 'InvalidCellIndex'
    message = 'Cell index must be between 0 and 8'


class InvalidPayload(ArenaError):
    code = 'InvalidPayload'
    message = 'Malformed request'


class InvalidMessage(ArenaError):
    code = 'InvalidMessage'
    message = 'Message is empty or too long'


# Precondition errors

class NameTaken(ArenaError):
    code = 'NameTaken'
    message = 'That name is already in use'


class NotRegistered(ArenaError):
    code = 'NotRegistered'
    message = 'Please register first'


class MatchNotFound(ArenaError):
    code = 'MatchNotFound'
    message = 'Game not found'


class MatchFull(ArenaError):
    code = 'MatchFull'
    message = 'Game is full'


class AlreadyInMatch(ArenaError):
    code = 'AlreadyInMatch'
    message = 'Already in this game'


class NotParticipant(ArenaError):
    code = 'NotParticipant'
    message = 'Not in this game'


class GameNotActive(ArenaError):
    code = 'GameNotActive'
    message = 'Game is not in progress'


class NotYourTurn(ArenaError):
    code = 'NotYourTurn'
    message = 'Not your turn'


class CellOccupied(ArenaError):
    code = 'CellOccupied'
    message = 'Cell already taken'


class OpponentUnavailable(ArenaError):
    code = 'OpponentUnavailable'
    message = 'Opponent is not connected'


class NoRematchOffer(ArenaError):
    code = 'NoRematchOffer'
    message = 'No rematch has been offered'
