"""Error taxonomy for room and game operations.

Every error is reported back to the requesting connection through the
acknowledgement of the triggering event; none of them tears down the room.
"""


class GameError(Exception):
    """Base exception for rejected room/game requests."""

    code = 'GameError'

    def __init__(self, message=None):
        super().__init__(message or self.code)

    def to_ack(self):
        return {'ok': False, 'err': self.code}


class RoomNotFound(GameError):
    """Raised when an operation references an unknown room id."""

    code = 'RoomNotFound'


class NotHost(GameError):
    """Raised when a host-only operation comes from another player."""

    code = 'NotHost'


class AlreadyStarted(GameError):
    code = 'AlreadyStarted'


class WrongPhase(GameError):
    """Raised when a submission arrives outside the phase that accepts it."""

    code = 'WrongPhase'


class NoSlot(GameError):
    """Raised when a player who was not present at game start submits."""

    code = 'NoSlot'
