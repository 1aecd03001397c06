import secrets
import string
import threading
from collections import OrderedDict
from typing import Dict, List, Optional

from telephone.services.games.session import GameSession

ROOM_CODE_ALPHABET = string.ascii_letters + string.digits + '_-'


def generate_room_code(taken, length=7):
    """Generate a room token not already present in ``taken``."""
    while True:
        code = ''.join(secrets.choice(ROOM_CODE_ALPHABET) for _ in range(length))
        if code not in taken:
            return code


class Player:
    def __init__(self, id: str, name: str):
        self.id = id
        self.name = name

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
        }


class PlayerRegistry:
    """Connected players of one room, kept in join order."""

    def __init__(self):
        self._players: 'OrderedDict[str, Player]' = OrderedDict()

    def add(self, player_id: str, name: str) -> Player:
        player = Player(player_id, name)
        self._players[player_id] = player
        return player

    def remove(self, player_id: str) -> Optional[Player]:
        return self._players.pop(player_id, None)

    def get(self, player_id: str) -> Optional[Player]:
        return self._players.get(player_id)

    def ids(self) -> List[str]:
        return list(self._players.keys())

    def names(self) -> Dict[str, str]:
        return {pid: p.name for pid, p in self._players.items()}

    def first(self) -> Optional[str]:
        return next(iter(self._players), None)

    def __contains__(self, player_id) -> bool:
        return player_id in self._players

    def __len__(self) -> int:
        return len(self._players)

    def to_list(self):
        return [p.to_dict() for p in self._players.values()]


class Settings:
    FIELDS = ('rounds', 'draw_time_sec')

    def __init__(self, rounds: int = 3, draw_time_sec: int = 60):
        self.rounds = rounds
        self.draw_time_sec = draw_time_sec

    def update(self, values) -> None:
        """Merge known keys, skipping values that are not positive integers."""
        for key in self.FIELDS:
            if key not in (values or {}):
                continue
            try:
                value = int(values[key])
            except (TypeError, ValueError):
                continue
            if value > 0:
                setattr(self, key, value)

    def to_dict(self):
        return {
            'rounds': self.rounds,
            'draw_time_sec': self.draw_time_sec,
        }


class Room:
    """One isolated group of players sharing a game session.

    All mutation goes through ``lock``; ``closed`` is set once the room has
    been torn down so late callers holding a stale reference back off.
    """

    def __init__(self, id: str, settings: Settings):
        self.id = id
        self.host_id: Optional[str] = None
        self.players = PlayerRegistry()
        self.settings = settings
        self.game = GameSession()
        self.timer = None
        self.closed = False
        self.lock = threading.RLock()

    def cancel_timer(self) -> None:
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None

    def to_dict(self):
        return {
            'id': self.id,
            'host_id': self.host_id,
            'players': self.players.to_list(),
            'settings': self.settings.to_dict(),
        }
