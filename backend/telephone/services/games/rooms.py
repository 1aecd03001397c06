import logging
import threading
from typing import Callable, Dict, Optional

from telephone.errors import NoSlot, NotHost, RoomNotFound, WrongPhase
from telephone.models import Room, Settings, generate_room_code
from .session import GamePhase


class RoomRegistry:
    """Owns the live rooms of one server process.

    Locking: ``_lock`` guards only the room table and the connection index.
    Each room's state is mutated under ``room.lock``. The room lock may be
    held while taking ``_lock``, never the other way round.

    ``transport`` provides ``send(event, payload, to)``, ``enter(sid, room_id)``
    and ``leave(sid, room_id)``. ``timer_factory(room)`` returns an unstarted
    RoundTimer, or None to run without a countdown.
    """

    def __init__(
        self,
        transport,
        timer_factory: Optional[Callable[[Room], object]] = None,
        default_rounds: int = 3,
        default_draw_time_sec: int = 60,
        code_length: int = 7,
        logger=None,
    ):
        self.transport = transport
        self.timer_factory = timer_factory
        self.default_rounds = default_rounds
        self.default_draw_time_sec = default_draw_time_sec
        self.code_length = code_length
        self.logger = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._rooms: Dict[str, Room] = {}
        self._room_of: Dict[str, str] = {}

    # ---- lookup ----

    def get(self, room_id: str) -> Room:
        with self._lock:
            room = self._rooms.get(room_id)
        if room is None:
            raise RoomNotFound(f"room {room_id} not found")
        return room

    def room_of(self, sid: str) -> Optional[str]:
        with self._lock:
            return self._room_of.get(sid)

    def __len__(self):
        with self._lock:
            return len(self._rooms)

    def _locked(self, room_id: str) -> Room:
        """Return the room with its lock held; caller must release it."""
        room = self.get(room_id)
        room.lock.acquire()
        if room.closed:
            room.lock.release()
            raise RoomNotFound(f"room {room_id} was closed")
        return room

    def _broadcast_room(self, room: Room) -> None:
        self.transport.send('room_update', room.to_dict(), room.id)

    # ---- membership ----

    def create_room(self, sid: str, name: Optional[str]) -> Room:
        self.leave(sid)
        settings = Settings(self.default_rounds, self.default_draw_time_sec)
        with self._lock:
            room_id = generate_room_code(self._rooms, self.code_length)
            room = Room(room_id, settings)
            self._rooms[room_id] = room
        with room.lock:
            room.players.add(sid, name or 'Player')
            room.host_id = sid
            with self._lock:
                self._room_of[sid] = room_id
            self.transport.enter(sid, room_id)
            self.logger.info(f"[room-create] room={room_id} host={sid}")
            self._broadcast_room(room)
        return room

    def join_room(self, sid: str, room_id: str, name: Optional[str]) -> Room:
        if self.room_of(sid) not in (None, room_id):
            self.leave(sid)
        room = self._locked(room_id)
        try:
            room.players.add(sid, name or 'Player')
            if room.host_id is None:
                room.host_id = sid
            with self._lock:
                self._room_of[sid] = room_id
            self.transport.enter(sid, room_id)
            self.logger.info(f"[room-join] room={room_id} player={sid} host={room.host_id}")
            self._broadcast_room(room)
            return room
        finally:
            room.lock.release()

    def leave(self, sid: str) -> None:
        """Remove ``sid`` from whatever room it belongs to. Safe to repeat."""
        room_id = self.room_of(sid)
        if room_id is None:
            return
        try:
            room = self._locked(room_id)
        except RoomNotFound:
            with self._lock:
                self._room_of.pop(sid, None)
            return
        try:
            room.players.remove(sid)
            with self._lock:
                self._room_of.pop(sid, None)
            self.transport.leave(sid, room_id)
            if room.host_id == sid:
                room.host_id = room.players.first()
            self.logger.info(f"[room-leave] room={room_id} player={sid} host={room.host_id}")
            if not len(room.players):
                self._destroy(room)
                return
            self._broadcast_room(room)
            if room.game.started:
                self._after_submission(room, room.game.evaluate(room.players.ids(), room.players.names()))
        finally:
            room.lock.release()

    def handle_disconnect(self, sid: str) -> None:
        self.leave(sid)

    def _destroy(self, room: Room) -> None:
        room.closed = True
        room.cancel_timer()
        with self._lock:
            self._rooms.pop(room.id, None)
        self.logger.info(f"[room-destroy] room={room.id}")

    # ---- host actions ----

    def update_settings(self, sid: str, room_id: str, settings: Optional[dict]) -> Settings:
        room = self._locked(room_id)
        try:
            if sid != room.host_id:
                raise NotHost()
            room.settings.update(settings)
            self._broadcast_room(room)
            return room.settings
        finally:
            room.lock.release()

    def start_game(self, sid: str, room_id: str) -> None:
        room = self._locked(room_id)
        try:
            if sid != room.host_id:
                raise NotHost()
            room.game.start(room.players.ids())
            self.logger.info(f"[phase] room={room_id} idle -> collect_prompts players={len(room.players)}")
            self.transport.send('game_started', {'settings': room.settings.to_dict()}, room_id)
            self.transport.send('game_phase', room.game.to_dict(), room_id)
        finally:
            room.lock.release()

    # ---- player submissions ----

    def _member(self, room: Room, sid: str) -> None:
        if sid not in room.players:
            raise NoSlot(f"player {sid} is not in room {room.id}")

    def submit_prompt(self, sid: str, room_id: str, prompt: str) -> None:
        room = self._locked(room_id)
        try:
            if room.game.phase != GamePhase.COLLECT_PROMPTS:
                raise WrongPhase()
            self._member(room, sid)
            phase = room.game.submit_prompt(sid, prompt, room.players.ids(), room.players.names())
            self._after_submission(room, phase)
        finally:
            room.lock.release()

    def drawing_event(self, sid: str, room_id: str, target_id: str, event: dict) -> bool:
        """Relay a live drawing event to its target; keep it if it persists."""
        room = self._locked(room_id)
        try:
            if not isinstance(event, dict):
                return False
            if sid not in room.players or target_id not in room.players:
                return False
            self.transport.send('drawing_event', {'from': sid, 'ev': event}, target_id)
            return room.game.record_drawing_event(target_id, event)
        finally:
            room.lock.release()

    def finish_drawing(self, sid: str, room_id: str) -> None:
        room = self._locked(room_id)
        try:
            if room.game.phase != GamePhase.DRAWING:
                raise WrongPhase()
            self._member(room, sid)
            self._after_submission(room, room.game.finish_drawing(sid, room.players.ids()))
        finally:
            room.lock.release()

    def submit_description(self, sid: str, room_id: str, text: str) -> None:
        room = self._locked(room_id)
        try:
            if room.game.phase != GamePhase.DESCRIBE:
                raise WrongPhase()
            self._member(room, sid)
            self._after_submission(room, room.game.submit_description(sid, text, room.players.ids()))
        finally:
            room.lock.release()

    def _after_submission(self, room: Room, phase: Optional[GamePhase]) -> None:
        if phase is None:
            return
        game = room.game
        if phase == GamePhase.DRAWING:
            self.logger.info(f"[phase] room={room.id} collect_prompts -> drawing players={len(game.targets)}")
            self.transport.send('phase_drawing', {
                'mapping': game.targets.to_dict(),
                'settings': room.settings.to_dict(),
            }, room.id)
            self._start_timer(room)
        elif phase == GamePhase.DESCRIBE:
            self.logger.info(f"[phase] room={room.id} drawing -> describe")
            room.cancel_timer()
            self.transport.send('phase_describe', {'to_describe': game.to_describe}, room.id)
        elif phase == GamePhase.REVEAL:
            self.logger.info(f"[phase] room={room.id} describe -> reveal chains={len(game.reveal)}")
            self.transport.send('game_reveal', {'reveal': game.reveal}, room.id)

    def _start_timer(self, room: Room) -> None:
        room.cancel_timer()
        if self.timer_factory is None:
            return
        timer = self.timer_factory(room)
        if timer is None:
            return
        room.timer = timer
        timer.start()

    # ---- re-sync requests ----

    def request_reveal(self, sid: str, room_id: str) -> None:
        room = self._locked(room_id)
        try:
            if room.game.phase != GamePhase.REVEAL:
                raise WrongPhase()
            self.transport.send('game_reveal', {'reveal': room.game.reveal}, sid)
        finally:
            room.lock.release()

    def request_draw_for_describe(self, sid: str, room_id: str) -> None:
        room = self._locked(room_id)
        try:
            if room.game.phase != GamePhase.DESCRIBE:
                raise WrongPhase()
            self.transport.send('phase_describe', {'to_describe': room.game.to_describe}, sid)
        finally:
            room.lock.release()

    # ---- teardown ----

    def shutdown(self) -> None:
        """Close every room and stop its countdown."""
        with self._lock:
            rooms = list(self._rooms.values())
        for room in rooms:
            with room.lock:
                if not room.closed:
                    self._destroy(room)
        with self._lock:
            self._room_of.clear()

    def snapshot(self, room_id: str) -> dict:
        room = self._locked(room_id)
        try:
            payload = room.to_dict()
            payload['game'] = room.game.to_dict()
            return payload
        finally:
            room.lock.release()

