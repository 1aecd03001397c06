from enum import Enum
from typing import Dict, List, Optional, Set

from telephone.errors import AlreadyStarted, NoSlot, WrongPhase
from .reveal import compose_reveal
from .rotation import RotationMapping, build_rotation


class GamePhase(str, Enum):
    IDLE = 'idle'
    COLLECT_PROMPTS = 'collect_prompts'
    DRAWING = 'drawing'
    DESCRIBE = 'describe'
    REVEAL = 'reveal'


# Drawing records kept for the describe/reveal phases; everything else is live-only
PERSISTED_DRAWING_EVENTS = frozenset({'stroke_end', 'bucket', 'fill', 'clear'})


def _as_text(value) -> str:
    # missing or non-string submissions are stored as empty text
    return value if isinstance(value, str) else ''


class GameSession:
    """Phase state machine for one room.

    idle -> collect_prompts -> drawing -> describe -> reveal

    Only ``start`` is an explicit command. Every later transition fires when
    all *participants* have submitted for the current phase: live players
    holding a prompt slot while prompts are collected, then live receivers
    of the rotation. Callers hold the room lock and pass the live
    player ids, in join order, to each call.
    """

    def __init__(self):
        self.started = False
        self.phase = GamePhase.IDLE
        self.round_index = 0
        self.sequences: Dict[str, List[Optional[str]]] = {}
        self.targets: Optional[RotationMapping] = None
        self.saved_drawings: Dict[str, List[dict]] = {}
        self.done: Set[str] = set()
        self.descriptions: Dict[str, str] = {}
        self.to_describe: Dict[str, List[dict]] = {}
        self.reveal: Optional[Dict[str, dict]] = None

    # -- queries --

    def participants(self, live_ids: List[str]) -> List[str]:
        """Live players taking part in the current phase, in join order.

        Prompt collection counts everyone seeded at start; drawing and
        describing count only the receivers of the rotation.
        """
        if self.targets is None:
            return [pid for pid in live_ids if pid in self.sequences]
        return [pid for pid in live_ids if self.targets.target_for(pid) is not None]

    def prompt_of(self, player_id: str) -> Optional[str]:
        seq = self.sequences.get(player_id)
        return seq[0] if seq else None

    def _require(self, phase: GamePhase, player_id: str) -> None:
        if self.phase != phase:
            raise WrongPhase(f"expected {phase.value}, room is in {self.phase.value}")
        if player_id not in self.sequences:
            raise NoSlot(f"player {player_id} has no slot in this game")
        if self.targets is not None and self.targets.target_for(player_id) is None:
            raise NoSlot(f"player {player_id} received nothing in the rotation")

    # -- commands --

    def start(self, player_ids: List[str]) -> None:
        if self.started:
            raise AlreadyStarted()
        self.started = True
        self.phase = GamePhase.COLLECT_PROMPTS
        self.round_index = 0
        self.sequences = {pid: [None] for pid in player_ids}
        self.targets = None
        self.saved_drawings = {}
        self.done = set()
        self.descriptions = {}
        self.to_describe = {}
        self.reveal = None

    def submit_prompt(self, player_id: str, prompt: str, live_ids: List[str], names: Dict[str, str]) -> Optional[GamePhase]:
        self._require(GamePhase.COLLECT_PROMPTS, player_id)
        self.sequences[player_id][0] = _as_text(prompt)
        return self.evaluate(live_ids, names)

    def record_drawing_event(self, target_id: str, event: dict) -> bool:
        """Append a persisting drawing record for ``target_id``."""
        if self.phase != GamePhase.DRAWING:
            return False
        if not isinstance(event, dict) or event.get('type') not in PERSISTED_DRAWING_EVENTS:
            return False
        self.saved_drawings.setdefault(target_id, []).append(event)
        return True

    def finish_drawing(self, player_id: str, live_ids: List[str]) -> Optional[GamePhase]:
        self._require(GamePhase.DRAWING, player_id)
        self.done.add(player_id)
        return self.evaluate(live_ids)

    def submit_description(self, player_id: str, text: str, live_ids: List[str]) -> Optional[GamePhase]:
        self._require(GamePhase.DESCRIBE, player_id)
        self.descriptions[player_id] = _as_text(text)
        return self.evaluate(live_ids)

    def evaluate(self, live_ids: List[str], names: Optional[Dict[str, str]] = None) -> Optional[GamePhase]:
        """Check the current phase's barrier; advance and return the new phase if it holds."""
        participants = self.participants(live_ids)
        if not participants:
            return None
        if self.phase == GamePhase.COLLECT_PROMPTS:
            if all(self.prompt_of(pid) is not None for pid in participants):
                prompts = {pid: self.prompt_of(pid) for pid in participants}
                self.targets = build_rotation(participants, prompts, names or {})
                self.round_index = 0
                self.phase = GamePhase.DRAWING
                return self.phase
        elif self.phase == GamePhase.DRAWING:
            if all(pid in self.done for pid in participants):
                self.to_describe = {pid: list(self.saved_drawings.get(pid, [])) for pid in participants}
                self.done = set()
                self.phase = GamePhase.DESCRIBE
                return self.phase
        elif self.phase == GamePhase.DESCRIBE:
            if all(pid in self.descriptions for pid in participants):
                prompts = {pid: self.prompt_of(pid) for pid in self.sequences}
                self.reveal = compose_reveal(self.targets, prompts, self.saved_drawings, self.descriptions)
                self.phase = GamePhase.REVEAL
                return self.phase
        return None

    def to_dict(self):
        return {
            'started': self.started,
            'phase': self.phase.value,
            'round_index': self.round_index,
            'sequences': {pid: list(seq) for pid, seq in self.sequences.items()},
            'current_targets': self.targets.to_dict() if self.targets else None,
            'done': sorted(self.done),
            'descriptions_submitted': sorted(self.descriptions.keys()),
        }
