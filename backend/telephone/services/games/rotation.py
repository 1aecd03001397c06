from typing import Dict, List, Optional


class Target:
    """The prompt one receiver has to draw, and where it came from."""

    def __init__(self, prompt: str, from_id: str, from_name: str):
        self.prompt = prompt
        self.from_id = from_id
        self.from_name = from_name

    def to_dict(self):
        return {
            'prompt': self.prompt,
            'from_id': self.from_id,
            'from_name': self.from_name,
        }


class RotationMapping:
    """Receiver -> source assignment, stored in both directions."""

    def __init__(self, targets: Dict[str, Target]):
        self._targets = dict(targets)
        self._receiver_by_source = {t.from_id: rid for rid, t in self._targets.items()}

    def target_for(self, receiver_id: str) -> Optional[Target]:
        return self._targets.get(receiver_id)

    def receiver_for(self, source_id: str) -> Optional[str]:
        return self._receiver_by_source.get(source_id)

    def receivers(self) -> List[str]:
        return list(self._targets.keys())

    def authors(self) -> List[str]:
        # join order, same as receivers
        return [pid for pid in self._targets if pid in self._receiver_by_source]

    def __len__(self):
        return len(self._targets)

    def to_dict(self):
        return {rid: t.to_dict() for rid, t in self._targets.items()}


def build_rotation(player_ids: List[str], prompts: Dict[str, str], names: Dict[str, str]) -> RotationMapping:
    """Receiver ``i`` draws the prompt written by player ``(i + 1) % n``.

    For a single player the mapping points back at themselves.
    """
    n = len(player_ids)
    targets = {}
    for i, pid in enumerate(player_ids):
        source = player_ids[(i + 1) % n]
        targets[pid] = Target(prompts[source], source, names.get(source, ''))
    return RotationMapping(targets)
