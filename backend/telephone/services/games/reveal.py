from typing import Dict, List

from .rotation import RotationMapping


def compose_reveal(
    mapping: RotationMapping,
    prompts: Dict[str, str],
    saved_drawings: Dict[str, List[dict]],
    descriptions: Dict[str, str],
) -> Dict[str, dict]:
    """Rebuild every author's chain: prompt -> drawing -> description.

    The drawing owner is found through the receiver/source id pair recorded
    at rotation time, so two identical prompt texts never swap chains.
    """
    reveal = {}
    for author_id in mapping.authors():
        owner = mapping.receiver_for(author_id)
        reveal[author_id] = {
            'prompt': prompts.get(author_id),
            'drawing_owner': owner,
            'drawing_events': list(saved_drawings.get(owner, [])),
            'description_text': descriptions.get(owner, ''),
        }
    return reveal
