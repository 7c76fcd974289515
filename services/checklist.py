import re
from typing import Tuple

_CHECKBOX = re.compile(r'data-checked="(true|false)"')


def checklist_statistics(text: str) -> Tuple[int, int]:
    """(total, checked) checklist items in an HTML task description."""
    states = _CHECKBOX.findall(text or "")
    return len(states), states.count("true")


def checklist_progress(text: str) -> int:
    total, checked = checklist_statistics(text)
    if total == 0:
        return 0
    return int(checked * 100 / total + 0.5)
