"""
Widget Catalog - Known widget type identifiers.

Used to flag typos in addWidget() calls ("org.kde.plasma.kickof") and,
in strict mode, to reject widget types the host shell wouldn't know.
Suggestions use rapidfuzz weighted ratio, the same scorer app search uses.
"""

from typing import Iterable, Optional

from loguru import logger
from rapidfuzz import fuzz, process

# Stock Plasma panel widgets
DEFAULT_WIDGETS = (
    "org.kde.plasma.kickoff",
    "org.kde.plasma.kicker",
    "org.kde.plasma.kickerdash",
    "org.kde.plasma.pager",
    "org.kde.plasma.taskmanager",
    "org.kde.plasma.icontasks",
    "org.kde.plasma.panelspacer",
    "org.kde.plasma.marginsseparator",
    "org.kde.plasma.systemtray",
    "org.kde.plasma.digitalclock",
    "org.kde.plasma.analogclock",
    "org.kde.plasma.showdesktop",
    "org.kde.plasma.minimizeall",
    "org.kde.plasma.windowlist",
    "org.kde.plasma.appmenu",
    "org.kde.plasma.trash",
    "org.kde.plasma.folder",
    "org.kde.plasma.lock_logout",
)

SUGGESTION_CUTOFF = 80


def suggest_name(name: str, choices: Iterable[str], cutoff: int = SUGGESTION_CUTOFF) -> Optional[str]:
    """
    Return the closest choice to `name`, or None if nothing is close enough.

    Example:
        suggest_name("lenghtMode", ["lengthMode", "height"])  # "lengthMode"
    """
    match = process.extractOne(name, list(choices), scorer=fuzz.WRatio, score_cutoff=cutoff)
    if match is None:
        return None
    # match: (choice, score, index)
    return match[0]


class WidgetCatalog:
    """Set of widget type ids the host shell provides."""

    def __init__(self, known_types: Iterable[str] = DEFAULT_WIDGETS):
        self._known = list(dict.fromkeys(known_types))
        logger.debug(f"WidgetCatalog initialized with {len(self._known)} widget types")

    def __contains__(self, type_id: str) -> bool:
        return self.is_known(type_id)

    def __len__(self) -> int:
        return len(self._known)

    def is_known(self, type_id: str) -> bool:
        return type_id in self._known

    def suggest(self, type_id: str) -> Optional[str]:
        """Closest known widget id for a misspelled one."""
        if self.is_known(type_id):
            return type_id
        return suggest_name(type_id, self._known)

    def extended(self, extra_types: Iterable[str]) -> "WidgetCatalog":
        """Return a new catalog with `extra_types` added."""
        return WidgetCatalog([*self._known, *extra_types])
