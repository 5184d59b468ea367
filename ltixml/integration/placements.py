"""
LTI Placement Catalog

Static, read-only catalog of the locations in the Canvas user interface where
an external tool can be launched. The catalog is shared by every render and is
never mutated.

Copyright (c) 2025 LTI XML Builder contributors
"""

from dataclasses import dataclass
from typing import Dict, Final, Optional, Tuple


@dataclass(frozen=True)
class Placement:
    """
    A single launch location offered by the host platform.

    Only the identifier and the display label are modeled. Per-placement
    options such as launch URLs, link text or icons are not part of the
    descriptor yet.
    """

    key: str
    label: str
    default_active: bool = False

    def to_json(self) -> Dict[str, object]:
        return {
            "key": self.key,
            "label": self.label,
            "default_active": self.default_active,
        }


PLACEMENTS: Final[Tuple[Placement, ...]] = (
    Placement("account_navigation", "Account Navigation"),
    Placement("assignment_selection", "Assignment Selection"),
    Placement("course_home_sub_navigation", "Course Home Sub Navigation"),
    Placement("course_navigation", "Course Navigation", default_active=True),
    Placement("course_settings_sub_navigation", "Course Settings Sub Navigation"),
    Placement("editor_button", "Editor Button"),
    Placement("global_navigation", "Global Navigation"),
    Placement("homework_submission", "Homework Submission"),
    Placement("link_selection", "Link Selection"),
    Placement("migration_selection", "Migration Selection"),
    Placement("resource_selection", "Resource Selection"),
    Placement("user_navigation", "User Navigation"),
)

_PLACEMENTS_BY_KEY: Final[Dict[str, Placement]] = {p.key: p for p in PLACEMENTS}


def get_placement(key: str) -> Optional[Placement]:
    """Look up a catalog entry by identifier, or None if it is unknown."""
    return _PLACEMENTS_BY_KEY.get(key)


def placement_keys() -> Tuple[str, ...]:
    return tuple(p.key for p in PLACEMENTS)


__all__ = [
    'Placement',
    'PLACEMENTS',
    'get_placement',
    'placement_keys',
]
