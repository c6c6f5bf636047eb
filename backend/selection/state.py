"""
Selection state for the chained pickers.

The state is immutable; every command in ``selection.commands`` returns a
new ``SelectionState``.
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Tuple

ROOT_JOURNAL_ID = "__ROOT__"

MAX_LEVEL2_SELECTIONS = 10
MAX_LEVEL3_SELECTIONS = 20

DEFAULT_ROOT_FILTER = ("affected",)


class Role(str, enum.Enum):
    JOURNAL = "journal"
    PARTNER = "partner"
    GOODS = "goods"
    PROJECT = "project"
    DOCUMENT = "document"


DEFAULT_ROLE_ORDER = (Role.JOURNAL, Role.PARTNER, Role.GOODS, Role.PROJECT, Role.DOCUMENT)

DEFAULT_VISIBILITY = {
    Role.JOURNAL: True,
    Role.PARTNER: True,
    Role.GOODS: True,
    Role.PROJECT: False,
    Role.DOCUMENT: True,
}


@dataclass(frozen=True)
class JournalSelection:
    """
    Multi-level journal selection.

    ``top_level_id`` is the drilled-in context, ``level2_ids`` are selected
    children of it and ``level3_ids`` grandchildren. ``flat_id`` is used when
    journals are picked from a flat list instead of the tree.
    """
    top_level_id: str = ROOT_JOURNAL_ID
    level2_ids: Tuple[str, ...] = ()
    level3_ids: Tuple[str, ...] = ()
    flat_id: Optional[str] = None
    root_filter: Tuple[str, ...] = DEFAULT_ROOT_FILTER

    def is_selected(self, journal_id: str) -> bool:
        return journal_id in self.level2_ids or journal_id in self.level3_ids


@dataclass(frozen=True)
class SelectionState:
    role_order: Tuple[Role, ...] = DEFAULT_ROLE_ORDER
    visibility: Mapping[Role, bool] = field(default_factory=lambda: dict(DEFAULT_VISIBILITY))
    values: Mapping[Role, Any] = field(default_factory=dict)
    journal: JournalSelection = field(default_factory=JournalSelection)
    restricted_root_id: str = ROOT_JOURNAL_ID
    effective_journal_ids: Tuple[str, ...] = ()

    @property
    def active_roles(self) -> Tuple[Role, ...]:
        """Visible roles in display order."""
        return tuple(role for role in self.role_order if self.visibility.get(role, False))

    def position(self, role: Role) -> Optional[int]:
        """Position of ``role`` among the active roles, or None when hidden."""
        active = self.active_roles
        return active.index(role) if role in active else None

    def value_of(self, role: Role):
        if role == Role.JOURNAL:
            return self.journal
        return self.values.get(role)


def initial_state(restricted_root_id: str = ROOT_JOURNAL_ID, role_order=None, visibility=None) -> SelectionState:
    order = tuple(Role(role) for role in role_order) if role_order else DEFAULT_ROLE_ORDER
    flags = dict(DEFAULT_VISIBILITY)
    if visibility:
        flags.update({Role(role): bool(visible) for role, visible in visibility.items()})
    return SelectionState(
        role_order=order,
        visibility=flags,
        journal=JournalSelection(top_level_id=restricted_root_id),
        restricted_root_id=restricted_root_id,
    )
