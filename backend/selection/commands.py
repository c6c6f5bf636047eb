"""
Pure transition functions for the chained pickers.

Every command takes a ``SelectionState`` (and the ``JournalTree`` when it
needs hierarchy lookups) and returns a new state. A command given a journal
id the tree does not know returns the state unchanged.

Changing the value of the role at active position k clears every role at a
later active position. Reordering roles or changing visibility clears every
role from the first active position that changed.
"""

import logging
from dataclasses import replace
from typing import Iterable, Optional, Sequence, Tuple

from selection.hierarchy import JournalTree
from selection.state import (
    MAX_LEVEL2_SELECTIONS,
    MAX_LEVEL3_SELECTIONS,
    ROOT_JOURNAL_ID,
    JournalSelection,
    Role,
    SelectionState,
    initial_state,
)

logger = logging.getLogger(__name__)


def compute_effective_ids(selection: JournalSelection, tree: Optional[JournalTree],
                          restricted_root_id: str = ROOT_JOURNAL_ID) -> Tuple[str, ...]:
    """
    Reduce a multi-level selection to the smallest id set that still means
    the same thing once each id is widened to its subtree.

    Level-3 ids are always kept. A level-2 id is dropped when one of its
    children is selected at level 3. The top level is used only when nothing
    else remains and the user drilled past their restricted root. A flat
    selection replaces all of this.
    """
    if selection.flat_id is not None:
        return (selection.flat_id,)

    level3 = set(selection.level3_ids)
    effective = list(dict.fromkeys(selection.level3_ids))
    for level2_id in selection.level2_ids:
        if level2_id in effective:
            continue
        # Without a tree no child can be proven selected, so the id stays
        if tree is not None and any(child_id in level3 for child_id in tree.children_ids(level2_id)):
            continue
        effective.append(level2_id)

    top_level_id = selection.top_level_id
    if not effective and top_level_id not in (restricted_root_id, ROOT_JOURNAL_ID):
        effective.append(top_level_id)
    return tuple(effective)


def _default_journal(state: SelectionState) -> JournalSelection:
    return JournalSelection(top_level_id=state.restricted_root_id, root_filter=state.journal.root_filter)


def _clear_roles(state: SelectionState, roles: Iterable[Role]) -> SelectionState:
    roles = set(roles)
    if not roles:
        return state
    values = {role: value for role, value in state.values.items() if role not in roles}
    if Role.JOURNAL in roles:
        journal = _default_journal(state)
        return replace(state, values=values, journal=journal,
                       effective_journal_ids=compute_effective_ids(journal, None, state.restricted_root_id))
    return replace(state, values=values)


def _cascade(state: SelectionState, changed_role: Role) -> SelectionState:
    position = state.position(changed_role)
    if position is None:
        return state
    return _clear_roles(state, state.active_roles[position + 1:])


def _reset_changed_positions(old: SelectionState, new: SelectionState) -> SelectionState:
    old_active = old.active_roles
    new_active = new.active_roles
    first_changed = 0
    while (first_changed < min(len(old_active), len(new_active))
           and old_active[first_changed] == new_active[first_changed]):
        first_changed += 1
    if first_changed == len(old_active) == len(new_active):
        return new
    return _clear_roles(new, old_active[first_changed:] + new_active[first_changed:])


def _with_journal(state: SelectionState, journal: JournalSelection, tree: Optional[JournalTree]) -> SelectionState:
    updated = replace(
        state,
        journal=journal,
        effective_journal_ids=compute_effective_ids(journal, tree, state.restricted_root_id),
    )
    return _cascade(updated, Role.JOURNAL)


def _in_scope(state: SelectionState, tree: JournalTree, journal_id: str) -> bool:
    if journal_id == ROOT_JOURNAL_ID:
        return state.restricted_root_id == ROOT_JOURNAL_ID
    if journal_id not in tree:
        return False
    if state.restricted_root_id == ROOT_JOURNAL_ID:
        return True
    return tree.is_within(journal_id, state.restricted_root_id)


def _bounded_append(ids: Tuple[str, ...], journal_id: str, limit: int) -> Tuple[Tuple[str, ...], Tuple[str, ...]]:
    """Append and evict the oldest entries past ``limit``. Returns (kept, evicted)."""
    ids = ids + (journal_id,)
    overflow = max(0, len(ids) - limit)
    return ids[overflow:], ids[:overflow]


def select_top_level(state: SelectionState, tree: JournalTree, journal_id: str,
                     child_to_select: Optional[str] = None) -> SelectionState:
    """Make ``journal_id`` the top level, optionally preselecting one child at level 2."""
    if not _in_scope(state, tree, journal_id):
        logger.debug(f"select_top_level ignored unknown or out of scope journal '{journal_id}'")
        return state
    level2_ids = (child_to_select,) if child_to_select in tree else ()
    journal = replace(state.journal, top_level_id=journal_id, level2_ids=level2_ids, level3_ids=(), flat_id=None)
    return _with_journal(state, journal, tree)


def toggle_level2(state: SelectionState, tree: JournalTree, journal_id: str) -> SelectionState:
    if journal_id not in tree:
        logger.debug(f"toggle_level2 ignored unknown journal '{journal_id}'")
        return state
    current = state.journal
    if journal_id in current.level2_ids:
        removed = (journal_id,)
        level2_ids = tuple(i for i in current.level2_ids if i != journal_id)
    else:
        level2_ids, removed = _bounded_append(current.level2_ids, journal_id, MAX_LEVEL2_SELECTIONS)

    # Dropping a level-2 node also drops its selected children
    orphaned = {child_id for removed_id in removed for child_id in tree.children_ids(removed_id)}
    level3_ids = tuple(i for i in current.level3_ids if i not in orphaned)
    journal = replace(current, level2_ids=level2_ids, level3_ids=level3_ids, flat_id=None)
    return _with_journal(state, journal, tree)


def toggle_level3(state: SelectionState, tree: JournalTree, journal_id: str) -> SelectionState:
    if journal_id not in tree:
        logger.debug(f"toggle_level3 ignored unknown journal '{journal_id}'")
        return state
    current = state.journal
    if journal_id in current.level3_ids:
        level3_ids = tuple(i for i in current.level3_ids if i != journal_id)
    else:
        level3_ids, _ = _bounded_append(current.level3_ids, journal_id, MAX_LEVEL3_SELECTIONS)
    journal = replace(current, level3_ids=level3_ids, flat_id=None)
    return _with_journal(state, journal, tree)


def promote(state: SelectionState, tree: JournalTree, journal_id: str) -> SelectionState:
    """
    Move the visible window of the tree in response to a promote gesture.

    A selected node becomes the new top level. An unselected child of the
    drilled-in top level re-roots the window one level up: the old top level
    moves to level 2 and the node to level 3. Any other unselected node goes
    to level 2 under its own parent. The top level never rises above the
    restricted root.
    """
    if not _in_scope(state, tree, journal_id):
        logger.debug(f"promote ignored unknown or out of scope journal '{journal_id}'")
        return state

    current = state.journal
    restricted_root_id = state.restricted_root_id

    if current.is_selected(journal_id) or journal_id == restricted_root_id:
        return select_top_level(state, tree, journal_id)

    top_level_id = current.top_level_id
    if (top_level_id not in (ROOT_JOURNAL_ID, restricted_root_id)
            and tree.parent_id(journal_id) == top_level_id):
        new_top = tree.parent_id(top_level_id) or ROOT_JOURNAL_ID
        journal = replace(current, top_level_id=new_top, level2_ids=(top_level_id,),
                          level3_ids=(journal_id,), flat_id=None)
        return _with_journal(state, journal, tree)

    new_top = tree.parent_id(journal_id) or ROOT_JOURNAL_ID
    journal = replace(current, top_level_id=new_top, level2_ids=(journal_id,), level3_ids=(), flat_id=None)
    return _with_journal(state, journal, tree)


def set_flat(state: SelectionState, tree: JournalTree, journal_id: Optional[str]) -> SelectionState:
    """Select a journal from a flat list; ``None`` clears the flat selection."""
    if journal_id is not None and journal_id not in tree:
        logger.debug(f"set_flat ignored unknown journal '{journal_id}'")
        return state
    journal = replace(state.journal, flat_id=journal_id)
    return _with_journal(state, journal, tree)


def toggle_root_filter(state: SelectionState, tag: str) -> SelectionState:
    """Toggle a root filter tag. Filters only change what is shown, so nothing cascades."""
    tags = state.journal.root_filter
    root_filter = tuple(t for t in tags if t != tag) if tag in tags else tags + (tag,)
    return replace(state, journal=replace(state.journal, root_filter=root_filter))


def set_role_value(state: SelectionState, role: Role, value) -> SelectionState:
    """Store the selection of a non-journal role and clear the roles after it."""
    role = Role(role)
    if role == Role.JOURNAL:
        raise ValueError("Journal selection changes go through the journal commands")
    values = dict(state.values)
    if value is None:
        values.pop(role, None)
    else:
        values[role] = value
    return _cascade(replace(state, values=values), role)


def reset_from(state: SelectionState, role: Role) -> SelectionState:
    """Clear ``role`` and every role after it in the active order."""
    role = Role(role)
    position = state.position(role)
    if position is None:
        return _clear_roles(state, [role])
    return _clear_roles(state, state.active_roles[position:])


def reorder_roles(state: SelectionState, new_order: Sequence[Role]) -> SelectionState:
    new_order = tuple(Role(role) for role in new_order)
    if sorted(new_order) != sorted(state.role_order) or len(set(new_order)) != len(new_order):
        raise ValueError(f"{[r.value for r in new_order]} is not a permutation of the current roles")
    return _reset_changed_positions(state, replace(state, role_order=new_order))


def toggle_visibility(state: SelectionState, role: Role) -> SelectionState:
    role = Role(role)
    visibility = dict(state.visibility)
    visibility[role] = not visibility.get(role, False)
    return _reset_changed_positions(state, replace(state, visibility=visibility))


def reset_all(state: SelectionState) -> SelectionState:
    """Clear every selection, keeping the role layout and the restricted root."""
    fresh = initial_state(state.restricted_root_id)
    return replace(fresh, role_order=state.role_order, visibility=dict(state.visibility))
