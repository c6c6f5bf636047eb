from selection.state import (
    DEFAULT_ROLE_ORDER,
    MAX_LEVEL2_SELECTIONS,
    MAX_LEVEL3_SELECTIONS,
    ROOT_JOURNAL_ID,
    JournalSelection,
    Role,
    SelectionState,
    initial_state,
)
from selection.hierarchy import JournalNode, JournalTree
from selection.commands import (
    compute_effective_ids,
    promote,
    reorder_roles,
    reset_all,
    reset_from,
    select_top_level,
    set_flat,
    set_role_value,
    toggle_level2,
    toggle_level3,
    toggle_root_filter,
    toggle_visibility,
)
from selection.fetch_guard import FetchGuard

__all__ = [
    'DEFAULT_ROLE_ORDER', 'FetchGuard', 'JournalNode', 'JournalSelection', 'JournalTree',
    'MAX_LEVEL2_SELECTIONS', 'MAX_LEVEL3_SELECTIONS', 'ROOT_JOURNAL_ID', 'Role', 'SelectionState',
    'compute_effective_ids', 'initial_state', 'promote', 'reorder_roles', 'reset_all', 'reset_from',
    'select_top_level', 'set_flat', 'set_role_value', 'toggle_level2', 'toggle_level3',
    'toggle_root_filter', 'toggle_visibility',
]
