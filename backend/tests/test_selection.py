import pytest

from selection import (
    MAX_LEVEL2_SELECTIONS,
    MAX_LEVEL3_SELECTIONS,
    ROOT_JOURNAL_ID,
    JournalNode,
    JournalSelection,
    JournalTree,
    Role,
    compute_effective_ids,
    initial_state,
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


@pytest.fixture()
def tree():
    return JournalTree.from_rows([
        {"id": "4", "name": "Revenue", "parent_id": None},
        {"id": "40", "name": "Sales", "parent_id": "4"},
        {"id": "401", "name": "Domestic", "parent_id": "40"},
        {"id": "402", "name": "Export", "parent_id": "40"},
        {"id": "45", "name": "Services", "parent_id": "4"},
        {"id": "451", "name": "Consulting", "parent_id": "45"},
        {"id": "5", "name": "Expenses", "parent_id": None},
        {"id": "50", "name": "Rent", "parent_id": "5"},
    ])


@pytest.fixture()
def wide_tree():
    nodes = [JournalNode(id="9", name="Wide")]
    for i in range(MAX_LEVEL3_SELECTIONS + 1):
        nodes.append(JournalNode(id=f"9.{i}", parent_id="9"))
        nodes.append(JournalNode(id=f"9.{i}.x", parent_id=f"9.{i}"))
    return JournalTree(nodes)


def _with_downstream_values(state):
    state = set_role_value(state, Role.PARTNER, 7)
    state = set_role_value(state, Role.GOODS, 3)
    return set_role_value(state, Role.DOCUMENT, "INV-1")


# --- tree ---

def test_tree_lookups(tree):
    assert tree.root_ids() == ("4", "5")
    assert tree.children_ids("40") == ("401", "402")
    assert tree.ancestor_ids("401") == ("4", "40", "401")
    assert tree.descendant_ids("4") == ("4", "40", "45", "401", "402", "451")
    assert tree.is_within("451", "4")
    assert not tree.is_within("50", "4")
    assert tree.ancestor_ids("nope") == ()


# --- effective ids ---

def test_level2_dropped_when_its_child_is_selected(tree):
    selection = JournalSelection(top_level_id="4", level2_ids=("40",), level3_ids=("401",))
    assert compute_effective_ids(selection, tree) == ("401",)


def test_level2_kept_without_selected_children(tree):
    selection = JournalSelection(top_level_id="4", level2_ids=("40", "45"), level3_ids=("401",))
    assert compute_effective_ids(selection, tree) == ("401", "45")


def test_top_level_used_only_past_restricted_root(tree):
    assert compute_effective_ids(JournalSelection(top_level_id="4"), tree) == ("4",)
    assert compute_effective_ids(JournalSelection(top_level_id=ROOT_JOURNAL_ID), tree) == ()
    assert compute_effective_ids(JournalSelection(top_level_id="4"), tree, restricted_root_id="4") == ()


def test_flat_selection_overrides(tree):
    selection = JournalSelection(top_level_id="4", level2_ids=("40",), flat_id="50")
    assert compute_effective_ids(selection, tree) == ("50",)


# --- toggles ---

def test_toggle_level2_and_level3(tree):
    state = select_top_level(initial_state(), tree, "4")
    assert state.effective_journal_ids == ("4",)

    state = toggle_level2(state, tree, "40")
    assert state.effective_journal_ids == ("40",)
    state = toggle_level3(state, tree, "401")
    assert state.effective_journal_ids == ("401",)

    # removing the level-2 node removes its level-3 children too
    state = toggle_level2(state, tree, "40")
    assert state.journal.level2_ids == ()
    assert state.journal.level3_ids == ()
    assert state.effective_journal_ids == ("4",)


def test_level2_selection_is_bounded(wide_tree):
    state = select_top_level(initial_state(), wide_tree, "9")
    for i in range(MAX_LEVEL2_SELECTIONS + 1):
        state = toggle_level2(state, wide_tree, f"9.{i}")

    assert len(state.journal.level2_ids) == MAX_LEVEL2_SELECTIONS
    assert "9.0" not in state.journal.level2_ids
    assert state.journal.level2_ids[-1] == f"9.{MAX_LEVEL2_SELECTIONS}"


def test_evicted_level2_takes_its_children_along(wide_tree):
    state = select_top_level(initial_state(), wide_tree, "9")
    state = toggle_level2(state, wide_tree, "9.0")
    state = toggle_level3(state, wide_tree, "9.0.x")
    for i in range(1, MAX_LEVEL2_SELECTIONS + 1):
        state = toggle_level2(state, wide_tree, f"9.{i}")

    assert "9.0" not in state.journal.level2_ids
    assert state.journal.level3_ids == ()


def test_level3_selection_is_bounded(wide_tree):
    state = initial_state()
    for i in range(MAX_LEVEL3_SELECTIONS + 1):
        state = toggle_level3(state, wide_tree, f"9.{i}.x")

    assert len(state.journal.level3_ids) == MAX_LEVEL3_SELECTIONS
    assert state.journal.level3_ids[0] == "9.1.x"


def test_unknown_ids_leave_state_unchanged(tree):
    state = initial_state()
    assert toggle_level2(state, tree, "999") is state
    assert toggle_level3(state, tree, "999") is state
    assert select_top_level(state, tree, "999") is state
    assert promote(state, tree, "999") is state


# --- promote ---

def test_promote_selected_node_drills_down(tree):
    state = select_top_level(initial_state(), tree, "4")
    state = toggle_level2(state, tree, "40")

    state = promote(state, tree, "40")

    assert state.journal.top_level_id == "40"
    assert state.journal.level2_ids == ()
    assert state.effective_journal_ids == ("40",)


def test_promote_unselected_child_of_top_reroots_window(tree):
    state = select_top_level(initial_state(), tree, "40")

    state = promote(state, tree, "401")

    assert state.journal.top_level_id == "4"
    assert state.journal.level2_ids == ("40",)
    assert state.journal.level3_ids == ("401",)
    assert state.effective_journal_ids == ("401",)


def test_promote_unselected_node_selects_it_under_its_parent(tree):
    state = promote(initial_state(), tree, "45")

    assert state.journal.top_level_id == "4"
    assert state.journal.level2_ids == ("45",)


def test_promote_respects_restricted_root(tree):
    state = initial_state(restricted_root_id="4")
    assert state.journal.top_level_id == "4"

    state = promote(state, tree, "40")
    assert state.journal.top_level_id == "4"
    assert state.journal.level2_ids == ("40",)

    state = select_top_level(state, tree, "40")
    state = promote(state, tree, "402")
    assert state.journal.top_level_id == "4"
    assert state.journal.level3_ids == ("402",)

    assert promote(state, tree, "50") is state
    assert select_top_level(state, tree, ROOT_JOURNAL_ID) is state


# --- cascade ---

def test_journal_change_clears_downstream_roles(tree):
    state = _with_downstream_values(initial_state())

    state = select_top_level(state, tree, "4")

    assert state.values == {}


def test_role_change_clears_only_later_roles():
    state = _with_downstream_values(initial_state())

    state = set_role_value(state, Role.PARTNER, 8)

    assert state.value_of(Role.PARTNER) == 8
    assert state.value_of(Role.GOODS) is None
    assert state.value_of(Role.DOCUMENT) is None


def test_journal_value_goes_through_journal_commands():
    with pytest.raises(ValueError):
        set_role_value(initial_state(), Role.JOURNAL, "4")


def test_root_filter_does_not_cascade():
    state = _with_downstream_values(initial_state())

    state = toggle_root_filter(state, "unaffected")
    assert state.journal.root_filter == ("affected", "unaffected")
    state = toggle_root_filter(state, "affected")
    assert state.journal.root_filter == ("unaffected",)
    assert state.value_of(Role.DOCUMENT) == "INV-1"


def test_reorder_resets_from_first_changed_position(tree):
    state = toggle_level2(select_top_level(initial_state(), tree, "4"), tree, "40")
    state = _with_downstream_values(state)

    state = reorder_roles(state, [Role.JOURNAL, Role.GOODS, Role.PARTNER, Role.PROJECT, Role.DOCUMENT])

    assert state.active_roles == (Role.JOURNAL, Role.GOODS, Role.PARTNER, Role.DOCUMENT)
    assert state.journal.level2_ids == ("40",)
    assert state.values == {}


def test_reorder_of_hidden_role_changes_nothing():
    state = _with_downstream_values(initial_state())

    reordered = reorder_roles(state, [Role.JOURNAL, Role.PARTNER, Role.GOODS, Role.DOCUMENT, Role.PROJECT])

    assert reordered.values == state.values


def test_reorder_rejects_unknown_order():
    with pytest.raises(ValueError):
        reorder_roles(initial_state(), [Role.JOURNAL, Role.PARTNER])


def test_reorder_moving_journal_resets_it(tree):
    state = select_top_level(initial_state(), tree, "4")

    state = reorder_roles(state, [Role.PARTNER, Role.JOURNAL, Role.GOODS, Role.PROJECT, Role.DOCUMENT])

    assert state.journal.top_level_id == ROOT_JOURNAL_ID
    assert state.effective_journal_ids == ()


def test_showing_a_role_resets_from_its_position():
    state = _with_downstream_values(initial_state())

    state = toggle_visibility(state, Role.PROJECT)

    assert Role.PROJECT in state.active_roles
    assert state.value_of(Role.PARTNER) == 7
    assert state.value_of(Role.GOODS) == 3
    assert state.value_of(Role.DOCUMENT) is None


def test_reset_from(tree):
    state = _with_downstream_values(select_top_level(initial_state(), tree, "4"))

    state = reset_from(state, Role.PARTNER)

    assert state.journal.top_level_id == "4"
    assert state.values == {}


def test_flat_selection_and_reset_all(tree):
    state = _with_downstream_values(toggle_level2(initial_state(), tree, "40"))

    state = set_flat(state, tree, "50")
    assert state.effective_journal_ids == ("50",)
    assert state.values == {}

    state = set_flat(state, tree, None)
    assert state.effective_journal_ids == ("40",)

    state = reset_all(toggle_visibility(state, Role.PROJECT))
    assert state.journal == JournalSelection()
    assert state.effective_journal_ids == ()
    assert state.visibility[Role.PROJECT] is True


def test_clearing_flat_selection_restores_level2_ids(tree):
    state = toggle_level2(initial_state(), tree, "40")
    state = set_flat(state, tree, "45")

    state = set_flat(state, tree, None)

    assert state.journal.level2_ids == ("40",)
    assert state.effective_journal_ids == ("40",)


def test_flat_selection_ignores_unknown_journal(tree):
    state = initial_state()
    assert set_flat(state, tree, "999") is state


def test_reduction_without_tree_keeps_level2_ids():
    selection = JournalSelection(top_level_id="4", level2_ids=("40", "45"))
    assert compute_effective_ids(selection, None) == ("40", "45")
