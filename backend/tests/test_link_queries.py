import pytest
from sqlalchemy import event

from crud import goods as crud_goods
from crud import journal_links as crud_links
from crud import journal_partner_good_links as crud_full_links
from crud import link_queries
from database import engine
from schemas.links import JournalPartnerGoodLinkOrchestratedCreate
from tests.factories import make_good, make_journals, make_partner


def _full_link(db, journal_id, partner_id, good_id):
    crud_full_links.create_full_link(db, JournalPartnerGoodLinkOrchestratedCreate(
        journal_id=journal_id, partner_id=partner_id, good_id=good_id, partnership_type="STANDARD"
    ))


@pytest.fixture()
def catalog(db):
    make_journals(db, ("1", None), ("10", "1"), ("101", "10"), ("11", "1"), ("2", None))
    ids = {
        "acme": make_partner(db, "Acme"),
        "bolt": make_partner(db, "Bolt"),
        "cherry": make_good(db, "Cherry"),
        "apple": make_good(db, "Apple"),
        "banana": make_good(db, "Banana"),
    }
    _full_link(db, "101", ids["acme"], ids["apple"])
    _full_link(db, "101", ids["acme"], ids["banana"])
    _full_link(db, "11", ids["acme"], ids["banana"])
    _full_link(db, "1", ids["acme"], ids["cherry"])
    _full_link(db, "2", ids["bolt"], ids["apple"])
    _full_link(db, "101", ids["bolt"], ids["banana"])
    return ids


class QueryCounter:

    def __init__(self):
        self.count = 0

    def __call__(self, conn, cursor, statement, parameters, context, executemany):
        self.count += 1


@pytest.fixture()
def query_counter():
    counter = QueryCounter()
    event.listen(engine, "before_cursor_execute", counter)
    yield counter
    event.remove(engine, "before_cursor_execute", counter)


def _labels(goods):
    return [g.label for g in goods]


def test_goods_under_journal_with_descendants(db, catalog):
    goods = link_queries.get_goods_for_journals_and_partner(db, ["1"], catalog["acme"], True)
    assert _labels(goods) == ["Apple", "Banana", "Cherry"]


def test_goods_exactly_at_journal(db, catalog):
    goods = link_queries.get_goods_for_journals_and_partner(db, ["1"], catalog["acme"], False)
    assert _labels(goods) == ["Cherry"]


def test_goods_union_across_journals(db, catalog):
    goods = link_queries.get_goods_for_journals_and_partner(db, ["11", "2"], catalog["bolt"], True)
    assert _labels(goods) == ["Apple"]
    goods = link_queries.get_goods_for_journals_and_partner(db, ["10", "11"], catalog["acme"], True)
    assert _labels(goods) == ["Apple", "Banana"]


def test_goods_tie_break_by_id(db, catalog):
    twin_id = make_good(db, "Apple")
    _full_link(db, "1", catalog["acme"], twin_id)
    goods = link_queries.get_goods_for_journals_and_partner(db, ["1"], catalog["acme"], True)
    assert [g.id for g in goods][:2] == [catalog["apple"], twin_id]


def test_empty_journal_list_issues_no_query(db, catalog, query_counter):
    assert link_queries.get_goods_for_journals_and_partner(db, [], catalog["acme"], True) == []
    assert link_queries.get_partners_for_journals_and_good(db, [], catalog["apple"], False) == []
    assert query_counter.count == 0


def test_no_matching_links_stops_before_goods_lookup(db, catalog, query_counter):
    assert link_queries.get_goods_for_journals_and_partner(db, ["2"], catalog["acme"], False) == []
    # only the two-way link lookup ran
    assert query_counter.count == 1


def test_partners_for_journals_and_good(db, catalog):
    partners = link_queries.get_partners_for_journals_and_good(db, ["1"], catalog["banana"], True)
    assert [p.name for p in partners] == ["Acme", "Bolt"]
    partners = link_queries.get_partners_for_journals_and_good(db, ["11"], catalog["banana"], True)
    assert [p.name for p in partners] == ["Acme"]
    assert link_queries.get_partners_for_journals_and_good(db, ["1"], catalog["banana"], False) == []


def test_journals_for_partner_and_good_are_not_widened(db, catalog):
    journals = link_queries.get_journals_for_partner_and_good(db, catalog["acme"], catalog["banana"])
    assert [j.id for j in journals] == ["101", "11"]
    assert link_queries.get_journals_for_partner_and_good(db, catalog["bolt"], catalog["cherry"]) == []


def test_two_way_queries(db, catalog):
    crud_links.link_entity_to_journal_hierarchy(db, catalog["cherry"], "good", "101")

    assert _labels(link_queries.get_goods_for_journals(db, ["10"], True)) == ["Cherry"]
    assert link_queries.get_goods_for_journals(db, ["11"], True) == []
    assert [j.id for j in link_queries.get_journals_for_good(db, catalog["cherry"])] == ["1", "10", "101"]

    partners = link_queries.get_partners_for_journals(db, ["10"], True)
    assert [p.name for p in partners] == ["Acme", "Bolt"]
    assert [j.id for j in link_queries.get_journals_for_partner(db, catalog["bolt"])] == ["101", "2"]


def test_goods_shared_by_all_partners(db, catalog):
    goods = link_queries.get_goods_for_partners_intersection(db, [catalog["acme"], catalog["bolt"]], "101")
    assert _labels(goods) == ["Banana"]
    assert link_queries.get_goods_for_partners_intersection(db, [catalog["acme"], catalog["bolt"]], "1") == []
    assert link_queries.get_goods_for_partners_intersection(db, [], "101") == []


def test_soft_deleted_goods_are_hidden(db, catalog):
    crud_goods.delete_good(db, catalog["apple"])
    goods = link_queries.get_goods_for_journals_and_partner(db, ["1"], catalog["acme"], True)
    assert _labels(goods) == ["Banana", "Cherry"]
