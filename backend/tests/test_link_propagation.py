import pytest

from crud import journal_links as crud_links
from crud import journals as crud_journals
from exceptions import ConflictError, NotFoundError, ValidationError
from models.journal_good_link import JournalGoodLink
from models.journal_partner_link import JournalPartnerLink
from schemas.links import JournalGoodLinkCreate, JournalPartnerLinkCreate, LinkEntityType
from tests.factories import make_good, make_journals, make_partner


@pytest.fixture()
def chain(db):
    make_journals(db, ("1", None), ("10", "1"), ("101", "10"))


def test_partner_link_reaches_every_ancestor(db, chain):
    partner_id = make_partner(db, "P1")

    links = crud_links.link_entity_to_journal_hierarchy(db, partner_id, "partner", "101", "STANDARD")

    assert [link.journal_id for link in links] == ["1", "10", "101"]
    for journal_id in ("1", "10", "101"):
        assert crud_links.find_journal_partner_link(db, journal_id, partner_id, "STANDARD") is not None


def test_relinking_leaves_existing_links(db, chain):
    partner_id = make_partner(db)
    first = crud_links.link_entity_to_journal_hierarchy(db, partner_id, LinkEntityType.PARTNER, "10", "STANDARD")
    first_ids = [link.id for link in first]

    second = crud_links.link_entity_to_journal_hierarchy(db, partner_id, LinkEntityType.PARTNER, "101", "STANDARD")

    assert [link.id for link in second][:2] == first_ids
    assert db.query(JournalPartnerLink).count() == 3


def test_partnership_types_coexist(db, chain):
    partner_id = make_partner(db)
    crud_links.link_entity_to_journal_hierarchy(db, partner_id, "partner", "101", "STANDARD")
    crud_links.link_entity_to_journal_hierarchy(db, partner_id, "partner", "101", "CONSIGNMENT")

    assert db.query(JournalPartnerLink).count() == 6
    assert len(crud_links.get_journal_partner_links(db, journal_id="1", partner_id=partner_id)) == 2


def test_partner_link_defaults_partnership_type(db, chain):
    partner_id = make_partner(db)
    links = crud_links.link_entity_to_journal_hierarchy(db, partner_id, "partner", "1")
    assert links[0].partnership_type == "STANDARD_TRANSACTION"


def test_good_link_reaches_every_ancestor(db, chain):
    good_id = make_good(db)

    links = crud_links.link_entity_to_journal_hierarchy(db, good_id, "good", "101")

    assert [link.journal_id for link in links] == ["1", "10", "101"]
    assert db.query(JournalGoodLink).count() == 3


def test_link_rejects_unknown_references(db, chain):
    partner_id = make_partner(db)
    with pytest.raises(NotFoundError):
        crud_links.link_entity_to_journal_hierarchy(db, partner_id, "partner", "999")
    with pytest.raises(NotFoundError):
        crud_links.link_entity_to_journal_hierarchy(db, partner_id + 100, "partner", "101")
    with pytest.raises(ValidationError):
        crud_links.link_entity_to_journal_hierarchy(db, partner_id, "project", "101")
    assert db.query(JournalPartnerLink).count() == 0


def test_direct_partner_link_conflicts_on_duplicate(db, chain):
    partner_id = make_partner(db)
    link = JournalPartnerLinkCreate(journal_id="10", partner_id=partner_id, partnership_type="standard")
    created = crud_links.create_journal_partner_link(db, link)
    assert created.partnership_type == "STANDARD"

    with pytest.raises(ConflictError):
        crud_links.create_journal_partner_link(db, link)


def test_delete_partner_link_is_idempotent(db, chain):
    partner_id = make_partner(db)
    link_id = crud_links.create_journal_partner_link(
        db, JournalPartnerLinkCreate(journal_id="10", partner_id=partner_id)
    ).id

    assert crud_links.delete_journal_partner_link(db, link_id)["id"] == link_id
    assert crud_links.delete_journal_partner_link(db, link_id) is None


def test_delete_links_by_key(db, chain):
    partner_id = make_partner(db)
    good_id = make_good(db)
    crud_links.link_entity_to_journal_hierarchy(db, partner_id, "partner", "101", "STANDARD")
    crud_links.link_entity_to_journal_hierarchy(db, partner_id, "partner", "101", "CONSIGNMENT")
    crud_links.create_journal_good_link(db, JournalGoodLinkCreate(journal_id="10", good_id=good_id))

    assert crud_links.delete_journal_partner_links_by_key(db, "101", partner_id, "STANDARD") == 1
    assert crud_links.delete_journal_partner_links_by_key(db, "10", partner_id) == 2
    assert crud_links.delete_journal_partner_links_by_key(db, "10", partner_id) == 0
    assert crud_links.delete_journal_good_links_by_key(db, "10", good_id) == 1
    assert db.query(JournalPartnerLink).count() == 3


def test_end_to_end_link_then_delete_leaf(db, chain):
    partner_id = make_partner(db, "P1")
    crud_links.link_entity_to_journal_hierarchy(db, partner_id, "partner", "101", "STANDARD")

    linked = {link.journal_id for link in crud_links.get_journal_partner_links(db, partner_id=partner_id)}
    assert linked == {"1", "10", "101"}

    report = crud_journals.delete_journals_safely(db, ["101"])

    assert report["passes"] == [["101"]]
    # the link at the deleted journal goes with it
    linked = {link.journal_id for link in crud_links.get_journal_partner_links(db, partner_id=partner_id)}
    assert linked == {"1", "10"}


def test_partnership_type_is_normalised_on_direct_calls(db, chain):
    partner_id = make_partner(db)
    crud_links.link_entity_to_journal_hierarchy(db, partner_id, "partner", "101", "STANDARD")
    crud_links.link_entity_to_journal_hierarchy(db, partner_id, "partner", "101", " standard ")

    assert db.query(JournalPartnerLink).count() == 3
    assert crud_links.find_journal_partner_link(db, "10", partner_id, "standard") is not None
    assert len(crud_links.get_journal_partner_links(db, partner_id=partner_id, partnership_type="Standard")) == 3
    assert crud_links.delete_journal_partner_links_by_key(db, "1", partner_id, "standard") == 1


def test_blank_partnership_type_is_rejected(db, chain):
    partner_id = make_partner(db)
    with pytest.raises(ValidationError):
        crud_links.link_entity_to_journal_hierarchy(db, partner_id, "partner", "101", "   ")
    assert db.query(JournalPartnerLink).count() == 0
