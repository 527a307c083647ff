import sys
import pathlib

import pytest

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parent.parent))
from library_records import (ItemKind, MemberCategory, RecordParseError, RecordStore,
                             UnknownRecordError, decode_item, decode_member)
from library_rules import POLICIES, policy_for
from library_reports import item_info


def test_decode_book_magazine_dvd():
    book = decode_item(["B", "1", "Dune", "Frank Herbert", "Sci-Fi", "normal"])
    assert (book.item_id, book.kind, book.title, book.tag) == (1, ItemKind.BOOK, "Dune", "normal")
    assert item_info(book) == "Author: Frank Herbert Genre: Sci-Fi"

    mag = decode_item(["M", "2", "Nature", "Springer", "Science", "rare"])
    assert item_info(mag) == "Publisher: Springer Category: Science"

    dvd = decode_item(["D", "3", "Alien", "Ridley Scott", "Horror", "117 min", "limited"])
    assert dvd.runtime == "117 min"
    assert dvd.tag == "limited"
    assert item_info(dvd) == "Director: Ridley Scott Category: Horror Runtime: 117 min"


@pytest.mark.parametrize("fields", [
    ["X", "1", "Dune", "Frank Herbert", "Sci-Fi", "normal"],
    ["B", "one", "Dune", "Frank Herbert", "Sci-Fi", "normal"],
    ["B", "1", "Dune", "Frank Herbert", "Sci-Fi", "normal", "extra"],
    ["B", "1", "Dune", "Frank Herbert"],
    [],
])
def test_decode_bad_items(fields):
    with pytest.raises(RecordParseError):
        decode_item(fields)


def test_decode_members():
    student = decode_member(["S", "Ann", "10", "555-0101", "CS", "Engineering", "3"])
    assert student.category is MemberCategory.STUDENT
    assert (student.member_id, student.grade, student.faculty) == (10, "3", "Engineering")
    assert student.loans == {}
    assert student.penalty == 0

    academic = decode_member(["A", "Bob", "20", "555-0202", "Math", "Science", "Dr."])
    assert academic.title == "Dr."

    guest = decode_member(["G", "Gus", "30", "555-0303", "Writer"])
    assert guest.category is MemberCategory.GUEST
    assert guest.occupation == "Writer"


def test_guest_with_empty_occupation():
    # the reader drops trailing empty fields
    guest = decode_member(["G", "Gus", "30", "555-0303"])
    assert guest.occupation == ""


@pytest.mark.parametrize("fields", [
    ["Q", "Ann", "10", "555-0101"],
    ["S", "Ann", "ten", "555-0101", "CS", "Engineering", "3"],
    ["G", "Gus", "30", "555-0303", "Writer", "extra"],
    ["G", "", "30", "555-0303", "Writer"],
])
def test_decode_bad_members(fields):
    with pytest.raises(RecordParseError):
        decode_member(fields)


def test_store_rejects_duplicates_and_unknown_ids():
    store = RecordStore()
    store.add_item(decode_item(["B", "1", "Dune", "Frank Herbert", "Sci-Fi", "normal"]))
    with pytest.raises(RecordParseError):
        store.add_item(decode_item(["B", "1", "Emma", "Jane Austen", "Classic", "normal"]))
    with pytest.raises(UnknownRecordError):
        store.get_item(2)
    with pytest.raises(UnknownRecordError):
        store.get_member(10)


def test_store_sorted_by_numeric_id():
    store = RecordStore()
    for item_id in ("10", "2", "33"):
        store.add_item(decode_item(["B", item_id, "T" + item_id, "A", "G", "normal"]))
    assert [i.item_id for i in store.sorted_items()] == [2, 10, 33]


def test_policy_table():
    assert [(p.max_loans, p.overdue_days) for p in POLICIES.values()] == [(5, 30), (3, 15), (1, 7)]

    rare = decode_item(["M", "2", "Nature", "Springer", "Science", "rare"])
    limited = decode_item(["M", "3", "Wired", "Conde Nast", "Tech", "limited"])
    referenced = decode_item(["B", "4", "Atlas", "Various", "Reference", "referenced"])
    student = decode_member(["S", "Ann", "10", "555-0101", "CS", "Engineering", "3"])
    academic = decode_member(["A", "Bob", "20", "555-0202", "Math", "Science", "Dr."])
    guest = decode_member(["G", "Gus", "30", "555-0303", "Writer"])

    assert not policy_for(student).allows(referenced)
    assert policy_for(student).allows(rare)
    assert all(policy_for(academic).allows(i) for i in (rare, limited, referenced))
    assert not policy_for(guest).allows(rare)
    assert not policy_for(guest).allows(limited)
    assert policy_for(guest).allows(referenced)
