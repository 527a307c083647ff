"""
library_records.py

Catalog items, members and the in-memory record store they live in.

Rows read from the input files are decoded here into typed records. A row
that cannot be decoded raises `RecordParseError` instead of producing an
absent record.
"""

from __future__ import annotations
import datetime
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence


class RecordParseError(ValueError):
    """Raised when an input row cannot be turned into a record."""


class UnknownRecordError(LookupError):
    """Raised when a command refers to an item or member that was never loaded."""


class ItemKind(Enum):
    BOOK = "B"
    MAGAZINE = "M"
    DVD = "D"


class MemberCategory(Enum):
    STUDENT = "S"
    ACADEMIC = "A"
    GUEST = "G"


@dataclass(frozen=True)
class Item:
    item_id: int
    kind: ItemKind
    title: str
    creator: str  # author, publisher or director depending on kind
    genre: str
    tag: str  # normal, referenced, rare or limited
    runtime: Optional[str] = None


@dataclass
class Member:
    member_id: int
    category: MemberCategory
    name: str
    phone: str
    department: str = ""
    faculty: str = ""
    grade: str = ""
    title: str = ""
    occupation: str = ""
    loans: Dict[int, datetime.date] = field(default_factory=dict)
    penalty: int = 0


# Expected field counts per kind code, kind code included
ITEM_FIELDS = {ItemKind.BOOK: 6, ItemKind.MAGAZINE: 6, ItemKind.DVD: 7}
MEMBER_FIELDS = {MemberCategory.STUDENT: 7, MemberCategory.ACADEMIC: 7, MemberCategory.GUEST: 5}


def parse_id(raw: str, what: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise RecordParseError(f"{what} must be an integer, got {raw!r}") from None


def _fit(fields: Sequence[str], expected: int, code: str) -> List[str]:
    # trailing empty fields are not kept by the reader, so short rows are padded back
    if len(fields) > expected:
        raise RecordParseError(
            f"record of kind {code!r} takes {expected} fields, got {len(fields)}: {list(fields)}")
    return list(fields) + [""] * (expected - len(fields))


def decode_item(fields: Sequence[str]) -> Item:
    """
    Build an Item from one row of the items file.

    Layouts:
        B,id,title,author,genre,tag
        M,id,title,publisher,category,tag
        D,id,title,director,category,runtime,tag
    """
    if not fields:
        raise RecordParseError("empty item record")
    code = fields[0]
    try:
        kind = ItemKind(code)
    except ValueError:
        raise RecordParseError(f"unknown item kind {code!r}") from None
    fields = _fit(fields, ITEM_FIELDS[kind], code)

    item_id = parse_id(fields[1], "item id")
    if not fields[-1]:
        raise RecordParseError(f"item {item_id} has no category tag")
    if kind is ItemKind.DVD:
        return Item(item_id=item_id, kind=kind, title=fields[2], creator=fields[3],
                    genre=fields[4], runtime=fields[5], tag=fields[6])
    return Item(item_id=item_id, kind=kind, title=fields[2], creator=fields[3],
                genre=fields[4], tag=fields[5])


def decode_member(fields: Sequence[str]) -> Member:
    """
    Build a Member from one row of the members file.

    Layouts:
        S,name,id,phone,department,faculty,grade
        A,name,id,phone,department,faculty,title
        G,name,id,phone,occupation
    """
    if not fields:
        raise RecordParseError("empty member record")
    code = fields[0]
    try:
        category = MemberCategory(code)
    except ValueError:
        raise RecordParseError(f"unknown member kind {code!r}") from None
    fields = _fit(fields, MEMBER_FIELDS[category], code)
    if not fields[1]:
        raise RecordParseError(f"member record without a name: {fields}")

    member = Member(member_id=parse_id(fields[2], "member id"), category=category,
                    name=fields[1], phone=fields[3])
    if category is MemberCategory.GUEST:
        member.occupation = fields[4]
    else:
        member.department = fields[4]
        member.faculty = fields[5]
        if category is MemberCategory.STUDENT:
            member.grade = fields[6]
        else:
            member.title = fields[6]
    return member


class RecordStore:
    """
    Lookup-by-ID mappings for the catalog and the membership.

    Items and members are added once while loading. Loans live on the
    members, so the store also answers who currently holds an item.
    """

    def __init__(self) -> None:
        self.items: Dict[int, Item] = {}
        self.members: Dict[int, Member] = {}

    def add_item(self, item: Item) -> None:
        if item.item_id in self.items:
            raise RecordParseError(f"duplicate item id {item.item_id}")
        self.items[item.item_id] = item

    def add_member(self, member: Member) -> None:
        if member.member_id in self.members:
            raise RecordParseError(f"duplicate member id {member.member_id}")
        self.members[member.member_id] = member

    def get_item(self, item_id: int) -> Item:
        try:
            return self.items[item_id]
        except KeyError:
            raise UnknownRecordError(f"Item not found: {item_id}") from None

    def get_member(self, member_id: int) -> Member:
        try:
            return self.members[member_id]
        except KeyError:
            raise UnknownRecordError(f"Member not found: {member_id}") from None

    def holder_of(self, item_id: int) -> Optional[Member]:
        for member in self.members.values():
            if item_id in member.loans:
                return member
        return None

    def sorted_items(self) -> List[Item]:
        return [self.items[i] for i in sorted(self.items)]

    def sorted_members(self) -> List[Member]:
        return [self.members[m] for m in sorted(self.members)]
