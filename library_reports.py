"""
library_reports.py

Display text for the current state of members and items.
"""

from __future__ import annotations
from typing import List

from library_records import Item, ItemKind, Member, MemberCategory, RecordStore

# Configuration
DATE_DISPLAY_FORMAT = "%d/%m/%Y"
SEPARATOR = " "


def member_info(member: Member) -> str:
    """Category-specific info block; spans two lines."""
    if member.category is MemberCategory.STUDENT:
        return (f"Name: {member.name} Phone: {member.phone}\n"
                f"Faculty: {member.faculty} Department: {member.department} Grade: {member.grade}th")
    if member.category is MemberCategory.ACADEMIC:
        return (f"Name: {member.title} {member.name} Phone: {member.phone}\n"
                f"Faculty: {member.faculty} Department: {member.department}")
    return (f"Name: {member.name} Phone: {member.phone}\n"
            f"Occupation: {member.occupation}")


def item_info(item: Item) -> str:
    if item.kind is ItemKind.BOOK:
        return f"Author: {item.creator} Genre: {item.genre}"
    if item.kind is ItemKind.MAGAZINE:
        return f"Publisher: {item.creator} Category: {item.genre}"
    return f"Director: {item.creator} Category: {item.genre} Runtime: {item.runtime}"


def item_status(store: RecordStore, item: Item) -> str:
    holder = store.holder_of(item.item_id)
    line = f"ID: {item.item_id} Name: {item.title} Status: "
    if holder is None:
        return line + "Available"
    borrowed_on = holder.loans[item.item_id].strftime(DATE_DISPLAY_FORMAT)
    return line + f"Borrowed Borrowed Date: {borrowed_on} Borrowed by: {holder.name}"


def member_report_lines(store: RecordStore) -> List[str]:
    """
    Lines of the member report, members ascending by ID.

    Each entry is preceded by a separator line; the penalty line only
    appears for members who owe something.
    """
    lines = [SEPARATOR]
    for member in store.sorted_members():
        lines.append(SEPARATOR)
        lines.append(f"------ User Information for {member.member_id} ------")
        lines.append(member_info(member))
        if member.penalty > 0:
            lines.append(f"Penalty: {member.penalty}$")
    return lines


def item_report_lines(store: RecordStore) -> List[str]:
    """Lines of the item report, items ascending by ID."""
    lines = [SEPARATOR]
    for item in store.sorted_items():
        lines.append(SEPARATOR)
        lines.append(f"------ Item Information for {item.item_id} ------")
        lines.append(item_status(store, item))
        lines.append(item_info(item))
    return lines
