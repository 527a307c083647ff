"""
library_rules.py

Borrowing policy per member category: how many items may be held at once,
after how many days a loan counts as overdue, and which item tags the
category may borrow.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, FrozenSet

from library_records import Item, Member, MemberCategory


@dataclass(frozen=True)
class BorrowingPolicy:
    max_loans: int
    overdue_days: int
    barred_tags: FrozenSet[str] = frozenset()

    def allows(self, item: Item) -> bool:
        return item.tag not in self.barred_tags


# Configuration
POLICIES: Dict[MemberCategory, BorrowingPolicy] = {
    MemberCategory.STUDENT: BorrowingPolicy(max_loans=5, overdue_days=30,
                                            barred_tags=frozenset({"referenced"})),
    MemberCategory.ACADEMIC: BorrowingPolicy(max_loans=3, overdue_days=15),
    MemberCategory.GUEST: BorrowingPolicy(max_loans=1, overdue_days=7,
                                          barred_tags=frozenset({"rare", "limited"})),
}


def policy_for(member: Member) -> BorrowingPolicy:
    return POLICIES[member.category]
