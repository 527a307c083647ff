"""
lending_engine.py

Replays borrow / return / pay / display commands against the record store.

Every command writes its outcome to a line sink. Business-rule rejections
(borrow limit, availability, unpaid penalty, item type) are reported as
output lines and processing goes on. A borrow dated before the last
accepted borrow aborts the whole replay with `SequentialDateError`.
"""

from __future__ import annotations
import datetime
import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Protocol, Sequence, Tuple, Union

from library_records import RecordParseError, RecordStore, parse_id
from library_reports import item_report_lines, member_report_lines
from library_rules import policy_for

# Configuration
DATE_FORMAT = "%d/%m/%Y"
PENALTY_STEP = 2
PENALTY_BLOCK_AMOUNT = 6

logger = logging.getLogger("LibrarySystem.engine")


class SequentialDateError(Exception):
    """A borrow command is dated before the last accepted borrow."""

    def __init__(self, date: datetime.date, watermark: datetime.date):
        super().__init__(
            f"borrow dated {date.strftime(DATE_FORMAT)} precedes the last accepted borrow "
            f"dated {watermark.strftime(DATE_FORMAT)}")
        self.date = date
        self.watermark = watermark


class LineSink(Protocol):
    def write_line(self, line: str) -> None:
        ...


# ---------------- Commands ----------------
@dataclass(frozen=True)
class Borrow:
    member_id: int
    item_id: int
    date: datetime.date


@dataclass(frozen=True)
class Return:
    member_id: int
    item_id: int


@dataclass(frozen=True)
class Pay:
    member_id: int


@dataclass(frozen=True)
class DisplayMembers:
    pass


@dataclass(frozen=True)
class DisplayItems:
    pass


Command = Union[Borrow, Return, Pay, DisplayMembers, DisplayItems]


def parse_date(raw: str) -> datetime.date:
    try:
        return datetime.datetime.strptime(raw, DATE_FORMAT).date()
    except ValueError:
        raise RecordParseError(f"date must be dd/mm/yyyy, got {raw!r}") from None


def decode_command(fields: Sequence[str]) -> Command:
    """
    Build a command from one row of the commands file.

    Accepted rows:
        borrow,memberId,itemId,dd/mm/yyyy
        return,memberId,itemId
        pay,memberId
        displayMembers   (displayUsers is accepted too)
        displayItems
    """
    if not fields:
        raise RecordParseError("empty command")
    name, args = fields[0], list(fields[1:])

    def expect(count: int) -> None:
        if len(args) != count:
            raise RecordParseError(f"{name} takes {count} arguments, got {len(args)}: {args}")

    if name == "borrow":
        expect(3)
        return Borrow(member_id=parse_id(args[0], "member id"),
                      item_id=parse_id(args[1], "item id"),
                      date=parse_date(args[2]))
    if name == "return":
        expect(2)
        return Return(member_id=parse_id(args[0], "member id"), item_id=parse_id(args[1], "item id"))
    if name == "pay":
        expect(1)
        return Pay(member_id=parse_id(args[0], "member id"))
    if name in ("displayMembers", "displayUsers"):
        expect(0)
        return DisplayMembers()
    if name == "displayItems":
        expect(0)
        return DisplayItems()
    raise RecordParseError(f"unknown command {name!r}")


# ---------------- Engine ----------------
class LendingEngine:
    """
    Interprets commands one at a time against a RecordStore.

    Args:
        store: items and members; loans and penalties are mutated in place.
        sink: receives every output line in command order.
        today: clock used by the overdue sweep, defaults to the wall clock.
    """

    def __init__(self, store: RecordStore, sink: LineSink,
                 today: Optional[Callable[[], datetime.date]] = None):
        self.store = store
        self.sink = sink
        self.today = today or datetime.date.today
        # date of the most recently accepted borrow
        self.watermark: Optional[datetime.date] = None

    def run(self, commands: Iterable[Command]) -> int:
        """Execute commands in order; returns how many were executed."""
        count = 0
        for command in commands:
            self.execute(command)
            count += 1
        logger.info("Executed %d commands", count)
        return count

    def execute(self, command: Command) -> bool:
        """
        Execute a single command.

        Returns False when a borrow is rejected by a lending rule, True
        otherwise. Raises SequentialDateError on an out-of-order borrow and
        UnknownRecordError for IDs that were never loaded.
        """
        if isinstance(command, Borrow):
            return self.borrow(command.member_id, command.item_id, command.date)
        if isinstance(command, Return):
            return self.return_item(command.member_id, command.item_id)
        if isinstance(command, Pay):
            return self.pay(command.member_id)
        if isinstance(command, DisplayMembers):
            self._emit_all(member_report_lines(self.store))
            return True
        if isinstance(command, DisplayItems):
            self._emit_all(item_report_lines(self.store))
            return True
        raise TypeError(f"not a command: {command!r}")

    def _emit(self, line: str) -> None:
        self.sink.write_line(line)

    def _emit_all(self, lines: List[str]) -> None:
        for line in lines:
            self.sink.write_line(line)

    def sweep_overdue(self) -> List[Tuple[int, int]]:
        """
        Evict every loan held longer than its member's overdue threshold.

        Each evicted loan adds PENALTY_STEP to the holder's penalty. Returns
        the (member_id, item_id) pairs that were evicted.
        """
        today = self.today()
        swept: List[Tuple[int, int]] = []
        for member in self.store.members.values():
            threshold = policy_for(member).overdue_days
            overdue = [item_id for item_id, borrowed_on in member.loans.items()
                       if (today - borrowed_on).days + 1 > threshold]
            for item_id in overdue:
                del member.loans[item_id]
                member.penalty += PENALTY_STEP
                swept.append((member.member_id, item_id))
                logger.debug("Overdue loan of item %s swept from member %s (penalty now %d)",
                             item_id, member.member_id, member.penalty)
        return swept

    def borrow(self, member_id: int, item_id: int, date: datetime.date) -> bool:
        """
        Borrow an item for a member.

        Checks run in a fixed order and the first failing one decides the
        outcome: date order, overdue sweep, borrow limit, availability,
        penalty, item type.
        """
        if self.watermark is not None and date < self.watermark:
            self._emit("Borrow dates must be sequential.")
            logger.error("Borrow of item %s by member %s dated %s precedes %s; aborting",
                         item_id, member_id, date, self.watermark)
            raise SequentialDateError(date, self.watermark)
        self.watermark = date

        self.sweep_overdue()

        member = self.store.get_member(member_id)
        item = self.store.get_item(item_id)
        policy = policy_for(member)

        if len(member.loans) >= policy.max_loans:
            self._reject(f"{member.name} cannot borrow {item.title}, since the borrow limit has been reached!")
            return False
        if self.store.holder_of(item.item_id) is not None:
            self._reject(f"{member.name} cannot borrow {item.title}, it is not available!")
            return False
        if member.penalty >= PENALTY_BLOCK_AMOUNT:
            self._reject(f"{member.name} cannot borrow {item.title}, "
                         f"you must first pay the penalty amount! {member.penalty}$")
            return False
        if not policy.allows(item):
            self._reject(f"{member.name} cannot borrow {item.tag} item!")
            return False

        member.loans[item.item_id] = date
        self._emit(f"{member.name} successfully borrowed! {item.title}")
        logger.debug("Member %s borrowed item %s on %s", member_id, item_id, date)
        return True

    def _reject(self, message: str) -> None:
        self._emit(message)
        logger.warning("Rejected: %s", message)

    def return_item(self, member_id: int, item_id: int) -> bool:
        member = self.store.get_member(member_id)
        item = self.store.get_item(item_id)
        # returning an item the member does not hold is not an error
        member.loans.pop(item.item_id, None)
        self._emit(f"{member.name} successfully returned {item.title}")
        logger.debug("Member %s returned item %s", member_id, item_id)
        return True

    def pay(self, member_id: int) -> bool:
        member = self.store.get_member(member_id)
        logger.debug("Member %s paid penalty of %d", member_id, member.penalty)
        member.penalty = 0
        self._emit(f"{member.name} has paid penalty")
        return True
