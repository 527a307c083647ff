#!/usr/bin/env python3
"""
library_system.py

Loads catalog items and members from delimited text files, replays a
command file against them and writes the results to an output file.

Usage:
    python library_system.py items.txt members.txt commands.txt output.txt
"""

from __future__ import annotations
import argparse
import datetime
import logging
import sys
from typing import Callable, List, Optional, Sequence, TypeVar

import pandas as pd

from library_files import OutputFile, PathLike, read_records
from library_records import (ItemKind, MemberCategory, RecordParseError, RecordStore, UnknownRecordError,
                             decode_item, decode_member)
from lending_engine import Command, LendingEngine, LineSink, SequentialDateError, decode_command
from library_reports import DATE_DISPLAY_FORMAT

# Exit codes
EXIT_OK = 0
EXIT_SEQUENCE = 1
EXIT_INPUT = 2

# Logging
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger("LibrarySystem")

KIND_LABELS = {ItemKind.BOOK: "Book", ItemKind.MAGAZINE: "Magazine", ItemKind.DVD: "DVD"}
CATEGORY_LABELS = {
    MemberCategory.STUDENT: "Student",
    MemberCategory.ACADEMIC: "AcademicMember",
    MemberCategory.GUEST: "Guest",
}


T = TypeVar("T")


def _decode_rows(rows: List[List[str]], decode: Callable[[Sequence[str]], T], path: PathLike) -> List[T]:
    decoded: List[T] = []
    for line_no, fields in enumerate(rows, start=1):
        try:
            decoded.append(decode(fields))
        except RecordParseError as exc:
            raise RecordParseError(f"{path}, record {line_no}: {exc}") from exc
    return decoded


class LibrarySystem:
    """
    LibrarySystem holds the loaded items, members and commands of one run.

    Construction reads and decodes all three input files, so a malformed
    record or unreadable file fails before any command is executed.
    """

    def __init__(self,
                 items_path: PathLike,
                 members_path: PathLike,
                 commands_path: PathLike,
                 today: Optional[Callable[[], datetime.date]] = None):
        """
        Args:
            items_path: path to the items file.
            members_path: path to the members file.
            commands_path: path to the commands file.
            today: clock for the overdue sweep; defaults to the wall clock.
        """
        self.store = RecordStore()
        self.today = today
        self.commands: List[Command] = []

        self._load_items(items_path)
        self._load_members(members_path)
        self._load_commands(commands_path)

    # ---------------- Loading ----------------
    def _load_items(self, path: PathLike) -> None:
        for item in _decode_rows(read_records(path), decode_item, path):
            self.store.add_item(item)
        logger.info("Loaded %d items", len(self.store.items))

    def _load_members(self, path: PathLike) -> None:
        for member in _decode_rows(read_records(path), decode_member, path):
            self.store.add_member(member)
        logger.info("Loaded %d members", len(self.store.members))

    def _load_commands(self, path: PathLike) -> None:
        self.commands = _decode_rows(read_records(path), decode_command, path)
        logger.info("Loaded %d commands", len(self.commands))

    # ---------------- Replay ----------------
    def replay(self, sink: LineSink) -> int:
        """
        Execute every loaded command, writing results to `sink`.

        Returns the number of commands executed. SequentialDateError and
        UnknownRecordError propagate and stop the replay.
        """
        engine = LendingEngine(self.store, sink, today=self.today)
        return engine.run(self.commands)

    def run(self, output_path: PathLike) -> int:
        """Replay into `output_path`, which is truncated first."""
        with OutputFile(output_path) as out:
            return self.replay(out)

    # ---------------- Reports ----------------
    def export_report_items(self) -> pd.DataFrame:
        """
        Produce a DataFrame of the catalog and its current loan status.

        Columns: Item ID, Kind, Title, Type, Status, Borrowed By, Borrowed Date.
        """
        rows = []
        for item in self.store.sorted_items():
            holder = self.store.holder_of(item.item_id)
            rows.append({
                "Item ID": item.item_id,
                "Kind": KIND_LABELS[item.kind],
                "Title": item.title,
                "Type": item.tag,
                "Status": "Available" if holder is None else "Borrowed",
                "Borrowed By": "" if holder is None else holder.name,
                "Borrowed Date": "" if holder is None
                else holder.loans[item.item_id].strftime(DATE_DISPLAY_FORMAT),
            })
        return pd.DataFrame(rows, columns=["Item ID", "Kind", "Title", "Type", "Status",
                                           "Borrowed By", "Borrowed Date"])

    def export_report_members(self) -> pd.DataFrame:
        """
        Build a DataFrame summarizing members, their loans and penalties.

        Returns columns: Member ID, Name, Category, BorrowedCount,
        BorrowedItems (comma separated IDs), Penalty.
        """
        rows = []
        for member in self.store.sorted_members():
            rows.append({
                "Member ID": member.member_id,
                "Name": member.name,
                "Category": CATEGORY_LABELS[member.category],
                "BorrowedCount": len(member.loans),
                "BorrowedItems": ",".join(str(i) for i in sorted(member.loans)),
                "Penalty": member.penalty,
            })
        return pd.DataFrame(rows, columns=["Member ID", "Name", "Category", "BorrowedCount",
                                           "BorrowedItems", "Penalty"])


# ---------------- CLI ----------------
def main(argv: Optional[List[str]] = None,
         today: Optional[Callable[[], datetime.date]] = None) -> int:
    """
    Run one replay from the command line and return the process exit code.

    0 on success, 1 when a borrow date is out of order, 2 when an input
    file is unreadable or malformed or a command names an unknown record.
    `today` overrides the wall clock used by the overdue sweep.
    """
    parser = argparse.ArgumentParser(description="Library lending command replay")
    parser.add_argument("items", help="Path to the items file")
    parser.add_argument("members", help="Path to the members file")
    parser.add_argument("commands", help="Path to the commands file")
    parser.add_argument("output", help="Path to the output file (overwritten)")
    args = parser.parse_args(argv)

    try:
        # the output file is truncated before any input is read
        with OutputFile(args.output) as out:
            lib = LibrarySystem(args.items, args.members, args.commands, today=today)
            lib.replay(out)
    except SequentialDateError as exc:
        logger.error("Run aborted: %s", exc)
        return EXIT_SEQUENCE
    except (RecordParseError, UnknownRecordError) as exc:
        logger.error("Invalid input: %s", exc)
        return EXIT_INPUT
    except OSError as exc:
        logger.error("I/O failure: %s", exc)
        return EXIT_INPUT
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
