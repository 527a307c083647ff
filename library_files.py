"""
library_files.py

Line-oriented reading of the delimited input files and the line sinks the
engine writes its results to.
"""

from __future__ import annotations
import csv
import logging
import pathlib
from typing import List, Union

import pandas as pd

from library_records import RecordParseError

# Configuration
DELIMITER = ","
# Upper bound on fields per line; the widest record layout has 7
MAX_FIELDS = 16
ENCODING = "utf-8"

logger = logging.getLogger("LibrarySystem.files")

PathLike = Union[str, pathlib.Path]


def read_records(path: PathLike) -> List[List[str]]:
    """
    Read a delimited text file into a list of field lists, one per line.

    Lines may have different widths. Fields are whitespace-stripped, trailing
    empty fields are dropped and blank lines are skipped.
    A missing or unreadable file raises OSError. A line wider than
    MAX_FIELDS or text that is not valid UTF-8 raises RecordParseError.
    """
    path = pathlib.Path(path)
    try:
        df = pd.read_csv(path, sep=DELIMITER, header=None, names=list(range(MAX_FIELDS)),
                         index_col=False, dtype=str, keep_default_na=False,
                         quoting=csv.QUOTE_NONE, skip_blank_lines=True, encoding=ENCODING)
    except pd.errors.EmptyDataError:
        logger.warning("Input file is empty: %s", path)
        return []
    except (pd.errors.ParserError, UnicodeDecodeError) as exc:
        raise RecordParseError(f"{path}: {exc}") from exc

    rows: List[List[str]] = []
    for values in df.itertuples(index=False, name=None):
        fields = [value.strip() if isinstance(value, str) else "" for value in values]
        # short lines come back padded with empty fields
        while fields and not fields[-1]:
            fields.pop()
        rows.append(fields)
    logger.info("Read %d records from %s", len(rows), path)
    return rows


class LineBuffer:
    """In-memory line sink."""

    def __init__(self) -> None:
        self.lines: List[str] = []

    def write_line(self, line: str) -> None:
        self.lines.append(line)


class OutputFile:
    """
    Buffered line sink over a results file.

    The file is truncated when opened and closed on exit of the `with`
    block, so every line written before an abort is kept.
    """

    def __init__(self, path: PathLike) -> None:
        self.path = pathlib.Path(path)
        self._handle = None
        self.lines_written = 0

    def __enter__(self) -> "OutputFile":
        self._handle = self.path.open("w", encoding="utf-8")
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def write_line(self, line: str) -> None:
        if self._handle is None:
            raise ValueError(f"Output file is not open: {self.path}")
        self._handle.write(line + "\n")
        self.lines_written += 1

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None
            logger.info("Wrote %d lines to %s", self.lines_written, self.path)
