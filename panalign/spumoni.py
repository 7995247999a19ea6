"""Matching-statistics output files: binary records, plain text and summaries."""

from __future__ import annotations

import os
import struct
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, TextIO

_WORD = struct.Struct("<Q")


class SlpKind(Enum):
    """Grammar-compressed random access structures for the reference."""

    SHAPED = "shaped"
    PLAIN = "plain"


def slp_file_extension(kind: SlpKind) -> str:
    """File extension of a stored random access structure."""
    return ".plain.slp" if SlpKind(kind) is SlpKind.PLAIN else ".slp"


def temp_output_name(out_filename: str, index: int) -> str:
    """Name of the temporary output written by worker ``index``."""
    return f"{out_filename}_{index}.ms.tmp.out"


def write_lengths_record(out: BinaryIO, lengths: Sequence[int]) -> None:
    """Write a record: its length, then the values, as 64-bit words."""
    out.write(_WORD.pack(len(lengths)))
    out.write(struct.pack(f"<{len(lengths)}Q", *lengths))


def _words(handle: BinaryIO) -> Iterator[int]:
    while True:
        chunk = handle.read(_WORD.size)
        if len(chunk) < _WORD.size:
            return
        yield _WORD.unpack(chunk)[0]


def read_lengths_records(path: str | os.PathLike[str]) -> Iterator[list[int]]:
    """Yield the records of a file written with write_lengths_record."""
    with open(path, "rb") as handle:
        for length in _words(handle):
            data = handle.read(length * _WORD.size)
            if len(data) != length * _WORD.size:
                raise ValueError(f"truncated record in {os.fspath(path)}")
            yield list(struct.unpack(f"<{length}Q", data))


def write_pseudo_lengths(tmp_paths: Iterable[str | os.PathLike[str]], out: TextIO) -> int:
    """Write every record of the files as '>index' followed by its values.

    Records are numbered across all files in order; returns their count.
    """
    count = 0
    for path in tmp_paths:
        for lengths in read_lengths_records(path):
            out.write(f">{count}\n")
            out.write("".join(f"{value} " for value in lengths))
            out.write("\n")
            count += 1
    return count


def write_max_length(out: BinaryIO, value: int) -> None:
    """Write one maximum matching length as a 64-bit word."""
    out.write(_WORD.pack(value))


def read_max_lengths(path: str | os.PathLike[str]) -> Iterator[int]:
    """Yield the maximum lengths stored in a file."""
    with open(path, "rb") as handle:
        yield from _words(handle)


@dataclass(frozen=True)
class MaxLengthStats:
    """How many reads have a maximal match of at least 25, 50 and 75 bases."""

    reads: int = 0
    mem25: int = 0
    mem50: int = 0
    mem75: int = 0


def summarize_max_lengths(values: Iterable[int]) -> MaxLengthStats:
    """Count reads and the reads whose longest match reaches each threshold."""
    reads = mem25 = mem50 = mem75 = 0
    for value in values:
        reads += 1
        mem25 += value >= 25
        mem50 += value >= 50
        mem75 += value >= 75
    return MaxLengthStats(reads=reads, mem25=mem25, mem50=mem50, mem75=mem75)