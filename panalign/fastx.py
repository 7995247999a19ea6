"""Reading FASTA/FASTQ files and splitting them into blocks or byte ranges."""

from __future__ import annotations

import gzip
import io
import os
import sys
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import BinaryIO, TextIO

from panalign.sam import Read

_GZIP_MAGIC = b"\x1f\x8b"
_HEADERS = (">", "@")


def is_gzipped(path: str | os.PathLike[str]) -> bool:
    """True if the file starts with the gzip magic bytes."""
    with open(path, "rb") as handle:
        return handle.read(2) == _GZIP_MAGIC


def _open_text(path: str | os.PathLike[str]) -> TextIO:
    if is_gzipped(path):
        return io.TextIOWrapper(gzip.open(path, "rb"), encoding="latin-1", newline="")
    return open(path, encoding="latin-1", newline="")


def _parse_header(line: str) -> tuple[str, str]:
    parts = line[1:].rstrip("\r\n").split(None, 1)
    name = parts[0] if parts else ""
    comment = parts[1] if len(parts) > 1 else ""
    return name, comment


def _records(lines: Iterator[str]) -> Iterator[Read]:
    line = next(lines, None)
    while line is not None and not line.startswith(_HEADERS):
        line = next(lines, None)
    while line is not None:
        name, comment = _parse_header(line)
        seq_parts: list[str] = []
        line = next(lines, None)
        while line is not None and not line.startswith((*_HEADERS, "+")):
            seq_parts.append(line.rstrip("\r\n"))
            line = next(lines, None)
        seq = "".join(seq_parts)
        qual: str | None = None
        if line is not None and line.startswith("+"):
            qual_parts: list[str] = []
            qual_len = 0
            while qual_len < len(seq):
                line = next(lines, None)
                if line is None:
                    break
                part = line.rstrip("\r\n")
                qual_parts.append(part)
                qual_len += len(part)
            qual = "".join(qual_parts)
            if len(qual) != len(seq):
                raise ValueError(f"quality and sequence lengths differ for read {name!r}")
            line = next(lines, None)
        yield Read(name=name, seq=seq, qual=qual, comment=comment)
        while line is not None and not line.startswith(_HEADERS):
            line = next(lines, None)


def read_fastx(path: str | os.PathLike[str]) -> Iterator[Read]:
    """Yield the records of a FASTA or FASTQ file, gzipped or plain."""
    with _open_text(path) as handle:
        yield from _records(iter(handle))


def count_sequences(path: str | os.PathLike[str]) -> int:
    """Number of records in a FASTA or FASTQ file."""
    return sum(1 for _ in read_fastx(path))


def _base_name(path: str) -> str:
    last = path.rfind(".")
    without_ext = path[:last] if last >= 0 else path
    second = without_ext.rfind(".")
    return path[:second] if second >= 0 else path


def _block_sizes(n_seqs: int, n_blocks: int) -> tuple[int, int]:
    if n_seqs % n_blocks == 0:
        return n_seqs // n_blocks, n_seqs // n_blocks
    if n_blocks == 2:
        return n_seqs // 2, n_seqs % 2 + n_seqs // 2
    return n_seqs // (n_blocks - 1), n_seqs % (n_blocks - 1)


def _report(progress: TextIO | None, done: int, total: int) -> None:
    if progress is not None:
        progress.write(f"\rSplitting sequences... {done}/{total}  {done / total * 100:.6f}%")
        progress.flush()


def split_file(
    path: str | os.PathLike[str],
    n_seqs: int,
    n_blocks: int,
    progress: TextIO | None = None,
) -> list[Path]:
    """Split a sequence file into n_blocks FASTA files; returns their paths.

    The first blocks are named <base>_<i>.fa and the last <base>_<n>.fasta,
    where <base> is the input path with its last two extensions removed.
    Records with an empty sequence are skipped.
    """
    if n_blocks < 1:
        raise ValueError("number of blocks must be positive")
    if n_seqs < 0:
        raise ValueError("number of sequences must not be negative")
    per_block, residual = _block_sizes(n_seqs, n_blocks)
    base = _base_name(os.fspath(path))
    records = read_fastx(path)
    names = [f"{base}_{i}.fa" for i in range(1, n_blocks)] + [f"{base}_{n_blocks}.fasta"]
    counts = [per_block] * (n_blocks - 1) + [residual]
    outputs = []
    try:
        for number, (out_name, count) in enumerate(zip(names, counts), start=1):
            _report(progress, number, n_blocks)
            with open(out_name, "w", encoding="latin-1", newline="") as out:
                for _, read in zip(range(count), records):
                    if read.seq:
                        out.write(f">{read.name}\n{read.seq}\n")
            outputs.append(Path(out_name))
    finally:
        records.close()
    return outputs


def _read_char(handle: BinaryIO) -> bytes:
    return handle.read(1)


def next_fastq_start(handle: BinaryIO) -> int:
    """Offset of the first FASTQ record that starts at or after the current position.

    The handle must be a seekable binary stream. At the end of the data the
    stream position is returned.
    """
    if handle.tell() == 0:
        if _read_char(handle) == b"@":
            return 0
    handle.seek(max(handle.tell() - 1, 0))

    window: list[tuple[bytes, int]] = []
    for _ in range(4):
        c = _read_char(handle)
        while c and c != b"\n":
            c = _read_char(handle)
        if not c:
            return handle.tell()
        c = _read_char(handle)
        if not c:
            return handle.tell()
        window.append((c, handle.tell() - 1))

    for first, third in zip(window[:2], window[2:]):
        if first[0] == b"@" and third[0] == b"+":
            return first[1]
        if first[0] == b"+" and third[0] == b"@":
            return third[1]
    return handle.tell()


def split_fastq(path: str | os.PathLike[str], n_parts: int) -> list[int]:
    """Cut an uncompressed FASTQ file into n_parts byte ranges on record boundaries.

    Returns n_parts + 1 offsets; part i spans offsets[i] to offsets[i + 1].
    """
    if n_parts < 1:
        raise ValueError("number of parts must be positive")
    if is_gzipped(path):
        raise ValueError(f"cannot split a gzipped file: {os.fspath(path)}")
    size = os.path.getsize(path)
    starts = []
    with open(path, "rb") as handle:
        for i in range(n_parts + 1):
            handle.seek(size * i // n_parts)
            starts.append(next_fastq_start(handle))
    return starts


def main(argv: Sequence[str] | None = None) -> int:
    """Split a sequence file into a given number of FASTA blocks."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 2:
        print("Usage: split_fa <in.seq> <n blocks>", file=sys.stderr)
        return 1
    path = args[0]
    print(f"In path: {path}")
    try:
        n_blocks = int(args[1])
    except ValueError:
        print(f"Invalid number of blocks: {args[1]}", file=sys.stderr)
        return 1
    print(f"Blocks: {n_blocks}")
    print("Reading sequences...", end="", flush=True)
    n_seqs = count_sequences(path)
    print(f" done. N: {n_seqs}")
    print("Splitting sequences...", end="", flush=True)
    split_file(path, n_seqs, n_blocks, progress=sys.stdout)
    print(" done.")
    return 0