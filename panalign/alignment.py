"""Nucleotide encoding, CIGAR handling, MD tags and text rendering of alignments."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from enum import IntEnum

_BASES = "ACGTN"
_UNKNOWN = 4


def _build_nt4_table() -> bytes:
    table = bytearray([_UNKNOWN] * 256)
    for code in range(4):
        table[code] = code
    for code, base in enumerate("ACGT"):
        table[ord(base)] = code
        table[ord(base.lower())] = code
    return bytes(table)


_NT4_TABLE = _build_nt4_table()


class CigarOp(IntEnum):
    """CIGAR operations as stored in the low four bits of a packed CIGAR entry."""

    MATCH = 0
    INSERTION = 1
    DELETION = 2
    SKIP = 3
    EQUAL = 7
    DIFF = 8

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]

    @property
    def is_alignment_match(self) -> bool:
        return self in (CigarOp.MATCH, CigarOp.EQUAL, CigarOp.DIFF)


_SYMBOLS = {
    CigarOp.MATCH: "M",
    CigarOp.INSERTION: "I",
    CigarOp.DELETION: "D",
    CigarOp.SKIP: "N",
    CigarOp.EQUAL: "=",
    CigarOp.DIFF: "X",
}


def encode_nt4(seq: str | bytes) -> bytes:
    """Map A, C, G, T (either case) and the raw codes 0-3 to 0-3; anything else to 4."""
    raw = seq if isinstance(seq, (bytes, bytearray)) else bytes(ord(c) if ord(c) < 256 else 0xFF for c in seq)
    return raw.translate(_NT4_TABLE)


def _base(code: int) -> str:
    if not 0 <= code <= _UNKNOWN:
        raise ValueError(f"invalid nucleotide code: {code}")
    return _BASES[code]


def decode_nt4(codes: Iterable[int]) -> str:
    """Map codes 0-4 back to A, C, G, T and N."""
    return "".join(_base(code) for code in codes)


def simple_score_matrix(m: int, match: int, mismatch: int) -> list[list[int]]:
    """Build an m x m scoring matrix: +|match| on the diagonal, -|mismatch| elsewhere.

    The last row and column (the ambiguous symbol) score zero.
    """
    if m < 1:
        raise ValueError("matrix size must be positive")
    a = abs(match)
    b = -abs(mismatch)
    matrix = [[0] * m for _ in range(m)]
    for i, row in enumerate(matrix[: m - 1]):
        for j in range(m - 1):
            row[j] = a if i == j else b
    return matrix


def pack_cigar(length: int, op: CigarOp | int) -> int:
    """Pack a CIGAR operation and its length into one integer."""
    op = CigarOp(op)
    if length < 0:
        raise ValueError("CIGAR length must not be negative")
    return (length << 4) | int(op)


def unpack_cigar(code: int) -> tuple[int, CigarOp]:
    """Split a packed CIGAR entry into (length, operation)."""
    try:
        op = CigarOp(code & 0xF)
    except ValueError:
        raise ValueError(f"unsupported CIGAR operation in {code:#x}") from None
    return code >> 4, op


def cigar_to_string(cigar: Iterable[int]) -> str:
    """Render packed CIGAR entries as a SAM CIGAR string."""
    parts = []
    for code in cigar:
        length, op = unpack_cigar(code)
        parts.append(f"{length}{op.symbol}")
    return "".join(parts)


def md_tag(target: Sequence[int], query: Sequence[int], cigar: Iterable[int]) -> tuple[str, int]:
    """Compute the MD:Z string and the edit distance (NM) of an alignment.

    Both sequences are nt4 codes; the target is the reference.
    """
    md: list[str] = []
    nm = 0
    run = 0
    q_off = t_off = 0
    for code in cigar:
        length, op = unpack_cigar(code)
        if op.is_alignment_match:
            for q, t in zip(query[q_off:q_off + length], target[t_off:t_off + length]):
                if q != t:
                    md.append(f"{run}{_base(t)}")
                    run = 0
                    nm += 1
                else:
                    run += 1
            q_off += length
            t_off += length
        elif op is CigarOp.INSERTION:
            q_off += length
            nm += length
        elif op is CigarOp.DELETION:
            deleted = decode_nt4(target[t_off:t_off + length])
            md.append(f"{run}^{deleted}")
            run = 0
            t_off += length
            nm += length
        else:
            t_off += length
    if run > 0:
        md.append(str(run))
    return "".join(md), nm


def _render(code: int) -> str:
    return _BASES[code] if 0 <= code < 4 else str(code)


def blast_like(target: Sequence[int], query: Sequence[int], cigar: Iterable[int]) -> str:
    """Render an alignment as three lines: target, match bars and query.

    Codes 0-3 are shown as bases; other codes are shown as their number.
    Matches are marked '|', mismatches '*', gaps with spaces.
    """
    target_line: list[str] = []
    bars: list[str] = []
    query_line: list[str] = []
    q_off = t_off = 0
    for code in cigar:
        length, op = unpack_cigar(code)
        if op.is_alignment_match:
            for q, t in zip(query[q_off:q_off + length], target[t_off:t_off + length]):
                bars.append("|" if q == t else "*")
                target_line.append(_render(t))
                query_line.append(_render(q))
            q_off += length
            t_off += length
        elif op is CigarOp.INSERTION:
            for q in query[q_off:q_off + length]:
                target_line.append(" ")
                bars.append(" ")
                query_line.append(_render(q))
            q_off += length
        else:
            for t in target[t_off:t_off + length]:
                query_line.append(" ")
                bars.append(" ")
                target_line.append(_render(t))
            t_off += length
    return "".join(target_line) + "\n" + "".join(bars) + "\n" + "".join(query_line) + "\n"