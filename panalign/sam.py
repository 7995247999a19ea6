"""SAM and CSV record writers for aligned reads."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import IntFlag
from typing import TextIO


class SamFlag(IntFlag):
    """Bitwise FLAG values of a SAM record."""

    PAIRED = 1
    MAPPED_PAIRED = 2
    UNMAPPED = 4
    MATE_UNMAPPED = 8
    REVERSED = 16
    MATE_REVERSED = 32
    FIRST_IN_PAIR = 64
    SECOND_IN_PAIR = 128
    SECONDARY_ALIGNMENT = 256
    FAILS_CHECKS = 512
    DUPLICATE = 1024
    SUPPLEMENTARY_ALIGNMENT = 2048


@dataclass
class Read:
    """A sequencing read: name, bases and optional qualities."""

    name: str
    seq: str
    qual: str | None = None
    comment: str = ""


@dataclass
class SamRecord:
    """One SAM line, with the lift-over fields reported in the OA tag."""

    read: Read | None = None
    flag: int = SamFlag.UNMAPPED
    pos: int = 0
    mapq: int = 255
    pnext: int = 0
    tlen: int = 0
    rname: str = "*"
    cigar: str = "*"
    rnext: str = "*"
    score: int = 0
    nm: int = 0
    zs: int = 0
    md: str = ""
    oa: str = ""
    rlen: int = 0
    lift_rname: str = "*"
    lift_cigar: str = "*"
    lift_pos: int = 0
    lift_mapq: int = 0
    lift_nm: int = 0
    lift_md: str = ""
    lift_rlen: int = 0
    unmapped_lft: bool = False

    def validate(self) -> bool:
        """True when the mapping quality lies in the SAM range 0-255."""
        return 0 <= self.mapq < 256


def strip_mate_suffix(name: str) -> str:
    """Remove a trailing '/1' or '/2' mate marker from a read name."""
    if len(name) >= 2 and name[-2] == "/" and name[-1] in "12":
        return name[:-2]
    return name


def format_sam(record: SamRecord) -> str:
    """Render a record as one SAM line, newline included."""
    if not record.validate():
        raise ValueError(f"mapping quality out of range: {record.mapq}")
    if record.read is None:
        raise ValueError("SAM record has no read")
    read = record.read
    fields = [
        read.name,
        str(int(record.flag)),
        record.rname,
        str(record.pos),
        str(record.mapq),
        record.cigar,
        record.rnext,
        str(record.pnext),
        str(record.tlen),
        read.seq,
        read.qual if read.qual else "*",
    ]
    line = "\t".join(fields)
    if not (record.flag & SamFlag.UNMAPPED) or record.unmapped_lft:
        tags = [f"AS:i:{record.score}", f"NM:i:{record.nm}"]
        if record.zs > 0:
            tags.append(f"ZS:i:{record.zs}")
        tags.append(f"MD:Z:{record.md}")
        strand = "-" if record.flag & SamFlag.REVERSED else "+"
        tags.append(
            f"OA:Z:{record.lift_rname},{record.lift_pos},{strand},"
            f"{record.lift_cigar},{record.mapq},{record.lift_nm};"
        )
        line += "\t" + "\t".join(tags)
    return line + "\n"


def write_sam(out: TextIO, record: SamRecord) -> None:
    """Write one SAM line to a text stream."""
    out.write(format_sam(record))


def _score_mapq(score: int, score2: int) -> int:
    remaining = 1 - abs(score - score2) / score
    if remaining <= 0:
        return 255
    return min(int(-4.343 * math.log(remaining)), 255)


def format_alignment_sam(
    score: int,
    score2: int,
    ref_pos: int,
    ref_name: str,
    read: Read,
    reverse: bool,
    cigar: str,
    md: str,
    mismatches: int,
    rnext: str,
    pnext: int,
    tlen: int,
) -> str:
    """Render an alignment as a SAM line; positions are 0-based on input.

    A zero score produces an unmapped record. Reverse-strand qualities are
    written reversed.
    """
    if score == 0:
        return f"{read.name}\t4\t*\t0\t255\t*\t*\t0\t0\t*\t*\n"
    mapq = _score_mapq(score, score2)
    if read.qual and reverse:
        qual = read.qual[::-1]
    elif read.qual:
        qual = read.qual
    else:
        qual = "*"
    fields = [
        read.name,
        "16" if reverse else "0",
        ref_name,
        str(ref_pos + 1),
        str(mapq),
        cigar,
        rnext,
        str(pnext + 1),
        str(tlen),
        read.seq,
        qual,
        f"AS:i:{score}",
        f"NM:i:{mismatches}",
    ]
    if score2 > 0:
        fields.append(f"ZS:i:{score2}")
    fields.append(f"MD:Z:{md}")
    return "\t".join(fields) + "\n"


@dataclass
class CsvRecord:
    """Per-read MEM statistics for debugging output."""

    read: Read | None = None
    num_uniq_mems: int = 0
    total_mem_occ: int = 0
    max_mem_freq: float = 0.0
    min_mem_freq: float = 1.0
    high_occ_mem: int = 0
    low_occ_mem: int = 0
    num_mems_filter: int = 0
    num_chains_skipped: int = 0


def format_csv(record: CsvRecord) -> str:
    """Render the statistics as one comma-separated line, newline included."""
    if record.read is None:
        raise ValueError("CSV record has no read")
    fields = [
        record.read.name,
        str(record.num_uniq_mems),
        str(record.total_mem_occ),
        f"{record.max_mem_freq:.6f}",
        f"{record.min_mem_freq:.6f}",
        str(record.high_occ_mem),
        str(record.low_occ_mem),
        str(record.num_mems_filter),
        str(record.num_chains_skipped),
    ]
    return ",".join(fields) + "\n"


def write_csv(out: TextIO, record: CsvRecord) -> None:
    """Write one CSV line to a text stream."""
    out.write(format_csv(record))