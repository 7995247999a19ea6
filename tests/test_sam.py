import io

import pytest

from panalign.sam import (
    CsvRecord,
    Read,
    SamFlag,
    SamRecord,
    format_alignment_sam,
    format_csv,
    format_sam,
    strip_mate_suffix,
    write_csv,
    write_sam,
)


def _read(qual="IIJJ"):
    return Read(name="r1", seq="ACGT", qual=qual)


@pytest.mark.parametrize("name,expected", [("read/1", "read"), ("read/2", "read"), ("read/3", "read/3"), ("r", "r"), ("ab", "ab")])
def test_strip_mate_suffix(name, expected):
    assert strip_mate_suffix(name) == expected


def test_validate_range():
    assert SamRecord(mapq=0).validate()
    assert SamRecord(mapq=255).validate()
    assert not SamRecord(mapq=256).validate()
    assert not SamRecord(mapq=-1).validate()


def test_default_record_is_unmapped_without_tags():
    line = format_sam(SamRecord(read=_read()))
    assert line.endswith("\n")
    fields = line.rstrip("\n").split("\t")
    assert len(fields) == 11
    assert fields[0] == "r1"
    assert fields[1] == str(int(SamFlag.UNMAPPED))
    assert fields[2] == "*"
    assert fields[4] == "255"
    assert fields[9] == "ACGT"
    assert fields[10] == "IIJJ"


def test_missing_quality_written_as_star():
    fields = format_sam(SamRecord(read=_read(qual=None))).rstrip("\n").split("\t")
    assert fields[10] == "*"


def test_mapped_record_tags():
    record = SamRecord(
        read=_read(), flag=SamFlag.REVERSED, pos=7, mapq=30, rname="chr1", cigar="4M",
        score=8, nm=1, zs=5, md="2A1", lift_rname="chrX", lift_pos=11, lift_cigar="4M", lift_nm=2,
    )
    fields = format_sam(record).rstrip("\n").split("\t")
    assert fields[1] == str(int(SamFlag.REVERSED))
    assert fields[11:] == ["AS:i:8", "NM:i:1", "ZS:i:5", "MD:Z:2A1", "OA:Z:chrX,11,-,4M,30,2;"]


def test_forward_strand_and_no_zs():
    record = SamRecord(read=_read(), flag=0, mapq=10, md="4")
    fields = format_sam(record).rstrip("\n").split("\t")
    assert not any(f.startswith("ZS:") for f in fields)
    assert fields[-1].split(",")[2] == "+"


def test_unmapped_lift_still_has_tags():
    record = SamRecord(read=_read(), unmapped_lft=True)
    assert "\tAS:i:0" in format_sam(record)


def test_invalid_mapq_raises():
    with pytest.raises(ValueError):
        format_sam(SamRecord(read=_read(), mapq=300))


def test_missing_read_raises():
    with pytest.raises(ValueError):
        format_sam(SamRecord())


def test_write_sam_matches_format():
    record = SamRecord(read=_read(), flag=0, mapq=3)
    buf = io.StringIO()
    write_sam(buf, record)
    assert buf.getvalue() == format_sam(record)


def test_alignment_zero_score_unmapped():
    line = format_alignment_sam(0, 0, 5, "chr1", _read(), False, "4M", "4", 0, "*", 0, 0)
    assert line == "r1\t4\t*\t0\t255\t*\t*\t0\t0\t*\t*\n"


def test_alignment_fields_and_reverse_quality():
    line = format_alignment_sam(100, 50, 9, "chr2", _read(), True, "4M", "4", 0, "=", 4, -12)
    fields = line.rstrip("\n").split("\t")
    assert fields[1] == "16"
    assert fields[2] == "chr2"
    assert fields[3] == "10"
    assert fields[5] == "4M"
    assert fields[6] == "="
    assert fields[7] == "5"
    assert fields[8] == "-12"
    assert fields[10] == "JJII"
    assert fields[11:] == ["AS:i:100", "NM:i:0", "ZS:i:50", "MD:Z:4"]


def test_alignment_mapq_grows_with_score_gap():
    def mapq(score2):
        line = format_alignment_sam(100, score2, 0, "c", _read(), False, "4M", "4", 0, "*", 0, 0)
        return int(line.split("\t")[4])

    assert mapq(90) <= mapq(50) <= mapq(10)
    assert 0 <= mapq(0) <= 255


def test_csv_format_and_write():
    record = CsvRecord(read=_read(), num_uniq_mems=3, total_mem_occ=7, max_mem_freq=0.5,
                       high_occ_mem=4, low_occ_mem=1, num_mems_filter=2, num_chains_skipped=1)
    line = format_csv(record)
    assert line.rstrip("\n").split(",") == ["r1", "3", "7", "0.500000", "1.000000", "4", "1", "2", "1"]
    buf = io.StringIO()
    write_csv(buf, record)
    assert buf.getvalue() == line


def test_csv_missing_read_raises():
    with pytest.raises(ValueError):
        format_csv(CsvRecord())