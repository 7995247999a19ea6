# panalign

Pure-Python building blocks for aligning sequencing reads against a
pangenome reference. The package needs nothing beyond the standard library.

## What is inside

- `panalign.alignment` converts nucleotides to and from the codes 0-4
  (`encode_nt4`, `decode_nt4`). It builds the simple match/mismatch scoring
  matrix (`simple_score_matrix`). It packs and unpacks CIGAR entries
  (`pack_cigar`, `unpack_cigar`, `CigarOp`) and renders them as text
  (`cigar_to_string`). It also computes the SAM `MD` string together with the
  edit distance (`md_tag`) and draws a three-line view of an alignment made of
  target, match bars and query (`blast_like`).
- `panalign.sam` holds the record types `SamFlag`, `Read`, `SamRecord` and
  `CsvRecord`. It writes SAM lines with `format_sam` and `write_sam`; for
  mapped records these carry the `AS`, `NM`, `ZS`, `MD` and `OA` tags. A plain
  alignment line comes from `format_alignment_sam`, and per-read MEM
  statistics are written as CSV with `format_csv` and `write_csv`.
  `strip_mate_suffix` removes a trailing `/1` or `/2` from a read name.
- `panalign.chain` chains MEM occurrences with a minimap2-style dynamic
  programme. It provides `Mem`, `Chain` (with `reverse` and `reset`),
  `ChainConfig`, `populate_anchors` and `find_chains`.
- `panalign.chain_secondary` provides `find_chains_secondary`. Besides the
  primary chains, it reports secondary chains whose links do not reuse a
  reference position from the primary chain.
- `panalign.fastx` reads FASTA and FASTQ files, plain or gzipped
  (`read_fastx`, `count_sequences`, `is_gzipped`). It splits a sequence file
  into FASTA blocks (`split_file`). It also finds split points that fall on
  record boundaries in an uncompressed FASTQ file (`next_fastq_start`,
  `split_fastq`).
- `panalign.spumoni` reads and writes the binary intermediate files of
  matching-statistics runs. It has `write_lengths_record`,
  `read_lengths_records`, `write_pseudo_lengths`, `write_max_length`,
  `read_max_lengths` and `temp_output_name`. It summarises maximum match
  lengths with `summarize_max_lengths` and `MaxLengthStats`, and names
  reference files with `SlpKind` and `slp_file_extension`.

## Installation

```
pip install .
```

## Example

```python
from panalign.alignment import CigarOp, cigar_to_string, encode_nt4, md_tag, pack_cigar

target = encode_nt4("ACGTACGT")
query = encode_nt4("ACGAACGT")
cigar = [pack_cigar(8, CigarOp.MATCH)]

print(cigar_to_string(cigar))        # 8M
print(md_tag(target, query, cigar))  # ('3T4', 1)
```

## Command line

Split a FASTA or FASTQ file, plain or gzipped, into a number of FASTA blocks:

```
panalign-split-fa reads.fa.gz 4
```

The command counts the sequences first and then writes them out in
consecutive blocks. Every block except the last goes to `<base>_<i>.fa`, and
the last block goes to `<base>_<n>.fasta`. Here `<base>` is the input path
with its last two extensions removed. Records with an empty sequence are
skipped.

## What the package does not do

- It contains no aligner. No Smith-Waterman or extension step produces
  CIGARs, and no mapping quality is computed from extension scores. The
  alignment helpers work on CIGARs and sequences that you supply.
- It does not build or load any index. There is no r-index, no
  matching-statistics computation and no compressed random access to the
  reference. `panalign.spumoni` only reads and writes the files such a run
  produces.
- It does not lift positions between coordinate systems. `SamRecord`
  stores lift-over fields only so that they can be written out.

## Running the tests

```
pip install .[test]
pytest
```