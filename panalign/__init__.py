"""Building blocks for pangenome read alignment: CIGAR/MD helpers, SAM output, MEM chaining and FASTA/FASTQ utilities."""

__version__ = "0.1.0"

__all__ = [
    "alignment",
    "sam",
    "chain",
    "chain_secondary",
    "fastx",
    "spumoni",
]