"""FASTA reading for target/decoy protein databases.

Protein names in search results are the first whitespace-separated token of
the FASTA header, so that token is used as identifier here as well (no
UniProt accession extraction).
"""

import logging
from pathlib import Path
from typing import Dict, Iterator, Tuple, Union

logger = logging.getLogger(__name__)


def parse_protein_id(header: str) -> str:
    """First token of a FASTA header (without the leading '>').

    Examples
    --------
    >>> parse_protein_id("sp|P12345|NAME_HUMAN Some protein")
    'sp|P12345|NAME_HUMAN'
    >>> parse_protein_id("random_sp|P12345|NAME_HUMAN")
    'random_sp|P12345|NAME_HUMAN'
    """
    tokens = header.strip().split()
    return tokens[0] if tokens else ""


def iter_fasta(fasta_path: Union[str, Path]) -> Iterator[Tuple[str, str]]:
    """Stream (protein_id, sequence) pairs from a FASTA file.

    Raises
    ------
    FileNotFoundError
        If the file does not exist
    """
    fasta_path = Path(fasta_path)
    if not fasta_path.exists():
        raise FileNotFoundError(f"FASTA file not found: {fasta_path}")

    current_id = None
    current_seq = []

    with open(fasta_path) as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            if line.startswith('>'):
                if current_id:
                    yield current_id, ''.join(current_seq)
                current_id = parse_protein_id(line[1:])
                current_seq = []
            else:
                current_seq.append(line)

    if current_id:
        yield current_id, ''.join(current_seq)


def read_protein_lengths(fasta_path: Union[str, Path]) -> Dict[str, int]:
    """Map protein identifier to sequence length.

    Duplicate identifiers keep the first entry.
    """
    lengths: Dict[str, int] = {}
    for protein_id, sequence in iter_fasta(fasta_path):
        lengths.setdefault(protein_id, len(sequence))

    logger.info(f"✓ Read {len(lengths):,} proteins from {Path(fasta_path).name}")
    return lengths
