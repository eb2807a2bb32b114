"""
Configuration classes and input loading for DigestLab.

Sequences may be given inline or as FASTA paths; enzyme panels come from
the built-in table or from a delimited enzyme table.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence
import logging
import re

import pandas as pd
import yaml

from .core.alphabet import InvalidEnzymeDefinition, InvalidSequence, validate_sequence
from .core.enzymes import DEFAULT_ENZYMES, get_enzyme
from .core.models import EnzymeDefinition
from .utils.sequence import clean_sequence

logger = logging.getLogger(__name__)


# Regex to detect if string is an IUPAC DNA sequence
DNA_PATTERN = re.compile(r'^[ACGTRYKMSWBDHVNacgtrykmswbdhvn\s]+$')

ENZYME_COLUMNS = ['name', 'recognition_sequence', 'cut_offset_5', 'cut_offset_3']


def is_dna_sequence(s: str) -> bool:
    """Check if string is an IUPAC DNA sequence (not a file path)."""
    return bool(s) and bool(DNA_PATTERN.match(s))


def parse_sequence_input(value: str) -> str:
    """
    Parse sequence input - can be either a DNA string or a FASTA file path.

    Args:
        value: Either a DNA sequence string or path to a FASTA file

    Returns:
        The DNA sequence (uppercase)

    Examples:
        >>> parse_sequence_input("GAATTC")
        'GAATTC'
        >>> parse_sequence_input("pUC19.fasta")
        'TCGCGCGTTTCG...'  # contents of file
    """
    value = value.strip()

    if is_dna_sequence(value):
        return validate_sequence(clean_sequence(value))

    path = Path(value)
    if not path.exists():
        raise ValueError(f"File not found: {value}")

    return load_fasta(path)


def _read_fasta_sequence(path: str) -> str:
    """Read first sequence from a FASTA file."""
    sequence = []
    with open(path) as f:
        for line in f:
            line = line.strip()
            if line.startswith('>'):
                if sequence:
                    break  # Only read first sequence
                continue
            sequence.append(clean_sequence(line))
    return ''.join(sequence)


def load_fasta(path: Path) -> str:
    """Load sequence from FASTA file.

    Raises:
        InvalidSequence: If the record contains non-IUPAC characters
    """
    try:
        return validate_sequence(_read_fasta_sequence(str(path)))
    except InvalidSequence as e:
        raise InvalidSequence(f"{path}: {e}") from e


def _truthy(value) -> bool:
    if pd.isna(value):
        return False
    return str(value).strip().lower() in ('1', 'true', 'yes', 'y')


def load_enzyme_table(path: Path) -> List[EnzymeDefinition]:
    """
    Load restriction enzymes from a delimited table.

    Accepted layouts:
    - TSV with a header naming ``name``, ``recognition_sequence``,
      ``cut_offset_5``, ``cut_offset_3`` and optionally ``type_iis``
    - Headerless ``Name;Site;Cut5;Cut3`` lines (``#`` comments allowed)

    Duplicate names (case-insensitive) keep their first definition.

    Args:
        path: Path to the enzyme table

    Returns:
        Enzymes sorted by name

    Raises:
        ValueError: If a column is missing or a row is malformed
    """
    path = Path(path)
    if not path.is_file():
        raise ValueError(f"Enzyme table not found: {path}")
    with open(path) as f:
        first = next(
            (line for line in f if line.strip() and not line.lstrip().startswith('#')),
            '',
        )
    if not first:
        raise ValueError(f"Enzyme table is empty: {path}")

    sep = ';' if ';' in first else '\t'
    has_header = 'name' in first.lower()
    df = pd.read_csv(
        path,
        sep=sep,
        comment='#',
        header=0 if has_header else None,
        names=None if has_header else ENZYME_COLUMNS,
        usecols=None if has_header else list(range(len(ENZYME_COLUMNS))),
        dtype=str,
        skipinitialspace=True,
    )

    missing = [c for c in ENZYME_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Enzyme table {path} missing column(s): {', '.join(missing)}")

    enzymes = {}
    for row_num, row in df.iterrows():
        if pd.isna(row['name']) or pd.isna(row['recognition_sequence']):
            raise ValueError(f"{path}: row {row_num + 1} has no name or recognition sequence")
        name = str(row['name']).strip()
        try:
            enzyme = EnzymeDefinition(
                name=name,
                recognition_sequence=str(row['recognition_sequence']).strip(),
                cut_offset_5=int(row['cut_offset_5']),
                cut_offset_3=int(row['cut_offset_3']),
                type_iis=_truthy(row['type_iis']) if 'type_iis' in df.columns else False,
            )
        except (TypeError, ValueError) as e:
            if isinstance(e, (InvalidEnzymeDefinition, InvalidSequence)):
                raise
            raise InvalidEnzymeDefinition(f"{path}: row {row_num + 1} ({name}): {e}") from e

        key = name.lower()
        if key in enzymes:
            logger.warning(f"Duplicate enzyme {name} in {path}; keeping first definition")
            continue
        enzymes[key] = enzyme

    logger.info(f"Loaded {len(enzymes)} enzymes from {path}")
    return sorted(enzymes.values(), key=lambda e: e.name)


@dataclass
class WorkbenchConfig:
    """Engine and CLI configuration."""
    enzyme_file: Optional[Path] = None

    # Cloning advisor filters
    min_recognition_length: int = 6
    allow_ambiguous: bool = False

    # MCS detection
    mcs_window: int = 200
    mcs_min_sites: int = 4
    mcs_padding: int = 5

    # Processing options
    workers: int = 1
    output_dir: Path = Path('.')

    @classmethod
    def from_yaml(cls, path: Path) -> 'WorkbenchConfig':
        """Load configuration from YAML file.

        Raises:
            ValueError: If the file is missing, is not valid YAML, or holds
                a value of the wrong type
        """
        if not Path(path).is_file():
            raise ValueError(f"Config file not found: {path}")
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Config {path} must be a mapping, got {type(data).__name__}")

        enzyme_file = data.get('enzyme_file')
        if enzyme_file:
            enzyme_file = Path(enzyme_file)
            if not enzyme_file.is_absolute():
                enzyme_file = Path(path).parent / enzyme_file

        try:
            return cls(
                enzyme_file=enzyme_file,
                min_recognition_length=int(data.get('min_recognition_length', 6)),
                allow_ambiguous=bool(data.get('allow_ambiguous', False)),
                mcs_window=int(data.get('mcs_window', 200)),
                mcs_min_sites=int(data.get('mcs_min_sites', 4)),
                mcs_padding=int(data.get('mcs_padding', 5)),
                workers=int(data.get('workers', 1)),
                output_dir=Path(data.get('output_dir', '.')),
            )
        except TypeError as e:
            raise ValueError(f"Invalid value in {path}: {e}") from e

    def load_enzymes(self) -> List[EnzymeDefinition]:
        """Enzyme panel: the configured table, else the built-in panel."""
        if self.enzyme_file is not None:
            return load_enzyme_table(self.enzyme_file)
        return list(DEFAULT_ENZYMES)


def resolve_enzymes(names: Sequence[str], panel: Sequence[EnzymeDefinition]) -> List[EnzymeDefinition]:
    """Look up enzymes by name in a panel (case-insensitive)."""
    return [get_enzyme(name, panel) for name in names]
