"""
Output generation for DigestLab results.

Positions are written 0-based, as produced by the core.
"""

from pathlib import Path
from typing import List
import logging

import pandas as pd

from ..core.models import CloningCandidate, DnaConstruct, EnzymeAnalysis, Fragment
from ..utils.sequence import gc_content, wrap_lines

logger = logging.getLogger(__name__)


def write_cut_sites_tsv(
    analyses: List[EnzymeAnalysis],
    output_path: Path,
) -> Path:
    """
    Write a per-enzyme cut-site report to TSV.

    Args:
        analyses: List of EnzymeAnalysis objects
        output_path: Path for output TSV

    Returns:
        Path to written file
    """
    rows = []

    for a in analyses:
        rows.append({
            'enzyme': a.enzyme.name,
            'recognition_sequence': a.enzyme.recognition_sequence,
            'overhang_type': a.enzyme.overhang_type.name,
            'overhang_length': a.enzyme.overhang_length,
            'cut_count': a.cut_count,
            'positions': ','.join(str(p) for p in a.positions),
            'strands': ','.join(s.strand for s in a.cut_sites),
        })

    df = pd.DataFrame(rows, columns=[
        'enzyme', 'recognition_sequence', 'overhang_type', 'overhang_length',
        'cut_count', 'positions', 'strands',
    ])
    df.to_csv(output_path, sep='\t', index=False)

    logger.info(f"Wrote cut sites for {len(analyses)} enzymes to {output_path}")

    return output_path


def write_fragments_fasta(
    fragments: List[Fragment],
    output_path: Path,
    prefix: str = 'fragment',
) -> Path:
    """
    Write digestion fragments to an 80-column FASTA file.

    Headers carry the original coordinates, the size, the GC content and
    the enzymes at each end (``-`` for a native end).
    """
    with open(output_path, 'w') as f:
        for idx, frag in enumerate(fragments, start=1):
            ends = f"{frag.enzyme5 or '-'}/{frag.enzyme3 or '-'}"
            f.write(
                f">{prefix}_{idx} {frag.start_position}-{frag.end_position} "
                f"{frag.size}bp gc={gc_content(frag.sequence):.3f} ends={ends}\n"
            )
            for line in wrap_lines(frag.sequence, 80):
                f.write(f"{line}\n")

    logger.info(f"Wrote {len(fragments)} fragments to {output_path}")

    return output_path


def write_construct_fasta(construct: DnaConstruct, output_path: Path) -> Path:
    """Write a single construct (e.g. a recombinant) as a FASTA record."""
    topology = 'circular' if construct.is_circular else 'linear'
    with open(output_path, 'w') as f:
        f.write(f">{construct.name} {construct.length}bp {topology}")
        if construct.source_name:
            f.write(f" source={construct.source_name}")
        f.write("\n")
        for line in wrap_lines(construct.sequence, 80):
            f.write(f"{line}\n")

    logger.info(f"Wrote {construct.name} ({construct.length} bp) to {output_path}")

    return output_path


def write_candidates_tsv(
    candidates: List[CloningCandidate],
    output_path: Path,
) -> Path:
    """Write ranked cloning candidates to TSV."""
    df = pd.DataFrame(
        [
            {
                'rank': rank,
                'enzyme': c.enzyme_name,
                'position': c.position,
                'overhang_length': c.overhang_length,
                'in_mcs': str(c.in_mcs).upper(),
            }
            for rank, c in enumerate(candidates, start=1)
        ],
        columns=['rank', 'enzyme', 'position', 'overhang_length', 'in_mcs'],
    )
    df.to_csv(output_path, sep='\t', index=False)

    logger.info(f"Wrote {len(candidates)} cloning candidates to {output_path}")

    return output_path


def write_features_tsv(construct: DnaConstruct, output_path: Path) -> Path:
    """Write a construct's feature annotations to TSV."""
    df = pd.DataFrame(
        [
            {
                'name': f.name,
                'type': f.feature_type.value,
                'start': f.start,
                'end': f.end,
                'strand': f.strand,
                'length': f.length(construct.length),
            }
            for f in construct.features
        ],
        columns=['name', 'type', 'start', 'end', 'strand', 'length'],
    )
    df.to_csv(output_path, sep='\t', index=False)

    logger.info(f"Wrote {len(construct.features)} features of {construct.name} to {output_path}")

    return output_path
