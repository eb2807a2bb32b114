"""
Built-in restriction enzyme panel.

Used when no enzyme table is configured. Offsets follow the
EnzymeDefinition convention (top- and bottom-strand nicks measured from
the start of the recognition site).
"""

from typing import Collection, Iterable, List, Optional, Tuple

from .models import EnzymeDefinition, OverhangType


def _e(name: str, site: str, cut5: int, cut3: int, type_iis: bool = False) -> EnzymeDefinition:
    return EnzymeDefinition(name, site, cut5, cut3, type_iis=type_iis)


DEFAULT_ENZYMES: Tuple[EnzymeDefinition, ...] = (
    # 6-cutters, 5' overhang
    _e("EcoRI", "GAATTC", 1, 5),
    _e("BamHI", "GGATCC", 1, 5),
    _e("HindIII", "AAGCTT", 1, 5),
    _e("XhoI", "CTCGAG", 1, 5),
    _e("SalI", "GTCGAC", 1, 5),
    _e("XbaI", "TCTAGA", 1, 5),
    _e("NcoI", "CCATGG", 1, 5),
    _e("NheI", "GCTAGC", 1, 5),
    _e("NdeI", "CATATG", 2, 4),
    _e("BglII", "AGATCT", 1, 5),
    _e("ClaI", "ATCGAT", 2, 4),
    _e("MfeI", "CAATTG", 1, 5),
    _e("AgeI", "ACCGGT", 1, 5),
    _e("SpeI", "ACTAGT", 1, 5),
    _e("AflII", "CTTAAG", 1, 5),
    _e("MluI", "ACGCGT", 1, 5),
    # 6-cutters, 3' overhang
    _e("SacI", "GAGCTC", 5, 1),
    _e("KpnI", "GGTACC", 5, 1),
    _e("SphI", "GCATGC", 5, 1),
    _e("PstI", "CTGCAG", 5, 1),
    _e("ApaI", "GGGCCC", 5, 1),
    _e("NsiI", "ATGCAT", 5, 1),
    # 6-cutters, blunt
    _e("EcoRV", "GATATC", 3, 3),
    _e("SmaI", "CCCGGG", 3, 3),
    _e("StuI", "AGGCCT", 3, 3),
    _e("NruI", "TCGCGA", 3, 3),
    _e("PvuII", "CAGCTG", 3, 3),
    _e("HpaI", "GTTAAC", 3, 3),
    _e("ScaI", "AGTACT", 3, 3),
    _e("DraI", "TTTAAA", 3, 3),
    # 4-cutters
    _e("MboI", "GATC", 0, 4),
    _e("Sau3AI", "GATC", 0, 4),
    _e("DpnI", "GATC", 2, 2),
    _e("DpnII", "GATC", 0, 4),
    _e("HaeIII", "GGCC", 2, 2),
    _e("AluI", "AGCT", 2, 2),
    _e("RsaI", "GTAC", 2, 2),
    _e("TaqI", "TCGA", 1, 3),
    _e("MspI", "CCGG", 1, 3),
    _e("HpaII", "CCGG", 1, 3),
    # 8-cutters
    _e("NotI", "GCGGCCGC", 2, 6),
    _e("PacI", "TTAATTAA", 5, 3),
    _e("AscI", "GGCGCGCC", 2, 6),
    _e("FseI", "GGCCGGCC", 6, 2),
    _e("SwaI", "ATTTAAAT", 4, 4),
    _e("PmeI", "GTTTAAAC", 4, 4),
    _e("SbfI", "CCTGCAGG", 6, 2),
    # degenerate sites
    _e("AvaI", "CYCGRG", 1, 5),
    _e("HincII", "GTYRAC", 3, 3),
    _e("BsaJI", "CCNNGG", 1, 5),
    # Type IIS
    _e("BsaI", "GGTCTC", 7, 11, type_iis=True),
    _e("BsmBI", "CGTCTC", 7, 11, type_iis=True),
    _e("BbsI", "GAAGAC", 8, 12, type_iis=True),
    _e("SapI", "GCTCTTC", 8, 11, type_iis=True),
)


def filter_enzymes(
    enzymes: Iterable[EnzymeDefinition],
    lengths: Optional[Collection[int]] = None,
    overhang_types: Optional[Collection[OverhangType]] = None,
    palindromic: Optional[bool] = None,
) -> List[EnzymeDefinition]:
    """
    Subset of a panel by recognition length, end type and palindromy.

    Args:
        enzymes: Enzyme panel
        lengths: Recognition lengths to keep, e.g. {4, 6, 8}; None keeps all
        overhang_types: End types to keep; None keeps all
        palindromic: Keep only palindromic (True) or asymmetric (False) sites

    Returns:
        Matching enzymes in panel order
    """
    return [
        e for e in enzymes
        if (not lengths or e.length in lengths)
        and (not overhang_types or e.overhang_type in overhang_types)
        and (palindromic is None or e.is_palindromic == palindromic)
    ]


def get_enzyme(name: str, enzymes: Optional[Iterable[EnzymeDefinition]] = None) -> EnzymeDefinition:
    """Look up an enzyme by name (case-insensitive).

    Raises:
        ValueError: If no enzyme of that name is in the panel
    """
    panel = DEFAULT_ENZYMES if enzymes is None else enzymes
    wanted = name.strip().lower()
    for enzyme in panel:
        if enzyme.name.lower() == wanted:
            return enzyme
    raise ValueError(f"Enzyme not found: {name}")
