"""
DigestLab - restriction digestion and DNA construct editing.
"""

__version__ = "0.1.0"

from .config import WorkbenchConfig
from .core import (
    CutSite,
    DnaConstruct,
    EnzymeDefinition,
    Feature,
    FeatureType,
    Fragment,
    InvalidEnzymeDefinition,
    InvalidSequence,
    digest,
    find_cut_sites,
    find_unique_single_cutters,
    remap_after_cut,
    remap_after_insert,
    select_cloning_sites,
)

__all__ = [
    "WorkbenchConfig",
    "EnzymeDefinition",
    "DnaConstruct",
    "Feature",
    "FeatureType",
    "CutSite",
    "Fragment",
    "InvalidSequence",
    "InvalidEnzymeDefinition",
    "find_cut_sites",
    "digest",
    "remap_after_cut",
    "remap_after_insert",
    "find_unique_single_cutters",
    "select_cloning_sites",
    "__version__",
]
