"""
Core restriction-digestion and construct-editing engine.
"""

from .alphabet import (
    InvalidEnzymeDefinition,
    InvalidSequence,
    PatternMatcher,
    compile_pattern,
    compile_strand_pair,
    reverse_complement,
    validate_sequence,
)
from .annotation import (
    FEATURE_SIGNATURES,
    FeatureSignature,
    auto_annotate,
    detect_features,
)
from .cloning import (
    annotate_mcs,
    clone_into_vector,
    detect_mcs,
    find_unique_single_cutters,
    select_cloning_sites,
)
from .cutsites import (
    analyze_enzymes,
    find_cut_sites,
    find_cut_sites_multi,
    select_by_cut_count,
    strand_cut_positions,
)
from .digestion import (
    digest,
    digest_construct,
)
from .enzymes import (
    DEFAULT_ENZYMES,
    filter_enzymes,
    get_enzyme,
)
from .features import (
    remap_after_cut,
    remap_after_insert,
    remap_after_reverse_complement,
    reverse_complement_construct,
)
from .models import (
    CloningCandidate,
    CutSite,
    DnaConstruct,
    DnaEnd,
    EnzymeAnalysis,
    EnzymeDefinition,
    Feature,
    FeatureType,
    Fragment,
    OverhangDirection,
    OverhangType,
    SingleCutter,
)
from .scanner import (
    MatchScan,
    scan,
)

__all__ = [
    # Alphabet
    'InvalidSequence',
    'InvalidEnzymeDefinition',
    'PatternMatcher',
    'compile_pattern',
    'compile_strand_pair',
    'reverse_complement',
    'validate_sequence',
    # Models
    'EnzymeDefinition',
    'OverhangType',
    'OverhangDirection',
    'DnaEnd',
    'FeatureType',
    'Feature',
    'DnaConstruct',
    'CutSite',
    'Fragment',
    'EnzymeAnalysis',
    'SingleCutter',
    'CloningCandidate',
    # Scanning and cut sites
    'MatchScan',
    'scan',
    'find_cut_sites',
    'find_cut_sites_multi',
    'strand_cut_positions',
    'analyze_enzymes',
    'select_by_cut_count',
    # Digestion
    'digest',
    'digest_construct',
    # Feature remapping
    'remap_after_cut',
    'remap_after_insert',
    'remap_after_reverse_complement',
    'reverse_complement_construct',
    # Cloning
    'find_unique_single_cutters',
    'select_cloning_sites',
    'clone_into_vector',
    'detect_mcs',
    'annotate_mcs',
    # Annotation
    'FeatureSignature',
    'FEATURE_SIGNATURES',
    'detect_features',
    'auto_annotate',
    # Enzyme panel
    'DEFAULT_ENZYMES',
    'get_enzyme',
    'filter_enzymes',
]
