"""Tests for digestlab.core.models module."""

import pytest
from digestlab.core.alphabet import InvalidEnzymeDefinition, InvalidSequence
from digestlab.core.enzymes import DEFAULT_ENZYMES, filter_enzymes, get_enzyme
from digestlab.core.models import (
    DnaConstruct,
    DnaEnd,
    EnzymeDefinition,
    Feature,
    FeatureType,
    Fragment,
    OverhangDirection,
    OverhangType,
)


class TestEnzymeDefinition:
    """Test EnzymeDefinition class."""

    def test_five_prime_overhang(self):
        """Test EcoRI geometry."""
        ecori = EnzymeDefinition("EcoRI", "GAATTC", 1, 5)
        assert ecori.length == 6
        assert ecori.overhang_type == OverhangType.FIVE_PRIME
        assert ecori.overhang_direction == OverhangDirection.FIVE_PRIME
        assert ecori.overhang_length == 4
        assert ecori.overhang_sequence == "AATT"
        assert ecori.is_palindromic
        assert not ecori.is_ambiguous

    def test_three_prime_overhang(self):
        """Test PstI geometry."""
        psti = EnzymeDefinition("PstI", "CTGCAG", 5, 1)
        assert psti.overhang_type == OverhangType.THREE_PRIME
        assert psti.overhang_sequence == "TGCA"
        assert psti.overhang_length == 4

    def test_blunt(self):
        """Test blunt cutter geometry."""
        ecorv = EnzymeDefinition("EcoRV", "GATATC", 3, 3)
        assert ecorv.overhang_type == OverhangType.BLUNT
        assert ecorv.overhang_direction == OverhangDirection.NONE
        assert ecorv.overhang_sequence == ""
        assert ecorv.overhang_length == 0

    def test_lowercase_recognition_uppercased(self):
        """Test that the recognition sequence is normalized."""
        assert EnzymeDefinition("EcoRI", "gaattc", 1, 5).recognition_sequence == "GAATTC"

    def test_ambiguous_site(self):
        """Test degenerate recognition sequences."""
        assert get_enzyme("AvaI").is_ambiguous
        assert get_enzyme("AvaI").is_palindromic

    def test_type_iis(self):
        """Test Type IIS enzymes with cuts outside the site."""
        bsai = get_enzyme("BsaI")
        assert bsai.type_iis
        assert not bsai.is_palindromic
        assert bsai.overhang_length == 4
        assert bsai.overhang_sequence == ""

    def test_offset_beyond_site_rejected(self):
        """Test that offsets past the site need the Type IIS flag."""
        with pytest.raises(InvalidEnzymeDefinition):
            EnzymeDefinition("Bad", "GAATTC", 1, 7)
        assert EnzymeDefinition("Ok", "GAATTC", 1, 7, type_iis=True).cut_offset_3 == 7

    def test_negative_offset_rejected(self):
        """Test that negative offsets are always rejected."""
        with pytest.raises(InvalidEnzymeDefinition):
            EnzymeDefinition("Bad", "GAATTC", -1, 5, type_iis=True)

    def test_empty_recognition_rejected(self):
        """Test that an empty recognition sequence is rejected."""
        with pytest.raises(InvalidEnzymeDefinition):
            EnzymeDefinition("Bad", "", 0, 0)

    def test_invalid_recognition_rejected(self):
        """Test that a non-IUPAC recognition sequence is rejected."""
        with pytest.raises(InvalidSequence):
            EnzymeDefinition("Bad", "GAXTTC", 1, 5)

    def test_str(self):
        """Test string representation."""
        assert str(get_enzyme("EcoRI")) == "EcoRI: GAATTC (FIVE_PRIME)"


class TestEnzymePanel:
    """Test the built-in enzyme panel."""

    def test_lookup_case_insensitive(self):
        """Test case-insensitive lookup."""
        assert get_enzyme("ecori").name == "EcoRI"
        assert get_enzyme(" HindIII ").recognition_sequence == "AAGCTT"

    def test_unknown_enzyme_raises(self):
        """Test that an unknown name raises ValueError."""
        with pytest.raises(ValueError, match="Enzyme not found"):
            get_enzyme("NotAnEnzyme")

    def test_names_unique(self):
        """Test that panel names are unique."""
        names = [e.name.lower() for e in DEFAULT_ENZYMES]
        assert len(names) == len(set(names))


class TestFilterEnzymes:
    """Test panel filtering."""

    def test_by_length(self):
        """Test keeping only 8-cutters."""
        names = [e.name for e in filter_enzymes(DEFAULT_ENZYMES, lengths={8})]
        assert names == ["NotI", "PacI", "AscI", "FseI", "SwaI", "PmeI", "SbfI"]

    def test_by_length_and_overhang(self):
        """Test blunt 4-cutters."""
        enzymes = filter_enzymes(DEFAULT_ENZYMES, lengths={4}, overhang_types={OverhangType.BLUNT})
        assert [e.name for e in enzymes] == ["DpnI", "HaeIII", "AluI", "RsaI"]

    def test_asymmetric_sites(self):
        """Test selecting non-palindromic enzymes."""
        enzymes = filter_enzymes(DEFAULT_ENZYMES, palindromic=False)
        assert [e.name for e in enzymes] == ["BsaI", "BsmBI", "BbsI", "SapI"]

    def test_no_filters(self):
        """Test that empty filters keep the whole panel."""
        assert filter_enzymes(DEFAULT_ENZYMES, lengths=set(), overhang_types=set()) == list(DEFAULT_ENZYMES)


class TestDnaEnd:
    """Test DnaEnd ligation compatibility."""

    def test_blunt_ends_compatible(self):
        """Test that blunt ends ligate."""
        assert DnaEnd().is_compatible_with(DnaEnd(enzyme_name="EcoRV"))

    def test_blunt_and_sticky_incompatible(self):
        """Test that blunt and sticky ends do not ligate."""
        sticky = DnaEnd(OverhangDirection.FIVE_PRIME, "AATT", "EcoRI")
        assert not DnaEnd().is_compatible_with(sticky)
        assert not sticky.is_compatible_with(DnaEnd())

    def test_same_palindromic_overhang(self):
        """Test EcoRI with EcoRI."""
        end = DnaEnd(OverhangDirection.FIVE_PRIME, "AATT", "EcoRI")
        assert end.is_compatible_with(DnaEnd(OverhangDirection.FIVE_PRIME, "AATT", "MfeI"))

    def test_isocaudomers(self):
        """Test BamHI with BglII (both GATC)."""
        bamhi = DnaEnd(OverhangDirection.FIVE_PRIME, "GATC", "BamHI")
        bglii = DnaEnd(OverhangDirection.FIVE_PRIME, "GATC", "BglII")
        assert bamhi.is_compatible_with(bglii)

    def test_different_overhangs_incompatible(self):
        """Test EcoRI with BamHI."""
        ecori = DnaEnd(OverhangDirection.FIVE_PRIME, "AATT", "EcoRI")
        bamhi = DnaEnd(OverhangDirection.FIVE_PRIME, "GATC", "BamHI")
        assert not ecori.is_compatible_with(bamhi)

    def test_opposite_directions_incompatible(self):
        """Test that 5' and 3' tails do not anneal."""
        five = DnaEnd(OverhangDirection.FIVE_PRIME, "AATT")
        three = DnaEnd(OverhangDirection.THREE_PRIME, "AATT")
        assert not five.is_compatible_with(three)

    def test_asymmetric_overhangs_anneal_as_reverse_complements(self):
        """Test non-palindromic Type IIS style overhangs."""
        end = DnaEnd(OverhangDirection.FIVE_PRIME, "ACGG")
        assert end.is_compatible_with(DnaEnd(OverhangDirection.FIVE_PRIME, "CCGT"))
        assert not end.is_compatible_with(DnaEnd(OverhangDirection.FIVE_PRIME, "ACGG"))

    def test_none_incompatible(self):
        """Test that a missing end never ligates."""
        assert not DnaEnd().is_compatible_with(None)

    def test_str(self):
        """Test string representation."""
        assert str(DnaEnd()) == "Blunt"
        assert str(DnaEnd(OverhangDirection.FIVE_PRIME, "AATT", "EcoRI")) == "5' AATT (EcoRI)"


class TestFeature:
    """Test Feature class."""

    def test_length(self):
        """Test non-wrapping length."""
        assert Feature("f", 10, 30).length() == 20

    def test_wrapping_length(self):
        """Test wrapping feature length."""
        feature = Feature("ori", 95, 5)
        assert feature.wraps
        assert feature.length(100) == 10

    def test_wrapping_length_needs_circumference(self):
        """Test that a wrapping length without circumference raises."""
        with pytest.raises(ValueError):
            Feature("ori", 95, 5).length()

    def test_contains_inclusive(self):
        """Test inclusive containment."""
        feature = Feature("mcs", 10, 20)
        assert feature.contains(10)
        assert feature.contains(20)
        assert not feature.contains(21)

    def test_contains_wrapping(self):
        """Test containment through the origin."""
        feature = Feature("ori", 95, 5)
        assert feature.contains(97)
        assert feature.contains(2)
        assert not feature.contains(50)

    def test_invalid_strand(self):
        """Test strand validation."""
        with pytest.raises(ValueError):
            Feature("f", 0, 10, strand="x")

    def test_negative_coordinates(self):
        """Test coordinate validation."""
        with pytest.raises(ValueError):
            Feature("f", -1, 10)


class TestDnaConstruct:
    """Test DnaConstruct class."""

    def test_sequence_uppercased(self):
        """Test that the sequence is validated and upper-cased."""
        construct = DnaConstruct("c", "gaattc")
        assert construct.sequence == "GAATTC"
        assert construct.length == 6

    def test_invalid_sequence(self):
        """Test that an invalid sequence raises."""
        with pytest.raises(InvalidSequence):
            DnaConstruct("c", "GAXTTC")

    def test_circular_with_ends_rejected(self):
        """Test that circular constructs cannot carry ends."""
        with pytest.raises(ValueError):
            DnaConstruct("c", "ACGT", is_circular=True, end5=DnaEnd())

    def test_feature_out_of_bounds(self):
        """Test that features must lie inside the sequence."""
        with pytest.raises(ValueError):
            DnaConstruct("c", "ACGTACGT", features=[Feature("f", 2, 20)])

    def test_wrapping_feature_on_linear_rejected(self):
        """Test that linear constructs cannot hold wrapping features."""
        with pytest.raises(ValueError):
            DnaConstruct("c", "ACGTACGT", features=[Feature("f", 6, 2)])

    def test_wrapping_feature_on_circular(self):
        """Test that circular constructs accept wrapping features."""
        construct = DnaConstruct("c", "ACGTACGT", is_circular=True, features=[Feature("f", 6, 2)])
        assert construct.features[0].wraps

    def test_copy_does_not_share_features(self):
        """Test that copies own their feature list."""
        construct = DnaConstruct("c", "ACGTACGT", features=[Feature("f", 0, 4)])
        copied = construct.copy(name="d")
        copied.features.append(Feature("g", 4, 8))
        assert copied.name == "d"
        assert len(construct.features) == 1
        assert copied.features is not construct.features

    def test_subsequence_wraps_on_circular(self):
        """Test circular subsequence extraction."""
        construct = DnaConstruct("c", "AACCGGTT", is_circular=True)
        assert construct.subsequence(6, 2) == "TTAA"
        assert construct.subsequence(2, 6) == "CCGG"

    def test_subsequence_linear_reversed_bounds(self):
        """Test that a reversed range on a linear construct is empty."""
        assert DnaConstruct("c", "AACCGGTT").subsequence(6, 2) == ""

    def test_mcs_feature(self):
        """Test MCS lookup."""
        construct = DnaConstruct("c", "ACGTACGT", features=[
            Feature("amp", 0, 2, FeatureType.RESISTANCE),
            Feature("MCS", 3, 6, FeatureType.MCS),
        ])
        assert construct.mcs_feature.name == "MCS"
        assert DnaConstruct("d", "ACGT").mcs_feature is None


class TestFragment:
    """Test Fragment class."""

    def test_size_and_enzymes(self):
        """Test derived fragment properties."""
        fragment = Fragment(
            sequence="AATTCAAAAG",
            start_position=3,
            end_position=13,
            end5=DnaEnd(OverhangDirection.FIVE_PRIME, "AATT", "EcoRI"),
            end3=DnaEnd(OverhangDirection.FIVE_PRIME, "GATC", "BamHI"),
        )
        assert fragment.size == 10
        assert fragment.enzyme5 == "EcoRI"
        assert fragment.enzyme3 == "BamHI"

    def test_native_ends(self):
        """Test fragments without cut ends."""
        fragment = Fragment(sequence="ACGT", start_position=0, end_position=4)
        assert fragment.enzyme5 is None
        assert fragment.enzyme3 is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
