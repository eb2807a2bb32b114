"""Tests for digestlab.core.cutsites module."""

import pytest
from digestlab.core.alphabet import InvalidSequence, reverse_complement
from digestlab.core.cutsites import (
    analyze_enzymes,
    find_cut_sites,
    find_cut_sites_multi,
    select_by_cut_count,
    strand_cut_positions,
)
from digestlab.core.enzymes import get_enzyme
from digestlab.core.models import OverhangDirection


ECORI = get_enzyme("EcoRI")
BAMHI = get_enzyme("BamHI")
BSAI = get_enzyme("BsaI")

# BsaI site at 2, top-strand nick at 9, bottom-strand nick at 13
BSAI_TEST_SEQ = "TTGGTCTCAACGTAAAAAAAA"


class TestForwardSites:
    """Test cut positions from forward matches."""

    def test_ecori_linear(self):
        """Test the EcoRI top-strand cut."""
        sites = find_cut_sites("GAATTC", ECORI)
        assert [s.position for s in sites] == [1]
        assert sites[0].strand == '+'
        assert sites[0].recognition_start == 0
        assert sites[0].enzyme_name == "EcoRI"

    def test_five_prime_overhang_read_from_sequence(self):
        """Test the overhang carried by a 5' cutter site."""
        site = find_cut_sites("GAATTC", ECORI)[0]
        assert site.overhang.direction == OverhangDirection.FIVE_PRIME
        assert site.overhang.overhang_sequence == "AATT"
        assert site.overhang.enzyme_name == "EcoRI"
        assert site.overhang_length == 4

    def test_three_prime_overhang(self):
        """Test the PstI 3' overhang."""
        sites = find_cut_sites("AACTGCAGAA", get_enzyme("PstI"))
        assert [s.position for s in sites] == [7]
        assert sites[0].overhang.direction == OverhangDirection.THREE_PRIME
        assert sites[0].overhang.overhang_sequence == "TGCA"

    def test_blunt_cut(self):
        """Test EcoRV blunt cut."""
        sites = find_cut_sites("AAGATATCAA", get_enzyme("EcoRV"))
        assert [s.position for s in sites] == [5]
        assert sites[0].overhang.is_blunt
        assert sites[0].overhang_length == 0

    def test_lowercase_input(self):
        """Test that lowercase sequences are accepted."""
        assert [s.position for s in find_cut_sites("aagaattcaa", ECORI)] == [3]

    def test_no_sites(self):
        """Test a sequence the enzyme does not cut."""
        assert find_cut_sites("ACACACACAC", ECORI) == []

    def test_empty_sequence(self):
        """Test that an empty sequence has no sites."""
        assert find_cut_sites("", ECORI) == []

    def test_invalid_sequence(self):
        """Test that invalid input raises."""
        with pytest.raises(InvalidSequence):
            find_cut_sites("GAXTTC", ECORI)

    def test_cut_at_position_zero_kept(self):
        """Test that a cut before the first base is reported on linear input."""
        sites = find_cut_sites("GATCAAAA", get_enzyme("MboI"))
        assert [s.position for s in sites] == [0]


class TestPalindromicSites:
    """Test palindromic enzymes are reported once per site."""

    def test_single_site_single_report(self):
        """Test that a palindrome is not double-counted."""
        assert len(find_cut_sites("AAGAATTCAA", ECORI)) == 1

    def test_two_sites(self):
        """Test two EcoRI sites."""
        sites = find_cut_sites("GAATTCAAAAGAATTC", ECORI)
        assert [s.position for s in sites] == [1, 11]

    def test_degenerate_palindrome(self):
        """Test HincII on both of its concrete sites."""
        sites = find_cut_sites("GTCGACAAAAGTTAAC", get_enzyme("HincII"))
        assert [s.position for s in sites] == [3, 13]


class TestCircularSites:
    """Test cut sites on circular molecules."""

    def test_site_spanning_origin(self):
        """Test a recognition site crossing the origin."""
        sites = find_cut_sites("ATTCAAAAGA", ECORI, circular=True)
        assert [s.position for s in sites] == [9]
        assert sites[0].recognition_start == 8

    def test_site_spanning_origin_linear(self):
        """Test that the same site is absent on the linear molecule."""
        assert find_cut_sites("ATTCAAAAGA", ECORI) == []

    def test_cut_position_wraps(self):
        """Test that the cut position is reduced modulo the length."""
        # site starts at 9, nick at 10 -> 0
        sites = find_cut_sites("AATTCAAAAG", ECORI, circular=True)
        assert [s.position for s in sites] == [0]
        assert sites[0].overhang.overhang_sequence == "AATT"

    def test_overhang_across_origin(self):
        """Test that the overhang is read through the origin."""
        sites = find_cut_sites("TTCAAAAGAA", ECORI, circular=True)
        assert [s.position for s in sites] == [8]
        assert sites[0].overhang.overhang_sequence == "AATT"


class TestTypeIISSites:
    """Test asymmetric enzymes on both strands."""

    def test_bsai_forward(self):
        """Test BsaI forward cut and overhang outside the site."""
        sites = find_cut_sites(BSAI_TEST_SEQ, BSAI)
        assert [s.position for s in sites] == [9]
        assert sites[0].strand == '+'
        assert sites[0].overhang.overhang_sequence == "ACGT"
        assert sites[0].overhang.direction == OverhangDirection.FIVE_PRIME

    def test_bsai_reverse(self):
        """Test BsaI on the reverse complement of the same molecule."""
        rc = reverse_complement(BSAI_TEST_SEQ)
        sites = find_cut_sites(rc, BSAI)
        assert [s.position for s in sites] == [8]
        assert sites[0].strand == '-'
        assert sites[0].recognition_start == 13
        assert sites[0].overhang.overhang_sequence == "ACGT"

    @pytest.mark.parametrize("name", ["BsaI", "BbsI", "SapI"])
    def test_reverse_cut_matches_bottom_strand_nick(self, name):
        """Test the reverse-strand formula against the forward-strand bottom nick."""
        enzyme = get_enzyme(name)
        seq = "CCC" + enzyme.recognition_sequence + "CAGTCAGTCAGTCAGT"
        n = len(seq)

        forward = find_cut_sites(seq, enzyme)
        assert [s.position for s in forward] == [3 + enzyme.cut_offset_5]

        reverse = find_cut_sites(reverse_complement(seq), enzyme)
        assert [s.strand for s in reverse] == ['-']
        assert [s.position for s in reverse] == [n - (3 + enzyme.cut_offset_3)]

    def test_cut_past_end_dropped_on_linear(self):
        """Test that cuts beyond a linear molecule are dropped."""
        assert find_cut_sites("AAGGTCTCA", BSAI) == []

    def test_overhang_past_end_dropped_on_linear(self):
        """Test that a top nick inside with the bottom nick past the end is dropped."""
        assert find_cut_sites("GGTCTCAAA", BSAI) == []
        assert strand_cut_positions("GGTCTCAAA", BSAI, '+') == []

    def test_overhang_reaching_end_kept(self):
        """Test a bottom nick exactly at the end of a linear molecule."""
        sites = find_cut_sites("GGTCTCAAAAC", BSAI)
        assert [s.position for s in sites] == [7]
        assert sites[0].overhang.overhang_sequence == "AAAC"
        assert sites[0].overhang_length == 4

    def test_cut_past_end_wraps_on_circular(self):
        """Test that the same cut wraps on a circular molecule."""
        sites = find_cut_sites("AAGGTCTCA", BSAI, circular=True)
        assert [s.position for s in sites] == [0]


class TestStrandCutPositions:
    """Test single-path cut positions."""

    def test_forward_only(self):
        """Test forward path on a forward site."""
        assert strand_cut_positions(BSAI_TEST_SEQ, BSAI, '+') == [9]
        assert strand_cut_positions(BSAI_TEST_SEQ, BSAI, '-') == []

    def test_reverse_only(self):
        """Test reverse path on a reverse site."""
        rc = reverse_complement(BSAI_TEST_SEQ)
        assert strand_cut_positions(rc, BSAI, '-') == [8]
        assert strand_cut_positions(rc, BSAI, '+') == []

    def test_palindrome_paths_agree(self):
        """Test that both paths give the same cuts for a palindrome."""
        seq = "AAGAATTCAAGAATTCAA"
        assert strand_cut_positions(seq, ECORI, '+') == strand_cut_positions(seq, ECORI, '-')

    def test_invalid_strand(self):
        """Test strand validation."""
        with pytest.raises(ValueError):
            strand_cut_positions("GAATTC", ECORI, 'x')


class TestMultiEnzyme:
    """Test multi-enzyme reports."""

    def test_find_cut_sites_multi_ordered(self):
        """Test union of sites ordered by position."""
        sites = find_cut_sites_multi("GGATCCAAAAGAATTC", [ECORI, BAMHI])
        assert [(s.position, s.enzyme_name) for s in sites] == [(1, "BamHI"), (11, "EcoRI")]

    def test_isoschizomers_ordered_by_name(self):
        """Test that ties are broken by enzyme name."""
        sites = find_cut_sites_multi("AAGATCAA", [get_enzyme("Sau3AI"), get_enzyme("MboI")])
        assert [s.enzyme_name for s in sites] == ["MboI", "Sau3AI"]

    def test_analyze_enzymes_sorted(self):
        """Test per-enzyme analysis sorted by name."""
        analyses = analyze_enzymes("GGATCCAAAAGAATTC", [ECORI, get_enzyme("HindIII"), BAMHI])
        assert [a.enzyme.name for a in analyses] == ["BamHI", "EcoRI", "HindIII"]
        assert [a.cut_count for a in analyses] == [1, 1, 0]
        assert analyses[1].positions == [11]


class TestSelectByCutCount:
    """Test cut-count filtering of reports."""

    def _analyses(self):
        enzymes = [ECORI, BAMHI, get_enzyme("HindIII")]
        return analyze_enzymes("GAATTCAAAAGAATTCGGATCC", enzymes)

    def test_single(self):
        """Test keeping single cutters."""
        selected = select_by_cut_count(self._analyses(), ['single'])
        assert [a.enzyme.name for a in selected] == ["BamHI"]

    def test_none_and_multiple(self):
        """Test combining classes."""
        selected = select_by_cut_count(self._analyses(), ['none', 'multiple'])
        assert [a.enzyme.name for a in selected] == ["EcoRI", "HindIII"]

    def test_unknown_class(self):
        """Test that an unknown class raises."""
        with pytest.raises(ValueError, match="Unknown cut-count"):
            select_by_cut_count(self._analyses(), ['double'])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
