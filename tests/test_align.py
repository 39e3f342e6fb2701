#!/usr/bin/env python3
"""
Tests for the banded Smith-Waterman aligner and its gapped coordinate views.
"""

import hashlib

import pytest

from contigmerge.align import Gaps, ScoringScheme, local_alignment
from contigmerge.diagonal import best_diagonal


SCORING = ScoringScheme(match=1, mismatch=-2, gap=-2)


def generate_dna_sequence(seed: str, length: int) -> str:
    """Generate a reproducible pseudo-random DNA sequence."""
    bases = "ACGT"
    return "".join(bases[int(hashlib.md5(f"{seed}_{i}".encode()).hexdigest()[0], 16) % 4]
                   for i in range(length))


def substitute(seq: str, pos: int) -> str:
    swap = {'A': 'T', 'T': 'A', 'G': 'C', 'C': 'G'}
    return seq[:pos] + swap[seq[pos]] + seq[pos + 1:]


class TestGaps:

    def test_rendering_and_clipping(self):
        gaps = Gaps("TTACGTTT", 2, 6, [2, 3, None, 4, 5])
        assert str(gaps) == "AC-GT"
        assert gaps.clipped == "ACGT"
        assert len(gaps) == 5

    def test_boundaries_map_to_clipped_interval(self):
        gaps = Gaps("TTACGTTT", 2, 6, [2, 3, None, 4, 5])
        assert gaps.to_source_position(0) == 2
        assert gaps.to_source_position(len(gaps)) == 6

    def test_gap_column_maps_to_next_source_position(self):
        gaps = Gaps("TTACGTTT", 2, 6, [2, 3, None, 4, 5])
        assert gaps.to_source_position(2) == 4

    def test_view_position(self):
        gaps = Gaps("TTACGTTT", 2, 6, [2, 3, None, 4, 5])
        assert gaps.to_view_position(2) == 0
        assert gaps.to_view_position(4) == 3
        assert gaps.to_view_position(6) == 5

    def test_empty_view(self):
        gaps = Gaps("ACGT")
        assert len(gaps) == 0
        assert gaps.to_source_position(0) == 0


class TestLocalAlignment:

    def test_overlap_boundaries(self):
        result = local_alignment("AAAACCCCTTTT", "CCCCTTTTGGGG", SCORING)
        assert result.score == 8
        assert str(result.gaps_h) == "CCCCTTTT"
        assert str(result.gaps_v) == "CCCCTTTT"
        assert result.gaps_h.to_source_position(0) == 4
        assert result.gaps_h.to_source_position(len(result.gaps_h)) == 12
        assert result.gaps_v.to_source_position(0) == 0
        assert result.gaps_v.to_source_position(len(result.gaps_v)) == 8

    def test_insertion_produces_gap_column(self):
        left = generate_dna_sequence("left", 30)
        right = generate_dna_sequence("right", 30)
        seq_h = left + right
        seq_v = left + "A" + right
        result = local_alignment(seq_h, seq_v, SCORING)

        assert result.score == 58
        assert len(result.gaps_h) == len(result.gaps_v) == 61
        assert str(result.gaps_v) == seq_v
        assert str(result.gaps_h).replace('-', '') == seq_h
        assert str(result.gaps_h).count('-') == 1

    def test_unrelated_sequences_score_zero(self):
        result = local_alignment("AAAAAAAA", "CCCCCCCC", SCORING)
        assert result.score == 0
        assert len(result.gaps_h) == 0
        assert len(result.gaps_v) == 0

    def test_empty_sequence(self):
        result = local_alignment("", "ACGT", SCORING)
        assert result.score == 0

    def test_banded_agrees_with_full(self):
        reference = generate_dna_sequence("banded", 200)
        read = substitute(reference[20:180], 80)

        diagonal = best_diagonal(read, reference, 11)
        assert diagonal == 20

        full = local_alignment(reference, read, SCORING)
        banded = local_alignment(reference, read, SCORING, diagonal=diagonal)

        assert full.score == banded.score == 157
        for result in (full, banded):
            assert result.gaps_h.begin == 20
            assert result.gaps_h.end == 180
            assert result.gaps_v.begin == 0
            assert result.gaps_v.end == 160

    def test_band_outside_matrix_finds_nothing(self):
        seq = generate_dna_sequence("outside", 60)
        result = local_alignment(seq, seq, SCORING, diagonal=-100, band_radius=5)
        assert result.score == 0

    def test_narrow_band_around_true_diagonal(self):
        seq = generate_dna_sequence("narrow", 80)
        result = local_alignment(seq, seq, SCORING, diagonal=0, band_radius=0)
        assert result.score == 80
        assert result.gaps_h.clipped == seq


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
