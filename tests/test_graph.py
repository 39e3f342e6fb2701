#!/usr/bin/env python3
"""
Tests for the component graph: vertex splitting, path enumeration and the
translation of path coordinates back to vertex offsets.
"""

import pytest

from contigmerge.graph import ComponentGraph, Path


@pytest.fixture
def diamond():
    """AAAA -> (CC | GG) -> TT"""
    graph = ComponentGraph("AAAA")
    cc = graph.add_vertex("CC")
    gg = graph.add_vertex("GG")
    tt = graph.add_vertex("TT")
    graph.add_edge(0, cc)
    graph.add_edge(0, gg)
    graph.add_edge(cc, tt)
    graph.add_edge(gg, tt)
    return graph


class TestSplitVertex:

    def test_labels_concatenate_to_original(self):
        graph = ComponentGraph("AAAACCCCTTTT")
        v = graph.split_vertex(0, "AAAA", "CCCCTTTT")
        assert graph.label(0) + graph.label(v) == "AAAACCCCTTTT"
        assert graph.label(0) == "AAAA"

    def test_outgoing_edges_move_to_suffix(self):
        graph = ComponentGraph("AAAACCCC")
        a = graph.add_vertex("GG")
        b = graph.add_vertex("TT")
        graph.add_edge(0, a)
        graph.add_edge(0, b)

        v = graph.split_vertex(0, "AAAA", "CCCC")

        assert graph.out_edges(v) == [a, b]
        assert graph.out_edges(0) == [v]
        assert graph.num_vertices == 4

    def test_sources_unchanged(self):
        graph = ComponentGraph("AAAACCCC")
        graph.split_vertex(0, "AAA", "ACCCC")
        assert graph.sources == [0]

    def test_mismatched_labels_rejected(self):
        graph = ComponentGraph("AAAACCCC")
        with pytest.raises(ValueError):
            graph.split_vertex(0, "AAAA", "GGGG")


class TestEnumeratePaths:

    def test_single_vertex(self):
        paths = ComponentGraph("ACGT").enumerate_paths()
        assert len(paths) == 1
        assert paths[0].seq == "ACGT"
        assert paths[0].position_map == {4: 0}

    def test_branches_in_edge_order(self, diamond):
        paths = diamond.enumerate_paths()
        assert [p.seq for p in paths] == ["AAAACCTT", "AAAAGGTT"]
        assert paths[0].vertices == [0, 1, 3]
        assert paths[0].ends == [4, 6, 8]
        assert paths[1].vertices == [0, 2, 3]

    def test_sibling_branches_do_not_share_state(self, diamond):
        paths = diamond.enumerate_paths()
        assert paths[0].position_map == {4: 0, 6: 1, 8: 3}
        assert paths[1].position_map == {4: 0, 6: 2, 8: 3}

    def test_sources_in_registration_order(self, diamond):
        nn = diamond.add_vertex("NN")
        diamond.add_source(nn)
        diamond.add_edge(nn, 2)
        assert [p.seq for p in diamond.enumerate_paths()] == ["AAAACCTT", "AAAAGGTT", "NNGGTT"]

    def test_path_count_after_repeated_branching(self):
        graph = ComponentGraph("AAAA")
        for label in ["CC", "GG", "TT"]:
            graph.add_edge(0, graph.add_vertex(label))
        assert len(graph.enumerate_paths()) == 3


class TestPathCoordinates:
    """Vertex boundaries at 4 and 8 for labels AAAA, CCCC, TTTT."""

    @pytest.fixture
    def path(self):
        return Path("AAAACCCCTTTT", [4, 8, 12], [0, 1, 2])

    def test_end_inside_vertex(self, path):
        assert path.locate_end(6) == (1, 2)

    def test_end_on_boundary_belongs_to_left_vertex(self, path):
        assert path.locate_end(8) == (1, 4)
        assert path.locate_end(4) == (0, 4)

    def test_end_at_path_end(self, path):
        assert path.locate_end(12) == (2, 4)

    def test_begin_inside_vertex(self, path):
        assert path.locate_begin(6) == (1, 2)

    def test_begin_on_boundary_belongs_to_right_vertex(self, path):
        assert path.locate_begin(8) == (2, 0)
        assert path.locate_begin(4) == (1, 0)

    def test_begin_at_path_start(self, path):
        assert path.locate_begin(0) == (0, 0)

    def test_first_position_of_last_vertex(self, path):
        assert path.locate_begin(11) == (2, 3)


class TestFormatStructure:

    def test_lists_edges_and_label_lengths(self, diamond):
        dump = diamond.format_structure()
        assert "0 -> 1,2" in dump
        assert "Vertex map:" in dump
        assert "Vertex: 0, Length: 4" in dump
        assert "Vertex: 3, Length: 2" in dump


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
