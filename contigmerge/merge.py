"""
Incremental merging of similar contigs into a branching consensus graph.

Each sequence of a group is aligned against every path of the current graph;
the best-scoring path decides where the sequence's unaligned ends are attached,
either as extensions of existing vertex labels or as new branches.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Sequence

from contigmerge.align import (
    DEFAULT_BAND_RADIUS,
    AlignmentResult,
    Gaps,
    ScoringScheme,
    local_alignment,
)
from contigmerge.diagonal import best_diagonal
from contigmerge.graph import ComponentGraph, Path

# A group whose graph branches into more paths than this is not merged
MAX_PATHS = 30


class MergeError(Exception):
    """Base class for failures to merge a sequence group."""


class ComplexityExceeded(MergeError):
    """The component graph has more paths than the merge is allowed to handle."""

    def __init__(self, path_count: int, max_paths: int):
        super().__init__(f"Component graph has {path_count} paths (limit {max_paths})")
        self.path_count = path_count
        self.max_paths = max_paths


def align_to_path(path: Path, seq: str, scoring: ScoringScheme, qgram_length: int,
                  band_radius: int = DEFAULT_BAND_RADIUS) -> AlignmentResult:
    """Align seq against a path, banded around the best k-mer diagonal if one exists."""
    diagonal = best_diagonal(seq, path.seq, qgram_length)
    if diagonal is None:
        return local_alignment(path.seq, seq, scoring)
    return local_alignment(path.seq, seq, scoring, diagonal=diagonal, band_radius=band_radius)


def merge_seq_with_graph(graph: ComponentGraph,
                         path: Path,
                         seq: str,
                         gaps_path: Gaps,
                         gaps_seq: Gaps,
                         min_branch_len: int) -> None:
    """
    Apply an alignment of seq against path to the graph.

    Unaligned bases past the end of the path extend the last vertex; unaligned
    bases before the start of the path are prepended to the first vertex.
    Elsewhere an overhang longer than min_branch_len becomes a new branch
    (splitting the vertex at the alignment boundary when needed) and a shorter
    overhang is dropped.
    """
    align_end_seq = gaps_seq.to_source_position(len(gaps_seq))
    align_end_path = gaps_path.to_source_position(len(gaps_path))
    align_begin_seq = gaps_seq.to_source_position(0)
    align_begin_path = gaps_path.to_source_position(0)

    # Both boundaries are resolved against the unmodified path. A split at the
    # 3' boundary keeps the prefix in the original vertex, so the 5' offset
    # stays valid.
    end_vertex, end_offset = path.locate_end(align_end_path)
    begin_vertex, begin_offset = path.locate_begin(align_begin_path)

    # --- right end of the alignment

    if align_end_seq < len(seq):
        overhang = seq[align_end_seq:]
        if align_end_path == len(path.seq):
            graph.set_label(end_vertex, graph.label(end_vertex) + overhang)
            logging.debug(f"Extended vertex {end_vertex} by {len(overhang)} bases")
        elif len(overhang) > min_branch_len:
            label = graph.label(end_vertex)
            if end_offset < len(label):
                split = graph.split_vertex(end_vertex, label[:end_offset], label[end_offset:])
                logging.debug(f"Split vertex {end_vertex} at {end_offset}, suffix in vertex {split}")
            branch = graph.add_vertex(overhang)
            graph.add_edge(end_vertex, branch)
            logging.debug(f"Added 3' branch vertex {branch} ({len(overhang)} bases) after vertex {end_vertex}")
        else:
            logging.debug(f"Dropped 3' overhang of {len(overhang)} bases")

    # --- left end of the alignment

    if align_begin_seq > 0:
        overhang = seq[:align_begin_seq]
        if align_begin_path == 0:
            graph.set_label(begin_vertex, overhang + graph.label(begin_vertex))
            logging.debug(f"Prepended {len(overhang)} bases to vertex {begin_vertex}")
        elif len(overhang) > min_branch_len:
            entry = begin_vertex
            label = graph.label(begin_vertex)
            if begin_offset > 0:
                entry = graph.split_vertex(begin_vertex, label[:begin_offset], label[begin_offset:])
                logging.debug(f"Split vertex {begin_vertex} at {begin_offset}, suffix in vertex {entry}")
            branch = graph.add_vertex(overhang)
            graph.add_source(branch)
            graph.add_edge(branch, entry)
            logging.debug(f"Added 5' branch source {branch} ({len(overhang)} bases) before vertex {entry}")
        else:
            logging.debug(f"Dropped 5' overhang of {len(overhang)} bases")


def add_sequences_to_graph(graph: ComponentGraph,
                           seqs: Sequence[str],
                           min_branch_len: int,
                           match_score: int,
                           error_penalty: int,
                           qgram_length: int,
                           max_paths: int = MAX_PATHS,
                           max_threads: int = 1,
                           band_radius: int = DEFAULT_BAND_RADIUS) -> None:
    """
    Merge seqs[1:] into the graph one after another.

    Raises:
        ComplexityExceeded: if the graph has more than max_paths paths before
                            any merge step
    """
    scoring = ScoringScheme(match_score, error_penalty, error_penalty)

    for i in range(1, len(seqs)):
        seq = seqs[i]

        def align(path, seq=seq):
            return align_to_path(path, seq, scoring, qgram_length, band_radius)

        paths = graph.enumerate_paths()
        if len(paths) > max_paths:
            raise ComplexityExceeded(len(paths), max_paths)

        # The graph is only read while candidates are scored
        if max_threads > 1 and len(paths) > 1:
            with ThreadPoolExecutor(max_workers=max_threads) as executor:
                results = list(executor.map(align, paths))
        else:
            results = [align(path) for path in paths]

        best_idx = 0
        for j, result in enumerate(results):
            if result.score > results[best_idx].score:
                best_idx = j
        best = results[best_idx]

        if best.score <= 0:
            logging.warning(f"Sequence {i} ({len(seq)} bp) does not align to any path, skipping")
            continue

        logging.debug(f"Sequence {i}: best of {len(paths)} paths is path {best_idx} (score={best.score})")
        merge_seq_with_graph(graph, paths[best_idx], seq, best.gaps_h, best.gaps_v, min_branch_len)


def merge_sequences(seqs: Sequence[str],
                    min_branch_len: int,
                    match_score: int,
                    error_penalty: int,
                    qgram_length: int,
                    verbose: bool = False,
                    max_paths: int = MAX_PATHS,
                    max_threads: int = 1,
                    band_radius: int = DEFAULT_BAND_RADIUS) -> List[str]:
    """
    Merge an ordered group of similar sequences into consensus sequences.

    The first sequence seeds the graph and the rest are merged in order, so the
    input order influences the result. Each source-to-sink path of the final
    graph becomes one output sequence.

    Args:
        seqs: Sequences of one group, seed first
        min_branch_len: Overhangs up to this length are dropped instead of branching
        match_score: Score for a matching base
        error_penalty: Score for a mismatch or gap (negative)
        qgram_length: Initial k-mer length for diagonal seeding
        verbose: Log the final graph structure
        max_paths: Path count above which the group is abandoned
        max_threads: Threads used to align candidate paths of one step
        band_radius: Half-width of the alignment band around a seeded diagonal

    Returns:
        Merged sequences in path enumeration order

    Raises:
        ComplexityExceeded: if the graph branches into more than max_paths paths
        ValueError: if seqs is empty or the seed sequence is empty
    """
    if len(seqs) == 0:
        raise ValueError("No sequences to merge")
    if not seqs[0]:
        raise ValueError("Seed sequence is empty")

    graph = ComponentGraph(seqs[0])
    add_sequences_to_graph(graph, seqs, min_branch_len, match_score, error_penalty,
                           qgram_length, max_paths=max_paths, max_threads=max_threads,
                           band_radius=band_radius)

    final_paths = graph.enumerate_paths()

    if verbose and graph.num_vertices > 1:
        logging.info(f"Component graph:\n{graph.format_structure()}")

    return [path.seq for path in final_paths]
