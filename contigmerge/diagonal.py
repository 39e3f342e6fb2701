"""K-mer seeded diagonal voting used to band the local alignment."""

import logging
from collections import defaultdict
from typing import Dict, List, Optional

import numpy as np

# Shortest q-gram that is still worth counting; below this the search gives up
MIN_QGRAM_LENGTH = 1


def build_kmer_index(sequence: str, k: int) -> Dict[str, List[int]]:
    """Map every k-mer of the sequence to its start positions (ascending)."""
    index = defaultdict(list)
    for pos in range(len(sequence) - k + 1):
        index[sequence[pos:pos + k]].append(pos)
    return index


def best_diagonal(reference: str, query: str, qgram_length: int) -> Optional[int]:
    """
    Find the diagonal with the most shared k-mer hits between two sequences.

    The diagonal is reported as query offset minus reference offset. When no
    k-mer of the requested length is shared, the search is repeated with a
    q-gram length of two thirds until a hit is found or the length becomes
    degenerate.

    Args:
        reference: Sequence that is indexed
        query: Sequence whose k-mers are looked up in the index
        qgram_length: Seed length to start with

    Returns:
        Best diagonal, or None if the sequences are shorter than the seed or
        share no seed at all
    """
    if qgram_length < MIN_QGRAM_LENGTH:
        return None

    len1 = len(reference)
    len2 = len(query)
    if qgram_length > len1 or qgram_length > len2:
        return None

    index = build_kmer_index(reference, qgram_length)

    hits = []
    for i in range(len2 - qgram_length + 1):
        for occ in index.get(query[i:i + qgram_length], ()):
            hits.append(len1 + i - occ)

    if not hits:
        logging.debug(f"No shared {qgram_length}-mers, retrying with {qgram_length * 2 // 3}")
        return best_diagonal(reference, query, qgram_length * 2 // 3)

    counters = np.bincount(hits, minlength=len1 + len2)
    # argmax returns the first maximum, i.e. the lowest diagonal on ties
    return int(np.argmax(counters)) - len1
