"""
Smith-Waterman local alignment with optional diagonal banding.

The dynamic programming matrix is filled row by row with numpy. Each row only
stores the columns inside the band, so a banded alignment of two long contigs
needs memory proportional to the band width rather than the full matrix.
"""

from typing import List, NamedTuple, Optional

import numpy as np

# Half-width of the band placed around a seeded diagonal
DEFAULT_BAND_RADIUS = 25


class ScoringScheme(NamedTuple):
    """Linear scoring: match bonus, mismatch penalty and per-base gap penalty."""
    match: int
    mismatch: int
    gap: int


class Gaps:
    """Gapped view of one aligned sequence.

    Holds the source sequence, the clipped source interval [begin, end) that
    takes part in the alignment, and one entry per alignment column: the source
    position shown in that column, or None for a gap.
    """

    def __init__(self, source: str, begin: int = 0, end: int = 0,
                 columns: Optional[List[Optional[int]]] = None):
        self.source = source
        self.begin = begin
        self.end = end
        self.columns = columns if columns is not None else []

    def __len__(self) -> int:
        return len(self.columns)

    def __str__(self) -> str:
        return ''.join('-' if pos is None else self.source[pos] for pos in self.columns)

    @property
    def clipped(self) -> str:
        return self.source[self.begin:self.end]

    def to_source_position(self, view_position: int) -> int:
        """Translate an alignment column into a source position.

        Column 0 maps to the start of the aligned region and len(self) to its
        end. A gap column maps to the next source position to its right.
        """
        for pos in self.columns[view_position:]:
            if pos is not None:
                return pos
        return self.end

    def to_view_position(self, source_position: int) -> int:
        """Translate a source position into the first column showing it (or after it)."""
        for column, pos in enumerate(self.columns):
            if pos is not None and pos >= source_position:
                return column
        return len(self.columns)


class AlignmentResult(NamedTuple):
    score: int
    gaps_h: Gaps
    gaps_v: Gaps


def _row_values(row_start: int, row: np.ndarray, start: int, stop: int) -> np.ndarray:
    """Values of a stored row for columns [start, stop), zero outside the stored band."""
    out = np.zeros(max(0, stop - start), dtype=np.int64)
    lo = max(start, row_start)
    hi = min(stop, row_start + len(row))
    if lo < hi:
        out[lo - start:hi - start] = row[lo - row_start:hi - row_start]
    return out


def _cell(row_start: int, row: np.ndarray, column: int) -> int:
    if row_start <= column < row_start + len(row):
        return int(row[column - row_start])
    return 0


def local_alignment(seq_h: str, seq_v: str, scoring: ScoringScheme,
                    diagonal: Optional[int] = None,
                    band_radius: int = DEFAULT_BAND_RADIUS) -> AlignmentResult:
    """
    Compute the best local alignment of two sequences.

    seq_h runs along the columns and seq_v along the rows of the matrix, so a
    diagonal is a position in seq_h minus the matching position in seq_v.

    Args:
        seq_h: Horizontal sequence
        seq_v: Vertical sequence
        scoring: Match, mismatch and gap scores (mismatch and gap negative)
        diagonal: Restrict the search to diagonal +/- band_radius; None searches
                  the whole matrix
        band_radius: Half-width of the band

    Returns:
        AlignmentResult with the score and the gapped views of both sequences.
        A score of 0 comes with empty views.
    """
    m = len(seq_h)
    n = len(seq_v)
    match, mismatch, gap = scoring

    if m == 0 or n == 0:
        return AlignmentResult(0, Gaps(seq_h), Gaps(seq_v))

    if diagonal is None:
        lower, upper = -n, m
    else:
        lower, upper = diagonal - band_radius, diagonal + band_radius

    codes_h = np.frombuffer(seq_h.encode('ascii'), dtype=np.uint8)
    codes_v = np.frombuffer(seq_v.encode('ascii'), dtype=np.uint8)

    row_starts = []
    rows = []

    start = max(0, lower)
    stop = min(m, upper) + 1
    row_starts.append(start)
    rows.append(np.zeros(max(0, stop - start), dtype=np.int32))

    best_score = 0
    best_cell = None

    for i in range(1, n + 1):
        start = max(0, i + lower)
        stop = min(m, i + upper) + 1
        if start >= stop:
            row_starts.append(start)
            rows.append(np.zeros(0, dtype=np.int32))
            continue

        prev_start, prev = row_starts[-1], rows[-1]
        cols = np.arange(start, stop)

        up = _row_values(prev_start, prev, start, stop) + gap
        sub = np.where(codes_h[cols - 1] == codes_v[i - 1], match, mismatch)
        diag = _row_values(prev_start, prev, start - 1, stop - 1) + sub
        if start == 0:
            diag[0] = 0

        best_in = np.maximum(np.maximum(diag, up), 0)

        # Horizontal gaps: H[j] = max over k <= j of best_in[k] + gap * (j - k)
        offsets = np.arange(stop - start, dtype=np.int64) * gap
        row = offsets + np.maximum.accumulate(best_in - offsets)

        row_starts.append(start)
        rows.append(row.astype(np.int32))

        idx = int(np.argmax(row))
        if row[idx] > best_score:
            best_score = int(row[idx])
            best_cell = (i, start + idx)

    if best_cell is None:
        return AlignmentResult(0, Gaps(seq_h), Gaps(seq_v))

    end_v, end_h = best_cell
    i, j = best_cell
    columns_h = []
    columns_v = []
    while True:
        value = _cell(row_starts[i], rows[i], j)
        if value <= 0:
            break
        if i > 0 and j > 0:
            step = match if seq_h[j - 1] == seq_v[i - 1] else mismatch
            if value == _cell(row_starts[i - 1], rows[i - 1], j - 1) + step:
                columns_h.append(j - 1)
                columns_v.append(i - 1)
                i -= 1
                j -= 1
                continue
        if i > 0 and value == _cell(row_starts[i - 1], rows[i - 1], j) + gap:
            columns_h.append(None)
            columns_v.append(i - 1)
            i -= 1
        else:
            columns_h.append(j - 1)
            columns_v.append(None)
            j -= 1

    columns_h.reverse()
    columns_v.reverse()

    return AlignmentResult(
        best_score,
        Gaps(seq_h, j, end_h, columns_h),
        Gaps(seq_v, i, end_v, columns_v),
    )
