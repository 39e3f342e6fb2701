"""Branching graph of sequence fragments built up while merging contigs."""

from bisect import bisect_left, bisect_right
from typing import Dict, List, Optional, Sequence, Tuple


class Path:
    """One source-to-sink route through a ComponentGraph.

    seq is the concatenation of the vertex labels along the route. ends[i] is
    the offset in seq at which the label of vertices[i] ends, which is the index
    used to translate a position in seq back to a vertex.
    """

    def __init__(self, seq: str = "", ends: Sequence[int] = (), vertices: Sequence[int] = ()):
        self.seq = seq
        self.ends = list(ends)
        self.vertices = list(vertices)

    def __len__(self) -> int:
        return len(self.seq)

    def __repr__(self) -> str:
        return f"Path(vertices={self.vertices}, length={len(self.seq)})"

    @property
    def position_map(self) -> Dict[int, int]:
        """Cumulative end offset -> vertex whose label ends there."""
        return dict(zip(self.ends, self.vertices))

    def _start_of(self, idx: int) -> int:
        return self.ends[idx - 1] if idx > 0 else 0

    def locate_end(self, pos: int) -> Tuple[int, int]:
        """Vertex holding the base just before pos, and pos relative to that vertex.

        A position that coincides with a vertex boundary resolves to the vertex
        ending there, so the returned offset lies in (0, len(label)].
        """
        idx = bisect_left(self.ends, pos)
        return self.vertices[idx], pos - self._start_of(idx)

    def locate_begin(self, pos: int) -> Tuple[int, int]:
        """Vertex holding the base at pos, and pos relative to that vertex.

        A position on a vertex boundary resolves to the vertex starting there,
        so the returned offset lies in [0, len(label)).
        """
        idx = bisect_right(self.ends, pos)
        return self.vertices[idx], pos - self._start_of(idx)


class ComponentGraph:
    """Directed acyclic graph whose vertices carry sequence labels.

    Vertices are integer handles into the label table. Edges are kept per vertex
    in insertion order, and sources in registration order, which fixes the order
    in which paths are enumerated.
    """

    def __init__(self, seed: Optional[str] = None):
        self._labels: List[str] = []
        self._edges: List[List[int]] = []
        self.sources: List[int] = []
        if seed is not None:
            self.add_source(self.add_vertex(seed))

    @property
    def num_vertices(self) -> int:
        return len(self._labels)

    def add_vertex(self, label: str) -> int:
        self._labels.append(label)
        self._edges.append([])
        return len(self._labels) - 1

    def add_edge(self, u: int, v: int) -> None:
        self._edges[u].append(v)

    def add_source(self, v: int) -> None:
        self.sources.append(v)

    def label(self, v: int) -> str:
        return self._labels[v]

    def set_label(self, v: int, label: str) -> None:
        self._labels[v] = label

    def out_edges(self, v: int) -> List[int]:
        return list(self._edges[v])

    def out_degree(self, v: int) -> int:
        return len(self._edges[v])

    def split_vertex(self, u: int, prefix_label: str, suffix_label: str) -> int:
        """
        Split vertex u into u (prefix) -> v (suffix).

        The new vertex v takes over all outgoing edges of u, and u is left with
        the single edge u -> v.

        Returns:
            The handle of the new suffix vertex
        """
        if prefix_label + suffix_label != self._labels[u]:
            raise ValueError(f"Split labels do not reproduce the label of vertex {u}")

        v = self.add_vertex(suffix_label)
        self._edges[v] = self._edges[u]
        self._edges[u] = [v]
        self._labels[u] = prefix_label
        return v

    def enumerate_paths(self) -> List[Path]:
        """
        Enumerate every source-to-sink path by depth-first traversal.

        Each branch carries its own immutable copy of the accumulated labels, so
        extending one branch never leaks into a sibling. The graph must be
        acyclic.
        """
        paths = []
        for source in self.sources:
            stack = [(source, (), (0,), ())]
            while stack:
                v, labels, ends, vertices = stack.pop()
                label = self._labels[v]
                labels = labels + (label,)
                ends = ends + (ends[-1] + len(label),)
                vertices = vertices + (v,)

                if not self._edges[v]:
                    paths.append(Path(''.join(labels), ends[1:], vertices))
                    continue

                for target in reversed(self._edges[v]):
                    stack.append((target, labels, ends, vertices))
        return paths

    def format_structure(self) -> str:
        """Text dump of the adjacency lists and label lengths."""
        lines = ["Adjacency list:"]
        for v, targets in enumerate(self._edges):
            lines.append(f"{v} -> " + ",".join(str(t) for t in targets))
        lines.append(f"Sources: {','.join(str(s) for s in self.sources)}")
        lines.append("Vertex map:")
        for v, label in enumerate(self._labels):
            lines.append(f"Vertex: {v}, Length: {len(label)}")
        return "\n".join(lines)
