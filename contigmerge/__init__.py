"""
Contigmerge: incremental merging of similar contigs into branching consensus sequences.

Contigs assembled from different samples for the same insertion are merged one
at a time into a graph that keeps real branch points (alleles) apart and
collapses near-identical overlaps.
"""

__version__ = "0.1.0"

from .merge import merge_sequences, ComplexityExceeded, MergeError
from .core import main as contigmerge_main

__all__ = ["merge_sequences", "ComplexityExceeded", "MergeError", "contigmerge_main", "__version__"]
