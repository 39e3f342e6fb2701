"""Configuration for contig merging."""

from dataclasses import dataclass

from contigmerge.align import DEFAULT_BAND_RADIUS
from contigmerge.merge import MAX_PATHS


@dataclass
class MergeConfig:
    """Parameters of a merge run.

    Attributes:
        min_branch_len: Unaligned overhangs up to this length are dropped (default: 50)
        match_score: Alignment score of a matching base (default: 1)
        error_penalty: Alignment score of a mismatch or gap base (default: -5)
        qgram_length: Initial k-mer length for diagonal seeding (default: 47)
        band_radius: Half-width of the alignment band (default: 25)
        max_paths: Groups branching into more paths are not merged (default: 30)
        max_threads: Threads for aligning candidate paths (default: 1)
        verbose: Log the component graph of every merged group (default: False)
    """
    min_branch_len: int = 50
    match_score: int = 1
    error_penalty: int = -5
    qgram_length: int = 47
    band_radius: int = DEFAULT_BAND_RADIUS
    max_paths: int = MAX_PATHS
    max_threads: int = 1
    verbose: bool = False

    @classmethod
    def from_args(cls, args) -> 'MergeConfig':
        """Create config from command-line arguments."""
        return cls(
            min_branch_len=args.min_branch_len,
            match_score=args.match_score,
            error_penalty=args.error_penalty,
            qgram_length=args.qgram_length,
            band_radius=getattr(args, 'band_radius', DEFAULT_BAND_RADIUS),
            max_paths=args.max_paths,
            max_threads=getattr(args, 'threads', 1),
            verbose=getattr(args, 'verbose', False),
        )

    def validate(self) -> None:
        """Raise ValueError for parameters the aligner cannot work with."""
        if self.match_score <= 0:
            raise ValueError(f"Match score must be positive, got {self.match_score}")
        if self.error_penalty >= 0:
            raise ValueError(f"Error penalty must be negative, got {self.error_penalty}")
        if self.qgram_length <= 0:
            raise ValueError(f"Q-gram length must be positive, got {self.qgram_length}")
        if self.min_branch_len < 0:
            raise ValueError(f"Minimum branch length must not be negative, got {self.min_branch_len}")
        if self.band_radius < 0:
            raise ValueError(f"Band radius must not be negative, got {self.band_radius}")
        if self.max_paths < 1:
            raise ValueError(f"Path limit must be at least 1, got {self.max_paths}")

    def merge_kwargs(self) -> dict:
        """Keyword arguments for merge_sequences()."""
        return {
            'min_branch_len': self.min_branch_len,
            'match_score': self.match_score,
            'error_penalty': self.error_penalty,
            'qgram_length': self.qgram_length,
            'verbose': self.verbose,
            'max_paths': self.max_paths,
            'max_threads': self.max_threads,
            'band_radius': self.band_radius,
        }
