#!/usr/bin/env python3

import argparse
import json
import logging
import os
import sys
from datetime import datetime
from typing import Dict, List

from Bio import SeqIO
from Bio.Seq import Seq
from Bio.SeqRecord import SeqRecord
from tqdm import tqdm

from contigmerge import __version__
from contigmerge.align import DEFAULT_BAND_RADIUS
from contigmerge.config import MergeConfig
from contigmerge.merge import MergeError, merge_sequences


def read_sequence_group(input_file: str) -> List[str]:
    """Read one ordered sequence group from a FASTA or FASTQ file.

    Sequences are upper-cased; empty records are skipped with a warning.
    """
    file_format = "fastq" if input_file.endswith((".fastq", ".fq")) else "fasta"
    sequences = []
    for record in SeqIO.parse(input_file, file_format):
        seq = str(record.seq).upper()
        if not seq:
            logging.warning(f"Skipping empty sequence {record.id} in {input_file}")
            continue
        sequences.append(seq)
    return sequences


def write_merged_fasta(group_name: str, merged: List[str], output_dir: str) -> str:
    """Write the merged sequences of a group and return the output path."""
    records = [
        SeqRecord(Seq(seq), id=f"{group_name}_{i}", description=f"length={len(seq)}")
        for i, seq in enumerate(merged, 1)
    ]
    output_file = os.path.join(output_dir, f"{group_name}.merged.fasta")
    with open(output_file, 'w') as f:
        SeqIO.write(records, f, "fasta")
    return output_file


def merge_group(group_name: str, sequences: List[str], config: MergeConfig,
                output_dir: str) -> Dict:
    """Merge one group and write its output. Returns the summary entry for the group."""
    entry = {
        "group": group_name,
        "input_sequences": len(sequences),
        "merged_sequences": 0,
        "status": "empty",
        "output_file": None,
    }
    if not sequences:
        logging.warning(f"No sequences in group {group_name}, nothing to merge")
        return entry

    try:
        merged = merge_sequences(sequences, **config.merge_kwargs())
    except MergeError as e:
        logging.warning(f"Could not merge group {group_name}: {e}")
        entry["status"] = "failed"
        entry["error"] = str(e)
        return entry

    entry["merged_sequences"] = len(merged)
    entry["status"] = "merged"
    entry["output_file"] = write_merged_fasta(group_name, merged, output_dir)
    logging.info(f"Merged {len(sequences)} sequences of {group_name} into {len(merged)}")
    return entry


def write_summary(output_dir: str, config: MergeConfig, groups: List[Dict]) -> str:
    """Write run metadata and per-group results to JSON."""
    summary = {
        "version": __version__,
        "timestamp": datetime.now().isoformat(),
        "parameters": {
            "min_branch_len": config.min_branch_len,
            "match_score": config.match_score,
            "error_penalty": config.error_penalty,
            "qgram_length": config.qgram_length,
            "band_radius": config.band_radius,
            "max_paths": config.max_paths,
            "max_threads": config.max_threads,
        },
        "groups": groups,
    }
    summary_file = os.path.join(output_dir, "merge_summary.json")
    with open(summary_file, 'w') as f:
        json.dump(summary, f, indent=2)
    logging.debug(f"Wrote merge summary to {summary_file}")
    return summary_file


def main():
    parser = argparse.ArgumentParser(
        description="Merge groups of similar contigs into branching consensus sequences"
    )
    parser.add_argument("input_files", nargs="+",
                        help="FASTA/FASTQ files, one ordered sequence group per file "
                             "(the first sequence of each file seeds the merge)")
    parser.add_argument("--min-branch-len", type=int, default=50,
                        help="Minimum length of an unaligned overhang to create a branch (default: 50)")
    parser.add_argument("--match-score", type=int, default=1,
                        help="Alignment score for a matching base (default: 1)")
    parser.add_argument("--error-penalty", type=int, default=-5,
                        help="Alignment score for a mismatch or gap (default: -5)")
    parser.add_argument("--qgram-length", type=int, default=47,
                        help="Initial k-mer length for seeding the alignment band (default: 47)")
    parser.add_argument("--band-radius", type=int, default=DEFAULT_BAND_RADIUS,
                        help=f"Half-width of the alignment band around the seeded diagonal "
                             f"(default: {DEFAULT_BAND_RADIUS})")
    parser.add_argument("--max-paths", type=int, default=30,
                        help="Give up on a group once its graph has more paths than this (default: 30)")
    parser.add_argument("--threads", type=int, default=1, metavar="N",
                        help="Threads for aligning against candidate paths (default: 1)")
    parser.add_argument("-O", "--output-dir", default="merged",
                        help="Output directory for merged sequences (default: merged)")
    parser.add_argument("--verbose", action="store_true",
                        help="Log the component graph structure of each merged group")
    parser.add_argument("--log-level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    parser.add_argument("--version", action="version",
                        version=f"contigmerge {__version__}",
                        help="Show program's version number and exit")

    args = parser.parse_args()

    # The graph dump is logged at INFO, so --verbose must not be filtered out
    log_level = getattr(logging, args.log_level)
    if args.verbose:
        log_level = min(log_level, logging.INFO)

    log_format = '%(asctime)s - %(levelname)s - %(message)s'
    logging.basicConfig(
        level=log_level,
        format=log_format
    )

    config = MergeConfig.from_args(args)
    try:
        config.validate()
    except ValueError as e:
        parser.error(str(e))

    for input_file in args.input_files:
        if not os.path.exists(input_file):
            logging.error(f"Input file not found: {input_file}")
            sys.exit(1)

    os.makedirs(args.output_dir, exist_ok=True)
    logging.info(f"Merging {len(args.input_files)} sequence groups "
                 f"(min_branch_len={config.min_branch_len}, qgram_length={config.qgram_length})")

    groups = []
    for input_file in tqdm(args.input_files, desc="Merging groups", unit="group"):
        group_name = os.path.splitext(os.path.basename(input_file))[0]
        try:
            sequences = read_sequence_group(input_file)
        except (OSError, ValueError) as e:
            logging.error(f"Failed to read input file '{input_file}': {e}")
            sys.exit(1)
        groups.append(merge_group(group_name, sequences, config, args.output_dir))

    write_summary(args.output_dir, config, groups)

    failed = sum(1 for g in groups if g["status"] == "failed")
    merged = sum(g["merged_sequences"] for g in groups)
    logging.info(f"Wrote {merged} merged sequences for {len(groups) - failed} groups to {args.output_dir}")
    if failed:
        logging.info(f"Note: {failed} group(s) exceeded {config.max_paths} paths and were not merged")


if __name__ == "__main__":
    main()
