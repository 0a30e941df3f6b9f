"""Allelic profile table helpers for the cluster stage.

Profile tables are tab-delimited with a header row; the first column holds
the genome/sample identifier and the remaining columns are loci.
"""

from pathlib import Path
from typing import List, Sequence

import numpy as np
import pandas as pd
from rich.console import Console

from cgmlst_typer.errors import ClusterStageError

console = Console(stderr=True)

MISSING_TOKEN = '0'


def read_profile_loci(profile_file) -> List[str]:
    """Return the locus names of a profile table (header only, id column dropped)."""
    try:
        with open(profile_file) as fh:
            header = fh.readline().rstrip('\r\n')
    except (OSError, UnicodeDecodeError) as e:
        raise ClusterStageError(f"Cannot read profile table {profile_file}: {e}") from e
    if not header:
        raise ClusterStageError(f"Profile table {profile_file} has no header")
    return header.split('\t')[1:]


def check_locus_alignment(master_file, new_loci: Sequence[str]) -> int:
    """Make sure the new genome's loci match the master table's columns.

    Parameters:
        master_file: Master profile table (only its header is read)
        new_loci: Locus names from the new genome's allele calls

    Returns:
        int: Number of shared loci

    Raises:
        ClusterStageError: If the locus sets differ
    """
    master_loci = read_profile_loci(master_file)
    master_set, new_set = set(master_loci), set(new_loci)
    if master_set != new_set:
        only_master = sorted(master_set - new_set)
        only_new = sorted(new_set - master_set)
        raise ClusterStageError(
            f"Locus set of new genome does not match master table {master_file}: "
            f"{len(only_master)} loci only in master (e.g. {only_master[:3]}), "
            f"{len(only_new)} only in new genome (e.g. {only_new[:3]})"
        )
    return len(master_loci)


def _clean_locus_column(col: pd.Series) -> pd.Series:
    # INF-<n> is a called allele that was not added to the schema; keep its id
    col = col.str.strip().str.replace(r'^INF-', '', regex=True)
    valid = col.str.fullmatch(r'0*[1-9]\d*')
    col = col.where(valid, MISSING_TOKEN).str.lstrip('0')
    return col.where(col != '', MISSING_TOKEN)


def clean_allelic_profile(profile_file, output_file=None) -> Path:
    """Rewrite a joined profile table into the shape pHierCC expects.

    - identifier column kept as is
    - extra header columns starting with '#' dropped
    - ``INF-`` prefixes stripped from allele ids
    - any token that is not a positive integer becomes ``0`` (missing)

    Parameters:
        profile_file: Joined profile table
        output_file: Destination; defaults to ``<stem>_clean.tsv`` beside the input

    Returns:
        Path: The cleaned table
    """
    profile_file = Path(profile_file)
    if output_file is None:
        output_file = profile_file.with_name(profile_file.stem + '_clean.tsv')
    output_file = Path(output_file)

    try:
        df = pd.read_csv(profile_file, sep='\t', dtype=str, na_filter=False)
    except (OSError, ValueError) as e:
        raise ClusterStageError(f"Cannot parse profile table {profile_file}: {e}") from e
    if df.shape[1] < 2:
        raise ClusterStageError(f"Profile table {profile_file} has no locus columns")

    keep = [i == 0 or not str(c).startswith('#') for i, c in enumerate(df.columns)]
    df = df.loc[:, keep].copy()
    id_col, loci = df.columns[0], list(df.columns[1:])

    df[loci] = df[loci].apply(_clean_locus_column)

    n_missing = int(np.sum(df[loci].to_numpy() == MISSING_TOKEN))
    df.to_csv(output_file, sep='\t', index=False)
    console.print(f"  Cleaned {len(df)} profiles x {len(loci)} loci ({n_missing:,} missing calls) -> {output_file}")
    if df[id_col].duplicated().any():
        console.print(f"  [yellow]⚠[/yellow] Duplicate identifiers in {output_file}")
    return output_file


__all__ = ['MISSING_TOKEN', 'read_profile_loci', 'check_locus_alignment', 'clean_allelic_profile']
