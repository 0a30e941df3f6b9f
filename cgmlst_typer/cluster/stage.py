"""Conditional cluster stage: add the new genome to a precomputed HierCC archive.

Canonical master tables and archives are only ever read. Each is first
copied into the run's scratch directory and every derived file is written
there.
"""

import shutil
from pathlib import Path
from typing import Dict, Sequence

from rich.console import Console

from cgmlst_typer.config_utils import BackendLayout
from cgmlst_typer.core.alleles import AlleleCallVector
from cgmlst_typer.core.tools import ToolRunner, join_profiles_command, hiercc_command
from cgmlst_typer.errors import ClusterStageError, ToolExecutionError
from cgmlst_typer.cluster.profiles import check_locus_alignment, clean_allelic_profile
from cgmlst_typer.cluster.hiercc import decompress_hiercc, read_hiercc_row, select_levels, hc_label

console = Console(stderr=True)


def borrow_snapshot(source, destination) -> Path:
    """Copy a read-only canonical file into scratch space."""
    return Path(shutil.copyfile(source, destination))


class ClusterStage:
    """Join, clean, cluster and extract HC levels for one genome."""

    def __init__(self, runner: ToolRunner, layout: BackendLayout, scratch_dir,
                 chewbbaca: str = 'chewBBACA.py', phiercc: str = 'pHierCC',
                 sentinel_id: str = 'input', hc_levels: Sequence[int] = (0, 2, 5, 10, 20, 50, 100)):
        self.runner = runner
        self.layout = layout
        self.scratch = Path(scratch_dir)
        self.chewbbaca = chewbbaca
        self.phiercc = phiercc
        self.sentinel_id = sentinel_id
        self.hc_levels = tuple(hc_levels)

        self.master_copy = self.scratch / 'master_copy.tsv'
        self.joined = self.scratch / 'master_joined.tsv'
        self.cleaned = self.scratch / 'master_joined_clean.tsv'
        self.local_archive = self.scratch / 'precomputed_clusters.npz'
        self.cluster_prefix = self.scratch / 'cluster'
        self.hiercc_gz = self.scratch / 'cluster.HierCC.gz'
        self.hiercc_tsv = self.scratch / 'cluster.HierCC'

    def run(self, schema: str, allele_calls_file, vector: AlleleCallVector) -> Dict[str, int]:
        """Run every step; any failure raises ClusterStageError.

        Returns:
            dict: HC label -> cluster id of the new genome, allowed levels only
        """
        try:
            return self._run(schema, allele_calls_file, vector)
        except (ToolExecutionError, OSError, ValueError) as e:
            raise ClusterStageError(f"Clustering failed: {e}") from e

    def _require(self, path, label):
        return self.runner.require(path, label, ClusterStageError)

    def _run(self, schema, allele_calls_file, vector):
        runner = self.runner
        req = self._require

        # 1. snapshot the master profile table
        master = req(self.layout.master_table(schema), 'Master profile table')
        runner.call('Copy Master Table', borrow_snapshot, master, self.master_copy)
        req(self.master_copy, 'Copy Master Table')

        # 2. join the new calls onto the snapshot
        runner.call('Locus alignment check', check_locus_alignment, self.master_copy, vector.loci)
        runner.run(join_profiles_command(self.chewbbaca, self.master_copy, allele_calls_file, self.joined))
        req(self.joined, 'Join Profiles')

        # 3. clean for pHierCC
        runner.call('Clean Allele Call', clean_allelic_profile, self.joined, self.cleaned)
        req(self.cleaned, 'Clean Allele Call')

        # 4. snapshot the cluster archive
        archive = req(self.layout.cluster_archive(schema), 'Precomputed clusters')
        runner.call('Copy Precomputed Clusters', borrow_snapshot, archive, self.local_archive)
        req(self.local_archive, 'Copy Precomputed Clusters')

        # 5. incremental HierCC against the copied archive
        runner.run(hiercc_command(self.phiercc, self.cleaned, self.cluster_prefix, self.local_archive))
        req(self.hiercc_gz, 'Cluster')

        # 6. locate the sentinel row
        runner.call('gunzip', decompress_hiercc, self.hiercc_gz, self.hiercc_tsv)
        row = runner.call(
            f'lookup of {self.sentinel_id} row', read_hiercc_row, self.hiercc_tsv, self.sentinel_id,
            placeholder={hc_label(lv): '0' for lv in self.hc_levels},
        )

        # 7. keep the allowed levels
        levels = select_levels(row, self.hc_levels)
        console.print("  Cluster key-value pairs:")
        for key, value in levels.items():
            console.print(f"    {key} => {value}")
        return levels


__all__ = ['ClusterStage', 'borrow_snapshot']
