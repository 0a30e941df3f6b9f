"""cgmlst-typer pipeline - main orchestrator

Five-step single-genome typing pipeline:
1. Schema resolution from the genome's lineage
2. Allele calling against the resolved schema
3. Quality gate on the exact-match fraction
4. Cluster assignment (only for cluster-eligible genomes)
5. Typing record and analysis event appended to the genome
"""
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from rich.console import Console
from rich.markup import escape

from cgmlst_typer.config_utils import BackendLayout
from cgmlst_typer.core.alleles import AlleleCallVector, read_allele_calls
from cgmlst_typer.core.genome import GenomeTypeObject
from cgmlst_typer.core.quality import QCResult, Verdict, evaluate_quality
from cgmlst_typer.core.records import AnalysisEvent, TypingRecord, build_typing_record
from cgmlst_typer.core.schemas import DEFAULT_SCHEMA_MAP, SchemaMap, resolve_schema
from cgmlst_typer.core.taxonomy import DEFAULT_TAXONOMY_URL, TaxonomyClient
from cgmlst_typer.core.tools import ToolRunner, allele_call_command
from cgmlst_typer.cluster.stage import ClusterStage
from cgmlst_typer.errors import AlleleCallError

console = Console(stderr=True)

DEFAULT_HC_LEVELS = (0, 2, 5, 10, 20, 50, 100)
UNSET_BACKEND_DIR = '$CGMLST_BACKEND_DIR'
DRY_RUN_LOCI = 10


@dataclass
class TypingConfig:
    """Configuration for the typing pipeline."""

    # Required
    backend_dir: Optional[str]

    # Backend layout
    refs_dir: Optional[str] = None
    master_table_date: str = '11_25_2025'

    # Quality gate (percent of loci with an exact allele match)
    qc_threshold: float = 70.0
    cluster_threshold: float = 85.0

    # Clustering
    hc_levels: Tuple[int, ...] = DEFAULT_HC_LEVELS
    sentinel_id: str = 'input'

    # External tools
    chewbbaca: str = 'chewBBACA.py'
    phiercc: str = 'pHierCC'
    cpu: int = 4

    # Taxonomy; an explicit lineage bypasses the service
    taxonomy_url: str = DEFAULT_TAXONOMY_URL
    lineage: Optional[List[int]] = None

    # General
    scratch_dir: Optional[str] = None
    keep_scratch: bool = False
    dry_run: bool = False
    verbose: bool = False

    def layout(self) -> BackendLayout:
        return BackendLayout(Path(self.backend_dir or UNSET_BACKEND_DIR), self.refs_dir, self.master_table_date)


def dry_run_vector(sentinel_id: str) -> AlleleCallVector:
    """Placeholder calls used when no allele caller is run."""
    loci = [f'dry_run_locus_{i + 1}' for i in range(DRY_RUN_LOCI)]
    return AlleleCallVector.from_tokens(sentinel_id, loci, ['1'] * DRY_RUN_LOCI)


class TypingPipeline:
    """Main orchestrator for the typing of one genome."""

    def __init__(self, config: TypingConfig, genome: GenomeTypeObject,
                 schema_map: SchemaMap = DEFAULT_SCHEMA_MAP,
                 taxonomy: Optional[TaxonomyClient] = None,
                 runner: Optional[ToolRunner] = None):
        self.config = config
        self.genome = genome
        self.schema_map = schema_map
        self.taxonomy = taxonomy
        self.runner = runner or ToolRunner(dry_run=config.dry_run)
        self.layout = config.layout()
        self.scratch: Optional[Path] = None
        self._own_scratch = False

        self.results: Dict[str, Any] = {
            'step_1_schema': {},
            'step_2_allele_call': {},
            'step_3_quality': {},
            'step_4_cluster': {},
            'step_5_record': {},
        }

    def run(self) -> Optional[TypingRecord]:
        """Execute the pipeline.

        Returns:
            TypingRecord appended to the genome, or None when no schema
            covers the genome's lineage.
        """
        console.print("[bold cyan]═══════════════════════════════════════════════════════════[/bold cyan]")
        console.print(f"[bold cyan]cgMLST typing - genome {self.genome.id or '<unnamed>'}[/bold cyan]")
        console.print("[bold cyan]═══════════════════════════════════════════════════════════[/bold cyan]\n")

        try:
            schema = self._step_1_resolve_schema()
            if schema is None:
                console.print("[yellow]Schema does not exist for this species[/yellow]")
                return None

            self._prepare_scratch()
            vector = self._step_2_allele_call(schema)
            qc = self._step_3_quality_gate(vector)
            levels = None
            if qc.cluster_eligible and qc.verdict is Verdict.GOOD:
                levels = self._step_4_cluster(schema, vector)
            else:
                console.print("\n[bold]STEP 4: Cluster Assignment[/bold] - skipped "
                              f"({qc.percent_exact:.1f}% < {self.config.cluster_threshold}% or QC {qc.verdict.value})")
            record = self._step_5_typing_record(schema, vector, qc, levels)

            console.print("\n[bold green]✓[/bold green] Typing completed successfully!")
            self._cleanup_scratch()
            return record

        except Exception as e:
            console.print(f"\n[bold red]✗[/bold red] Pipeline failed: {escape(str(e))}")
            if self.scratch is not None:
                console.print(f"  Intermediate files kept in {self.scratch}")
            if self.config.verbose:
                console.print_exception()
            raise

    def _lineage(self) -> List[int]:
        if self.config.lineage is not None:
            return list(self.config.lineage)
        taxon_id = self.genome.taxonomy_id
        if taxon_id is None:
            console.print("  [yellow]⚠[/yellow] Genome has no ncbi_taxonomy_id")
            return []
        client = self.taxonomy or TaxonomyClient(self.config.taxonomy_url)
        lineage = client.lineage(taxon_id)
        if lineage.taxon_name:
            console.print(f"  Taxon {taxon_id}: {lineage.taxon_name}")
        if lineage.names:
            console.print(f"  Lineage names: {' > '.join(lineage.names)}")
        return lineage.ids

    def _step_1_resolve_schema(self) -> Optional[str]:
        """Step 1: Resolve the allele-calling schema from the lineage."""
        console.print("\n[bold]STEP 1: Schema Resolution[/bold]")
        console.print("─" * 60)

        lineage = self._lineage()
        console.print(f"  Lineage: {', '.join(str(t) for t in lineage) or '<empty>'}")
        schema = resolve_schema(lineage, self.schema_map)
        console.print(f"  dir_name: {schema}")

        self.results['step_1_schema'] = {'lineage': lineage, 'schema': schema}
        return schema

    def _prepare_scratch(self):
        if self.config.scratch_dir:
            self.scratch = Path(self.config.scratch_dir)
            self.scratch.mkdir(parents=True, exist_ok=True)
        else:
            self.scratch = Path(tempfile.mkdtemp(prefix='cgmlst_'))
            self._own_scratch = True
        console.print(f"  Scratch directory: {self.scratch}")

    def _cleanup_scratch(self):
        if self._own_scratch and not self.config.keep_scratch and self.scratch is not None:
            shutil.rmtree(self.scratch, ignore_errors=True)

    def _step_2_allele_call(self, schema: str) -> AlleleCallVector:
        """Step 2: Call alleles for the genome against the schema."""
        console.print("\n[bold]STEP 2: Allele Calling[/bold]")
        console.print("─" * 60)

        sentinel = self.config.sentinel_id
        fasta_dir = self.scratch / 'clean_fastas'
        n_contigs = self.genome.write_contigs_to_file(fasta_dir / f'{sentinel}.fasta')
        console.print(f"  Wrote {n_contigs} contigs to {fasta_dir}")

        out_dir = self.scratch / 'new_genomes_allele_call'
        command = allele_call_command(
            self.config.chewbbaca, fasta_dir, self.layout.schema_dir(schema), out_dir, self.config.cpu,
        )
        self.runner.run(command)

        calls_file = self.runner.require(out_dir / 'results_alleles.tsv', 'Allele Call', AlleleCallError)
        vector = self.runner.call('parse of allele calls', read_allele_calls, calls_file,
                                  placeholder=dry_run_vector(sentinel))
        if vector.sample_id != sentinel:
            console.print(f"  [yellow]⚠[/yellow] Allele call row is {vector.sample_id!r}, expected {sentinel!r}")
        console.print(f"  {len(vector)} loci called")

        self.results['step_2_allele_call'] = {
            'command': command,
            'calls_file': calls_file,
            'vector': vector,
        }
        return vector

    def _step_3_quality_gate(self, vector: AlleleCallVector) -> QCResult:
        """Step 3: Exact-match quality gate."""
        console.print("\n[bold]STEP 3: Quality Gate[/bold]")
        console.print("─" * 60)

        qc = evaluate_quality(vector, self.config.qc_threshold, self.config.cluster_threshold)
        console.print(f"  QC verdict: {qc.verdict.value} (threshold {self.config.qc_threshold}%)")
        console.print(f"  Cluster eligible: {qc.cluster_eligible} (threshold {self.config.cluster_threshold}%)")

        self.results['step_3_quality'] = qc
        return qc

    def _step_4_cluster(self, schema: str, vector: AlleleCallVector) -> Dict[str, int]:
        """Step 4: Merge into the precomputed clusters and read back HC levels."""
        console.print("\n[bold]STEP 4: Cluster Assignment[/bold]")
        console.print("─" * 60)

        stage = ClusterStage(
            self.runner, self.layout, self.scratch,
            chewbbaca=self.config.chewbbaca,
            phiercc=self.config.phiercc,
            sentinel_id=self.config.sentinel_id,
            hc_levels=self.config.hc_levels,
        )
        levels = stage.run(schema, self.results['step_2_allele_call']['calls_file'], vector)

        self.results['step_4_cluster'] = levels
        return levels

    def _step_5_typing_record(self, schema, vector, qc, levels) -> TypingRecord:
        """Step 5: Record the analysis event and typing result on the genome."""
        console.print("\n[bold]STEP 5: Typing Record[/bold]")
        console.print("─" * 60)

        command = self.results['step_2_allele_call']['command']
        event = AnalysisEvent.now(command.argv)
        record = build_typing_record(self.genome, event, schema, vector, qc, levels)
        console.print(f"  {record.loci_called} / {record.loci_total} loci called ({record.pct_called:.1f}%), "
                      f"QC {record.qc_verdict}, event {record.event_id}")

        self.results['step_5_record'] = record
        return record


def run_pipeline(config: TypingConfig, genome: GenomeTypeObject, **kwargs) -> Optional[TypingRecord]:
    """Type one genome in place.

    Parameters:
        config: TypingConfig with pipeline settings
        genome: Genome container; the typing record is appended to it
        **kwargs: Passed to TypingPipeline (schema_map, taxonomy, runner)

    Returns:
        TypingRecord, or None when no schema is available
    """
    pipeline = TypingPipeline(config, genome, **kwargs)
    return pipeline.run()


__all__ = [
    'TypingConfig',
    'TypingPipeline',
    'dry_run_vector',
    'run_pipeline',
]
