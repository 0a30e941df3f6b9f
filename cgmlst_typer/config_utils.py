"""Configuration validation, summary printing and the backend filesystem layout."""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from rich.console import Console

from cgmlst_typer.errors import ConfigError

console = Console(stderr=True)


@dataclass(frozen=True)
class BackendLayout:
    """Where schemas, cluster archives and master profile tables live.

    Everything under the backend root is read-only for the pipeline.
    """

    backend_dir: Path
    refs_dir: Optional[Path] = None
    master_table_date: str = '11_25_2025'

    def __post_init__(self):
        object.__setattr__(self, 'backend_dir', Path(self.backend_dir))
        refs = Path(self.refs_dir) if self.refs_dir else self.cgmlst_root / 'refs'
        object.__setattr__(self, 'refs_dir', refs)

    @property
    def cgmlst_root(self) -> Path:
        return self.backend_dir / 'CoreGenomeMLST'

    def schema_dir(self, schema: str) -> Path:
        return self.cgmlst_root / 'chewbbaca_schemas' / schema

    def cluster_archive(self, schema: str) -> Path:
        return self.cgmlst_root / 'precomputed_clusters' / f'{schema.lower()}.cgMLSTv1.npz'

    def master_table(self, schema: str) -> Path:
        return self.refs_dir / f'{schema}_{self.master_table_date}_joined.tsv'


def validate_config(config):
    """Validate a TypingConfig object.

    Parameters:
        config: TypingConfig instance

    Raises:
        ConfigError: If configuration is invalid
    """
    errors = []

    # dry run never touches backend files
    if not config.dry_run:
        if not config.backend_dir:
            errors.append("backend_dir is required (--backend-dir or CGMLST_BACKEND_DIR)")
        elif not Path(config.backend_dir).is_dir():
            errors.append(f"Backend directory not found: {config.backend_dir}")

    for name in ('qc_threshold', 'cluster_threshold'):
        value = getattr(config, name)
        if not 0 <= value <= 100:
            errors.append(f"{name} must be between 0 and 100 (got {value})")

    if config.cluster_threshold < config.qc_threshold:
        console.print("[yellow]⚠[/yellow] cluster_threshold is below qc_threshold; "
                      "genomes failing QC will still not be clustered")

    if not config.hc_levels:
        errors.append("hc_levels must name at least one HC level")
    elif any(lv < 0 for lv in config.hc_levels):
        errors.append("hc_levels must be >= 0")

    if config.cpu < 1:
        errors.append("cpu must be >= 1")

    if not config.sentinel_id:
        errors.append("sentinel_id must not be empty")

    if errors:
        console.print("[bold red]Configuration Errors:[/bold red]")
        for error in errors:
            console.print(f"  ✗ {error}")
        raise ConfigError(f"Invalid configuration: {len(errors)} error(s): " + '; '.join(errors))

    console.print("[green]✓[/green] Configuration validated")


def print_config_summary(config):
    """Print a summary of the configuration."""
    layout = config.layout()
    console.print("\n[bold]Configuration Summary:[/bold]")
    console.print(f"  Backend: {layout.backend_dir}")
    console.print(f"  Master tables: {layout.refs_dir} (date {layout.master_table_date})")
    console.print("\n  [bold]Quality gate:[/bold]")
    console.print(f"    qc_threshold: {config.qc_threshold}%")
    console.print(f"    cluster_threshold: {config.cluster_threshold}%")
    console.print("\n  [bold]Clustering:[/bold]")
    console.print(f"    hc_levels: {', '.join(str(lv) for lv in config.hc_levels)}")
    console.print(f"    sentinel: {config.sentinel_id}")
    console.print("\n  [bold]General:[/bold]")
    console.print(f"    cpu: {config.cpu}")
    console.print(f"    scratch: {config.scratch_dir or 'temporary directory'}")
    console.print(f"    dry_run: {config.dry_run}")


__all__ = [
    'BackendLayout',
    'validate_config',
    'print_config_summary',
]
