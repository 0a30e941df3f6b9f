"""Command-line entry point: type one genome container with cgMLST + HierCC."""

import argparse
import os
import sys

from rich.console import Console
from rich.markup import escape

from cgmlst_typer import __version__
from cgmlst_typer.config_utils import validate_config, print_config_summary
from cgmlst_typer.core.genome import GenomeTypeObject
from cgmlst_typer.core.taxonomy import DEFAULT_TAXONOMY_URL, parse_lineage
from cgmlst_typer.errors import TypingError
from cgmlst_typer.main import DEFAULT_HC_LEVELS, TypingConfig, run_pipeline

console = Console(stderr=True)


def _int_list(text):
    try:
        return tuple(int(tok) for tok in text.split(',') if tok.strip())
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected comma-separated integers, got {text!r}")


def build_parser():
    parser = argparse.ArgumentParser(
        prog='compute-cgmlst',
        description="Compute cgMLST allele calls and HierCC cluster levels for a genome object",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  compute-cgmlst -i genome.gto -o genome.typed.gto --backend-dir /data/backend
  compute-cgmlst < genome.gto > typed.gto --lineage 2,1239,1280
  compute-cgmlst -i genome.gto -o out.gto --dry-run
        """,
    )
    parser.add_argument('-i', '--in', dest='input', default=None, help="Input GTO (default: stdin)")
    parser.add_argument('-o', '--out', dest='output', default=None, help="Output GTO (default: stdout)")
    parser.add_argument('--parallel', type=int, default=4, help="Threads for allele calling (default: 4)")
    parser.add_argument('-n', '--dry-run', '--dry_run', dest='dry_run', action='store_true',
                        help="Print commands without executing them")
    parser.add_argument('--backend-dir', default=os.environ.get('CGMLST_BACKEND_DIR'),
                        help="Backend root holding CoreGenomeMLST/ (default: $CGMLST_BACKEND_DIR; optional with --dry-run)")
    parser.add_argument('--refs-dir', default=None,
                        help="Directory of master profile tables (default: <backend>/CoreGenomeMLST/refs)")
    parser.add_argument('--master-date', default='11_25_2025', help="Date tag of master profile tables")
    parser.add_argument('--qc-threshold', type=float, default=70.0,
                        help="Minimum %% exact allele matches for a good QC verdict (default: 70)")
    parser.add_argument('--cluster-threshold', type=float, default=85.0,
                        help="Minimum %% exact allele matches for cluster assignment (default: 85)")
    parser.add_argument('--hc-levels', type=_int_list, default=DEFAULT_HC_LEVELS,
                        help="Comma-separated HC levels to record (default: 0,2,5,10,20,50,100)")
    parser.add_argument('--lineage', default=None,
                        help="Comma-separated lineage taxon ids; skips the taxonomy service")
    parser.add_argument('--taxonomy-url', default=DEFAULT_TAXONOMY_URL, help="Taxonomy service base URL")
    parser.add_argument('--scratch-dir', default=None, help="Scratch directory (default: new temp dir)")
    parser.add_argument('--keep-scratch', action='store_true', help="Keep the temporary scratch directory")
    parser.add_argument('--chewbbaca', default='chewBBACA.py', help="chewBBACA executable")
    parser.add_argument('--phiercc', default='pHierCC', help="pHierCC executable")
    parser.add_argument('-v', '--verbose', action='store_true', help="Show configuration and tracebacks")
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        lineage = parse_lineage(args.lineage) if args.lineage is not None else None
        config = TypingConfig(
            backend_dir=args.backend_dir,
            refs_dir=args.refs_dir,
            master_table_date=args.master_date,
            qc_threshold=args.qc_threshold,
            cluster_threshold=args.cluster_threshold,
            hc_levels=args.hc_levels,
            chewbbaca=args.chewbbaca,
            phiercc=args.phiercc,
            cpu=args.parallel,
            taxonomy_url=args.taxonomy_url,
            lineage=lineage,
            scratch_dir=args.scratch_dir,
            keep_scratch=args.keep_scratch,
            dry_run=args.dry_run,
            verbose=args.verbose,
        )
        validate_config(config)
        if args.verbose:
            print_config_summary(config)

        genome = GenomeTypeObject.from_file(args.input)
        run_pipeline(config, genome)
        genome.write(args.output)
    except TypingError as e:
        console.print(f"\n✗ {escape(str(e))}", style="bold red")
        return 1

    console.print("\n✓ Finished")
    return 0


if __name__ == '__main__':
    sys.exit(main())
