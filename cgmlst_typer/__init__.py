"""cgmlst-typer: core-genome MLST typing and HierCC cluster assignment for a single genome."""

__version__ = "0.3.0"
