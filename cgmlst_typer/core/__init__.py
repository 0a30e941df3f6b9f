"""Core building blocks for single-genome cgMLST typing.

Submodules:
- schemas: Taxon -> allele-calling schema map and lineage resolution
- taxonomy: Lineage lookup against the taxonomy service
- genome: Genome container (GTO) reading, writing and event/typing append
- alleles: Allele-call matrix parsing into tagged calls
- quality: Exact-match quality gate
- records: Analysis events and typing records
- tools: External tool descriptors and the shared runner
"""

__all__ = ['schemas', 'taxonomy', 'genome', 'alleles', 'quality', 'records', 'tools']
