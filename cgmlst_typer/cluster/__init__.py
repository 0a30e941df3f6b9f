"""Cluster assignment of a newly typed genome against precomputed HierCC results.

Submodules:
- profiles: Profile-table header checks and cleaning for pHierCC
- hiercc: HierCC output decompression and level extraction
- stage: The conditional cluster stage
"""

__all__ = ['profiles', 'hiercc', 'stage']
