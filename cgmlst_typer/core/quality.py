"""Exact-match quality gate over a genome's allele calls."""

from dataclasses import dataclass
from enum import Enum

from rich.console import Console

from cgmlst_typer.core.alleles import AlleleCallVector

console = Console(stderr=True)


class Verdict(str, Enum):
    GOOD = 'good'
    POOR = 'poor'


@dataclass(frozen=True)
class QCResult:
    total_loci: int
    exact_matches: int
    percent_exact: float
    verdict: Verdict
    cluster_eligible: bool

    @property
    def missing(self) -> int:
        return self.total_loci - self.exact_matches


def percent_exact(exact: int, total: int) -> float:
    return 100.0 * exact / total if total > 0 else 0.0


def evaluate_quality(vector: AlleleCallVector, qc_threshold: float, cluster_threshold: float) -> QCResult:
    """Classify a call vector against the QC and clustering thresholds.

    The two thresholds are independent comparisons against the same
    percentage: a genome may pass QC and still not be eligible for
    clustering.

    Parameters:
        vector: Decoded allele calls
        qc_threshold: Minimum exact-match percentage for a ``good`` verdict
        cluster_threshold: Minimum exact-match percentage for cluster assignment

    Returns:
        QCResult
    """
    total = len(vector)
    exact = vector.exact_count
    pct = percent_exact(exact, total)
    result = QCResult(
        total_loci=total,
        exact_matches=exact,
        percent_exact=pct,
        verdict=Verdict.GOOD if pct >= qc_threshold else Verdict.POOR,
        cluster_eligible=pct >= cluster_threshold,
    )
    console.print(f"  Allele call check: {exact} / {total} loci ({pct:.1f}%) have exact allele matches")
    return result


__all__ = ['Verdict', 'QCResult', 'percent_exact', 'evaluate_quality']
