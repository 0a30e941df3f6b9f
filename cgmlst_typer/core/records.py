"""Analysis events and typing records attached to the genome container."""

import socket
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from cgmlst_typer.core.alleles import AlleleCallVector
from cgmlst_typer.core.quality import QCResult

TOOL_NAME = 'p3x-compute-cgmlst'
TYPING_METHOD = 'sequence_typing'


@dataclass(frozen=True)
class AnalysisEvent:
    tool_name: str
    parameters: List[str]
    execution_time: float
    hostname: str

    @classmethod
    def now(cls, parameters, tool_name: str = TOOL_NAME) -> 'AnalysisEvent':
        return cls(
            tool_name=tool_name,
            parameters=[str(p) for p in parameters],
            execution_time=time.time(),
            hostname=socket.getfqdn(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'tool_name': self.tool_name,
            'parameters': list(self.parameters),
            'execution_time': self.execution_time,
            'hostname': self.hostname,
        }


@dataclass(frozen=True)
class TypingRecord:
    schema_name: str
    allele_call_string: str
    loci_total: int
    loci_called: int
    loci_missing: int
    pct_called: float
    qc_verdict: str
    event_id: str
    cluster_levels: Optional[Dict[str, int]] = None
    method: str = field(default=TYPING_METHOD)

    def to_dict(self) -> Dict[str, Any]:
        out = {
            'method': self.method,
            'schema_name': self.schema_name,
            'allele_call_string': self.allele_call_string,
            'loci_total': self.loci_total,
            'loci_called': self.loci_called,
            'loci_missing': self.loci_missing,
            'pct_called': self.pct_called,
            'qc_verdict': self.qc_verdict,
            'event_id': self.event_id,
        }
        if self.cluster_levels is not None:
            out['cluster_levels'] = dict(self.cluster_levels)
        return out


def build_typing_record(genome, event: AnalysisEvent, schema_name: str, vector: AlleleCallVector,
                        qc: QCResult, cluster_levels: Optional[Dict[str, int]] = None) -> TypingRecord:
    """Register ``event`` on the genome and append the matching typing record.

    Cluster levels are only accepted for genomes that passed QC and the
    clustering threshold.
    """
    if cluster_levels is not None and not (qc.cluster_eligible and qc.verdict == 'good'):
        raise ValueError("cluster levels given for a genome that is not cluster eligible")

    event_id = genome.add_analysis_event(event.to_dict())
    record = TypingRecord(
        schema_name=schema_name,
        allele_call_string=vector.call_string(),
        loci_total=qc.total_loci,
        loci_called=qc.exact_matches,
        loci_missing=qc.missing,
        pct_called=round(qc.percent_exact, 4),
        qc_verdict=qc.verdict.value,
        event_id=event_id,
        cluster_levels=dict(cluster_levels) if cluster_levels is not None else None,
    )
    genome.add_typing(record.to_dict())
    return record


__all__ = ['TOOL_NAME', 'TYPING_METHOD', 'AnalysisEvent', 'TypingRecord', 'build_typing_record']
