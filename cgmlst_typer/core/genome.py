"""Genome container (GTO) access.

A GTO is a JSON document holding the genome's contigs, its NCBI taxonomy id
and append-only lists of analysis events and typing results. Only the parts
the typing pipeline touches are modelled; everything else is carried through
untouched.
"""

import json
import sys
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional

from Bio import SeqIO
from Bio.Seq import Seq
from Bio.SeqRecord import SeqRecord

from cgmlst_typer.errors import GenomeError

EVENT_NAMESPACE = uuid.UUID('6f1d4c52-8a7e-4f0b-9a0e-2b3f6c1d7e90')


class GenomeTypeObject:
    """Thin wrapper around a GTO dictionary."""

    def __init__(self, data: Dict[str, Any]):
        if not isinstance(data, dict):
            raise GenomeError("Genome object must be a JSON object")
        self.data = data

    @classmethod
    def from_file(cls, path=None) -> 'GenomeTypeObject':
        """Load a GTO from ``path``, or from standard input when path is None."""
        source = str(path) if path else 'standard input'
        try:
            if path:
                with open(path) as fh:
                    data = json.load(fh)
            else:
                data = json.load(sys.stdin)
        except (OSError, ValueError) as e:
            raise GenomeError(f"Error reading GTO from {source}: {e}") from e
        return cls(data)

    def write(self, path=None):
        """Serialize to ``path``, or to standard output when path is None."""
        if path:
            with open(path, 'w') as fh:
                json.dump(self.data, fh, indent=2)
                fh.write('\n')
        else:
            json.dump(self.data, sys.stdout, indent=2)
            sys.stdout.write('\n')

    @property
    def id(self) -> str:
        return str(self.data.get('id', ''))

    @property
    def taxonomy_id(self) -> Optional[int]:
        tid = self.data.get('ncbi_taxonomy_id')
        if tid in (None, ''):
            return None
        try:
            return int(tid)
        except (TypeError, ValueError) as e:
            raise GenomeError(f"Invalid ncbi_taxonomy_id: {tid!r}") from e

    @property
    def contigs(self) -> List[Dict[str, Any]]:
        return self.data.get('contigs') or []

    @property
    def analysis_events(self) -> List[Dict[str, Any]]:
        return self.data.setdefault('analysis_events', [])

    @property
    def typing(self) -> List[Dict[str, Any]]:
        return self.data.setdefault('typing', [])

    def write_contigs_to_file(self, path) -> int:
        """Write all contigs as FASTA; returns the number of records written."""
        if not self.contigs:
            raise GenomeError(f"Genome {self.id or '<unnamed>'} has no contigs")
        records = (
            SeqRecord(Seq(c.get('dna', '')), id=str(c.get('id', f'contig_{i + 1}')), description='')
            for i, c in enumerate(self.contigs)
        )
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        return SeqIO.write(records, str(path), 'fasta')

    def add_analysis_event(self, event: Dict[str, Any]) -> str:
        """Append an analysis event and return its identifier.

        The identifier depends only on the genome id, the tool name and the
        event's position, so rerunning with the same input reproduces it.
        """
        events = self.analysis_events
        key = f"{self.id}:{event.get('tool_name', '')}:{len(events)}"
        event_id = str(uuid.uuid5(EVENT_NAMESPACE, key))
        events.append({**event, 'id': event_id})
        return event_id

    def add_typing(self, record: Dict[str, Any]):
        self.typing.append(record)


__all__ = ['GenomeTypeObject']
