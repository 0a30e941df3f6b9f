"""Allele-call matrix parsing.

The allele caller writes a tab-separated matrix: a header naming the loci
and one row per input genome, the first column holding the input identifier.
Calls are decoded once into tagged values so downstream code never has to
re-interpret raw tokens.
"""

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence, Tuple

from cgmlst_typer.errors import AlleleCallError

EXACT_RE = re.compile(r'^\d+$')
INFERRED_RE = re.compile(r'^INF-(\d+)$')


class CallKind(Enum):
    EXACT = 'exact'
    INFERRED = 'inferred'
    NOVEL = 'novel'
    MISSING = 'missing'


@dataclass(frozen=True)
class AlleleCall:
    """One locus call: an exact allele id or a non-exact state with its raw token."""

    kind: CallKind
    raw: str
    allele_id: Optional[int] = None

    @property
    def is_exact(self) -> bool:
        return self.kind is CallKind.EXACT


def decode_call(token) -> AlleleCall:
    """Decode a raw call token.

    Only strictly positive integers are exact matches; ``0`` is a missing call.
    """
    raw = '' if token is None else str(token).strip()
    if EXACT_RE.match(raw):
        value = int(raw)
        if value > 0:
            return AlleleCall(CallKind.EXACT, raw, value)
        return AlleleCall(CallKind.MISSING, raw)
    m = INFERRED_RE.match(raw)
    if m:
        return AlleleCall(CallKind.INFERRED, raw, int(m.group(1)))
    if raw.startswith('*'):
        return AlleleCall(CallKind.NOVEL, raw)
    return AlleleCall(CallKind.MISSING, raw)


@dataclass(frozen=True)
class AlleleCallVector:
    """Per-locus calls for a single genome, in schema locus order."""

    sample_id: str
    loci: Tuple[str, ...]
    calls: Tuple[AlleleCall, ...]

    @classmethod
    def from_tokens(cls, sample_id: str, loci: Sequence[str], tokens: Sequence[str]) -> 'AlleleCallVector':
        if len(loci) != len(tokens):
            raise AlleleCallError(
                f"Allele call row for {sample_id!r} has {len(tokens)} calls but header names {len(loci)} loci"
            )
        return cls(sample_id, tuple(loci), tuple(decode_call(t) for t in tokens))

    def __len__(self) -> int:
        return len(self.calls)

    @property
    def exact_count(self) -> int:
        return sum(1 for c in self.calls if c.is_exact)

    def count(self, kind: CallKind) -> int:
        return sum(1 for c in self.calls if c.kind is kind)

    def call_string(self) -> str:
        """Comma-joined raw calls, identifier column excluded."""
        return ','.join(c.raw for c in self.calls)


def read_allele_calls(path) -> AlleleCallVector:
    """Read the header and the first data row of an allele-call matrix.

    Parameters:
        path: Path to the allele caller's ``results_alleles.tsv``

    Returns:
        AlleleCallVector: Calls of the first (and only) genome in the matrix

    Raises:
        AlleleCallError: If the file is missing, or the data row is absent or empty
    """
    path = Path(path)
    try:
        with open(path) as fh:
            header = fh.readline()
            data = fh.readline()
    except (OSError, UnicodeDecodeError) as e:
        raise AlleleCallError(f"Cannot read allele call output {path}: {e}") from e

    header = header.rstrip('\r\n')
    data = data.rstrip('\r\n')
    if not header:
        raise AlleleCallError(f"Allele call output {path} is empty")
    if not data.strip():
        raise AlleleCallError(f"Allele call output {path} has no data row")

    loci = header.split('\t')[1:]
    fields = data.split('\t')
    return AlleleCallVector.from_tokens(fields[0], loci, fields[1:])


__all__ = ['CallKind', 'AlleleCall', 'decode_call', 'AlleleCallVector', 'read_allele_calls']
