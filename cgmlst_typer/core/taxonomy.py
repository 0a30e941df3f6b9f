"""Lineage lookup against the BV-BRC taxonomy collection."""

from dataclasses import dataclass, field
from typing import List, Optional

import requests
from rich.console import Console

from cgmlst_typer.errors import TaxonomyError

console = Console(stderr=True)

DEFAULT_TAXONOMY_URL = 'https://www.bv-brc.org/api/taxonomy/'


@dataclass(frozen=True)
class Lineage:
    """Ancestry of a taxon, ordered from most general to most specific."""

    taxon_id: int
    taxon_name: str = ''
    ids: List[int] = field(default_factory=list)
    names: List[str] = field(default_factory=list)


class TaxonomyClient:
    """Small client for the taxonomy REST collection."""

    def __init__(self, base_url: str = DEFAULT_TAXONOMY_URL, timeout: float = 60.0,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def lineage(self, taxon_id) -> Lineage:
        """Fetch the lineage of ``taxon_id``.

        An unknown taxon gives an empty lineage rather than an error, so the
        caller ends up in the regular "no schema available" branch.

        Raises:
            TaxonomyError: On connection failure, HTTP error or a malformed reply
        """
        taxon_id = int(taxon_id)
        query = f'eq(taxon_id,{taxon_id})&select(taxon_name,lineage_ids,lineage_names)'
        url = f'{self.base_url}?{query}'
        try:
            response = self.session.get(url, headers={'Accept': 'application/json'}, timeout=self.timeout)
            response.raise_for_status()
            rows = response.json()
        except requests.RequestException as e:
            raise TaxonomyError(f"Taxonomy lookup failed for taxon {taxon_id}: {e}") from e
        except ValueError as e:
            raise TaxonomyError(f"Taxonomy service returned invalid JSON for taxon {taxon_id}") from e

        if not isinstance(rows, list):
            raise TaxonomyError(f"Unexpected taxonomy reply for taxon {taxon_id}: {rows!r}")
        if not rows:
            console.print(f"  [yellow]⚠[/yellow] Taxon {taxon_id} not found in taxonomy service")
            return Lineage(taxon_id=taxon_id)

        row = rows[0]
        try:
            ids = [int(t) for t in row.get('lineage_ids') or []]
        except (TypeError, ValueError) as e:
            raise TaxonomyError(f"Non-numeric lineage id for taxon {taxon_id}") from e
        return Lineage(
            taxon_id=taxon_id,
            taxon_name=row.get('taxon_name', ''),
            ids=ids,
            names=list(row.get('lineage_names') or []),
        )


def parse_lineage(text: str) -> List[int]:
    """Parse a comma-separated lineage given on the command line."""
    text = (text or '').strip()
    if not text:
        return []
    try:
        return [int(tok) for tok in text.split(',') if tok.strip()]
    except ValueError as e:
        raise TaxonomyError(f"Invalid lineage {text!r}: taxon ids must be integers") from e


__all__ = ['DEFAULT_TAXONOMY_URL', 'Lineage', 'TaxonomyClient', 'parse_lineage']
