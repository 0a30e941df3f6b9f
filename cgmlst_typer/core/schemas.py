"""Taxon to cgMLST schema mapping and lineage-based schema resolution."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional

from rich.console import Console

console = Console(stderr=True)


# Schema directory name -> NCBI taxon id. Several schemas may share a taxon
# (e.g. the two B. mallei schemes); see SchemaMap.from_schema_taxa.
SCHEMA_TAXA: Dict[str, int] = {
    'acinetobacter_baumannii': 470,
    'bacillus_anthracis': 1392,
    'bordetella_pertussis': 520,
    'brucella_abortus': 235,
    'brucella_canis': 36855,
    'brucella_ceti': 120577,
    'brucella_inopinata': 1218315,
    'brucella_melitensis': 29459,
    'brucella_microti': 444163,
    'brucella_neotomae': 29460,
    'brucella_ovis': 236,
    'brucella_pinnipedialis': 120576,
    'brucella_suis': 29461,
    'burkholderia_mallei_fli': 13373,
    'burkholderia_mallei_rki': 13373,
    'burkholderia_pseudomallei': 111527,
    'campylobacter_coli': 197,
    'campylobacter_jejuni': 195,
    'clostridioides_difficile': 1496,
    'clostridium_perfringens': 1502,
    'corynebacterium_diphtheriae': 1717,
    'corynebacterium_pseudotuberculosis': 1719,
    'cronobacter_malonaticus': 413503,
    'cronobacter_sakazakii': 28141,
    'enterococcus_faecalis': 1351,
    'enterococcus_faecium': 1352,
    'escherichia_coli': 562,
    'francisella_tularensis': 263,
    'klebsiella_grimontii': 2058152,
    'klebsiella_michiganensis': 1134687,
    'klebsiella_oxytoca': 571,
    'klebsiella_pasteurii': 2587529,
    'klebsiella_pneumoniae': 573,
    'klebsiella_quasipneumoniae': 1463165,
    'klebsiella_variicola': 244366,
    'legionella_pneumophila': 446,
    'listeria_monocytogenes': 1639,
    'mycobacterium_africanum': 33894,
    'mycobacterium_bovis': 1765,
    'mycobacterium_canettii': 78331,
    'mycobacterium_tuberculosis': 77643,
    'mycobacteroides_abscessus': 36809,
    'mycoplasma_gallisepticum': 2096,
    'paenibacillus_larvae': 1464,
    'proteus_mirabilis': 584,
    'providencia_stuartii': 588,
    'pseudomonas_aeruginosa': 287,
    'Salmonella_enterica': 28901,
    'serratia_marcescens': 615,
    'staphylococcus_argenteus': 985002,
    'staphylococcus_aureus': 1280,
    'staphylococcus_capitis': 29388,
    'streptococcus_pyogenes': 1314,
    'yersinia_enterocolitica': 630,
}


@dataclass(frozen=True)
class SchemaMap:
    """Immutable taxon id -> schema name lookup.

    Build it once at startup and pass it to the resolver; it is never
    mutated afterwards.
    """

    by_taxon: Mapping[int, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'by_taxon', MappingProxyType(
            {int(taxon): str(name) for taxon, name in dict(self.by_taxon).items()}
        ))

    @classmethod
    def from_schema_taxa(cls, schema_taxa: Mapping[str, int]) -> 'SchemaMap':
        """Invert a schema -> taxon table.

        When several schemas are bound to the same taxon, the alphabetically
        first schema name wins so the result does not depend on dict order.
        """
        by_taxon: Dict[int, str] = {}
        for name in sorted(schema_taxa):
            by_taxon.setdefault(int(schema_taxa[name]), name)
        return cls(by_taxon)

    def __len__(self) -> int:
        return len(self.by_taxon)

    def get(self, taxon_id) -> Optional[str]:
        return self.by_taxon.get(taxon_id)


DEFAULT_SCHEMA_MAP = SchemaMap.from_schema_taxa(SCHEMA_TAXA)


def resolve_schema(lineage: Optional[Iterable[int]], schema_map: SchemaMap) -> Optional[str]:
    """Pick the allele-calling schema for a genome from its lineage.

    Parameters:
        lineage: Taxon ids ordered from most general to most specific, or None
        schema_map: SchemaMap to look ids up in

    Returns:
        str or None: Schema bound to the most specific lineage taxon present
        in the map, or None when no lineage taxon is mapped.
    """
    if not lineage:
        return None
    for taxon_id in reversed(list(lineage)):
        name = schema_map.get(int(taxon_id))
        if name is not None:
            console.print(f"  Schema [bold]{name}[/bold] matched at taxon {int(taxon_id)}")
            return name
    return None


__all__ = ['SCHEMA_TAXA', 'SchemaMap', 'DEFAULT_SCHEMA_MAP', 'resolve_schema']
