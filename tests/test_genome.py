import json

import pytest
from Bio import SeqIO

from cgmlst_typer.core.genome import GenomeTypeObject
from cgmlst_typer.errors import GenomeError


GTO = {
    "id": "1280.5001",
    "ncbi_taxonomy_id": 1280,
    "scientific_name": "Staphylococcus aureus",
    "contigs": [
        {"id": "contig_1", "dna": "ACGTACGTAA"},
        {"id": "contig_2", "dna": "GGGCCCTTTA"},
    ],
}


def test_read_write_roundtrip_preserves_unknown_fields(tmp_path):
    src = tmp_path / "in.gto"
    src.write_text(json.dumps(GTO))
    genome = GenomeTypeObject.from_file(src)
    assert genome.id == "1280.5001"
    assert genome.taxonomy_id == 1280

    out = tmp_path / "out.gto"
    genome.write(out)
    data = json.loads(out.read_text())
    assert data["scientific_name"] == "Staphylococcus aureus"


def test_invalid_json(tmp_path):
    src = tmp_path / "bad.gto"
    src.write_text("{not json")
    with pytest.raises(GenomeError):
        GenomeTypeObject.from_file(src)


def test_write_contigs(tmp_path):
    genome = GenomeTypeObject(json.loads(json.dumps(GTO)))
    fasta = tmp_path / "fastas" / "input.fasta"
    assert genome.write_contigs_to_file(fasta) == 2
    records = list(SeqIO.parse(str(fasta), "fasta"))
    assert [r.id for r in records] == ["contig_1", "contig_2"]
    assert str(records[1].seq) == "GGGCCCTTTA"


def test_no_contigs(tmp_path):
    genome = GenomeTypeObject({"id": "x"})
    with pytest.raises(GenomeError):
        genome.write_contigs_to_file(tmp_path / "x.fasta")


def test_event_ids_are_reproducible():
    first = GenomeTypeObject(json.loads(json.dumps(GTO)))
    second = GenomeTypeObject(json.loads(json.dumps(GTO)))
    e1 = first.add_analysis_event({"tool_name": "t", "execution_time": 1.0})
    e2 = second.add_analysis_event({"tool_name": "t", "execution_time": 2.0})
    assert e1 == e2
    e3 = first.add_analysis_event({"tool_name": "t"})
    assert e3 != e1
    assert [e["id"] for e in first.analysis_events] == [e1, e3]


def test_taxonomy_id_parsing():
    assert GenomeTypeObject({"ncbi_taxonomy_id": "573"}).taxonomy_id == 573
    assert GenomeTypeObject({}).taxonomy_id is None
    with pytest.raises(GenomeError):
        GenomeTypeObject({"ncbi_taxonomy_id": "abc"}).taxonomy_id
