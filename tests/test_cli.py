import json

from cgmlst_typer.cli import main

GTO = {
    "id": "573.100",
    "ncbi_taxonomy_id": 573,
    "contigs": [{"id": "contig_1", "dna": "ACGTTGCA"}],
}


def _write_gto(tmp_path):
    src = tmp_path / "in.gto"
    src.write_text(json.dumps(GTO))
    return src


def test_dry_run_writes_typing(tmp_path):
    src = _write_gto(tmp_path)
    out = tmp_path / "out.gto"
    rc = main([
        "-i", str(src), "-o", str(out), "--dry-run",
        "--backend-dir", str(tmp_path / "backend"),
        "--lineage", "2,1224,570,573",
        "--hc-levels", "0,5",
    ])
    assert rc == 0
    data = json.loads(out.read_text())
    typing = data["typing"][0]
    assert typing["schema_name"] == "klebsiella_pneumoniae"
    assert typing["cluster_levels"] == {"HC0": 0, "HC5": 0}
    assert data["analysis_events"][0]["id"] == typing["event_id"]


def test_no_schema_still_writes_genome(tmp_path):
    src = _write_gto(tmp_path)
    out = tmp_path / "out.gto"
    rc = main(["-i", str(src), "-o", str(out), "-n",
               "--backend-dir", str(tmp_path), "--lineage", "2,99999"])
    assert rc == 0
    data = json.loads(out.read_text())
    assert data.get("typing", []) == []


def test_invalid_thresholds(tmp_path):
    src = _write_gto(tmp_path)
    out = tmp_path / "out.gto"
    rc = main(["-i", str(src), "-o", str(out), "-n",
               "--backend-dir", str(tmp_path), "--qc-threshold", "120"])
    assert rc == 1
    assert not out.exists()


def test_missing_backend_dir(tmp_path):
    src = _write_gto(tmp_path)
    rc = main(["-i", str(src), "-o", str(tmp_path / "out.gto"),
               "--backend-dir", str(tmp_path / "absent"), "--lineage", "573"])
    assert rc == 1


def test_failed_run_does_not_write_output(tmp_path):
    src = _write_gto(tmp_path)
    out = tmp_path / "out.gto"
    rc = main([
        "-i", str(src), "-o", str(out),
        "--backend-dir", str(tmp_path),
        "--lineage", "573",
        "--chewbbaca", "definitely-not-a-real-tool-xyz",
    ])
    assert rc == 1
    assert not out.exists()


def test_dry_run_needs_no_backend_dir(tmp_path, monkeypatch):
    monkeypatch.delenv("CGMLST_BACKEND_DIR", raising=False)
    src = _write_gto(tmp_path)
    out = tmp_path / "out.gto"
    rc = main(["-i", str(src), "-o", str(out), "--dry-run", "--lineage", "2,570,573"])
    assert rc == 0
    data = json.loads(out.read_text())
    assert data["typing"][0]["schema_name"] == "klebsiella_pneumoniae"


def test_real_run_needs_backend_dir(tmp_path, monkeypatch):
    monkeypatch.delenv("CGMLST_BACKEND_DIR", raising=False)
    src = _write_gto(tmp_path)
    out = tmp_path / "out.gto"
    rc = main(["-i", str(src), "-o", str(out), "--lineage", "573"])
    assert rc == 1
    assert not out.exists()
