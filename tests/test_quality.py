import pytest

from cgmlst_typer.core.alleles import AlleleCallVector
from cgmlst_typer.core.quality import Verdict, evaluate_quality


def _vector(tokens):
    return AlleleCallVector.from_tokens("input", [f"l{i}" for i in range(len(tokens))], tokens)


def test_zero_is_not_an_exact_match():
    qc = evaluate_quality(_vector(["5", "3", "novel", "0", "12"]), qc_threshold=70, cluster_threshold=85)
    assert qc.total_loci == 5
    assert qc.exact_matches == 3
    assert qc.percent_exact == pytest.approx(60.0)
    assert qc.verdict is Verdict.POOR
    assert qc.cluster_eligible is False


def test_good_and_cluster_eligible():
    qc = evaluate_quality(_vector(["1"] * 9 + ["LNF"]), qc_threshold=70, cluster_threshold=85)
    assert qc.percent_exact == pytest.approx(90.0)
    assert qc.verdict is Verdict.GOOD
    assert qc.cluster_eligible is True


def test_good_but_not_cluster_eligible():
    qc = evaluate_quality(_vector(["1"] * 8 + ["LNF", "LNF"]), qc_threshold=70, cluster_threshold=85)
    assert qc.verdict is Verdict.GOOD
    assert qc.cluster_eligible is False


def test_thresholds_are_inclusive():
    qc = evaluate_quality(_vector(["1"] * 7 + ["LNF"] * 3), qc_threshold=70, cluster_threshold=70)
    assert qc.verdict is Verdict.GOOD
    assert qc.cluster_eligible is True


def test_empty_vector():
    qc = evaluate_quality(_vector([]), qc_threshold=70, cluster_threshold=85)
    assert qc.total_loci == 0
    assert qc.percent_exact == 0
    assert qc.verdict is Verdict.POOR
    assert qc.missing == 0


def test_monotonic_in_exact_count():
    total = 20
    previous = None
    for exact in range(total + 1):
        qc = evaluate_quality(_vector(["1"] * exact + ["LNF"] * (total - exact)), 70, 85)
        assert qc.exact_matches + qc.missing == qc.total_loci
        assert 0 <= qc.percent_exact <= 100
        if previous is not None:
            assert qc.percent_exact >= previous.percent_exact
            assert not (previous.verdict is Verdict.GOOD and qc.verdict is Verdict.POOR)
            assert not (previous.cluster_eligible and not qc.cluster_eligible)
        if qc.cluster_eligible:
            assert qc.verdict is Verdict.GOOD
        previous = qc
