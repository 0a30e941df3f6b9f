import pytest
import requests

from cgmlst_typer.core.taxonomy import TaxonomyClient, parse_lineage
from cgmlst_typer.errors import TaxonomyError


class FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class FakeSession:
    def __init__(self, response):
        self.response = response
        self.urls = []

    def get(self, url, headers=None, timeout=None):
        self.urls.append(url)
        if isinstance(self.response, Exception):
            raise self.response
        return self.response


def test_lineage_lookup():
    session = FakeSession(FakeResponse([{
        "taxon_name": "Staphylococcus aureus",
        "lineage_ids": [131567, 2, 1239, 1279, 1280],
        "lineage_names": ["cellular organisms", "Bacteria", "Bacillota", "Staphylococcus", "Staphylococcus aureus"],
    }]))
    client = TaxonomyClient("https://example.org/api/taxonomy/", session=session)
    lineage = client.lineage(1280)
    assert lineage.ids[-1] == 1280
    assert lineage.taxon_name == "Staphylococcus aureus"
    assert lineage.names[1] == "Bacteria"
    assert len(lineage.names) == len(lineage.ids)
    assert "eq(taxon_id,1280)" in session.urls[0]
    assert "lineage_ids" in session.urls[0]


def test_unknown_taxon_gives_empty_lineage():
    client = TaxonomyClient(session=FakeSession(FakeResponse([])))
    assert client.lineage(99999).ids == []


def test_http_error():
    client = TaxonomyClient(session=FakeSession(FakeResponse([], status=503)))
    with pytest.raises(TaxonomyError):
        client.lineage(1280)


def test_connection_error():
    client = TaxonomyClient(session=FakeSession(requests.ConnectionError("down")))
    with pytest.raises(TaxonomyError, match="down"):
        client.lineage(1280)


def test_invalid_json():
    client = TaxonomyClient(session=FakeSession(FakeResponse(ValueError("bad json"))))
    with pytest.raises(TaxonomyError, match="invalid JSON"):
        client.lineage(1280)


def test_parse_lineage():
    assert parse_lineage("2, 1280 ,9999") == [2, 1280, 9999]
    assert parse_lineage("") == []
    with pytest.raises(TaxonomyError):
        parse_lineage("2,x")
