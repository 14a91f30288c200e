import pytest
from fastapi.testclient import TestClient

import amazon_ecs.apis.product_search as product_search
from amazon_ecs.apis.app import app

from conftest import ERROR_RESPONSE, SAMPLE_RESPONSE, StubTransport


@pytest.fixture
def stub(monkeypatch):
    transport = StubTransport()
    monkeypatch.setattr(product_search, "load_symbol", lambda dotted: lambda user_agent=None: transport)
    monkeypatch.setenv("AMAZON_ECS_PUBLIC_KEY", "PK")
    monkeypatch.setenv("AMAZON_ECS_PRIVATE_KEY", "SK")
    monkeypatch.setenv("AMAZON_ECS_ASSOCIATE_TAG", "TAG")
    return transport


@pytest.fixture
def api():
    return TestClient(app)


def test_health(api):
    assert api.get("/health").json() == {"status": "ok"}


def test_search_items(stub, api):
    resp = api.post("/search", json={"keywords": "Harry Potter"})
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("application/xml")
    assert resp.text.startswith("<Items>")
    assert "SearchIndex=Books" in stub.urls[0]


def test_search_raw(stub, api):
    resp = api.post("/search", json={"keywords": "Harry Potter", "raw": True, "region": "co.uk"})
    assert resp.content == SAMPLE_RESPONSE
    assert stub.urls[0].startswith("http://ecs.amazonaws.co.uk/")


def test_search_without_items_node(stub, api):
    stub.payload = ERROR_RESPONSE
    assert api.post("/search", json={"keywords": "x"}).status_code == 204
    resp = api.post("/search", json={"keywords": "x", "items_only": False})
    assert "SignatureDoesNotMatch" in resp.text


def test_search_upstream_failure(stub, api):
    stub.fail = True
    assert api.post("/search", json={"keywords": "x"}).status_code == 502


def test_search_unparseable_response(stub, api):
    stub.payload = b"definitely not xml"
    assert api.post("/search", json={"keywords": "x"}).status_code == 502


def test_search_requires_input(stub, api):
    assert api.post("/search", json={}).status_code == 422
