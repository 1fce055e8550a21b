"""
modsync - Unit Tests: api.py
Endpoints run against a reconciler with an in-memory remote.

Run: pytest tests/test_api.py -v
"""
import pytest
from fastapi.testclient import TestClient

import api
from config_schema import ModSyncConfig

from conftest import HELLO_MODULE


@pytest.fixture
def client(reconciler, monkeypatch):
    monkeypatch.setattr(api, "_reconciler", reconciler)
    monkeypatch.setattr(api, "_config", ModSyncConfig())
    return TestClient(api.app)


class TestHealth:
    def test_health(self, client, modules_root):
        data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["remote"] == "octo/modules@main"
        assert data["modules_dir"] == str(modules_root)


class TestCheck:
    def test_partition(self, client, write_local):
        write_local("module_01", b"x")
        data = client.get("/modules").json()
        assert data == {
            "downloaded": ["module_01"],
            "not_downloaded": ["module_02", "module_03"],
        }

    def test_status(self, client, write_local, fake_remote):
        write_local("module_01", fake_remote.files["module_01"])
        states = {m["module"]: m["state"] for m in client.get("/modules/status").json()["modules"]}
        assert states["module_01"] == "current"
        assert states["module_02"] == "not_downloaded"

    def test_updates(self, client, write_local):
        write_local("module_02", b"edited")
        assert client.get("/modules/updates").json() == {"modules": ["module_02"]}


class TestDownloadAndUpdate:
    def test_download_batch(self, client, local_catalog, fake_remote):
        fake_remote.failing.add("module_01")
        r = client.post("/modules/download", json={"modules": ["module_01", "module_02"]})
        assert r.status_code == 200
        data = r.json()
        assert data["succeeded"] == 1
        assert data["failed"] == 1
        assert [x["success"] for x in data["results"]] == [False, True]
        assert local_catalog.has_module("module_02")

    def test_update_batch(self, client, write_local, local_catalog, fake_remote):
        write_local("module_03", b"old")
        r = client.post("/modules/update", json={"modules": ["module_03"]})
        assert r.json()["results"][0]["action"] == "update"
        assert local_catalog.read_module_content("module_03") == fake_remote.files["module_03"]

    def test_invalid_name_rejected(self, client, fake_remote):
        r = client.post("/modules/download", json={"modules": ["module_01", "README.md"]})
        assert r.status_code == 400
        assert fake_remote.fetches == []

    def test_missing_body_field(self, client):
        assert client.post("/modules/download", json={}).status_code == 422


class TestExecute:
    def test_execute_ok(self, client, write_local):
        write_local("module_01", HELLO_MODULE)
        r = client.post("/modules/module_01/execute")
        assert r.status_code == 200
        assert r.json()["outcome"] == "ok"

    def test_execute_not_downloaded(self, client):
        assert client.post("/modules/module_99/execute").status_code == 404

    def test_execute_broken(self, client, write_local):
        write_local("module_01", b"raise RuntimeError('nope')\n")
        r = client.post("/modules/module_01/execute")
        assert r.status_code == 500
        assert "nope" in r.json()["detail"]

    def test_execute_invalid_name(self, client):
        assert client.post("/modules/scripts/execute").status_code == 400
