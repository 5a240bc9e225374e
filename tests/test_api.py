"""API tests for the configurator routes."""

import pytest
from fastapi.testclient import TestClient

from api.main import app
from api.routes import configurators
from core.configurator import ConfiguratorStore


@pytest.fixture
def client(tmp_path, monkeypatch):
    """Create test client backed by a temporary storage directory."""
    monkeypatch.setattr(configurators.store, "data_dir", tmp_path)
    configurators.store.clear()
    return TestClient(app)


@pytest.fixture
def chair_payload():
    return {
        "name": "Chair",
        "description": "Dining chair",
        "model": "chair.glb",
        "options": [
            {
                "id": "finish",
                "name": "Finish",
                "displayType": "buttons",
                "manipulationType": "visibility",
                "defaultBehavior": "hide",
                "targetComponents": ["capA", "capB"],
                "values": [
                    {"id": "v1", "name": "A", "visibleComponents": ["capA"]},
                    {"id": "v2", "name": "B", "visibleComponents": ["capB"]},
                ],
            },
            {
                "id": "paint",
                "name": "Paint",
                "displayType": "grid",
                "manipulationType": "material",
                "targetComponents": ["seat"],
                "values": [
                    {"id": "red", "name": "Red", "color": "#FF0000"},
                    {
                        "id": "gold",
                        "name": "Gold",
                        "color": "#FFD700",
                        "conditionalLogic": {
                            "enabled": True,
                            "operator": "AND",
                            "rules": [{"optionId": "finish", "operator": "equals", "value": "v2"}],
                        },
                    },
                ],
            },
        ],
    }


@pytest.fixture
def chair_id(client, chair_payload):
    response = client.post("/api/configurators/", json=chair_payload)
    return response.json()["id"]


def test_health_check(client):
    """Test health endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_root(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "Configurator Builder"
    assert data["status"] == "running"


class TestConfiguratorCrud:
    """Test configurator storage endpoints."""

    def test_create(self, client, chair_payload):
        response = client.post("/api/configurators/", json=chair_payload)

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Chair"
        assert [o["id"] for o in data["options"]] == ["finish", "paint"]

    def test_create_rejects_blank_name(self, client):
        response = client.post("/api/configurators/", json={"name": "   "})
        assert response.status_code == 422

    def test_list_and_get(self, client, chair_id):
        assert [c["id"] for c in client.get("/api/configurators/").json()] == [chair_id]
        assert client.get(f"/api/configurators/{chair_id}").json()["model"] == "chair.glb"

    def test_get_missing(self, client):
        response = client.get("/api/configurators/missing")
        assert response.status_code == 404

    def test_update(self, client, chair_id, chair_payload):
        chair_payload["name"] = "Armchair"
        response = client.put(f"/api/configurators/{chair_id}", json=chair_payload)

        assert response.status_code == 200
        assert response.json()["id"] == chair_id
        assert client.get(f"/api/configurators/{chair_id}").json()["name"] == "Armchair"

    def test_delete(self, client, chair_id):
        assert client.delete(f"/api/configurators/{chair_id}").status_code == 200
        assert client.delete(f"/api/configurators/{chair_id}").status_code == 404


class TestResolve:
    """Test the preview resolution endpoint."""

    def test_resolve_applies_defaults(self, client, chair_id):
        response = client.post(
            f"/api/configurators/{chair_id}/resolve",
            json={
                "selections": {"finish": "v1"},
                "components": [{"name": "capA"}, {"name": "capB"}, {"name": "seat"}],
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["visibleOptionIds"] == ["finish", "paint"]
        assert data["visibleValueIds"]["paint"] == ["red"]
        assert data["defaultsToApply"] == {"paint": "red"}
        assert data["componentStates"] == {
            "capA": {"visible": True},
            "capB": {"visible": False},
            "seat": {"visible": True, "color": "#ff0000"},
        }
        assert data["passes"] == 2

    def test_resolve_reports_diagnostics(self, client, chair_id):
        response = client.post(
            f"/api/configurators/{chair_id}/resolve",
            json={"selections": {"finish": "v1", "paint": "red"}, "components": [{"name": "capA"}]},
        )

        kinds = {d["kind"] for d in response.json()["diagnostics"]}
        assert "dangling_component" in kinds

    def test_resolve_missing_configurator(self, client):
        response = client.post("/api/configurators/missing/resolve", json={})
        assert response.status_code == 404


class TestAvailableValues:
    """Test the available values endpoint."""

    def test_values_follow_selection(self, client, chair_id):
        url = f"/api/configurators/{chair_id}/options/paint/values"

        before = client.post(url, json={"selections": {"finish": "v1"}}).json()
        after = client.post(url, json={"selections": {"finish": "v2"}}).json()

        assert [v["id"] for v in before["values"]] == ["red"]
        assert [v["id"] for v in after["values"]] == ["red", "gold"]

    def test_unknown_option(self, client, chair_id):
        response = client.post(
            f"/api/configurators/{chair_id}/options/ghost/values", json={}
        )
        assert response.status_code == 404


class TestReorder:
    """Test the reorder endpoint."""

    def test_reorder(self, client, chair_id):
        response = client.post(
            f"/api/configurators/{chair_id}/reorder",
            json={"drag_index": 1, "hover_index": 0},
        )

        assert [o["id"] for o in response.json()["options"]] == ["paint", "finish"]
        stored = client.get(f"/api/configurators/{chair_id}").json()
        assert [o["id"] for o in stored["options"]] == ["paint", "finish"]


class TestImportExport:
    """Test import/export endpoints."""

    def test_export_then_import(self, client, chair_id):
        exported = client.get("/api/configurators/export").json()

        assert exported["version"] == "1.0"
        assert exported["activeConfiguratorId"] == chair_id

        configurators.store.clear()
        response = client.post("/api/configurators/import", json=exported)

        assert response.status_code == 200
        assert response.json()["imported"] == 1
        assert client.get(f"/api/configurators/{chair_id}").status_code == 200

    def test_import_invalid(self, client):
        response = client.post("/api/configurators/import", json={"configurators": []})

        assert response.status_code == 400
        assert "active configurator" in response.json()["detail"]


class TestStoragePersistence:
    """Test that changes made through the API reach disk."""

    def reload(self, tmp_path):
        restored = ConfiguratorStore(str(tmp_path))
        restored.load()
        return restored

    def test_create_is_saved(self, client, chair_id, tmp_path):
        restored = self.reload(tmp_path)

        assert restored.get(chair_id).name == "Chair"
        assert restored.active_id == chair_id

    def test_update_is_saved(self, client, chair_id, chair_payload, tmp_path):
        chair_payload["name"] = "Armchair"
        client.put(f"/api/configurators/{chair_id}", json=chair_payload)

        assert self.reload(tmp_path).get(chair_id).name == "Armchair"

    def test_delete_is_saved(self, client, chair_id, tmp_path):
        client.delete(f"/api/configurators/{chair_id}")

        assert self.reload(tmp_path).get(chair_id) is None

    def test_reorder_is_saved(self, client, chair_id, tmp_path):
        client.post(
            f"/api/configurators/{chair_id}/reorder",
            json={"drag_index": 1, "hover_index": 0},
        )

        options = self.reload(tmp_path).get(chair_id).options
        assert [o.id for o in options] == ["paint", "finish"]

    def test_import_is_saved(self, client, chair_id, tmp_path):
        exported = client.get("/api/configurators/export").json()
        configurators.store.clear()
        client.post("/api/configurators/import", json=exported)

        assert self.reload(tmp_path).get(chair_id) is not None
