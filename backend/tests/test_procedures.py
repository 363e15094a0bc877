from __future__ import annotations

from conftest import create


def test_procedure_round_trips_estimated_time_and_bill_of_materials(client) -> None:
    material = create(client, "/api/materials", {"name": "Fita veda rosca", "unity_of_measure": "UN"})

    created = create(
        client,
        "/api/procedures",
        {
            "name": "Vedar conexões",
            "description": "Aplicar fita nas roscas",
            "estimated_time": 30,
            "ps": "SF-04",
            "materials": [{"material_id": material["id"], "quantity": 2}],
        },
    )
    assert created["estimated_time"] == 30
    assert created["materials"][0]["quantity"] == 2

    detail = client.get("/api/procedures", params={"id": created["id"]}).json()["data"]
    assert detail["estimated_time"] == 30
    assert detail["procedure_materials"] == [{"quantity": 2, "material": material}]


def test_procedure_is_discarded_when_its_materials_fail(client) -> None:
    response = client.post(
        "/api/procedures",
        json={
            "name": "Vedar conexões",
            "description": "Aplicar fita nas roscas",
            "materials": [{"material_id": 999, "quantity": 1}],
        },
    )

    assert response.status_code == 500
    assert response.json()["code"] == "PROCEDURE_MATERIALS_FAILED"
    assert client.get("/api/procedures").json()["data"] == []


def test_procedures_filter_by_ps(client) -> None:
    create(client, "/api/procedures", {"name": "A", "description": "a", "ps": "SF-06"})
    create(client, "/api/procedures", {"name": "B", "description": "b", "ps": "AC-01"})

    names = [row["name"] for row in client.get("/api/procedures", params={"ps": "SF-06"}).json()["data"]]

    assert names == ["A"]
    assert len(client.get("/api/procedures").json()["data"]) == 2


def test_procedure_patch_and_delete(client) -> None:
    procedure = create(client, "/api/procedures", {"name": "A", "description": "a"})

    patched = client.patch("/api/procedures", json={"id": procedure["id"], "updatedData": {"estimated_time": 45}})
    assert patched.status_code == 200
    assert patched.json()["data"]["estimated_time"] == 45

    assert client.delete("/api/procedures", params={"id": procedure["id"]}).status_code == 200
    assert client.get("/api/procedures", params={"id": procedure["id"]}).status_code == 404


def test_procedure_requires_description(client) -> None:
    response = client.post("/api/procedures", json={"name": "A"})

    assert response.status_code == 400
