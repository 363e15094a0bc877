from __future__ import annotations


def _create_order(client, catalog) -> int:
    payload = {
        "service": {"type": "Troca de válvula", "ps": "SF-06", "status": "Planejamento"},
        "team": [catalog.team[0]["id"]],
        "procedures": [
            {"id_procedure": catalog.procedures[0]["id"], "execution_order": 1},
            {"id_procedure": catalog.procedures[1]["id"], "execution_order": 2},
        ],
        "materials": [{"material_id": catalog.materials[0]["id"], "quantity": 5}],
        "equipments": [{"equipment_id": catalog.equipments[0]["id"]}],
    }
    response = client.post("/api/services", json=payload)
    assert response.status_code == 201, response.text
    return response.json()["data"]["service"]["id"]


def test_patch_with_empty_materials_clears_only_materials(client, catalog) -> None:
    service_id = _create_order(client, catalog)

    response = client.patch("/api/services", json={"id": service_id, "materials": []})

    assert response.status_code == 200
    body = response.json()
    assert "warnings" not in body
    aggregate = body["data"]
    assert aggregate["service_materials"] == []
    assert [link["execution_order"] for link in aggregate["procedure_order"]] == [1, 2]
    assert len(aggregate["service_team"]) == 1
    assert len(aggregate["service_equipments"]) == 1


def test_patch_replaces_present_groups_and_scalars(client, catalog) -> None:
    service_id = _create_order(client, catalog)

    response = client.patch(
        "/api/services",
        json={
            "id": service_id,
            "status": "Em Andamento",
            "team": [{"team_id": catalog.team[1]["id"]}],
            "procedures": [{"id_procedure": catalog.procedures[1]["id"], "execution_order": 1}],
            "epi": [{"id": catalog.epi[0]["id"], "quantity": 2}],
        },
    )

    aggregate = response.json()["data"]
    assert aggregate["status"] == "Em Andamento"
    assert aggregate["type"] == "Troca de válvula"
    assert [link["team"]["name"] for link in aggregate["service_team"]] == ["B. Souza"]
    assert [link["procedure"]["name"] for link in aggregate["procedure_order"]] == ["Trocar válvula"]
    assert aggregate["service_epi"][0]["quantity"] == 2
    assert aggregate["service_materials"][0]["quantity"] == 5


def test_patch_keeps_duplicate_entries(client, catalog) -> None:
    service_id = _create_order(client, catalog)
    material_id = catalog.materials[1]["id"]

    response = client.patch(
        "/api/services",
        json={
            "id": service_id,
            "materials": [
                {"material_id": material_id, "quantity": 1},
                {"material_id": material_id, "quantity": 3},
            ],
        },
    )

    quantities = sorted(link["quantity"] for link in response.json()["data"]["service_materials"])
    assert quantities == [1, 3]


def test_patch_reports_failed_groups_as_warnings(client, catalog) -> None:
    service_id = _create_order(client, catalog)

    response = client.patch(
        "/api/services",
        json={
            "id": service_id,
            "materials": [{"material_id": 999, "quantity": 1}],
            "equipments": [],
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert set(body["warnings"]) == {"materials"}
    assert "materials" in body["message"]
    # the failed group keeps its previous rows, the other group was still replaced
    assert body["data"]["service_materials"][0]["quantity"] == 5
    assert body["data"]["service_equipments"] == []


def test_patch_missing_order_is_404(client) -> None:
    response = client.patch("/api/services", json={"id": 999, "materials": []})

    assert response.status_code == 404
    assert response.json()["code"] == "SERVICE_NOT_FOUND"


def test_put_updates_scalars_only(client, catalog) -> None:
    service_id = _create_order(client, catalog)

    response = client.put(
        "/api/services",
        json={"id": service_id, "responsible": "C. Lima", "materials": []},
    )

    assert response.status_code == 200
    assert response.json()["data"]["responsible"] == "C. Lima"
    aggregate = client.get("/api/services", params={"id": service_id}).json()["data"]
    assert aggregate["service_materials"][0]["quantity"] == 5


def test_put_without_fields_is_rejected(client, catalog) -> None:
    service_id = _create_order(client, catalog)

    response = client.put("/api/services", json={"id": service_id})

    assert response.status_code == 400
    assert response.json()["code"] == "NO_FIELDS_TO_UPDATE"


def test_put_rejects_end_date_before_existing_start_date(client, catalog) -> None:
    service_id = _create_order(client, catalog)
    client.put("/api/services", json={"id": service_id, "start_date": "2024-02-10"})

    response = client.put("/api/services", json={"id": service_id, "end_date": "2024-02-01"})

    assert response.status_code == 400
    assert response.json()["code"] == "SERVICE_DATES_INVALID"


def test_put_missing_order_is_404(client) -> None:
    response = client.put("/api/services", json={"id": 999, "status": "Concluída"})

    assert response.status_code == 404


def test_scalar_update_is_published_when_a_group_fails(app, client, catalog) -> None:
    service_id = _create_order(client, catalog)
    received = []
    app.state.change_feed.subscribe(received.append, table="services")

    response = client.patch(
        "/api/services",
        json={"id": service_id, "status": "Em Andamento", "materials": [{"material_id": 999, "quantity": 1}]},
    )

    assert response.status_code == 200
    assert set(response.json()["warnings"]) == {"materials"}
    assert [(change.event_type, change.id) for change in received] == [("UPDATE", service_id)]
    assert received[0].record["status"] == "Em Andamento"
