from __future__ import annotations

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from service_orders.config import Settings
from service_orders.main import create_app


class StubRenderer:
    def __init__(self) -> None:
        self.calls: list[str] = []
        self.error: Exception | None = None

    def render(self, url, options=None) -> bytes:
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return b"%PDF-1.4 stub"


class StubMailer:
    def __init__(self) -> None:
        self.sent: list[dict] = []

    def send(self, **kwargs) -> None:
        self.sent.append(kwargs)


class StubMessenger:
    def __init__(self) -> None:
        self.sent: list[dict] = []

    def send_pdf(self, **kwargs) -> None:
        self.sent.append(kwargs)


@pytest.fixture
def stubs():
    return SimpleNamespace(renderer=StubRenderer(), mailer=StubMailer(), messenger=StubMessenger())


@pytest.fixture
def settings() -> Settings:
    return Settings(
        DATABASE_URL="sqlite://",
        ENV="test",
        LOG_LEVEL="WARNING",
        REPORT_BASE_URL="http://reports.test",
    )


@pytest.fixture
def app(settings, stubs):
    return create_app(settings, renderer=stubs.renderer, mailer=stubs.mailer, messenger=stubs.messenger)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def create(client: TestClient, path: str, payload: dict) -> dict:
    response = client.post(path, json=payload)
    assert response.status_code == 201, response.text
    return response.json()["data"]


@pytest.fixture
def catalog(client):
    """Two team members, three materials, two procedures, one equipment and one PPE item."""
    team = [
        create(client, "/api/team", {"name": "A. Silva", "position": "Encanador"}),
        create(client, "/api/team", {"name": "B. Souza", "position": "Ajudante"}),
    ]
    materials = [
        create(client, "/api/materials", {"name": "Tubo PEX 16mm", "unity_of_measure": "M"}),
        create(client, "/api/materials", {"name": "Conexão PEX", "unity_of_measure": "UN"}),
        create(client, "/api/materials", {"name": "Válvula de descarga", "unity_of_measure": "UN"}),
    ]
    procedures = [
        create(client, "/api/procedures", {"name": "Isolar registro", "description": "Fechar o registro geral", "ps": "SF-06"}),
        create(client, "/api/procedures", {"name": "Trocar válvula", "description": "Substituir a válvula", "ps": "SF-06"}),
    ]
    equipments = [create(client, "/api/equipments", {"name": "Furadeira", "description": "Furadeira de impacto"})]
    epi = [create(client, "/api/epi", {"name": "Luva", "description": "Luva de raspa"})]
    return SimpleNamespace(
        team=team,
        materials=materials,
        procedures=procedures,
        equipments=equipments,
        epi=epi,
    )
