from __future__ import annotations

from types import SimpleNamespace

import pytest
from sqlalchemy.exc import IntegrityError

from service_orders.domain_errors import DomainError
from service_orders.schemas import SendOrderRequest, ServiceCreateRequest, ServiceRelationsUpdateRequest
from service_orders.use_cases import order_dispatch, service_orders


class _NestedStub:
    def __init__(self, session):
        self._session = session

    def __enter__(self):
        self._session.savepoints += 1
        return self

    def __exit__(self, exc_type, *_exc):
        if exc_type is not None:
            self._session.savepoint_rollbacks += 1
        return False


class _CreateSessionStub:
    def __init__(self):
        self.added = []
        self.committed = False
        self.rolled_back = False
        self.savepoints = 0
        self.savepoint_rollbacks = 0

    def add(self, obj):
        obj.id = 10
        self.added.append(obj)

    def flush(self):
        return None

    def begin_nested(self):
        return _NestedStub(self)

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def refresh(self, _obj):
        return None


def _request(**overrides) -> ServiceCreateRequest:
    payload = {
        "service": {"type": "Troca de válvula", "ps": "SF-06"},
        "procedures": [{"id_procedure": 5, "execution_order": 1}],
        "materials": [{"material_id": 3, "quantity": 4}],
    }
    payload.update(overrides)
    return ServiceCreateRequest.model_validate(payload)


def _integrity_error() -> IntegrityError:
    return IntegrityError("INSERT", {}, Exception("FOREIGN KEY constraint failed"))


def test_procedures_failure_rolls_back_and_never_commits(monkeypatch) -> None:
    db = _CreateSessionStub()

    def _fail(*_args, **_kwargs):
        raise _integrity_error()

    monkeypatch.setattr(service_orders.PROCEDURES.links, "insert", _fail)

    with pytest.raises(DomainError) as exc_info:
        service_orders.create_service_order_use_case(db=db, data=_request())

    assert exc_info.value.code == "PROCEDURES_ASSOCIATION_FAILED"
    assert exc_info.value.http_status == 500
    assert db.rolled_back is True
    assert db.committed is False
    assert db.savepoints == 0


def test_best_effort_group_failure_is_reported_and_order_committed(monkeypatch) -> None:
    db = _CreateSessionStub()

    def _fail(*_args, **_kwargs):
        raise _integrity_error()

    monkeypatch.setattr(service_orders.PROCEDURES.links, "insert", lambda *_args, **_kwargs: [])
    monkeypatch.setattr(service_orders.ASSOCIATION_GROUPS["materials"].links, "insert", _fail)

    result = service_orders.create_service_order_use_case(db=db, data=_request())

    assert db.committed is True
    assert db.savepoint_rollbacks == 1
    assert result["failures"] == {"materials": "FOREIGN KEY constraint failed"}
    assert result["associations"] == {"procedures": []}
    assert result["service"]["type"] == "Troca de válvula"


def test_blank_ps_is_rejected_before_any_write() -> None:
    db = _CreateSessionStub()

    with pytest.raises(DomainError) as exc_info:
        service_orders.create_service_order_use_case(
            db=db, data=_request(service={"type": "Troca de válvula", "ps": ""})
        )

    assert exc_info.value.http_status == 400
    assert db.added == []


def test_relations_update_only_touches_groups_present_in_request(monkeypatch) -> None:
    service = SimpleNamespace(id=7, start_date=None, end_date=None)
    db = _CreateSessionStub()
    replaced = []

    monkeypatch.setattr(service_orders.repository.services, "get_one", lambda _db, _id: service)
    monkeypatch.setattr(service_orders, "get_service_aggregate", lambda _db, service_id: {"id": service_id})
    for name, group in service_orders.ASSOCIATION_GROUPS.items():
        monkeypatch.setattr(group.links, "delete_where", lambda _db, name=name, **_filters: replaced.append(name))
        monkeypatch.setattr(group.links, "insert", lambda _db, _rows: [])

    aggregate, failures = service_orders.update_service_relations_use_case(
        db=db,
        data=ServiceRelationsUpdateRequest.model_validate({"id": 7, "materials": [], "epis": []}),
    )

    assert aggregate == {"id": 7}
    assert failures == {}
    assert replaced == ["materials", "epi"]
    assert db.committed is True


def test_link_aliases_and_bare_team_ids_are_accepted() -> None:
    request = _request(
        team=[1, "2", {"id": 3}],
        procedures=[{"procedure_id": 4}],
        epi=[{"id": 6, "quantity": 0}],
    )

    assert [entry.team_id for entry in request.team] == [1, 2, 3]
    assert request.procedures[0].id_procedure == 4
    assert request.procedures[0].execution_order == 1
    assert request.epi[0].quantity == 1


class _Renderer:
    def __init__(self):
        self.calls = 0

    def render(self, _url, _options=None):
        self.calls += 1
        return b"%PDF"


def test_send_order_validates_before_rendering(monkeypatch) -> None:
    renderer = _Renderer()
    dispatcher = order_dispatch.OrderDispatcher(
        renderer=renderer,
        mailer=SimpleNamespace(),
        messenger=SimpleNamespace(),
        report_base_url="http://app/",
    )
    monkeypatch.setattr(order_dispatch.repository.services, "exists", lambda _db, _id: False)

    with pytest.raises(DomainError) as exc_info:
        order_dispatch.send_order_use_case(
            db=SimpleNamespace(),
            dispatcher=dispatcher,
            data=SendOrderRequest(id=3, channel="email", destination="a@b.com"),
        )

    assert exc_info.value.http_status == 404
    assert renderer.calls == 0
    assert dispatcher.report_url(3) == "http://app/order/service/3"
