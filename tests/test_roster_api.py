import pytest

from fastapi.testclient import TestClient
from roster_service.application.use_cases.manage_roster import RosterCoordinator
from roster_service.interfaces.http.deps import get_coordinator

# Импортируем app
from roster_service.main import app

ANN = {
    "first_name": "Ann",
    "last_name": "Lee",
    "roll_no": "A1",
    "email": "a@x.com",
    "department": "Computers",
}


@pytest.fixture
def coordinator(local_store):
    c = RosterCoordinator(local_store)
    c.mount()
    return c


@pytest.fixture
def client(coordinator):
    """Фикстура для тестового клиента"""
    app.dependency_overrides[get_coordinator] = lambda: coordinator
    yield TestClient(app)
    # Очищаем после теста
    if get_coordinator in app.dependency_overrides:
        del app.dependency_overrides[get_coordinator]


def _add(client, **overrides):
    client.post("/api/roster/add")
    return client.post("/api/roster/submit", json={**ANN, **overrides}).json()


def test_initial_state(client):
    """Тест начального состояния"""
    response = client.get("/api/roster")
    assert response.status_code == 200
    data = response.json()
    assert data["mode"] == "compose"
    assert data["mounted"] is True
    assert data["loading"] is False
    assert data["editing"] is None
    assert data["students"] == []
    assert data["total"] == 0


def test_submit_invalid_form(client):
    """Тест: ошибки валидации показываются по полям"""
    data = client.post("/api/roster/submit", json={**ANN, "email": "bad"}).json()
    assert data["mode"] == "compose"
    assert data["errors"] == {"email": "Please enter a valid email address"}
    assert data["form"]["email"] == "bad"
    assert data["notifications"] == [
        {"level": "error", "message": "Please fix the validation errors"}
    ]


def test_submit_creates_and_shows_table(client):
    """Тест создания через форму"""
    data = _add(client)
    assert data["mode"] == "browse"
    assert data["total"] == 1
    assert data["students"][0]["roll_no"] == "A1"
    assert data["notifications"] == [
        {"level": "success", "message": "Student added successfully!"}
    ]
    # тост показывается один раз
    assert client.get("/api/roster").json()["notifications"] == []


def test_form_patch_then_submit(client):
    """Тест: заполнение формы по полю и отправка без тела"""
    for field, value in ANN.items():
        client.patch("/api/roster/form", json={"field": field, "value": value})
    data = client.post("/api/roster/submit").json()
    assert data["mode"] == "browse"
    assert data["total"] == 1


def test_form_patch_rejects_unknown_field(client):
    response = client.patch("/api/roster/form", json={"field": "id", "value": "1"})
    assert response.status_code == 422


def test_edit_flow(client):
    """Тест редактирования"""
    student_id = _add(client)["students"][0]["id"]
    data = client.post(f"/api/roster/edit/{student_id}").json()
    assert data["mode"] == "compose"
    assert data["editing"]["id"] == student_id
    assert data["form"]["first_name"] == "Ann"

    data = client.post("/api/roster/submit", json={**ANN, "first_name": "Anne"}).json()
    assert data["mode"] == "browse"
    assert data["editing"] is None
    assert data["students"][0]["first_name"] == "Anne"
    assert data["students"][0]["id"] == student_id
    assert data["notifications"][0]["message"] == "Student information updated successfully!"


def test_edit_unknown_student(client):
    client.post("/api/roster/view")
    assert client.post("/api/roster/edit/404").status_code == 404


def test_edit_from_compose_is_conflict(client):
    assert client.post("/api/roster/edit/1").status_code == 409


def test_cancel_edit(client):
    """Тест отмены редактирования"""
    student_id = _add(client)["students"][0]["id"]
    client.post(f"/api/roster/edit/{student_id}")
    data = client.post("/api/roster/cancel").json()
    assert data["mode"] == "browse"
    assert data["editing"] is None
    assert data["form"]["first_name"] == ""


def test_search(client):
    """Тест поиска"""
    _add(client)
    _add(client, first_name="Bo", last_name="Ray", roll_no="B2", email="b@x.com",
         department="Mechanical and Automation")
    data = client.put("/api/roster/search", json={"term": "RAY"}).json()
    assert data["search"] == "RAY"
    assert data["total"] == 2
    assert [s["first_name"] for s in data["students"]] == ["Bo"]


def test_delete_requires_confirmation(client):
    """Тест: удаление только после подтверждения"""
    student_id = _add(client)["students"][0]["id"]
    prompt = client.get(f"/api/roster/students/{student_id}/delete-prompt").json()["prompt"]
    assert prompt == "Are you sure you want to delete Ann Lee's record?"

    response = client.delete(f"/api/roster/students/{student_id}")
    assert response.status_code == 428
    assert response.json()["detail"] == prompt
    assert client.get("/api/roster").json()["total"] == 1

    data = client.delete(f"/api/roster/students/{student_id}", params={"confirm": "true"}).json()
    assert data["mode"] == "browse"
    assert data["total"] == 0
    assert data["notifications"] == [
        {"level": "success", "message": "Student deleted successfully!"}
    ]
