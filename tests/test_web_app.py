"""Mini README: Tests exercising the FastAPI back office end to end.

Structure:
    * test_task_board_* - role-scoped rendering, creation and status changes.
    * test_countdowns_endpoint - labels served to the polling script.
    * test_session_switch_* - unknown users and closing the previous board.
    * test_expense_* - daily log mode, date checks, admin exports and printable report.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from ekoprints.configuration import BackOfficeSettings
from ekoprints.interface import create_application


@pytest.fixture()
def client(store, clock):
    settings = BackOfficeSettings(timezone="UTC", seed_demo_data=False)
    with TestClient(create_application(store, settings, clock=clock)) as test_client:
        yield test_client


def _sign_in(client: TestClient, user_id: str) -> None:
    response = client.post("/session", data={"user_id": user_id})
    assert response.status_code == 200


def test_task_board_defaults_to_the_first_admin(client: TestClient) -> None:
    response = client.get("/")

    assert response.status_code == 200
    assert "Print flyers" in response.text
    assert "Bind reports" in response.text
    assert "OVERDUE" in response.text
    assert "1d 2h left" in response.text
    assert "Linked to Invoice #AB12CD34" in response.text
    assert "+ Create Task" in response.text


def test_task_board_scopes_regular_users(client: TestClient) -> None:
    _sign_in(client, "u_grace")

    page = client.get("/tasks").text

    assert "Print flyers" in page
    assert "Bind reports" not in page
    assert "+ Create Task" not in page
    assert client.post("/tasks/new/open").status_code == 403
    assert client.post("/tasks/task_0002/advance").status_code == 404


def test_session_switch_rejects_unknown_users(client: TestClient) -> None:
    assert client.post("/session", data={"user_id": "u_nobody"}).status_code == 404


def test_session_switch_closes_the_previous_board(client: TestClient, store) -> None:
    client.get("/tasks")
    sessions = client.app.state.sessions
    admin_board = sessions.for_user(store.get_user("u_admin")).tasks
    assert admin_board.mounted
    assert admin_board.active_timers == 2

    _sign_in(client, "u_grace")

    assert not admin_board.mounted
    assert admin_board.active_timers == 0
    assert len(sessions) == 1

    _sign_in(client, "u_grace")
    assert len(sessions) == 1


def test_task_board_creates_tasks_through_the_dialog(client: TestClient, store) -> None:
    assert client.post("/tasks/new").status_code == 409

    client.post("/tasks/new/open")
    partial = client.post("/tasks/new", data={"title": "Cut stickers"})
    assert "New Production Ticket" in partial.text

    client.post(
        "/tasks/new",
        data={
            "title": "Cut stickers",
            "assigned_to": "u_peter",
            "deadline": "2024-03-07T18:30",
            "sale_id": "",
        },
    )

    created = store.get_task("task_0003")
    assert created.assigned_to_name == "peter"
    assert created.deadline == "2024-03-07T18:30:00.000Z"
    assert "6h 30m left" in client.get("/tasks").text


def test_task_board_status_change_shows_toast(client: TestClient, store) -> None:
    _sign_in(client, "u_grace")

    page = client.post("/tasks/task_0001/advance").text

    assert "Status updated to In Progress" in page
    assert "Finish Task" in page
    assert store.get_task("task_0001").status.value == "In Progress"
    assert "Status updated" not in client.get("/tasks").text


def test_task_board_delete_flow(client: TestClient, store) -> None:
    page = client.post("/tasks/task_0001/delete").text
    assert "Purge Task" in page

    client.post("/tasks/delete/confirm")

    assert [task.task_id for task in store.snapshot().tasks] == ["task_0002"]


def test_countdowns_endpoint(client: TestClient) -> None:
    client.get("/tasks")

    payload = client.get("/countdowns").json()

    assert payload["task_0001"] == {"label": "1d 2h left", "overdue": False}
    assert payload["task_0002"] == {"label": "OVERDUE", "overdue": True}


def test_expense_ledger_daily_log_mode(client: TestClient) -> None:
    _sign_in(client, "u_grace")

    page = client.get("/expenses").text

    assert "Daily Log Mode" in page
    assert "Paper" in page
    assert "Boda" not in page
    assert client.post("/expenses/exp_0002/edit").status_code == 403


def test_expense_ledger_user_submission(client: TestClient, store) -> None:
    _sign_in(client, "u_peter")
    assert "No expenditure flow detected" in client.get("/expenses").text

    client.post("/expenses/new/open")
    page = client.post(
        "/expenses/new",
        data={"date": "2024-03-07", "category": "Fuel", "description": "Generator", "amount": "25000"},
    ).text

    assert "Generator" in page
    assert store.get_expense("exp_0005").user_id == "u_peter"


def test_expense_submission_rejects_malformed_dates(client: TestClient, store) -> None:
    _sign_in(client, "u_grace")
    client.post("/expenses/new/open")

    response = client.post(
        "/expenses/new",
        data={"date": "2024-3-07", "category": "Supplies", "description": "Toner"},
    )

    assert response.status_code == 400
    assert len(store.snapshot().expenses) == 4
    assert client.get("/expenses").status_code == 200

    _sign_in(client, "u_admin")
    assert client.get("/expenses/export.csv").status_code == 200
    assert client.get("/expenses/report").status_code == 200


def test_expense_csv_export_matches_filters(client: TestClient) -> None:
    client.post("/expenses/filters", data={"category": "Rent"})

    response = client.get("/expenses/export.csv")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert 'filename="eko_prints_expenses_2024-03-07.csv"' in response.headers["content-disposition"]
    lines = response.text.splitlines()
    assert lines[0] == "Date,User,Category,Description,Amount (UGX)"
    assert lines[1:] == [
        '3/1/2024,"Unknown User","Rent","Deposit",100000',
        '2/15/2024,"amina","Rent","Workshop rent",850000',
    ]
    assert "CSV export started." in client.get("/expenses").text


def test_expense_printable_report(client: TestClient) -> None:
    response = client.get("/expenses/report")

    assert response.status_code == 200
    assert "Expenses Report" in response.text
    assert "1,021,500 UGX" in response.text
    assert "window.print()" in response.text


def test_expense_printable_report_matches_filters(client: TestClient) -> None:
    client.post("/expenses/filters", data={"category": "Rent"})

    response = client.get("/expenses/report")

    assert response.status_code == 200
    assert "Filters: Category: Rent" in response.text
    assert "Workshop rent" in response.text
    assert "Paper" not in response.text
    assert "950,000 UGX" in response.text
    assert "1,021,500 UGX" not in response.text


def test_category_management_requires_admin(client: TestClient, store) -> None:
    client.post("/categories/new/open")
    client.post("/categories/new", data={"name": "Fuel"})
    assert [category.name for category in store.snapshot().categories] == ["Fuel", "Rent", "Supplies"]

    _sign_in(client, "u_grace")
    assert client.post("/categories/new/open").status_code == 403
    assert client.post("/expenses/tab", data={"tab": "categories"}).status_code == 403
