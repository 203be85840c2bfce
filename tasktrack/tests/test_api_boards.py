"""Boards, guests and categories over HTTP."""
from datetime import datetime, timedelta


def create_board(client, headers, title="Università", **extra):
    response = client.post("/boards", headers=headers, json={"title": title, **extra})
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_new_board_gets_default_categories(client, register):
    headers, user = register()
    board = create_board(client, headers, description="Esami", theme="purple", icon="university")

    assert board["owner_id"] == user["id"]
    assert [(c["name"], c["color"]) for c in board["categories"]] == [
        ("Da fare", "blue"),
        ("In corso", "orange"),
        ("Completato", "green"),
    ]
    assert all(c["board_id"] == board["id"] for c in board["categories"])
    assert board["stats"] == {"deadlines": 0, "in_progress": 0, "completed": 0}


def test_board_defaults(client, register):
    headers, _ = register()
    board = create_board(client, headers, title="Misc")
    assert board["theme"] == "blue"
    assert board["icon"] == "other"


def test_list_includes_owned_and_shared_boards(client, register):
    owner_headers, _ = register()
    guest_headers, guest = register("luigi@example.com", name="Luigi", surname="Verdi")

    shared = create_board(client, owner_headers, title="Shared")
    create_board(client, guest_headers, title="Own")

    invite = client.post(f"/boards/{shared['id']}/guests", headers=owner_headers, json={"email": "luigi@example.com"})
    assert invite.status_code == 201
    assert invite.json()["data"]["role"] == "viewer"

    boards = client.get("/boards", headers=guest_headers).json()["data"]
    assert [b["title"] for b in boards] == ["Own", "Shared"]
    assert boards[1]["guests"] == [guest["id"]]


def test_stats_are_computed_from_tasks(client, register):
    headers, _ = register()
    board = create_board(client, headers)
    yesterday = (datetime.utcnow() - timedelta(days=1)).isoformat()
    next_week = (datetime.utcnow() + timedelta(days=7)).isoformat()

    for title, column, due in [
        ("late", "todo", yesterday),
        ("working", "inprogress", next_week),
        ("finished", "done", yesterday),
    ]:
        client.post(f"/boards/{board['id']}/tasks", headers=headers, json={
            "title": title, "column_id": column, "due_date": due,
        })

    fetched = client.get(f"/boards/{board['id']}", headers=headers).json()["data"]
    assert fetched["stats"] == {"deadlines": 1, "in_progress": 1, "completed": 1}


def test_board_is_hidden_from_strangers(client, register):
    owner_headers, _ = register()
    stranger_headers, _ = register("eve@example.com", name="Eve", surname="X")
    board = create_board(client, owner_headers)

    assert client.get(f"/boards/{board['id']}", headers=stranger_headers).status_code == 404
    assert client.get("/boards/not-a-number", headers=owner_headers).status_code == 404


def test_guest_invite_errors(client, register):
    headers, _ = register()
    register("luigi@example.com", name="Luigi", surname="Verdi")
    board = create_board(client, headers)

    unknown = client.post(f"/boards/{board['id']}/guests", headers=headers, json={"email": "ghost@example.com"})
    assert unknown.status_code == 400
    assert unknown.json()["error"] == "User not found with this email"

    client.post(f"/boards/{board['id']}/guests", headers=headers, json={"email": "luigi@example.com"})
    again = client.post(f"/boards/{board['id']}/guests", headers=headers, json={"email": "luigi@example.com"})
    assert again.status_code == 409
    assert again.json()["error"] == "User is already a guest of this board"


def test_guest_roles_control_writes(client, register):
    owner_headers, _ = register()
    guest_headers, guest = register("luigi@example.com", name="Luigi", surname="Verdi")
    board = create_board(client, owner_headers)
    client.post(f"/boards/{board['id']}/guests", headers=owner_headers, json={"email": "luigi@example.com"})

    denied = client.patch(f"/boards/{board['id']}", headers=guest_headers, json={"title": "Mine now"})
    assert denied.status_code == 403

    promoted = client.patch(
        f"/boards/{board['id']}/guests/{guest['id']}",
        headers=owner_headers,
        json={"role": "editor"},
    )
    assert promoted.json()["data"]["role"] == "editor"

    allowed = client.patch(f"/boards/{board['id']}", headers=guest_headers, json={"title": "Renamed"})
    assert allowed.status_code == 200
    assert allowed.json()["data"]["title"] == "Renamed"

    # Only the owner deletes
    assert client.delete(f"/boards/{board['id']}", headers=guest_headers).status_code == 403

    removed = client.delete(f"/boards/{board['id']}/guests/{guest['id']}", headers=owner_headers)
    assert removed.status_code == 200
    assert client.get(f"/boards/{board['id']}", headers=guest_headers).status_code == 404


def test_delete_board(client, register):
    headers, _ = register()
    board = create_board(client, headers)

    assert client.delete(f"/boards/{board['id']}", headers=headers).json() == {"success": True, "data": None}
    assert client.get(f"/boards/{board['id']}", headers=headers).status_code == 404
    assert client.get("/boards", headers=headers).json()["data"] == []


def test_category_crud(client, register):
    headers, _ = register()
    board = create_board(client, headers)

    created = client.post(f"/boards/{board['id']}/categories", headers=headers, json={"name": "Esami", "color": "red"})
    assert created.status_code == 201
    category = created.json()["data"]

    updated = client.patch(f"/categories/{category['id']}", headers=headers, json={"color": "pink"})
    assert updated.json()["data"] == {**category, "color": "pink"}

    listed = client.get(f"/boards/{board['id']}/categories", headers=headers).json()["data"]
    assert [c["name"] for c in listed] == ["Da fare", "In corso", "Completato", "Esami"]

    assert client.delete(f"/categories/{category['id']}", headers=headers).status_code == 200
    assert client.patch(f"/categories/{category['id']}", headers=headers, json={"color": "red"}).status_code == 404
