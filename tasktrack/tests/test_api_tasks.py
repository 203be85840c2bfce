"""Tasks, comments, attachments and priority reminders over HTTP."""
from datetime import datetime
from tasktrack.db.models.user import User
from tasktrack.db.models.task import Task as TaskModel
from tasktrack.schemas.task import TaskCreate, TaskUpdate
from tasktrack.services.board_service import BoardService
from tasktrack.services.task_service import TaskService
from tasktrack.schemas.board import BoardCreate


def setup_board(client, register):
    headers, user = register()
    board = client.post("/boards", headers=headers, json={"title": "Lavoro"}).json()["data"]
    return headers, user, board


def create_task(client, headers, board_id, **fields):
    payload = {"title": "Exam prep", "due_date": "2024-06-10T10:00:00", **fields}
    response = client.post(f"/boards/{board_id}/tasks", headers=headers, json=payload)
    assert response.status_code == 201, response.text
    return response.json()["data"]


def test_create_task_assigns_creator_by_default(client, register):
    headers, user, board = setup_board(client, register)
    category_id = board["categories"][0]["id"]

    task = create_task(client, headers, board["id"], priority="Alta", category_ids=[category_id])

    assert task["priority"] == "Alta"
    assert task["column_id"] == "todo"
    assert [a["id"] for a in task["assignees"]] == [user["id"]]
    assert [c["name"] for c in task["categories"]] == ["Da fare"]
    assert task["comments"] == 0
    assert task["attachments"] == 0


def test_tasks_are_listed_by_due_date(client, register):
    headers, _, board = setup_board(client, register)
    create_task(client, headers, board["id"], title="later", due_date="2024-06-20T09:00:00")
    create_task(client, headers, board["id"], title="sooner", due_date="2024-06-01T09:00:00")

    tasks = client.get(f"/boards/{board['id']}/tasks", headers=headers).json()["data"]
    assert [t["title"] for t in tasks] == ["sooner", "later"]


def test_category_from_another_board_is_rejected(client, register):
    headers, _, board = setup_board(client, register)
    other = client.post("/boards", headers=headers, json={"title": "Altro"}).json()["data"]

    response = client.post(f"/boards/{board['id']}/tasks", headers=headers, json={
        "title": "x",
        "due_date": "2024-06-10T10:00:00",
        "category_ids": [other["categories"][0]["id"]],
    })
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_missing_due_date_is_rejected(client, register):
    headers, _, board = setup_board(client, register)
    response = client.post(f"/boards/{board['id']}/tasks", headers=headers, json={"title": "no date"})
    assert response.status_code == 400


def test_partial_update_and_relation_replacement(client, register):
    headers, _, board = setup_board(client, register)
    first, second = board["categories"][0]["id"], board["categories"][1]["id"]
    task = create_task(client, headers, board["id"], category_ids=[first])

    renamed = client.patch(f"/tasks/{task['id']}", headers=headers, json={"title": "Exam prep v2"}).json()["data"]
    assert renamed["title"] == "Exam prep v2"
    assert [c["id"] for c in renamed["categories"]] == [first]

    replaced = client.patch(f"/tasks/{task['id']}", headers=headers, json={"category_ids": [second, first]}).json()["data"]
    assert {c["id"] for c in replaced["categories"]} == {first, second}

    cleared = client.patch(f"/tasks/{task['id']}", headers=headers, json={"category_ids": []}).json()["data"]
    assert cleared["categories"] == []
    assert cleared["title"] == "Exam prep v2"


def test_move_task_between_columns(client, register):
    headers, _, board = setup_board(client, register)
    task = create_task(client, headers, board["id"])

    moved = client.patch(f"/tasks/{task['id']}/column", headers=headers, json={"column_id": "done"})
    assert moved.json()["data"]["column_id"] == "done"

    invalid = client.patch(f"/tasks/{task['id']}/column", headers=headers, json={"column_id": "archived"})
    assert invalid.status_code == 400


def test_comments(client, register):
    headers, user, board = setup_board(client, register)
    task = create_task(client, headers, board["id"])

    added = client.post(f"/tasks/{task['id']}/comments", headers=headers, json={"text": "Inizio domani"})
    assert added.status_code == 201
    assert added.json()["data"]["author"]["id"] == user["id"]

    comments = client.get(f"/tasks/{task['id']}/comments", headers=headers).json()["data"]
    assert [c["text"] for c in comments] == ["Inizio domani"]
    assert client.get(f"/tasks/{task['id']}", headers=headers).json()["data"]["comments"] == 1


def test_attachment_lifecycle(client, register, storage):
    headers, _, board = setup_board(client, register)
    task = create_task(client, headers, board["id"])

    uploaded = client.post(
        f"/tasks/{task['id']}/attachments",
        headers=headers,
        files={"file": ("../notes.txt", b"hello world", "text/plain")},
    )
    assert uploaded.status_code == 201
    attachment = uploaded.json()["data"]
    assert attachment["name"] == "notes.txt"
    assert attachment["file_path"].startswith(f"{task['id']}/")
    assert attachment["file_path"].endswith("_notes.txt")
    assert attachment["file_size"] == 11
    assert storage.exists(attachment["file_path"])

    download = client.get(attachment["url"].replace("http://testserver", ""))
    assert download.status_code == 200
    assert download.content == b"hello world"

    listed = client.get(f"/tasks/{task['id']}/attachments", headers=headers).json()["data"]
    assert [a["id"] for a in listed] == [attachment["id"]]

    assert client.delete(f"/attachments/{attachment['id']}", headers=headers).status_code == 200
    assert not storage.exists(attachment["file_path"])
    assert client.get(f"/tasks/{task['id']}", headers=headers).json()["data"]["attachments"] == 0


def test_bad_signed_url_is_404(client):
    assert client.get("/storage/signed/not-a-token").status_code == 404


def test_delete_task_removes_blobs_and_children(client, register, storage):
    headers, _, board = setup_board(client, register)
    task = create_task(client, headers, board["id"])
    client.post(f"/tasks/{task['id']}/comments", headers=headers, json={"text": "x"})
    path = client.post(
        f"/tasks/{task['id']}/attachments",
        headers=headers,
        files={"file": ("a.bin", b"\x00\x01", "application/octet-stream")},
    ).json()["data"]["file_path"]

    assert client.delete(f"/tasks/{task['id']}", headers=headers).status_code == 200
    assert not storage.exists(path)
    assert client.get(f"/tasks/{task['id']}", headers=headers).status_code == 404
    assert client.get(f"/boards/{board['id']}/tasks", headers=headers).json()["data"] == []


def test_delete_board_removes_task_blobs(client, register, storage):
    headers, _, board = setup_board(client, register)
    task = create_task(client, headers, board["id"])
    path = client.post(
        f"/tasks/{task['id']}/attachments",
        headers=headers,
        files={"file": ("plan.pdf", b"%PDF", "application/pdf")},
    ).json()["data"]["file_path"]

    assert client.delete(f"/boards/{board['id']}", headers=headers).status_code == 200
    assert not storage.exists(path)


def test_viewer_cannot_change_tasks(client, register):
    headers, _, board = setup_board(client, register)
    guest_headers, _ = register("luigi@example.com", name="Luigi", surname="Verdi")
    client.post(f"/boards/{board['id']}/guests", headers=headers, json={"email": "luigi@example.com"})
    task = create_task(client, headers, board["id"])

    assert client.get(f"/tasks/{task['id']}", headers=guest_headers).status_code == 200
    assert client.patch(f"/tasks/{task['id']}/column", headers=guest_headers, json={"column_id": "done"}).status_code == 403
    assert client.post(f"/tasks/{task['id']}/comments", headers=guest_headers, json={"text": "ciao"}).status_code == 403
    assert client.get(f"/tasks/{task['id']}/comments", headers=guest_headers).json()["data"] == []


def test_updated_at_only_moves_on_scalar_changes(db, storage):
    user = User(email="anna@example.com", name="Anna", surname="Bianchi")
    db.add(user)
    db.commit()

    board = BoardService(db, user, storage).create_board(BoardCreate(title="Casa"))
    service = TaskService(db, user, storage)
    created = service.create_task(board.id, TaskCreate(title="Spesa", due_date=datetime(2024, 6, 10)))

    stamp = datetime(2020, 1, 1)
    db.query(TaskModel).filter(TaskModel.id == int(created.id)).update({"updated_at": stamp})
    db.commit()

    service.update_task(created.id, TaskUpdate(category_ids=[board.categories[0].id]))
    assert db.get(TaskModel, int(created.id)).updated_at == stamp

    service.update_task(created.id, TaskUpdate(title="Spesa grande"))
    assert db.get(TaskModel, int(created.id)).updated_at > stamp


def test_sync_reminders_replaces_the_set(client, register):
    headers, _ = register()
    configs = client.get("/priorities", headers=headers).json()["data"]
    urgent = next(c for c in configs if c["priority_level"] == "Urgente")

    first = client.put(f"/priorities/{urgent['id']}/reminders", headers=headers, json={"reminders": [
        {"value": 1, "unit": "days"},
        {"value": 2, "unit": "hours"},
    ]}).json()["data"]
    assert [(r["value"], r["unit"]) for r in first["reminders"]] == [(1, "days"), (2, "hours")]

    second = client.put(f"/priorities/{urgent['id']}/reminders", headers=headers, json={"reminders": [
        {"value": 15, "unit": "minutes"},
    ]}).json()["data"]
    assert [(r["value"], r["unit"]) for r in second["reminders"]] == [(15, "minutes")]

    too_many = client.put(f"/priorities/{urgent['id']}/reminders", headers=headers, json={"reminders": [
        {"value": i, "unit": "hours"} for i in range(1, 5)
    ]})
    assert too_many.status_code == 400


def test_priority_config_belongs_to_its_user(client, register):
    headers, _ = register()
    other_headers, _ = register("luigi@example.com", name="Luigi", surname="Verdi")
    config_id = client.get("/priorities", headers=headers).json()["data"][0]["id"]

    response = client.put(f"/priorities/{config_id}/reminders", headers=other_headers, json={"reminders": []})
    assert response.status_code == 404


def test_update_and_reset_priorities(client, register):
    headers, _ = register()
    config = client.get("/priorities", headers=headers).json()["data"][0]

    updated = client.patch(f"/priorities/{config['id']}", headers=headers, json={"label": "Tranquilla"})
    assert updated.json()["data"]["label"] == "Tranquilla"

    reset = client.post("/priorities/reset", headers=headers).json()["data"]
    assert [c["label"] for c in reset] == ["Bassa", "Media", "Alta", "Urgente"]
