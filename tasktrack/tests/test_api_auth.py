"""Registration, login, tokens and the error envelope."""


def test_register_returns_tokens_and_string_ids(client, register):
    headers, user = register()
    assert user["id"] == "1"
    assert user["email"] == "mario@example.com"

    response = client.get("/auth/me", headers=headers)
    assert response.status_code == 200
    assert response.json() == {"success": True, "data": response.json()["data"]}
    assert response.json()["data"]["name"] == "Mario"


def test_duplicate_email_conflicts(client, register):
    register()
    response = client.post("/auth/register", json={
        "email": "Mario@Example.com",
        "password": "another1",
        "name": "Mario",
        "surname": "Bis",
    })
    assert response.status_code == 409
    assert response.json() == {"success": False, "error": "Email already exists"}


def test_invalid_registration_is_a_400(client):
    response = client.post("/auth/register", json={
        "email": "not-an-email",
        "password": "123",
        "name": "A",
        "surname": "B",
    })
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_login_errors_do_not_reveal_which_part_was_wrong(client, register):
    register()
    wrong_password = client.post("/auth/login", json={"email": "mario@example.com", "password": "nope123"})
    unknown_email = client.post("/auth/login", json={"email": "nobody@example.com", "password": "secret123"})

    assert wrong_password.status_code == 401
    assert unknown_email.status_code == 401
    assert wrong_password.json()["error"] == unknown_email.json()["error"] == "Invalid email or password"


def test_login_and_refresh(client, register):
    register()
    login = client.post("/auth/login", json={"email": "mario@example.com", "password": "secret123"})
    assert login.status_code == 200
    tokens = login.json()["data"]

    refreshed = client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert refreshed.status_code == 200
    assert refreshed.json()["data"]["user"]["email"] == "mario@example.com"

    # An access token is not accepted as a refresh token
    rejected = client.post("/auth/refresh", json={"refresh_token": tokens["access_token"]})
    assert rejected.status_code == 401


def test_protected_route_without_token(client):
    response = client.get("/boards")
    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Could not validate credentials"}


def test_update_profile(client, register):
    headers, _ = register()
    response = client.patch("/auth/me", headers=headers, json={"name": "Maria", "avatar_url": "http://img/1.png"})
    assert response.status_code == 200
    assert response.json()["data"]["name"] == "Maria"
    assert response.json()["data"]["surname"] == "Rossi"


def test_logout(client, register):
    headers, _ = register()
    response = client.post("/auth/logout", headers=headers)
    assert response.json() == {"success": True, "data": None}


def test_new_user_gets_default_priorities(client, register):
    headers, _ = register()
    response = client.get("/priorities", headers=headers)
    levels = [p["priority_level"] for p in response.json()["data"]]
    assert levels == ["Bassa", "Media", "Alta", "Urgente"]
    assert all(p["reminders"] == [] for p in response.json()["data"])


def test_list_and_search_users(client, register):
    headers, _ = register()
    register("luigi@example.com", name="Luigi", surname="Verdi")

    everyone = client.get("/users", headers=headers).json()["data"]
    assert {u["email"] for u in everyone} == {"mario@example.com", "luigi@example.com"}

    found = client.get("/users", headers=headers, params={"search": "verd"}).json()["data"]
    assert [u["name"] for u in found] == ["Luigi"]
