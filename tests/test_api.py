from datetime import timedelta

from library_app.extensions import db


def test_health(client):
    assert client.get("/health").get_json() == {"ok": True}


def test_register_and_login(client):
    r = client.post("/auth/register", json={"username": "dana", "email": "dana@example.com", "password": "pw"})
    assert r.status_code == 201
    assert r.get_json()["role"] == "user"

    dup = client.post("/auth/register", json={"username": "dana", "email": "x@example.com", "password": "pw"})
    assert dup.status_code == 409
    assert dup.get_json()["success"] is False

    bad = client.post("/auth/login", json={"username": "dana", "password": "nope"})
    assert bad.status_code == 401

    ok = client.post("/auth/login", json={"username": "dana", "password": "pw"})
    token = ok.get_json()["access_token"]
    me = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.get_json()["user"]["email"] == "dana@example.com"


def test_borrow_return_cycle(client, clock, make_user, make_book, auth_header):
    user = make_user()
    book = make_book(total=1)
    headers = auth_header(user)

    r = client.post("/borrow/", json={"book_id": book.id}, headers=headers)
    assert r.status_code == 201
    due = r.get_json()["data"]["due_date"]
    assert due == (clock.now() + timedelta(days=14)).isoformat()

    again = client.post("/borrow/", json={"book_id": book.id}, headers=headers)
    assert again.status_code == 409
    assert again.get_json()["message"] == "no copies available"

    clock.advance(days=17)
    r = client.post(f"/borrow/{book.id}/return", headers=headers)
    body = r.get_json()["data"]
    assert r.status_code == 200
    assert body["fine"]["amount"] == 3.0
    assert body["fine"]["status"] == "PENDING"

    twice = client.post(f"/borrow/{book.id}/return", headers=headers)
    assert twice.status_code == 404


def test_borrow_errors(client, clock, make_user, make_book, auth_header):
    headers = auth_header(make_user())

    assert client.post("/borrow/", json={}, headers=headers).status_code == 400
    assert client.post("/borrow/", json={"book_id": 12345}, headers=headers).status_code == 404

    for _ in range(3):
        client.post("/borrow/", json={"book_id": make_book().id}, headers=headers)
    r = client.post("/borrow/", json={"book_id": make_book().id}, headers=headers)
    assert r.status_code == 422
    assert "borrow limit" in r.get_json()["message"]


def test_requires_token(client, make_book):
    assert client.post("/borrow/", json={"book_id": make_book().id}).status_code == 401


def test_history_pages(client, clock, make_user, make_book, auth_header):
    user = make_user()
    headers = auth_header(user)
    for _ in range(3):
        client.post("/borrow/", json={"book_id": make_book().id}, headers=headers)
        clock.advance(minutes=5)

    r = client.get("/borrow/history?status=active&page=2&limit=2", headers=headers)
    body = r.get_json()
    assert body["total"] == 3
    assert len(body["data"]) == 1
    assert body["data"][0]["status"] == "active"

    assert client.get("/borrow/history?status=lost", headers=headers).status_code == 400


def test_pay_fine_flow(client, clock, make_user, make_book, auth_header):
    user = make_user()
    book = make_book()
    headers = auth_header(user)
    client.post("/borrow/", json={"book_id": book.id}, headers=headers)
    clock.advance(days=15)
    client.post(f"/borrow/{book.id}/return", headers=headers)

    fines = client.get("/fines/my", headers=headers).get_json()
    assert fines["total"] == 1.0
    fine_id = fines["data"][0]["id"]

    blocked = client.post("/borrow/", json={"book_id": book.id}, headers=headers)
    assert blocked.status_code == 422

    r = client.post(f"/fines/{fine_id}/pay", json={"payment_method": "cash"}, headers=headers)
    assert r.get_json()["data"]["status"] == "PAID"

    assert client.post("/borrow/", json={"book_id": book.id}, headers=headers).status_code == 201
    history = client.get("/fines/history?status=paid", headers=headers).get_json()
    assert [f["id"] for f in history["data"]] == [fine_id]


def test_admin_only_endpoints(client, clock, notifier, make_user, auth_header):
    user_headers = auth_header(make_user())
    admin_headers = auth_header(make_user(role="admin"))

    payload = {"title": "Neuromancer", "author": "William Gibson", "total_copies": 2}
    assert client.post("/books/", json=payload, headers=user_headers).status_code == 403
    created = client.post("/books/", json=payload, headers=admin_headers)
    assert created.status_code == 201

    book_id = created.get_json()["id"]
    r = client.put(f"/books/{book_id}", json={"total_copies": 3}, headers=admin_headers)
    assert r.get_json()["data"]["available_copies"] == 3

    assert client.post("/notifications/run-reminders", headers=user_headers).status_code == 403
    r = client.post("/notifications/run-reminders", headers=admin_headers)
    assert r.get_json() == {"success": True, "processed": 0}


def test_catalog_is_public(client, make_book):
    book = make_book(total=2, title="Public")
    assert client.get("/books/").get_json()["data"][0]["title"] == "Public"
    assert client.get(f"/books/{book.id}").get_json()["data"]["available_copies"] == 2
    assert client.get("/books/99999").status_code == 404


def test_create_book_rejects_bad_copies(client, make_user, auth_header):
    admin_headers = auth_header(make_user(role="admin"))
    for copies in [None, "two"]:
        r = client.post("/books/", json={"title": "T", "author": "A", "total_copies": copies}, headers=admin_headers)
        assert r.status_code == 400
        assert r.get_json() == {"success": False, "message": "total_copies must be an integer"}


def test_catalog_search(client, make_book):
    make_book(total=1, available=0, title="Dune Messiah")
    make_book(total=1, title="Dune")
    make_book(total=1, title="Hyperion")

    body = client.get("/books/?q=dune&available=true").get_json()
    assert [b["title"] for b in body["data"]] == ["Dune"]
    assert body["pagination"] == {"total": 1, "page": 1, "limit": 10, "total_pages": 1}

    body = client.get("/books/?author=some&limit=2&page=2").get_json()
    assert [b["title"] for b in body["data"]] == ["Hyperion"]
    assert body["pagination"]["total_pages"] == 2

    assert client.get("/books/?page=0").status_code == 400
    assert client.get("/books/?limit=x").status_code == 400


def test_deleted_book_leaves_catalog(client, make_user, make_book, auth_header):
    admin_headers = auth_header(make_user(role="admin"))
    book = make_book()
    assert client.delete(f"/books/{book.id}", headers=admin_headers).status_code == 200
    assert client.get(f"/books/{book.id}").status_code == 404
    assert client.get("/books/").get_json()["data"] == []


def test_reminder_logs_with_mail_sink(client, clock, make_user, make_book, auth_header):
    user = make_user("heidi")
    admin_headers = auth_header(make_user(role="admin"))
    r = client.post("/borrow/", json={"book_id": make_book().id}, headers=auth_header(user))
    borrow_id = r.get_json()["data"]["id"]

    clock.advance(days=13)
    assert client.post("/notifications/run-reminders", headers=admin_headers).get_json()["processed"] == 1

    logs = client.get("/notifications/logs", headers=admin_headers).get_json()["data"]
    assert len(logs) == 1
    assert logs[0]["borrow_id"] == borrow_id
    assert logs[0]["email"] == "heidi@example.com"
    assert logs[0]["type"] == "due_reminder"
    assert logs[0]["success"] is True


def test_history_shows_fine(client, clock, make_user, make_book, auth_header):
    headers = auth_header(make_user())
    book = make_book()
    client.post("/borrow/", json={"book_id": book.id}, headers=headers)
    clock.advance(days=15)
    client.post(f"/borrow/{book.id}/return", headers=headers)

    item = client.get("/borrow/history", headers=headers).get_json()["data"][0]
    assert item["fine"]["amount"] == 1.0
    assert item["fine"]["status"] == "PENDING"


def test_admin_changes_role(client, make_user, auth_header):
    user = make_user()
    admin_headers = auth_header(make_user(role="admin"))

    assert client.put(f"/users/{user.id}/role", json={"role": "admin"}, headers=auth_header(user)).status_code == 403
    assert client.put(f"/users/{user.id}/role", json={}, headers=admin_headers).status_code == 400
    assert client.put(f"/users/{user.id}/role", json={"role": "owner"}, headers=admin_headers).status_code == 400
    assert client.put("/users/99999/role", json={"role": "admin"}, headers=admin_headers).status_code == 404

    r = client.put(f"/users/{user.id}/role", json={"role": "Admin"}, headers=admin_headers)
    assert r.get_json()["data"]["role"] == "admin"

    # a token issued after the change carries the new role
    db.session.refresh(user)
    payload = {"title": "Promoted", "author": "A", "total_copies": 1}
    assert client.post("/books/", json=payload, headers=auth_header(user)).status_code == 201


def test_profile_and_deactivation(client, clock, make_book):
    client.post("/auth/register", json={"username": "ivan", "email": "ivan@example.com", "password": "pw"})
    token = client.post("/auth/login", json={"username": "ivan", "password": "pw"}).get_json()["access_token"]
    headers = {"Authorization": f"Bearer {token}"}

    r = client.put("/users/profile", json={"email": "ivan@library.org"}, headers=headers)
    assert r.get_json()["data"]["email"] == "ivan@library.org"
    r = client.put("/users/profile", json={"new_password": "pw2"}, headers=headers)
    assert r.status_code == 400
    assert client.get("/users/profile", headers=headers).get_json()["data"]["is_active"] is True

    book = make_book()
    client.post("/borrow/", json={"book_id": book.id}, headers=headers)
    r = client.post("/users/deactivate", headers=headers)
    assert r.status_code == 409
    assert r.get_json() == {"success": False, "message": "cannot deactivate while books are borrowed"}

    client.post(f"/borrow/{book.id}/return", headers=headers)
    assert client.post("/users/deactivate", headers=headers).status_code == 200

    assert client.post("/auth/login", json={"username": "ivan", "password": "pw"}).status_code == 401
    assert client.post("/borrow/", json={"book_id": book.id}, headers=headers).status_code == 422
