def _register(client, email="ana@example.com", password="s3cret-pass"):
    return client.post("/auth/register", json={"email": email, "password": password})


def _token(client, email="ana@example.com", password="s3cret-pass"):
    response = client.post("/auth/login", data={"username": email, "password": password})
    assert response.status_code == 200
    return response.json()["access_token"]


def test_register_and_login(anon_client):
    response = _register(anon_client)
    assert response.status_code == 201
    user_id = response.json()["id"]

    token = _token(anon_client)
    me = anon_client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json() == {"user_id": user_id}


def test_register_rejects_duplicate_email(anon_client):
    _register(anon_client)
    response = _register(anon_client)
    assert response.status_code == 400
    assert response.json()["message"] == "Email already registered"


def test_login_with_wrong_password(anon_client):
    _register(anon_client)
    response = anon_client.post("/auth/login", data={"username": "ana@example.com", "password": "nope"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid credentials"


def test_private_routes_require_token(anon_client):
    assert anon_client.get("/transactions").status_code == 401
    response = anon_client.get("/budgets", headers={"Authorization": "Bearer garbage"})
    assert response.status_code == 401
    assert response.json()["message"] == "Invalid token"


def test_token_scopes_data_to_its_user(anon_client):
    _register(anon_client)
    _register(anon_client, email="luis@example.com")
    ana = {"Authorization": f"Bearer {_token(anon_client)}"}
    luis = {"Authorization": f"Bearer {_token(anon_client, email='luis@example.com')}"}

    created = anon_client.post(
        "/transactions", json={"name": "Lunch", "category": "Food", "cost": 9}, headers=ana
    )
    assert created.status_code == 201

    assert anon_client.get("/transactions", headers=ana).json()["total"] == 1
    assert anon_client.get("/transactions", headers=luis).json()["total"] == 0
