from datetime import date


def _spend(client, headers, amount, category=None):
    payload = {"amount": amount, "type": "EXPENSE", "date": date.today().isoformat()}
    if category:
        payload["categoryId"] = category
    response = client.post("/api/transactions", json=payload, headers=headers)
    assert response.status_code == 201, response.text


def _budget(client, headers, category, amount):
    today = date.today()
    return client.post(
        "/api/budgets",
        json={"categoryId": category, "budgetAmount": amount, "month": today.month, "year": today.year},
        headers=headers,
    )


def test_upsert_budget(client, auth_headers, category_id):
    food = category_id(auth_headers, "Alimentación")
    first = _budget(client, auth_headers, food, 300)
    assert first.status_code == 201
    second = _budget(client, auth_headers, food, 450)
    assert second.status_code == 201

    assert first.json()["data"]["budget"]["id"] == second.json()["data"]["budget"]["id"]
    assert second.json()["data"]["budget"]["budgetAmount"] == 450

    budgets = client.get("/api/budgets", headers=auth_headers).json()["data"]["budgets"]
    assert len(budgets) == 1


def test_budget_needs_expense_category(client, auth_headers, category_id):
    salary = category_id(auth_headers, "Salario")
    response = _budget(client, auth_headers, salary, 300)
    assert response.status_code == 400


def test_budget_rejects_bad_month(client, auth_headers, category_id):
    food = category_id(auth_headers, "Alimentación")
    response = client.post(
        "/api/budgets",
        json={"categoryId": food, "budgetAmount": 100, "month": 13, "year": 2026},
        headers=auth_headers,
    )
    assert response.status_code == 400


def test_budgets_with_actuals(client, auth_headers, category_id):
    food = category_id(auth_headers, "Alimentación")
    transport = category_id(auth_headers, "Transporte")
    _budget(client, auth_headers, food, 300)
    _budget(client, auth_headers, transport, 100)
    _spend(client, auth_headers, 250, food)
    _spend(client, auth_headers, 150, food)
    _spend(client, auth_headers, 40, transport)
    _spend(client, auth_headers, 10)

    data = client.get("/api/budgets", headers=auth_headers).json()["data"]
    by_name = {b["category"]["name"]: b for b in data["budgets"]}

    assert list(by_name) == ["Alimentación", "Transporte"]
    assert by_name["Alimentación"]["actualSpent"] == 400
    assert by_name["Alimentación"]["remaining"] == -100
    assert by_name["Alimentación"]["percentageUsed"] == 100.0
    assert by_name["Alimentación"]["isOverBudget"] is True
    assert by_name["Transporte"]["percentageUsed"] == 40.0
    assert by_name["Transporte"]["isOverBudget"] is False

    summary = data["summary"]
    assert summary["totalBudget"] == 400
    assert summary["totalSpent"] == 450
    assert summary["totalRemaining"] == -50
    assert summary["percentageUsed"] == 112.5


def test_budget_summary(client, auth_headers, category_id):
    food = category_id(auth_headers, "Alimentación")
    _budget(client, auth_headers, food, 200)
    _spend(client, auth_headers, 50, food)

    data = client.get("/api/budgets/summary", headers=auth_headers).json()["data"]
    assert data["month"] == date.today().month
    assert data["totalBudget"] == 200
    assert data["categories"] == [
        {"categoryId": food, "budgetAmount": 200, "actualSpent": 50, "remaining": 150, "percentageUsed": 25.0}
    ]


def test_budgets_of_other_month_are_empty(client, auth_headers, category_id):
    food = category_id(auth_headers, "Alimentación")
    _budget(client, auth_headers, food, 200)
    other_year = date.today().year - 1
    data = client.get("/api/budgets", params={"year": other_year}, headers=auth_headers).json()["data"]
    assert data["budgets"] == []
    assert data["summary"]["percentageUsed"] == 0.0


def test_delete_budget(client, auth_headers, other_headers, category_id):
    food = category_id(auth_headers, "Alimentación")
    budget = _budget(client, auth_headers, food, 200).json()["data"]["budget"]
    assert client.delete(f"/api/budgets/{budget['id']}", headers=other_headers).status_code == 404
    assert client.delete(f"/api/budgets/{budget['id']}", headers=auth_headers).status_code == 200
    assert client.get("/api/budgets", headers=auth_headers).json()["data"]["budgets"] == []


def test_budget_period_out_of_range(client, auth_headers):
    for path in ("/api/budgets", "/api/budgets/summary"):
        response = client.get(path, params={"year": 10000}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json()["success"] is False
