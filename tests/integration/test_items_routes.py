def test_add_and_list_items(client):
    created = client.post("/api/items", json={"name": "Milk", "quantity": 2})
    merged = client.post("/api/items", json={"name": " MILK ", "quantity": 1})

    assert created.status_code == 201
    assert merged.json()["id"] == created.json()["id"]
    assert merged.json()["quantity"] == 3

    items = client.get("/api/items").json()
    assert len(items) == 1
    assert set(items[0]) == {"id", "name", "quantity", "createdAt", "updatedAt"}


def test_get_update_delete_item(client):
    item_id = client.post("/api/items", json={"name": "Eggs"}).json()["id"]

    assert client.get(f"/api/items/{item_id}").json()["name"] == "Eggs"

    updated = client.put(f"/api/items/{item_id}", json={"quantity": 12})
    assert updated.status_code == 200
    assert updated.json()["quantity"] == 12

    assert client.delete(f"/api/items/{item_id}").status_code == 204
    assert client.get(f"/api/items/{item_id}").status_code == 404
    assert client.delete(f"/api/items/{item_id}").status_code == 404


def test_unknown_item_returns_404(client):
    assert client.get("/api/items/missing").status_code == 404
    assert client.put("/api/items/missing", json={"quantity": 1}).status_code == 404


def test_invalid_item_payloads_return_400(client):
    assert client.post("/api/items", json={"name": "Milk", "quantity": 0}).status_code == 400
    assert client.post("/api/items", json={"quantity": 1}).status_code == 400

    blank = client.post("/api/items", json={"name": "   "})
    assert blank.status_code == 400
    assert blank.json()["message"] == "Item name cannot be blank"


def test_clear_items(client):
    client.post("/api/items", json={"name": "Milk"})
    client.post("/api/items", json={"name": "Bread"})

    assert client.delete("/api/items").status_code == 204
    assert client.get("/api/items").json() == []
