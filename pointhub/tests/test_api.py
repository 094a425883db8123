"""
HTTP 层测试：字段名（camelCase）、错误信息字符串、状态码、审计日志。
"""


def _new_class(client, name="1A"):
    r = client.post("/api/classes", json={"name": name, "description": "d"})
    assert r.status_code == 201
    return r.json()


def _new_student(client, class_id, name="Amy", number="001", points=10):
    r = client.post(
        "/api/students",
        json={"name": name, "student_number": number, "points": points, "class_id": class_id},
    )
    assert r.status_code == 201
    return r.json()


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_class_fields_are_camel_case(client):
    body = _new_class(client)
    assert set(body) == {"id", "name", "description", "studentCount", "createdAt"}
    assert body["studentCount"] == 0


def test_student_fields_and_count(client):
    c = _new_class(client)
    s = _new_student(client, c["id"])
    assert s["studentNumber"] == "001"
    assert s["classId"] == c["id"]
    assert s["className"] == "1A"
    got = client.get(f"/api/classes/{c['id']}").json()
    assert got["studentCount"] == 1


def test_update_class_rename_flow(client):
    c = _new_class(client)
    _new_student(client, c["id"])
    r = client.patch(f"/api/classes/{c['id']}", json={"name": "1B"})
    assert r.status_code == 200
    assert r.json()["name"] == "1B"
    students = client.get(f"/api/classes/{c['id']}/students").json()
    assert [s["className"] for s in students] == ["1B"]


def test_empty_update_is_400_with_message(client):
    c = _new_class(client)
    r = client.patch(f"/api/classes/{c['id']}", json={})
    assert r.status_code == 400
    assert r.json()["detail"] == "No fields to update"


def test_missing_class_is_404(client):
    r = client.get("/api/classes/nope")
    assert r.status_code == 404
    assert r.json()["detail"] == "Class not found: nope"


def test_delete_class(client):
    c = _new_class(client)
    assert client.delete(f"/api/classes/{c['id']}").json() == {"message": "ok"}
    assert client.get("/api/classes").json() == []


def test_adjust_points(client):
    c = _new_class(client)
    s = _new_student(client, c["id"], points=5)
    r = client.post(f"/api/students/{s['id']}/points", json={"delta": -7})
    assert r.status_code == 200
    assert r.json()["points"] == -2


def test_purchase_flow(client):
    c = _new_class(client)
    s = _new_student(client, c["id"], points=20)
    p = client.post("/api/products", json={"name": "Pen", "points": 5, "stock": 3, "class_id": c["id"]}).json()
    assert p["classId"] == c["id"]

    r = client.post("/api/purchases/redeem", json={"product_id": p["id"], "student_id": s["id"], "quantity": 2})
    assert r.status_code == 201
    rec = r.json()
    assert rec["totalPoints"] == 10
    assert rec["shippingStatus"] == "pending"
    assert rec["productName"] == "Pen"

    r = client.post("/api/purchases/redeem", json={"product_id": p["id"], "student_id": s["id"], "quantity": 5})
    assert r.status_code == 400
    assert r.json()["detail"].startswith("Insufficient stock")

    page = client.get(f"/api/classes/{c['id']}/purchases/page", params={"page": 1, "page_size": 10}).json()
    assert page["total"] == 1
    assert page["totalPages"] == 1
    assert page["currentPage"] == 1
    assert page["pageSize"] == 10

    r = client.post(f"/api/purchases/{rec['id']}/shipping", json={"shipping_status": "delivered"})
    assert r.json() == {"message": "ok"}
    listed = client.get(f"/api/classes/{c['id']}/purchases").json()
    assert listed[0]["shippingStatus"] == "delivered"


def test_import_and_export_students(client):
    c = _new_class(client)
    csv = "学号,学生姓名,积分\n001,Amy,10\n".encode("utf-8")
    r = client.post(f"/api/classes/{c['id']}/students/import", content=csv)
    assert r.status_code == 200
    assert r.json()["created"] == 1

    r = client.get(f"/api/classes/{c['id']}/students/export")
    assert r.status_code == 200
    text = r.content.decode("utf-8-sig")
    assert text.splitlines() == ["学号,学生姓名,积分", "001,Amy,10"]


def test_save_file_to_desktop(client, tmp_path):
    r = client.post("/api/files/desktop", json={"filename": "x.csv", "data": [104, 105]})
    assert r.status_code == 200
    with open(r.json()["path"], "rb") as f:
        assert f.read() == b"hi"

    r = client.post("/api/files/desktop", json={"filename": "x.csv", "data": [300]})
    assert r.status_code == 400


def test_operations_are_audited(client):
    _new_class(client)
    client.patch("/api/classes/nope", json={"name": "x"})
    logs = client.get("/api/logs/search", params={"size": 10}).json()
    assert logs["total"] == 2
    results = {(i["action"], i["result"]) for i in logs["items"]}
    assert results == {("CREATE_CLASS", "OK"), ("UPDATE_CLASS", "ERROR")}
    err = [i for i in logs["items"] if i["result"] == "ERROR"][0]
    assert err["err_msg"] == "Class not found: nope"
