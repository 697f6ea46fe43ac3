"""Tests for joining and leaving a drive's group."""

from bson import ObjectId

from tests.conftest import drive_body, make_profile, register


def _get(client, account, drive):
    return client.get(f"/api/drives/{drive['id']}", headers=account["headers"]).json()


def test_join_takes_a_seat_and_prepends_the_rider(client, driver, rider, drive):
    response = client.put(f"/api/drives/join/{drive['id']}", headers=rider["headers"])
    assert response.status_code == 200

    group = response.json()
    assert [m["user"] for m in group] == [rider["id"], driver["id"]]
    assert group[0]["name"] == "Riley Rider"
    assert group[0]["phone"] == "555-987-6543"
    assert group[0]["skills"] == ["maps", "snacks"]
    assert group[0]["exp"] == "beginner"
    assert _get(client, driver, drive)["seats"] == 1


def test_join_copies_only_profile_fields_that_are_set(client, driver, drive):
    account = register(client, "Sparse", "sparse@example.com")
    client.post("/api/profile", json={"grade": "9"}, headers=account["headers"])

    group = client.put(f"/api/drives/join/{drive['id']}", headers=account["headers"]).json()
    assert group[0]["grade"] == "9"
    for key in ("type", "exp", "skills"):
        assert key not in group[0]


def test_join_twice_is_rejected(client, driver, rider, drive):
    client.put(f"/api/drives/join/{drive['id']}", headers=rider["headers"])
    response = client.put(f"/api/drives/join/{drive['id']}", headers=rider["headers"])
    assert response.status_code == 400
    assert response.json() == {"msg": "Drive already joined"}

    after = _get(client, driver, drive)
    assert len(after["group"]) == 2
    assert after["seats"] == 1


def test_driver_cannot_join_own_drive_again(client, driver, drive):
    response = client.put(f"/api/drives/join/{drive['id']}", headers=driver["headers"])
    assert response.status_code == 400
    assert response.json() == {"msg": "Drive already joined"}


def test_join_full_drive_is_rejected(client, driver, rider):
    full = client.post("/api/drives", json=drive_body(seats=0), headers=driver["headers"]).json()
    response = client.put(f"/api/drives/join/{full['id']}", headers=rider["headers"])
    assert response.status_code == 400
    assert response.json() == {"msg": "Drive full"}
    assert _get(client, driver, full) == full


def test_join_requires_a_profile(client, driver, drive):
    account = register(client, "No Profile", "np@example.com")
    response = client.put(f"/api/drives/join/{drive['id']}", headers=account["headers"])
    assert response.status_code == 400
    assert response.json() == {"msg": "You need a profile to join drives"}
    assert _get(client, driver, drive) == drive


def test_join_unknown_drive(client, rider):
    assert client.put(f"/api/drives/join/{ObjectId()}", headers=rider["headers"]).status_code == 404
    assert client.put("/api/drives/join/nope", headers=rider["headers"]).status_code == 404


def test_leave_frees_the_seat(client, driver, rider, drive):
    client.put(f"/api/drives/join/{drive['id']}", headers=rider["headers"])
    response = client.put(f"/api/drives/leave/{drive['id']}", headers=rider["headers"])
    assert response.status_code == 200
    assert [m["user"] for m in response.json()] == [driver["id"]]
    assert _get(client, driver, drive)["seats"] == 2


def test_leave_without_joining_is_rejected(client, driver, rider, drive):
    response = client.put(f"/api/drives/leave/{drive['id']}", headers=rider["headers"])
    assert response.status_code == 400
    assert response.json() == {"msg": "Drive not joined"}
    assert _get(client, driver, drive) == drive


def test_leave_unknown_drive(client, rider):
    assert client.put(f"/api/drives/leave/{ObjectId()}", headers=rider["headers"]).status_code == 404


def test_driver_may_leave_own_drive(client, driver, drive):
    response = client.put(f"/api/drives/leave/{drive['id']}", headers=driver["headers"])
    assert response.status_code == 200
    assert response.json() == []
    assert _get(client, driver, drive)["seats"] == 3


def test_seat_and_group_counts_after_joins_and_leaves(client, driver):
    drive = client.post("/api/drives", json=drive_body(seats=3), headers=driver["headers"]).json()
    riders = []
    for i in range(3):
        account = register(client, f"Rider {i}", f"rider{i}@example.com")
        make_profile(client, account)
        riders.append(account)

    url_join = f"/api/drives/join/{drive['id']}"
    url_leave = f"/api/drives/leave/{drive['id']}"
    assert client.put(url_join, headers=riders[0]["headers"]).status_code == 200
    assert client.put(url_join, headers=riders[1]["headers"]).status_code == 200
    assert client.put(url_leave, headers=riders[0]["headers"]).status_code == 200
    assert client.put(url_join, headers=riders[2]["headers"]).status_code == 200
    assert client.put(url_join, headers=riders[0]["headers"]).status_code == 200

    # 4 joins, 1 leave
    after = _get(client, driver, drive)
    assert after["seats"] == 3 - 4 + 1
    assert len(after["group"]) == 1 + 4 - 1
    assert after["group"][-1]["user"] == driver["id"]

    response = client.put(url_join, headers=register(client, "Late", "late@example.com")["headers"])
    assert response.status_code == 400
    assert response.json() == {"msg": "Drive full"}


def test_full_drive_disappears_from_listing(client, driver, rider):
    drive = client.post("/api/drives", json=drive_body(seats=1), headers=driver["headers"]).json()
    client.put(f"/api/drives/join/{drive['id']}", headers=rider["headers"])
    listed = client.get("/api/drives", headers=driver["headers"]).json()
    assert drive["id"] not in [d["id"] for d in listed]


def test_leave_with_malformed_id(client, rider):
    response = client.put("/api/drives/leave/nope", headers=rider["headers"])
    assert response.status_code == 404
    assert response.json() == {"msg": "Drive not found"}
