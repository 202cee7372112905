from datetime import datetime

import pytest


def check(client, headers, habit_id, checked=True, value=None):
    body = {"checked": checked}
    if value is not None:
        body["value"] = value
    resp = client.put(f"/habits/{habit_id}/completion", json=body, headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()


def month_values(client, headers, **params):
    resp = client.get("/stats/month", params=params, headers=headers)
    assert resp.status_code == 200, resp.text
    return {h["name"]: h for g in resp.json()["categories"] for h in g["habits"]}


def test_checkbox_count_follows_check_and_uncheck(client, auth_headers, make_habit):
    meditate = make_habit("Meditate")

    check(client, auth_headers, meditate.id)
    assert month_values(client, auth_headers)["Meditate"]["value"] == 1

    check(client, auth_headers, meditate.id, checked=False)
    assert month_values(client, auth_headers)["Meditate"]["value"] == 0


def test_month_values_per_habit_type(client, auth_headers, make_habit, clock):
    meditate = make_habit("Meditate")
    read = make_habit("Read", habit_type="duration", default_duration=20)
    mood = make_habit("Mood", habit_type="rating", default_rating=3)

    check(client, auth_headers, meditate.id)
    check(client, auth_headers, read.id, value=45)
    check(client, auth_headers, mood.id, value=3.5)

    clock.set(datetime(2024, 5, 16, 7, 30))
    check(client, auth_headers, meditate.id)
    check(client, auth_headers, read.id, value=30)
    check(client, auth_headers, mood.id, value=4)

    values = month_values(client, auth_headers, year=2024, month=5)
    assert values["Meditate"]["value"] == 2
    assert values["Read"]["value"] == 75
    assert values["Mood"]["value"] == 3.8


def test_finalized_duration_counts_as_zero_minutes(client, auth_headers, make_habit):
    read = make_habit("Read", habit_type="duration", default_duration=20)
    client.post("/today/finalize", headers=auth_headers)
    assert month_values(client, auth_headers)["Read"]["value"] == 0


def test_archived_habit_keeps_its_history(client, auth_headers, make_habit):
    swim = make_habit("Swim")
    check(client, auth_headers, swim.id)
    client.post(f"/habits/{swim.id}/archive", headers=auth_headers)

    stat = month_values(client, auth_headers)["Swim"]
    assert stat["active"] is False
    assert stat["value"] == 1


def test_month_groups_by_category_then_type(client, auth_headers, make_habit):
    make_habit("Mood", habit_type="rating", category="mind")
    make_habit("Run", habit_type="duration", category="Fitness")
    make_habit("Stretch", category="Fitness")

    body = client.get("/stats/month", headers=auth_headers).json()
    assert (body["year"], body["month"]) == (2024, 5)
    assert [g["category"] for g in body["categories"]] == ["Fitness", "mind"]
    assert [h["name"] for h in body["categories"][0]["habits"]] == ["Stretch", "Run"]


def test_stats_exclude_habits_created_after_the_month(client, auth_headers, make_habit):
    make_habit("Later", created_at=datetime(2024, 6, 2, 8, 0))
    assert month_values(client, auth_headers, year=2024, month=5) == {}


def test_month_must_be_valid(client, auth_headers):
    assert client.get("/stats/month", params={"month": 13}, headers=auth_headers).status_code == 400
    assert client.get("/stats/daily", params={"month": 0}, headers=auth_headers).status_code == 400


def test_trend_returns_trailing_months(client, auth_headers, make_habit):
    make_habit("Meditate", created_at=datetime(2023, 11, 1, 8, 0))
    check(client, auth_headers, make_habit("Read", habit_type="duration").id, value=40)

    body = client.get("/stats/trend", params={"months": 6}, headers=auth_headers).json()
    assert body["periods"] == ["2023-12", "2024-01", "2024-02", "2024-03", "2024-04", "2024-05"]
    habits = {h["name"]: h for g in body["categories"] for h in g["habits"]}
    assert [p["value"] for p in habits["Read"]["points"]] == [0, 0, 0, 0, 0, 40]
    assert [p["period"] for p in habits["Meditate"]["points"]] == body["periods"]

    yearly = client.get("/stats/trend", params={"months": 12}, headers=auth_headers).json()
    assert yearly["periods"][0] == "2023-06"
    assert len(yearly["periods"]) == 12


def test_trend_rejects_other_windows(client, auth_headers):
    resp = client.get("/stats/trend", params={"months": 7}, headers=auth_headers)
    assert resp.status_code == 400


def test_daily_series_covers_every_day_of_the_month(client, auth_headers, make_habit, clock):
    mood = make_habit("Mood", habit_type="rating", default_rating=3)
    check(client, auth_headers, mood.id, value=4.5)

    body = client.get("/stats/daily", params={"year": 2024, "month": 5}, headers=auth_headers).json()
    points = body["categories"][0]["habits"][0]["points"]
    assert len(points) == 31
    assert points[0] == {"period": "2024-05-01", "value": 0}
    assert points[14] == {"period": "2024-05-15", "value": 4.5}


def test_stats_are_scoped_to_the_caller(client, auth_headers, other_headers, make_habit):
    make_habit("Meditate", user_id="user-2")
    assert client.get("/stats/month", headers=auth_headers).json()["categories"] == []
    assert client.get("/stats/month", headers=other_headers).json()["categories"] != []


@pytest.mark.parametrize("path", ["/stats/month", "/stats/daily"])
@pytest.mark.parametrize("year", [0, 10000])
def test_year_out_of_range_is_rejected(client, auth_headers, path, year):
    resp = client.get(path, params={"year": year, "month": 1}, headers=auth_headers)
    assert resp.status_code == 400


def test_last_supported_month(client, auth_headers, make_habit):
    make_habit("Meditate")
    resp = client.get("/stats/daily", params={"year": 9999, "month": 12}, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["categories"][0]["habits"][0]["points"][-1]["period"] == "9999-12-31"
