"""Tests for the settings API — default prompt read/write and apply-all."""

from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from rematch.exceptions import PersistenceError
from rematch.models.buyer import Buyer
from rematch.models.setting import Setting, dump_payload
from rematch.services.prompt_settings import DEFAULT_PROMPT_KEY
from rematch.services.failure_log import failure_log
from rematch.services.prompt_template import DEFAULT_SYSTEM_PROMPT, PLACEHOLDER_DOCS

VALID = "Buyer: {search_name}, {price_range}. Listing: {listing_price} in {listing_location}."


# ---------------------------------------------------------------------------
# GET /api/settings/prompt
# ---------------------------------------------------------------------------


def test_get_prompt_defaults(client):
    resp = client.get("/api/settings/prompt")
    assert resp.status_code == 200
    data = resp.json()
    assert data["isDefault"] is True
    assert data["version"] == 1
    assert data["template"] == DEFAULT_SYSTEM_PROMPT
    assert data["placeholders"] == PLACEHOLDER_DOCS
    assert data["updatedAt"] is None


def test_get_prompt_after_update(client):
    client.put("/api/settings/prompt", json={"template": VALID})
    data = client.get("/api/settings/prompt").json()
    assert data["isDefault"] is False
    assert data["template"] == VALID
    assert data["version"] == 1
    assert data["updatedAt"] is not None


def test_get_prompt_with_template_but_no_version(client, db_session):
    db_session.add(Setting(key=DEFAULT_PROMPT_KEY, value=dump_payload({"template": VALID})))
    db_session.commit()

    resp = client.get("/api/settings/prompt")
    assert resp.status_code == 200
    assert resp.json()["template"] == VALID
    assert resp.json()["version"] == 1
    assert resp.json()["isDefault"] is False


def test_get_prompt_with_empty_payload_is_default(client, db_session):
    db_session.add(Setting(key=DEFAULT_PROMPT_KEY, value="{}"))
    db_session.commit()

    data = client.get("/api/settings/prompt").json()
    assert data["isDefault"] is True
    assert data["template"] == DEFAULT_SYSTEM_PROMPT
    assert data["version"] == 1
    assert data["updatedAt"] is not None


def test_get_prompt_failure_is_generic(client, monkeypatch):
    def broken(db):
        raise OperationalError("SELECT", {}, Exception("connection reset by peer"))

    monkeypatch.setattr("rematch.api.settings.get_default_prompt", broken)
    resp = client.get("/api/settings/prompt")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to fetch default prompt"}
    assert failure_log.recent(source="settings.prompt.read")


# ---------------------------------------------------------------------------
# PUT /api/settings/prompt
# ---------------------------------------------------------------------------


def test_put_prompt_increments_version(client):
    resp = client.put("/api/settings/prompt", json={"template": VALID})
    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "version": 1,
        "message": "Default prompt updated successfully",
    }

    # Same content again still bumps the version
    resp = client.put("/api/settings/prompt", json={"template": VALID})
    assert resp.json()["version"] == 2
    assert client.get("/api/settings/prompt").json()["version"] == 2


@pytest.mark.parametrize("body", [{}, {"template": ""}, {"template": 42}, {"template": None}, ["x"]])
def test_put_prompt_requires_string_template(client, body):
    resp = client.put("/api/settings/prompt", json=body)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Template is required and must be a string"}


def test_put_prompt_missing_buyer_placeholders(client):
    client.put("/api/settings/prompt", json={"template": VALID})

    resp = client.put("/api/settings/prompt", json={"template": "Listing: {listing_price}"})
    assert resp.status_code == 400
    data = resp.json()
    assert data["error"] == "Invalid template"
    assert data["missingBuyer"] == ["At least one buyer requirement placeholder"]
    assert data["missingListing"] == []

    # Nothing was written
    current = client.get("/api/settings/prompt").json()
    assert current["version"] == 1
    assert current["template"] == VALID


def test_put_prompt_missing_both_groups(client):
    resp = client.put("/api/settings/prompt", json={"template": "Just text"})
    assert resp.status_code == 400
    data = resp.json()
    assert data["missingBuyer"] and data["missingListing"]
    assert client.get("/api/settings/prompt").json()["isDefault"] is True


def test_put_prompt_over_null_version(client, db_session):
    db_session.add(Setting(key=DEFAULT_PROMPT_KEY, value=dump_payload({"template": "t", "version": None})))
    db_session.commit()

    resp = client.put("/api/settings/prompt", json={"template": VALID})
    assert resp.status_code == 200
    assert resp.json()["version"] == 1


def test_put_prompt_lost_races_is_generic(client, monkeypatch):
    def contended(db, template):
        raise PersistenceError("Default prompt update lost 5 consecutive races")

    monkeypatch.setattr("rematch.api.settings.update_default_prompt", contended)
    resp = client.put("/api/settings/prompt", json={"template": VALID})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to update default prompt"}


def test_put_prompt_failure_hides_detail(client, monkeypatch):
    def broken(db, template):
        raise OperationalError("UPDATE", {}, Exception("disk I/O error"))

    monkeypatch.setattr("rematch.api.settings.update_default_prompt", broken)
    resp = client.put("/api/settings/prompt", json={"template": VALID})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to update default prompt"}
    assert "disk" not in resp.text


# ---------------------------------------------------------------------------
# POST /api/settings/prompt/apply-all
# ---------------------------------------------------------------------------


def test_apply_all_with_no_custom_prompts(client, db_session):
    db_session.add_all([Buyer(name="A"), Buyer(name="B")])
    db_session.commit()

    resp = client.post("/api/settings/prompt/apply-all")
    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "message": "Reset 0 buyer(s) to use the default prompt",
        "resetCount": 0,
    }


def test_apply_all_resets_custom_prompts(client, db_session):
    a = Buyer(name="A", system_prompt="x")
    b = Buyer(name="B")
    c = Buyer(name="C", system_prompt="y")
    db_session.add_all([a, b, c])
    db_session.commit()
    ids = {"a": a.id, "b": b.id, "c": c.id}

    resp = client.post("/api/settings/prompt/apply-all")
    assert resp.status_code == 200
    assert resp.json()["resetCount"] == 2
    assert resp.json()["message"] == "Reset 2 buyer(s) to use the default prompt"

    for key in ("a", "b", "c"):
        assert client.get(f"/api/buyers/{ids[key]}").json()["system_prompt"] is None


def test_apply_all_failure_is_generic(client, monkeypatch):
    def broken(db):
        raise OperationalError("UPDATE", {}, Exception("deadlock detected"))

    monkeypatch.setattr("rematch.api.settings.reset_buyer_prompts", broken)
    resp = client.post("/api/settings/prompt/apply-all")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to apply default prompt to all buyers"}
