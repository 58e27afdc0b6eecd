"""Agents: admin management, user assignment and what users can see."""

from tests.conftest import create_user


def _agent(fake_db, name, **extra):
    values = {"name": name, "system_prompt": f"You are {name}.", **extra}
    return fake_db.table("agents").insert(values).execute().data[0]


def _assign(fake_db, agent_id, user_id):
    fake_db.table("user_agents").insert({"agent_id": agent_id, "user_id": user_id}).execute()


class TestCreateAgent:
    def test_create_with_assignments(self, admin_client, fake_db, user):
        response = admin_client.post("/api/admin/agents", json={
            "name": "  Researcher  ",
            "system_prompt": "Find sources.",
            "webhook_url": "https://agents.example.com/research",
            "category": "research",
            "is_global": False,
            "assigned_to": [user["id"], user["id"]],
        })
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        agent = body["agent"]
        assert agent["name"] == "Researcher"
        assert agent["is_active"] is True
        assert agent["is_global"] is False
        assert agent["assigned_to"] == [user["id"]]
        assert [(r["agent_id"], r["user_id"]) for r in fake_db.rows("user_agents")] == [(agent["id"], user["id"])]

    def test_defaults_to_active_and_global(self, admin_client):
        agent = admin_client.post("/api/admin/agents", json={"name": "Helper", "system_prompt": "Help."}).json()["agent"]
        assert agent["is_active"] is True
        assert agent["is_global"] is True
        assert agent["webhook_url"] is None
        assert agent["assigned_to"] == []

    def test_name_and_prompt_required(self, admin_client, fake_db):
        for body in ({"name": "Helper"}, {"system_prompt": "Help."}, {"name": "  ", "system_prompt": "Help."}):
            response = admin_client.post("/api/admin/agents", json=body)
            assert response.status_code == 400
            assert response.json() == {"error": "Name and system prompt are required"}
        assert fake_db.rows("agents") == []

    def test_unknown_assignee(self, admin_client, fake_db, user):
        response = admin_client.post("/api/admin/agents", json={
            "name": "Helper",
            "system_prompt": "Help.",
            "assigned_to": [user["id"], "ghost"],
        })
        assert response.status_code == 404
        assert response.json() == {"error": "One or more users not found"}
        assert fake_db.rows("agents") == []

    def test_invalid_webhook_url(self, admin_client, fake_db):
        response = admin_client.post("/api/admin/agents", json={
            "name": "Helper",
            "system_prompt": "Help.",
            "webhook_url": "http://exa mple.com/hook",
        })
        assert response.status_code == 400
        assert fake_db.rows("agents") == []

    def test_requires_admin(self, user_client, fake_db):
        response = user_client.post("/api/admin/agents", json={"name": "Helper", "system_prompt": "Help."})
        assert response.status_code == 401
        assert fake_db.rows("agents") == []


class TestListAgents:
    def test_global_first_then_newest(self, admin_client, fake_db):
        _agent(fake_db, "Old global")
        _agent(fake_db, "Private", is_global=False)
        _agent(fake_db, "New global")

        agents = admin_client.get("/api/admin/agents").json()["agents"]
        assert [a["name"] for a in agents] == ["New global", "Old global", "Private"]

    def test_filter_by_user(self, admin_client, fake_db, user):
        other = create_user(fake_db, email="other@example.com")
        _agent(fake_db, "Global")
        mine = _agent(fake_db, "Mine", is_global=False)
        theirs = _agent(fake_db, "Theirs", is_global=False)
        _assign(fake_db, mine["id"], user["id"])
        _assign(fake_db, theirs["id"], other["id"])

        agents = admin_client.get("/api/admin/agents", params={"user_id": user["id"]}).json()["agents"]
        assert [a["name"] for a in agents] == ["Global", "Mine"]
        assert agents[1]["assigned_to"] == [user["id"]]


class TestAgentDetail:
    def test_get(self, admin_client, fake_db, user):
        agent = _agent(fake_db, "Helper")
        _assign(fake_db, agent["id"], user["id"])
        response = admin_client.get(f"/api/admin/agents/{agent['id']}")
        assert response.status_code == 200
        assert response.json()["agent"]["assigned_to"] == [user["id"]]

    def test_missing(self, admin_client):
        response = admin_client.get("/api/admin/agents/missing")
        assert response.status_code == 404
        assert response.json() == {"error": "Agent not found"}

    def test_update_fields_and_replace_assignments(self, admin_client, fake_db, user):
        other = create_user(fake_db, email="other@example.com")
        agent = _agent(fake_db, "Helper")
        _assign(fake_db, agent["id"], user["id"])

        response = admin_client.patch(f"/api/admin/agents/{agent['id']}", json={
            "system_prompt": "Be brief.",
            "is_active": False,
            "assigned_to": [other["id"]],
        })
        assert response.status_code == 200
        updated = response.json()["agent"]
        assert updated["system_prompt"] == "Be brief."
        assert updated["is_active"] is False
        assert updated["name"] == "Helper"
        assert updated["assigned_to"] == [other["id"]]
        assert [row["user_id"] for row in fake_db.rows("user_agents")] == [other["id"]]

    def test_update_without_fields(self, admin_client, fake_db):
        agent = _agent(fake_db, "Helper")
        response = admin_client.patch(f"/api/admin/agents/{agent['id']}", json={})
        assert response.status_code == 400
        assert response.json() == {"error": "No fields to update"}

    def test_update_missing(self, admin_client):
        response = admin_client.patch("/api/admin/agents/missing", json={"name": "X"})
        assert response.status_code == 404

    def test_delete_removes_assignments(self, admin_client, fake_db, user):
        agent = _agent(fake_db, "Helper")
        kept = _agent(fake_db, "Kept")
        _assign(fake_db, agent["id"], user["id"])
        _assign(fake_db, kept["id"], user["id"])

        response = admin_client.delete(f"/api/admin/agents/{agent['id']}")
        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert [a["id"] for a in fake_db.rows("agents")] == [kept["id"]]
        assert [row["agent_id"] for row in fake_db.rows("user_agents")] == [kept["id"]]

    def test_delete_missing(self, admin_client):
        assert admin_client.delete("/api/admin/agents/missing").status_code == 404


class TestUserAgents:
    def test_active_global_or_assigned(self, user_client, fake_db, user):
        other = create_user(fake_db, email="other@example.com")
        _agent(fake_db, "Zeta global")
        _agent(fake_db, "Alpha global")
        _agent(fake_db, "Retired", is_active=False)
        assigned = _agent(fake_db, "Assigned", is_global=False, webhook_url="https://agents.example.com/a")
        foreign = _agent(fake_db, "Foreign", is_global=False)
        _assign(fake_db, assigned["id"], user["id"])
        _assign(fake_db, foreign["id"], other["id"])

        response = user_client.get("/api/user/agents")
        assert response.status_code == 200
        agents = response.json()["agents"]
        assert [a["name"] for a in agents] == ["Alpha global", "Zeta global", "Assigned"]
        assert "webhook_url" not in agents[2]

    def test_requires_user_session(self, client):
        assert client.get("/api/user/agents").status_code == 401

    def test_deleting_user_removes_assignments(self, admin_client, fake_db, user):
        agent = _agent(fake_db, "Helper", is_global=False)
        _assign(fake_db, agent["id"], user["id"])

        response = admin_client.delete(f"/api/admin/users/{user['id']}")
        assert response.status_code == 200
        assert fake_db.rows("user_agents") == []
        assert len(fake_db.rows("agents")) == 1
