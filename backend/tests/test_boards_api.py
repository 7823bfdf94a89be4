# tests/test_boards_api.py — Board endpoints
import pytest
from httpx import AsyncClient

from tests.conftest import get_auth_headers


def _url(project, suffix=""):
    return f"/api/v1/projects/{project.id}/boards{suffix}"


async def _titles(client, project, user):
    res = await client.get(_url(project), headers=get_auth_headers(user))
    return [(b["title"], b["position"]) for b in res.json()["data"]]


@pytest.mark.asyncio
class TestBoards:
    async def test_list_with_cards(self, client: AsyncClient, project, boards, viewer_user):
        res = await client.get(_url(project), headers=get_auth_headers(viewer_user))
        assert res.status_code == 200
        data = res.json()["data"]
        assert [b["title"] for b in data] == ["To Do", "In Progress", "Done"]
        assert data[2]["isDoneColumn"] is True
        assert all(b["cards"] == [] for b in data)

    async def test_create_appends(self, client: AsyncClient, project, boards, member_user):
        res = await client.post(_url(project), json={"title": "Invoiced"}, headers=get_auth_headers(member_user))
        assert res.status_code == 201
        assert res.json()["position"] == 3
        assert res.json()["projectId"] == project.id

    async def test_create_at_position(self, client: AsyncClient, project, boards, member_user):
        res = await client.post(
            _url(project),
            json={"title": "Backlog", "position": 0},
            headers=get_auth_headers(member_user),
        )
        assert res.status_code == 201
        assert await _titles(client, project, member_user) == [
            ("Backlog", 0), ("To Do", 1), ("In Progress", 2), ("Done", 3),
        ]

    async def test_empty_title_rejected(self, client: AsyncClient, project, member_user):
        res = await client.post(_url(project), json={"title": ""}, headers=get_auth_headers(member_user))
        assert res.status_code == 400
        assert "title" in res.json()["errors"]

    async def test_update(self, client: AsyncClient, project, boards, member_user):
        res = await client.put(
            _url(project, f"/{boards[0].id}"),
            json={"title": "Queued", "position": 2},
            headers=get_auth_headers(member_user),
        )
        assert res.status_code == 200
        assert res.json()["title"] == "Queued"
        assert await _titles(client, project, member_user) == [("In Progress", 0), ("Done", 1), ("Queued", 2)]

    async def test_reorder(self, client: AsyncClient, project, boards, member_user):
        todo, progress, done = boards
        res = await client.put(
            _url(project),
            json={"boards": [
                {"id": progress.id, "position": 0},
                {"id": todo.id, "position": 1},
                {"id": done.id, "position": 2},
            ]},
            headers=get_auth_headers(member_user),
        )
        assert res.status_code == 200
        assert await _titles(client, project, member_user) == [("In Progress", 0), ("To Do", 1), ("Done", 2)]

    async def test_reorder_with_gap_rejected(self, client: AsyncClient, project, boards, member_user):
        todo, progress, done = boards
        res = await client.put(
            _url(project),
            json={"boards": [
                {"id": todo.id, "position": 0},
                {"id": progress.id, "position": 1},
                {"id": done.id, "position": 5},
            ]},
            headers=get_auth_headers(member_user),
        )
        assert res.status_code == 400
        assert "boards" in res.json()["errors"]
        assert await _titles(client, project, member_user) == [("To Do", 0), ("In Progress", 1), ("Done", 2)]


@pytest.mark.asyncio
class TestDeleteBoard:
    async def test_admin_deletes_with_cards(self, client: AsyncClient, project, boards, project_admin, member_user):
        card = await client.post(
            f"/api/v1/projects/{project.id}/cards",
            json={"boardId": boards[0].id, "title": "a"},
            headers=get_auth_headers(member_user),
        )
        card_id = card.json()["id"]

        res = await client.delete(_url(project, f"/{boards[0].id}"), headers=get_auth_headers(project_admin))
        assert res.status_code == 200

        assert await _titles(client, project, member_user) == [("In Progress", 0), ("Done", 1)]
        res = await client.get(f"/api/v1/projects/{project.id}/cards/{card_id}", headers=get_auth_headers(member_user))
        assert res.status_code == 404

    async def test_member_cannot_delete(self, client: AsyncClient, project, boards, member_user):
        res = await client.delete(_url(project, f"/{boards[0].id}"), headers=get_auth_headers(member_user))
        assert res.status_code == 403
        assert res.json()["message"] == "Only admins can delete boards"

    async def test_company_admin_can_delete(self, client: AsyncClient, project, boards, company_admin):
        res = await client.delete(_url(project, f"/{boards[1].id}"), headers=get_auth_headers(company_admin))
        assert res.status_code == 200

    async def test_unknown_board(self, client: AsyncClient, project, project_admin):
        res = await client.delete(_url(project, "/9999"), headers=get_auth_headers(project_admin))
        assert res.status_code == 404


@pytest.mark.asyncio
class TestBoardAccess:
    async def test_viewer_cannot_mutate(self, client: AsyncClient, project, boards, viewer_user):
        headers = get_auth_headers(viewer_user)
        create = await client.post(_url(project), json={"title": "x"}, headers=headers)
        update = await client.put(_url(project, f"/{boards[0].id}"), json={"title": "x"}, headers=headers)
        reorder = await client.put(
            _url(project),
            json={"boards": [{"id": b.id, "position": b.position} for b in boards]},
            headers=headers,
        )
        assert [r.status_code for r in (create, update, reorder)] == [403, 403, 403]
