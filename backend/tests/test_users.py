"""
FlagArchive Backend: User Service and API Tests
===============================================
"""

from unittest.mock import AsyncMock

import pytest

from flagarchive.exceptions import InternalError, NotFoundError
from flagarchive.models.user import User
from flagarchive.repositories.base import StorageError, UserRepository
from flagarchive.services.user_service import UserService

SEED_USERS = [
    ("ash@mail.com", "Ash", "Ketchum", "pikachu123", "ashketchum"),
    ("brock@mail.com", "Brock", "Harrison", "onixrocks", "brockstone"),
    ("misty@mail.com", "Misty", "Waterflower", "togepi456", "mistywaterflower"),
]


def make_user(email, first_name, last_name, password, username):
    return User(
        email=email,
        first_name=first_name,
        last_name=last_name,
        password=password,
        username=username,
    )


class TestUserService:

    def setup_method(self):
        self.repository = AsyncMock(spec=UserRepository)
        self.service = UserService(repository_factory=lambda db: self.repository)

    @pytest.mark.asyncio
    async def test_get_user_not_found(self, mock_db_session):
        self.repository.get_by_id.return_value = None

        with pytest.raises(NotFoundError):
            await self.service.get_user(mock_db_session, 9)

    @pytest.mark.asyncio
    async def test_get_user_storage_failure(self, mock_db_session):
        self.repository.get_by_id.side_effect = StorageError()

        with pytest.raises(InternalError):
            await self.service.get_user(mock_db_session, 1)

    @pytest.mark.asyncio
    async def test_list_users_clamps(self, mock_db_session):
        self.repository.list_page.return_value = ([], 0)

        result = await self.service.list_users(mock_db_session, page=0, size=500)

        assert result.size == 100
        self.repository.list_page.assert_awaited_once_with(offset=0, limit=100)


class TestUsersApi:

    @pytest.mark.asyncio
    async def test_get_and_list_users(self, test_client, session_factory):
        async with session_factory() as session:
            session.add_all([make_user(*row) for row in SEED_USERS])
            await session.commit()

        response = await test_client.get("/users/3")
        assert response.status_code == 200
        assert response.json()["username"] == "mistywaterflower"
        assert "password" not in response.json()

        response = await test_client.get("/users", params={"size": 2})
        assert response.headers["X-Total-Count"] == "3"
        assert [u["username"] for u in response.json()["items"]] == ["ashketchum", "brockstone"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("user_id", [1, 2**63])
    async def test_unknown_user_is_not_found(self, test_client, user_id):
        response = await test_client.get(f"/users/{user_id}")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_page_far_past_the_end_is_empty(self, test_client, session_factory):
        async with session_factory() as session:
            session.add_all([make_user(*row) for row in SEED_USERS])
            await session.commit()

        response = await test_client.get("/users", params={"page": 10**18})

        assert response.status_code == 200
        assert response.json()["items"] == []
        assert response.json()["total_count"] == 3
