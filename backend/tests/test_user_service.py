"""
CatAPI Backend — User and Auth Service Tests
==============================================

What:  UserService and AuthService against a real (SQLite) database.
"""

from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

from catapi.exceptions import AuthenticationError, ConflictError, ForbiddenError, NotFoundError
from catapi.models.user import ROLE_USER
from catapi.repositories.cat_repository import CatRepository
from catapi.repositories.user_repository import UserRepository
from catapi.schemas.user import LoginRequest, UserCreate, UserUpdate
from catapi.security.passwords import verify_password
from catapi.security.tokens import decode_access_token
from catapi.services.auth_service import AuthService
from catapi.services.user_service import UserService


@pytest.fixture
def service():
    return UserService()


class TestCheckToken:
    def test_without_principal_is_forbidden(self, service):
        with pytest.raises(ForbiddenError) as exc_info:
            service.check_token(None)
        assert exc_info.value.message == "token not valid"

    @pytest.mark.asyncio
    async def test_echoes_principal(self, service, alice):
        result = service.check_token(alice)
        assert result.model_dump() == {"id": alice.id, "user_name": "alice", "email": "a@x.com"}


class TestCreateUser:
    @pytest.mark.asyncio
    async def test_create_returns_reduced_projection(self, service, db_session):
        result = await service.create_user(
            db_session, UserCreate(user_name="alice", email="a@x.com", password="secret")
        )

        assert result.message == "User created"
        assert result.model_dump()["data"] == {"user_name": "alice", "email": "a@x.com"}

    @pytest.mark.asyncio
    async def test_password_hashed_and_role_forced(self, service, db_session):
        payload = {"user_name": "mallory", "email": "m@x.com", "password": "secret", "role": "admin"}
        await service.create_user(db_session, UserCreate(**payload))

        stored = await UserRepository(db_session).get_by_email("m@x.com")
        assert stored.password != "secret"
        assert verify_password("secret", stored.password)
        assert stored.role == ROLE_USER

    @pytest.mark.asyncio
    async def test_same_password_different_hashes(self, service, db_session):
        await service.create_user(db_session, UserCreate(user_name="one", email="1@x.com", password="secret"))
        await service.create_user(db_session, UserCreate(user_name="two", email="2@x.com", password="secret"))

        repo = UserRepository(db_session)
        first, second = await repo.get_by_email("1@x.com"), await repo.get_by_email("2@x.com")
        assert first.password != second.password

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts(self, service, db_session, alice):
        with pytest.raises(ConflictError):
            await service.create_user(
                db_session, UserCreate(user_name="alice2", email="a@x.com", password="secret")
            )

    @pytest.mark.asyncio
    async def test_unique_index_violation_conflicts(self, service, db_session, alice):
        # a concurrent registration committed between the lookup and the insert
        with patch.object(UserRepository, "get_by_email", AsyncMock(return_value=None)):
            with pytest.raises(ConflictError):
                await service.create_user(
                    db_session, UserCreate(user_name="alice2", email="a@x.com", password="secret")
                )


class TestReadUsers:
    @pytest.mark.asyncio
    async def test_list_and_get_hide_password_and_role(self, service, db_session, alice, admin):
        users = await service.list_users(db_session)
        single = await service.get_user(db_session, alice.id)

        for item in [u.model_dump() for u in users] + [single.model_dump()]:
            assert "password" not in item
            assert "role" not in item
        assert {u.email for u in users} == {"a@x.com", "admin@x.com"}

    @pytest.mark.asyncio
    async def test_get_missing_user(self, service, db_session):
        with pytest.raises(NotFoundError, match="No user found"):
            await service.get_user(db_session, uuid4())


class TestSelfService:
    @pytest.mark.asyncio
    async def test_update_rehashes_password(self, service, db_session, alice):
        result = await service.update_current_user(
            db_session, alice, UserUpdate(user_name="alice2", password="new-secret")
        )

        assert result.data.user_name == "alice2"
        assert "password" not in result.model_dump()["data"]
        stored = await UserRepository(db_session).get(alice.id)
        assert verify_password("new-secret", stored.password)

    @pytest.mark.asyncio
    async def test_update_cannot_set_role(self, service, db_session, alice):
        await service.update_current_user(db_session, alice, UserUpdate(**{"role": "admin"}))
        stored = await UserRepository(db_session).get(alice.id)
        assert stored.role == ROLE_USER

    @pytest.mark.asyncio
    async def test_update_to_taken_email_conflicts(self, service, db_session, alice, bob):
        with pytest.raises(ConflictError):
            await service.update_current_user(db_session, alice, UserUpdate(email="b@x.com"))

    @pytest.mark.asyncio
    async def test_update_unique_index_violation_conflicts(self, service, db_session, alice, bob):
        with patch.object(UserRepository, "get_by_email", AsyncMock(return_value=None)):
            with pytest.raises(ConflictError):
                await service.update_current_user(db_session, alice, UserUpdate(email="b@x.com"))

    @pytest.mark.asyncio
    async def test_delete_removes_user_and_their_cats(self, service, db_session, alice, bob, make_cat):
        await make_cat(alice)
        await make_cat(bob)

        result = await service.delete_current_user(db_session, alice)

        assert result.message == "User deleted"
        assert result.data.id == alice.id
        assert await UserRepository(db_session).get(alice.id) is None
        remaining = await CatRepository(db_session).list_all()
        assert [v.owner.id for v in remaining] == [bob.id]

    @pytest.mark.asyncio
    async def test_delete_missing_user(self, service, db_session, alice):
        await service.delete_current_user(db_session, alice)
        with pytest.raises(NotFoundError):
            await service.delete_current_user(db_session, alice)


class TestLogin:
    @pytest.mark.asyncio
    async def test_login_issues_token_for_user(self, db_session, alice):
        result = await AuthService().login(db_session, LoginRequest(username="a@x.com", password="secret"))

        assert result.message == "Login successful"
        assert result.user.id == alice.id
        assert decode_access_token(result.token) == alice

    @pytest.mark.asyncio
    @pytest.mark.parametrize("email,password", [("a@x.com", "wrong"), ("nobody@x.com", "secret")])
    async def test_bad_credentials(self, db_session, alice, email, password):
        with pytest.raises(AuthenticationError, match="Incorrect username/password"):
            await AuthService().login(db_session, LoginRequest(username=email, password=password))
