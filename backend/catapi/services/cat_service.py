"""
CatAPI Backend — Cat Service (Resource Controller)
====================================================

What:  Every cat operation: list, get, by owner, by bounding box, create,
       owner update/delete and admin update/delete.
How:   Each method runs the same four steps and nothing else:
           1. input check (already done by the schemas / route dependencies)
           2. authorization decision via `require()`
           3. one repository call
           4. response construction (bare view for reads, envelope for writes)
Who:   Called by routes/cats.py.

Error Handling:
    CatApiError subclasses raised inside a method propagate as-is. Anything
    else (driver errors, bugs) is logged with its traceback and re-raised as
    InternalError, so no raw exception reaches the HTTP boundary.

Design Decision:
    CatService is stateless. The session and the principal are arguments of
    every call, never attributes or request-global state.
"""

import logging
from dataclasses import replace
from typing import Any, Dict, List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from catapi.exceptions import (
    AuthenticationError,
    CatApiError,
    InternalError,
    NotFoundError,
    ValidationError,
)
from catapi.models.cat import Cat
from catapi.repositories.cat_repository import CatRepository, CatView
from catapi.repositories.user_repository import UserRepository
from catapi.schemas.cat import (
    CatAdminUpdate,
    CatCreateCommand,
    CatResponse,
    CatUpdate,
)
from catapi.schemas.common import MessageResponse
from catapi.security.principal import Principal
from catapi.services.authorization import Action, require
from catapi.utils.geo import parse_lat_lng, rectangle_bounds, to_geometry

logger = logging.getLogger(__name__)


def _internal_error(operation: str, error: Exception) -> InternalError:
    logger.error("Unexpected error in %s: %s", operation, str(error), exc_info=True)
    return InternalError(context={"operation": operation, "error_type": type(error).__name__})


def _column_values(data: CatUpdate) -> Dict[str, Any]:
    """Translate the fields a client sent into cats-table column values."""
    values = data.model_dump(exclude_unset=True, exclude_none=True, exclude={"location", "owner"})
    if data.location is not None:
        values["latitude"] = data.location.lat
        values["longitude"] = data.location.lng
    return values


async def _current_principal(db: AsyncSession, principal: Principal) -> Principal:
    """
    Reload the account behind a token. The returned principal carries the
    stored role, so a deleted or demoted account cannot act on its old claims.
    """
    user = await UserRepository(db).get(principal.id)
    if user is None:
        raise AuthenticationError("token not valid", context={"user_id": str(principal.id)})
    return replace(principal, role=user.role)


class CatService:
    """Business logic for cat records."""

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list_cats(self, db: AsyncSession) -> List[CatResponse]:
        """All cats with their owners. No pagination, no filtering."""
        try:
            views = await CatRepository(db).list_all()
            return [CatResponse.from_view(v) for v in views]
        except CatApiError:
            raise
        except Exception as e:
            raise _internal_error("list_cats", e)

    async def get_cat(self, db: AsyncSession, cat_id: UUID) -> CatResponse:
        """
        Raises:
            NotFoundError: "No cat found" (→ 404)
        """
        try:
            view = await CatRepository(db).get(cat_id)
            if view is None:
                raise NotFoundError(resource="cat", resource_id=str(cat_id))
            return CatResponse.from_view(view)
        except CatApiError:
            raise
        except Exception as e:
            raise _internal_error("get_cat", e)

    async def get_cats_by_owner(self, db: AsyncSession, principal: Principal) -> List[CatResponse]:
        """Cats owned by the principal; an empty list when there are none."""
        try:
            views = await CatRepository(db).list_by_owner(principal.id)
            return [CatResponse.from_view(v) for v in views]
        except CatApiError:
            raise
        except Exception as e:
            raise _internal_error("get_cats_by_owner", e)

    async def get_cats_in_bounding_box(
        self,
        db: AsyncSession,
        top_right: str,
        bottom_left: str,
    ) -> List[CatResponse]:
        """
        Cats located inside the rectangle spanned by two corners.

        Both corners are "lat,lng" strings and are parsed the same way. The
        rectangle takes the min/max of each axis, so corner order does not
        matter; points on the edge are included.

        Raises:
            ValidationError: a corner is not a valid "lat,lng" pair (→ 400)
        """
        try:
            corner_a = parse_lat_lng(top_right, "topRight")
            corner_b = parse_lat_lng(bottom_left, "bottomLeft")
            area = to_geometry(rectangle_bounds(corner_a, corner_b))
            views = await CatRepository(db).list_within(area)
            logger.debug("Bounding box %s / %s matched %d cats", top_right, bottom_left, len(views))
            return [CatResponse.from_view(v) for v in views]
        except CatApiError:
            raise
        except Exception as e:
            raise _internal_error("get_cats_in_bounding_box", e)

    # ── Writes ────────────────────────────────────────────────────────────

    async def create_cat(
        self,
        db: AsyncSession,
        command: CatCreateCommand,
    ) -> MessageResponse[CatResponse]:
        """
        Persist a new cat owned by the principal in `command`.

        The owner always comes from the principal; no client field can set it.

        Raises:
            AuthenticationError: the account behind the token no longer exists
        """
        try:
            principal = await _current_principal(db, command.principal)
            require(principal, Action.CREATE_CAT)
            cat = Cat(
                cat_name=command.data.cat_name,
                weight=command.data.weight,
                birthdate=command.data.birthdate,
                filename=command.filename,
                latitude=command.coordinates.lat,
                longitude=command.coordinates.lng,
                owner_id=principal.id,
            )
            view = await CatRepository(db).add(cat)
            logger.info("Cat %s created by %s", view.cat.id, principal.id)
            return MessageResponse[CatResponse](
                message="Cat created",
                data=CatResponse.from_view(view),
            )
        except CatApiError:
            raise
        except Exception as e:
            raise _internal_error("create_cat", e)

    async def update_cat(
        self,
        db: AsyncSession,
        principal: Principal,
        cat_id: UUID,
        data: CatUpdate,
    ) -> MessageResponse[CatResponse]:
        """
        Owner update. Only the cat's owner may change it, and never its owner.

        Raises:
            NotFoundError: cat does not exist
            ForbiddenError: principal is not the owner
        """
        try:
            repo = CatRepository(db)
            current = await self._get_view(repo, cat_id)
            require(principal, Action.UPDATE_OWN_CAT, current)
            view = await repo.update(cat_id, _column_values(data))
            logger.info("Cat %s updated by owner %s", cat_id, principal.id)
            return MessageResponse[CatResponse](message="Cat updated", data=CatResponse.from_view(view))
        except CatApiError:
            raise
        except Exception as e:
            raise _internal_error("update_cat", e)

    async def update_cat_admin(
        self,
        db: AsyncSession,
        principal: Principal,
        cat_id: UUID,
        data: CatAdminUpdate,
    ) -> MessageResponse[CatResponse]:
        """
        Admin update; may also reassign the owner.

        The role check runs before the lookup, so a non-admin learns nothing
        about which ids exist. The admin role is read from the users table,
        not from the token.

        Raises:
            AuthenticationError: the account behind the token no longer exists
            ForbiddenError: principal is not an admin
            NotFoundError: cat does not exist
            ValidationError: new owner does not exist
        """
        try:
            principal = await _current_principal(db, principal)
            require(principal, Action.UPDATE_ANY_CAT)
            repo = CatRepository(db)
            await self._get_view(repo, cat_id)

            values = _column_values(data)
            if data.owner is not None:
                if await UserRepository(db).get(data.owner) is None:
                    raise ValidationError("Owner does not exist: owner", field="owner")
                values["owner_id"] = data.owner

            view = await repo.update(cat_id, values)
            logger.info("Cat %s updated by admin %s", cat_id, principal.id)
            return MessageResponse[CatResponse](message="Cat updated", data=CatResponse.from_view(view))
        except CatApiError:
            raise
        except Exception as e:
            raise _internal_error("update_cat_admin", e)

    async def delete_cat(
        self,
        db: AsyncSession,
        principal: Principal,
        cat_id: UUID,
    ) -> MessageResponse[CatResponse]:
        """Owner delete; the response carries the record as it was."""
        try:
            repo = CatRepository(db)
            current = await self._get_view(repo, cat_id)
            require(principal, Action.DELETE_OWN_CAT, current)
            view = await repo.delete(cat_id)
            logger.info("Cat %s deleted by owner %s", cat_id, principal.id)
            return MessageResponse[CatResponse](message="Cat deleted", data=CatResponse.from_view(view))
        except CatApiError:
            raise
        except Exception as e:
            raise _internal_error("delete_cat", e)

    async def delete_cat_admin(
        self,
        db: AsyncSession,
        principal: Principal,
        cat_id: UUID,
    ) -> MessageResponse[CatResponse]:
        """Admin delete. A non-admin (by stored role) gets ForbiddenError and the row stays."""
        try:
            principal = await _current_principal(db, principal)
            require(principal, Action.DELETE_ANY_CAT)
            repo = CatRepository(db)
            await self._get_view(repo, cat_id)
            view = await repo.delete(cat_id)
            logger.info("Cat %s deleted by admin %s", cat_id, principal.id)
            return MessageResponse[CatResponse](message="Cat deleted", data=CatResponse.from_view(view))
        except CatApiError:
            raise
        except Exception as e:
            raise _internal_error("delete_cat_admin", e)

    @staticmethod
    async def _get_view(repo: CatRepository, cat_id: UUID) -> CatView:
        view = await repo.get(cat_id)
        if view is None:
            raise NotFoundError(resource="cat", resource_id=str(cat_id))
        return view


cat_service = CatService()
