"""
User routes.

Responses are projected down to the fields the caller's ability may read.
"""

from typing import Any
from fastapi import APIRouter, Depends

from rolegate.core.auth import CurrentAbility, ordered_permitted_fields
from rolegate.services.user import UserService
from rolegate.api.dependencies.services import get_user_service
from rolegate.models.user import User

router = APIRouter()


@router.get("")
async def list_users(
    ability: CurrentAbility,
    user_service: UserService = Depends(get_user_service),
) -> list[dict[str, Any]]:
    """List users, showing only permitted fields."""
    ability.throw_unless_can("read", "User")

    fields = ordered_permitted_fields(ability, "read", "User", User.field_names())
    return await user_service.list_projected(fields)
