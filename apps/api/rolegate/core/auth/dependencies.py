"""
FastAPI dependencies for abilities.

The caller's role comes from a query parameter (``?role=admin`` by
default); unknown or missing roles fall back to the configured fallback
role.

Usage:
    from rolegate.core.auth import CurrentAbility, require_ability

    @router.get("/users")
    async def list_users(ability: CurrentAbility):
        ability.throw_unless_can("read", "User")
        ...

    @router.post("/reload", dependencies=[Depends(require_ability("manage", "Ability"))])
    async def reload():
        ...
"""

from typing import Annotated, Callable

from fastapi import Depends, Request

from rolegate.core.config import settings

from .ability import Ability
from .registry import AbilityRegistry


def get_ability_registry(request: Request) -> AbilityRegistry:
    """
    The registry built at startup.

    Raises:
        RuntimeError: If the application has not loaded abilities yet
    """
    registry = getattr(request.app.state, "abilities", None)
    if registry is None:
        raise RuntimeError("Ability registry is not loaded")
    return registry


def get_requested_role(request: Request) -> str:
    """Role named by the request, or the fallback role."""
    return request.query_params.get(settings.auth.role_param) or settings.auth.fallback_role


def get_current_ability(
    request: Request,
    registry: AbilityRegistry = Depends(get_ability_registry),
) -> Ability:
    """
    Ability for the caller's role.

    Raises:
        UnknownRoleError: If neither the role nor the fallback is registered
    """
    role = get_requested_role(request)
    ability = registry.lookup_or_default(role, settings.auth.fallback_role)

    request.state.role = role if role in registry else settings.auth.fallback_role
    return ability


def require_ability(action: str, subject: str) -> Callable[[Ability], Ability]:
    """
    Dependency factory requiring a permission.

    Usage:
        @router.post("/reload")
        async def reload(ability: Ability = Depends(require_ability("manage", "Ability"))):
            ...
    """
    def dependency(ability: Ability = Depends(get_current_ability)) -> Ability:
        ability.throw_unless_can(action, subject)
        return ability

    return dependency


# ============================================================
# TYPE ALIASES FOR CLEAN SIGNATURES
# ============================================================

AbilityRegistryDep = Annotated[AbilityRegistry, Depends(get_ability_registry)]

CurrentAbility = Annotated[Ability, Depends(get_current_ability)]
