"""
Ability introspection and management routes.
"""

from fastapi import APIRouter, Depends, Query, Request

from rolegate.core.auth import (
    AbilityRegistryDep,
    CurrentAbility,
    ordered_permitted_fields,
    require_ability,
)
from rolegate.schemas.ability import (
    AbilityRulesResponse,
    PermissionCheckResponse,
    PermittedFieldsResponse,
    ReloadResponse,
    RuleResponse,
)
from rolegate.services.rbac import RBACService
from rolegate.api.dependencies.services import get_rbac_service

router = APIRouter()


@router.get("/rules", response_model=AbilityRulesResponse)
async def list_rules(request: Request, ability: CurrentAbility):
    """Rules of the caller's ability, in precedence order."""
    return AbilityRulesResponse(
        role=request.state.role,
        rules=[RuleResponse.from_rule(rule) for rule in ability.rules],
    )


@router.get("/check", response_model=PermissionCheckResponse)
async def check_permission(
    ability: CurrentAbility,
    action: str = Query(..., min_length=1),
    subject: str = Query(..., min_length=1),
    field: str | None = Query(None, min_length=1),
):
    """Evaluate one permission for the caller without failing the request."""
    decision = ability.check(action, subject, field=field)
    return PermissionCheckResponse.from_decision(decision, action, subject, field)


@router.get("/fields", response_model=PermittedFieldsResponse)
async def permitted_fields(
    ability: CurrentAbility,
    action: str = Query(..., min_length=1),
    subject: str = Query(..., min_length=1),
    default: list[str] = Query([]),
):
    """Fields the caller may use, given the subject's default field list."""
    return PermittedFieldsResponse(
        action=action,
        subject=subject,
        fields=ordered_permitted_fields(ability, action, subject, default),
    )


@router.post(
    "/reload",
    response_model=ReloadResponse,
    dependencies=[Depends(require_ability("manage", "Ability"))],
)
async def reload_abilities(
    registry: AbilityRegistryDep,
    rbac_service: RBACService = Depends(get_rbac_service),
):
    """Rebuild every role's ability from the database."""
    registry.reload(await rbac_service.load_role_rules())
    return ReloadResponse(roles=registry.roles)
