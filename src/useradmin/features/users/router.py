"""Routes for user administration."""

from __future__ import annotations

from typing import Annotated, Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Path, Query, status

from useradmin.api.deps import get_users_service, get_users_service_read
from useradmin.common.outcomes import Success
from useradmin.core.http.dependencies import PrincipalDep

from .responses import raise_for_outcome
from .schemas import UserDeleteResponse, UserMutationResponse, UserPage
from .service import UsersService

router = APIRouter(tags=["users"])

# Optional and untyped: the service authorizes before it validates the body.
UserBody = Annotated[
    Any,
    Body(
        description="Name and email of the user record.",
        examples=[{"name": "Ann", "email": "ann@example.com"}],
    ),
]
USER_ID_PARAM = Annotated[
    UUID,
    Path(
        description="User identifier.",
        alias="userId",
    ),
]
_AUTH_RESPONSES = {
    status.HTTP_401_UNAUTHORIZED: {"description": "No acting user on the request."},
    status.HTTP_403_FORBIDDEN: {"description": "The acting user lacks the permission."},
}


@router.get(
    "/users",
    response_model=UserPage,
    status_code=status.HTTP_200_OK,
    summary="List the users visible to the acting user",
    responses=_AUTH_RESPONSES,
)
def list_users(
    principal: PrincipalDep,
    service: Annotated[UsersService, Depends(get_users_service_read)],
    page: Annotated[str | None, Query(description="1-based page number")] = None,
    page_size: Annotated[str | None, Query(description="Items per page")] = None,
    sort: Annotated[
        str | None,
        Query(description="Comma-separated fields, '-' prefix for descending"),
    ] = None,
) -> UserPage:
    outcome = service.list_users(principal=principal, page=page, page_size=page_size, sort=sort)
    if not isinstance(outcome, Success):
        raise_for_outcome(outcome, principal=principal)
    return outcome.value


@router.post(
    "/users",
    response_model=UserMutationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user and email a generated password",
    responses={
        **_AUTH_RESPONSES,
        422: {"description": "Invalid name or email, or email already taken."},
    },
)
def create_user(
    principal: PrincipalDep,
    service: Annotated[UsersService, Depends(get_users_service)],
    payload: UserBody = None,
) -> UserMutationResponse:
    outcome = service.create_user(principal=principal, payload=payload)
    if not isinstance(outcome, Success):
        raise_for_outcome(outcome, principal=principal)
    return UserMutationResponse(
        message=outcome.message or "",
        redirect_to=outcome.redirect_to,
        user=outcome.value,
    )


@router.put(
    "/users/{userId}",
    response_model=UserMutationResponse,
    status_code=status.HTTP_200_OK,
    summary="Replace a user's name and email",
    responses={
        **_AUTH_RESPONSES,
        status.HTTP_404_NOT_FOUND: {"description": "User not found."},
        422: {"description": "Invalid name or email, or email already taken."},
    },
)
def update_user(
    principal: PrincipalDep,
    user_id: USER_ID_PARAM,
    service: Annotated[UsersService, Depends(get_users_service)],
    payload: UserBody = None,
) -> UserMutationResponse:
    outcome = service.update_user(principal=principal, user_id=user_id, payload=payload)
    if not isinstance(outcome, Success):
        raise_for_outcome(outcome, principal=principal)
    return UserMutationResponse(
        message=outcome.message or "",
        redirect_to=outcome.redirect_to,
        user=outcome.value,
    )


@router.delete(
    "/users/{userId}",
    response_model=UserDeleteResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete a user",
    responses={
        **_AUTH_RESPONSES,
        status.HTTP_404_NOT_FOUND: {"description": "User not found."},
    },
)
def delete_user(
    principal: PrincipalDep,
    user_id: USER_ID_PARAM,
    service: Annotated[UsersService, Depends(get_users_service)],
) -> UserDeleteResponse:
    outcome = service.delete_user(principal=principal, user_id=user_id)
    if not isinstance(outcome, Success):
        raise_for_outcome(outcome, principal=principal)
    return UserDeleteResponse(message=outcome.message or "", redirect_to=outcome.redirect_to)


__all__ = ["router"]
