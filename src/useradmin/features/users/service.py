"""Business logic for user operations."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any
from uuid import UUID

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from useradmin.common.errors import ValidationFailed
from useradmin.common.lifecycle import TransactionRunner
from useradmin.common.logging import log_context
from useradmin.common.outcomes import (
    Denied,
    Failure,
    FailureReason,
    FieldError,
    Invalid,
    Success,
)
from useradmin.common.pagination import paginate_sql
from useradmin.common.sorting import SortError, parse_sort, resolve_sort
from useradmin.core.auth.principal import Principal
from useradmin.core.rbac.policy import (
    can_create_user,
    can_delete_user,
    can_update_user,
    can_view_any_users,
)
from useradmin.core.rbac.registry import DEFAULT_ROLE
from useradmin.core.security.hashing import hash_password
from useradmin.core.security.passwords import generate_password
from useradmin.features.notifications import CredentialNotifier
from useradmin.features.rbac.store import RoleAssignmentStore
from useradmin.models import User
from useradmin.settings import Settings

from .exceptions import (
    CREATE_FAILED,
    DELETE_FAILED,
    EMAIL_TAKEN,
    LIST_FAILED,
    NOTIFICATION_FAILED,
    UPDATE_FAILED,
    USER_CREATED,
    USER_DELETED,
    USER_UPDATED,
    USERS_ROUTE,
    UserNotFoundError,
)
from .repository import UsersRepository
from .schemas import UserInput, UserOut, UserPage
from .sorting import DEFAULT_SORT, ID_FIELD, SORT_FIELDS
from .visibility import visible_users

logger = logging.getLogger(__name__)

# Raw request data; only checked once the caller is authorized.
type UserPayload = Mapping[str, Any] | None


def _field_errors(exc: ValidationError) -> list[FieldError]:
    errors: list[FieldError] = []
    for entry in exc.errors():
        loc = entry.get("loc") or ()
        field = str(loc[0]) if loc else "__root__"
        errors.append(FieldError(field=field, message=entry["msg"], code=entry.get("type")))
    return errors


def _parse_int(
    value: int | str | None,
    field: str,
    *,
    default: int,
    errors: list[FieldError],
) -> int | None:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        errors.append(FieldError(field, f"{field} must be an integer.", "int_parsing"))
        return None


class UsersService:
    """Create, update, delete and list user accounts on behalf of a principal.

    Every operation checks authorization before it validates or touches
    storage, and reports one of the outcomes in
    :mod:`useradmin.common.outcomes` instead of raising.
    """

    def __init__(
        self,
        *,
        session: Session,
        settings: Settings,
        notifier: CredentialNotifier,
    ) -> None:
        self._session = session
        self._settings = settings
        self._notifier = notifier
        self._repo = UsersRepository(session)
        self._roles = RoleAssignmentStore(session)
        self._runner = TransactionRunner(session)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_user(
        self,
        *,
        principal: Principal | None,
        payload: UserPayload,
    ) -> Success[UserOut] | Denied | Invalid | Failure[UserOut]:
        """Create a user, assign the base role and mail a generated password.

        The password is sent only after the commit. A failed send leaves the
        user in place and yields ``Failure(reason=NOTIFICATION)`` carrying the
        created user.
        """

        if principal is None or not can_create_user(principal):
            return self._deny("users.create", principal)

        password = generate_password(self._settings.generated_password_length)

        def mutation() -> UserOut:
            data = self._validate(payload)
            self._ensure_email_available(data.email)
            user = self._repo.create(
                name=data.name,
                email=str(data.email),
                hashed_password=hash_password(password),
                created_by_id=principal.id,
            )
            self._roles.assign(user.id, DEFAULT_ROLE)
            return UserOut.model_validate(user)

        def notify(created: UserOut) -> None:
            self._notifier.send_credentials(
                recipient=created.email,
                name=created.name,
                password=password,
            )

        return self._runner.run(
            mutation,
            operation="users.create",
            success_message=USER_CREATED,
            failure_message=CREATE_FAILED,
            actor_id=principal.id,
            after_commit=notify,
            after_commit_failure_message=NOTIFICATION_FAILED,
            redirect_to=USERS_ROUTE,
        )

    def update_user(
        self,
        *,
        principal: Principal | None,
        user_id: UUID,
        payload: UserPayload,
    ) -> Success[UserOut] | Denied | Invalid | Failure[UserOut]:
        """Replace the name and email of ``user_id`` in one commit."""

        target = self._repo.get_by_id(user_id)
        if principal is None or not can_update_user(
            principal,
            target,
            require_ownership=self._settings.users_mutation_requires_ownership,
        ):
            return self._deny("users.update", principal, target_id=user_id)

        def mutation() -> UserOut:
            if target is None:
                raise UserNotFoundError(user_id)
            data = self._validate(payload)
            self._ensure_email_available(data.email, exclude_id=target.id)
            self._repo.update(target, name=data.name, email=str(data.email))
            return UserOut.model_validate(target)

        return self._runner.run(
            mutation,
            operation="users.update",
            success_message=USER_UPDATED,
            failure_message=UPDATE_FAILED,
            actor_id=principal.id,
            target_id=user_id,
            redirect_to=USERS_ROUTE,
        )

    def delete_user(
        self,
        *,
        principal: Principal | None,
        user_id: UUID,
    ) -> Success[None] | Denied | Invalid | Failure[None]:
        """Hard-delete ``user_id``; its role assignments go with it."""

        target = self._repo.get_by_id(user_id)
        if principal is None or not can_delete_user(
            principal,
            target,
            require_ownership=self._settings.users_mutation_requires_ownership,
        ):
            return self._deny("users.delete", principal, target_id=user_id)

        def mutation() -> None:
            if target is None:
                raise UserNotFoundError(user_id)
            self._repo.delete(target)

        return self._runner.run(
            mutation,
            operation="users.delete",
            success_message=USER_DELETED,
            failure_message=DELETE_FAILED,
            actor_id=principal.id,
            target_id=user_id,
            redirect_to=USERS_ROUTE,
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_users(
        self,
        *,
        principal: Principal | None,
        page: int | str | None = 1,
        page_size: int | str | None = None,
        sort: str | None = None,
    ) -> Success[UserPage] | Denied | Invalid | Failure[UserPage]:
        """Return one page of the users visible to ``principal``."""

        if principal is None or not can_view_any_users(principal):
            return self._deny("users.list", principal)

        errors: list[FieldError] = []
        page = _parse_int(page, "page", default=1, errors=errors)
        size = _parse_int(
            page_size, "page_size", default=self._settings.users_page_size, errors=errors
        )
        if page is not None and page < 1:
            errors.append(FieldError("page", "Page must be at least 1.", "greater_than_equal"))
        if size is not None and not 1 <= size <= self._settings.users_max_page_size:
            errors.append(
                FieldError(
                    "page_size",
                    f"Page size must be between 1 and {self._settings.users_max_page_size}.",
                    "out_of_range",
                )
            )
        try:
            order_by = resolve_sort(
                parse_sort(sort),
                allowed=SORT_FIELDS,
                default=DEFAULT_SORT,
                id_field=ID_FIELD,
            )
        except SortError as exc:
            errors.append(FieldError("sort", str(exc), "invalid_sort"))
        if errors:
            return Invalid(errors=tuple(errors))

        logger.debug(
            "users.list.start",
            extra=log_context(actor_id=principal.id, page=page, page_size=size, sort=sort),
        )

        stmt = visible_users(principal).apply(select(User))
        try:
            result = paginate_sql(
                self._session,
                stmt,
                page=page,
                page_size=size,
                order_by=order_by,
            )
        except SQLAlchemyError as exc:
            logger.error(
                "users.list.failed",
                extra=log_context(actor_id=principal.id, error_type=type(exc).__name__),
                exc_info=exc,
            )
            return Failure(message=LIST_FAILED, reason=FailureReason.PERSISTENCE)

        users_page = UserPage(
            items=[UserOut.model_validate(user) for user in result.items],
            page=result.page,
            page_size=result.page_size,
            has_next=result.has_next,
            has_previous=result.has_previous,
            total=result.total,
        )
        logger.info(
            "users.list.success",
            extra=log_context(
                actor_id=principal.id,
                count=len(users_page.items),
                total=users_page.total,
            ),
        )
        return Success(value=users_page)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _deny(
        self,
        operation: str,
        principal: Principal | None,
        *,
        target_id: UUID | None = None,
    ) -> Denied:
        logger.warning(
            f"{operation}.denied",
            extra=log_context(
                actor_id=principal.id if principal is not None else None,
                target_id=target_id,
                authenticated=principal is not None,
            ),
        )
        return Denied()

    @staticmethod
    def _validate(payload: UserPayload) -> UserInput:
        if payload is None:
            raw: dict[str, Any] = {}
        elif isinstance(payload, Mapping):
            raw = {key: value for key, value in payload.items() if value is not None}
        else:
            raise ValidationFailed.for_field(
                "__root__", "Expected an object with name and email.", code="model_type"
            )
        try:
            return UserInput.model_validate(raw)
        except ValidationError as exc:
            raise ValidationFailed(_field_errors(exc)) from exc

    def _ensure_email_available(self, email: str, *, exclude_id: UUID | None = None) -> None:
        if self._repo.email_taken(str(email), exclude_id=exclude_id):
            raise ValidationFailed.for_field("email", EMAIL_TAKEN, code="unique")


__all__ = ["UsersService"]
