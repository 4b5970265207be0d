from __future__ import annotations

from uuid import uuid4

import pytest

from useradmin.core.auth.principal import Principal
from useradmin.core.rbac.registry import UnknownKeyError
from useradmin.core.rbac.types import Permission, Role


def test_principal_of_parses_role_keys() -> None:
    principal = Principal.of(uuid4(), ["admin", Role.USER])

    assert principal.roles == frozenset({Role.ADMIN, Role.USER})
    assert principal.has_role(Role.ADMIN)
    assert principal.has_permission(Permission.READ_USER)


def test_principal_of_rejects_unknown_roles() -> None:
    with pytest.raises(UnknownKeyError):
        Principal.of(uuid4(), ["wizard"])
