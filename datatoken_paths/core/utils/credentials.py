"""Allow/deny lists on an asset DDO.

A DDO carries ``credentials = {"allow": [...], "deny": [...]}`` where each
entry is ``{"type": <CredentialType>, "values": [...]}``. The helpers never
mutate their input; each returns an updated deep copy.
"""

from __future__ import annotations

import copy
from enum import StrEnum
from typing import Any, Literal

CredentialAction = Literal["allow", "deny"]


class CredentialType(StrEnum):
    ADDRESS = "address"
    CREDENTIAL_3BOX = "credential3Box"


def _check_action(action: str) -> None:
    if action not in ("allow", "deny"):
        raise ValueError(f"credential action must be 'allow' or 'deny', got {action!r}")


def _entries(ddo: dict[str, Any], action: str) -> list[dict[str, Any]]:
    return list((ddo.get("credentials") or {}).get(action) or [])


def check_credential_exist(
    credentials: dict[str, Any] | None,
    credential_type: CredentialType | str,
    action: CredentialAction,
) -> bool:
    _check_action(action)
    return any(
        entry.get("type") == credential_type
        for entry in (credentials or {}).get(action) or []
    )


def add_credential_detail(
    ddo: dict[str, Any],
    credential_type: CredentialType | str,
    values: list[str],
    action: CredentialAction,
) -> dict[str, Any]:
    _check_action(action)
    updated = copy.deepcopy(ddo)
    credentials = updated.get("credentials") or {}
    credentials[action] = [
        *(credentials.get(action) or []),
        {"type": str(credential_type), "values": list(values)},
    ]
    updated["credentials"] = credentials
    return updated


def update_credential_detail(
    ddo: dict[str, Any],
    credential_type: CredentialType | str,
    values: list[str],
    action: CredentialAction,
) -> dict[str, Any]:
    """Replace the values of an existing entry; a missing entry is left absent."""
    _check_action(action)
    updated = copy.deepcopy(ddo)
    for entry in _entries(updated, action):
        if entry.get("type") == credential_type:
            entry["values"] = list(values)
    return updated


def remove_credential_detail(
    ddo: dict[str, Any],
    credential_type: CredentialType | str,
    action: CredentialAction,
) -> dict[str, Any]:
    _check_action(action)
    updated = copy.deepcopy(ddo)
    credentials = updated.get("credentials")
    if credentials and action in credentials:
        credentials[action] = [
            entry
            for entry in credentials[action] or []
            if entry.get("type") != credential_type
        ]
    return updated


def update_credentials(
    ddo: dict[str, Any],
    credential_type: CredentialType | str = CredentialType.ADDRESS,
    *,
    allow: list[str] | None = None,
    deny: list[str] | None = None,
) -> dict[str, Any]:
    """Set allow/deny values for ``credential_type``, adding or replacing as needed.

    An empty list removes the entry.
    """
    updated = ddo
    for action, values in (("allow", allow), ("deny", deny)):
        if values is None:
            continue
        exists = check_credential_exist(updated.get("credentials"), credential_type, action)
        if not values:
            updated = remove_credential_detail(updated, credential_type, action)
        elif exists:
            updated = update_credential_detail(updated, credential_type, values, action)
        else:
            updated = add_credential_detail(updated, credential_type, values, action)
    return updated
