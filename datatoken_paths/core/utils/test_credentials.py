import pytest

from datatoken_paths.core.utils.credentials import (
    CredentialType,
    add_credential_detail,
    check_credential_exist,
    remove_credential_detail,
    update_credential_detail,
    update_credentials,
)

ALICE = "0x1111111111111111111111111111111111111111"
BOB = "0x2222222222222222222222222222222222222222"


@pytest.fixture
def ddo():
    return {
        "id": "did:op:abc",
        "credentials": {
            "allow": [{"type": "address", "values": [ALICE]}],
            "deny": [],
        },
    }


def test_check_credential_exist(ddo):
    creds = ddo["credentials"]

    assert check_credential_exist(creds, CredentialType.ADDRESS, "allow")
    assert not check_credential_exist(creds, CredentialType.ADDRESS, "deny")
    assert not check_credential_exist(creds, CredentialType.CREDENTIAL_3BOX, "allow")
    assert not check_credential_exist(None, CredentialType.ADDRESS, "allow")


def test_add_to_ddo_without_credentials():
    updated = add_credential_detail({"id": "did:op:x"}, "address", [BOB], "deny")

    assert updated["credentials"] == {"deny": [{"type": "address", "values": [BOB]}]}


def test_add_does_not_mutate_input(ddo):
    add_credential_detail(ddo, CredentialType.CREDENTIAL_3BOX, ["x"], "allow")

    assert len(ddo["credentials"]["allow"]) == 1


def test_update_replaces_values(ddo):
    updated = update_credential_detail(ddo, CredentialType.ADDRESS, [BOB], "allow")

    assert updated["credentials"]["allow"] == [{"type": "address", "values": [BOB]}]
    assert ddo["credentials"]["allow"][0]["values"] == [ALICE]


def test_remove_entry(ddo):
    updated = remove_credential_detail(ddo, CredentialType.ADDRESS, "allow")

    assert updated["credentials"]["allow"] == []


def test_update_credentials_adds_replaces_and_removes(ddo):
    updated = update_credentials(ddo, allow=[BOB], deny=[ALICE])
    assert updated["credentials"]["allow"] == [{"type": "address", "values": [BOB]}]
    assert updated["credentials"]["deny"] == [{"type": "address", "values": [ALICE]}]

    cleared = update_credentials(updated, allow=[])
    assert cleared["credentials"]["allow"] == []
    assert cleared["credentials"]["deny"] == updated["credentials"]["deny"]


def test_bad_action_rejected(ddo):
    with pytest.raises(ValueError):
        check_credential_exist(ddo["credentials"], "address", "maybe")
