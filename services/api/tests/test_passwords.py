import pytest

from ratings_api.services.passwords import (
    PasswordPolicyError,
    check_password_policy,
    hash_password,
    verify_password,
)


@pytest.mark.parametrize(
    ("password", "message"),
    [
        ("Ab1!", "at least 8"),
        ("Abcdefgh!12345678", "must not exceed 16"),
        ("abcdefgh!", "uppercase"),
        ("Abcdefgh1", "special character"),
    ],
)
def test_password_policy_rejects(password: str, message: str):
    with pytest.raises(PasswordPolicyError, match=message):
        check_password_policy(password)


def test_password_policy_accepts_valid_password():
    assert check_password_policy("Secret#Pass1") == "Secret#Pass1"


@pytest.mark.asyncio
async def test_hash_is_salted_and_verifies():
    first = await hash_password("Secret#Pass1")
    second = await hash_password("Secret#Pass1")

    assert first != second
    assert first.startswith("$2")
    assert await verify_password("Secret#Pass1", first)
    assert not await verify_password("Secret#Pass2", first)


@pytest.mark.asyncio
async def test_verify_against_malformed_hash_is_false():
    assert not await verify_password("Secret#Pass1", "not-a-bcrypt-hash")
