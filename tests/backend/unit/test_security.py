from testiflow.backend.security import (
    generate_token,
    hash_password,
    hash_token,
    verify_password,
)


def test_hash_token_is_deterministic_for_same_inputs() -> None:
    token = "session-token"
    salt = "local-dev-salt"

    hashed_first = hash_token(token, salt)
    hashed_second = hash_token(token, salt)

    assert hashed_first == hashed_second
    assert len(hashed_first) == 64


def test_generate_token_returns_non_empty_random_value() -> None:
    first = generate_token()
    second = generate_token()

    assert first
    assert second
    assert first != second


def test_password_hash_is_salted_and_verifiable() -> None:
    first = hash_password("password123")
    second = hash_password("password123")

    assert first != second
    assert verify_password("password123", first) is True
    assert verify_password("password124", first) is False
    assert hash_password("password123", "fixed") == hash_password("password123", "fixed")
