import pytest

from kinfolk.services.tokens import TOKEN_ALPHABET, TOKEN_LENGTH, generate_token, new_invite_token


def test_generated_tokens_use_unambiguous_alphabet() -> None:
    token = generate_token()

    assert len(token) == TOKEN_LENGTH == 12
    assert set(token) <= set(TOKEN_ALPHABET)
    assert len(TOKEN_ALPHABET) == 55
    assert not set("0O1lIio") & set(TOKEN_ALPHABET)


def test_token_is_redrawn_on_collision() -> None:
    seen: list[str] = []

    def exists(token: str) -> bool:
        seen.append(token)
        return len(seen) == 1

    token = new_invite_token(exists)

    assert len(seen) == 2
    assert token == seen[1]


def test_gives_up_after_repeated_collisions() -> None:
    with pytest.raises(RuntimeError):
        new_invite_token(lambda token: True, attempts=3)
