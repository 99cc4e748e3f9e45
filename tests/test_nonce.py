import pytest

from markdown_viewer.constants import NONCE_ALPHABET, NONCE_LENGTH
from markdown_viewer.nonce import generate_nonce


def test_nonce_is_32_alphanumeric_characters():
    nonce = generate_nonce()

    assert len(nonce) == NONCE_LENGTH == 32
    assert set(nonce) <= set(NONCE_ALPHABET)
    assert nonce.isascii() and nonce.isalnum()


def test_consecutive_nonces_differ():
    nonces = {generate_nonce() for _ in range(100)}

    assert len(nonces) == 100


def test_custom_length():
    assert len(generate_nonce(8)) == 8


def test_non_positive_length_is_rejected():
    with pytest.raises(ValueError):
        generate_nonce(0)
