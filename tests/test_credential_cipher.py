"""MySQL AES_ENCRYPT compatibility helpers."""

from wardrounds.services.credential_cipher import (
    fold_key, mysql_aes_decrypt, mysql_aes_encrypt, secrets_match,
)


def test_short_key_is_zero_padded():
    assert fold_key("nur") == b"nur" + b"\x00" * 13


def test_long_key_wraps_with_xor():
    key = "a" * 16 + "b"
    folded = fold_key(key)
    assert len(folded) == 16
    assert folded[0] == ord("a") ^ ord("b")
    assert folded[1:] == b"a" * 15


def test_encryption_is_deterministic_and_block_aligned():
    first = mysql_aes_encrypt("D01", "nur")
    assert first == mysql_aes_encrypt("D01", "nur")
    assert len(first) == 16
    assert len(mysql_aes_encrypt("x" * 16, "nur")) == 32
    assert mysql_aes_decrypt(first, "nur") == "D01"


def test_decrypt_with_wrong_key_or_garbage_returns_none():
    ciphertext = mysql_aes_encrypt("rahasia", "windi")
    assert mysql_aes_decrypt(ciphertext, "nur") != "rahasia"
    assert mysql_aes_decrypt(b"short", "windi") is None
    assert mysql_aes_decrypt(b"", "windi") is None


def test_secrets_match_requires_exact_value():
    assert secrets_match("rahasia", "rahasia")
    assert not secrets_match("rahasia", "Rahasia")
    assert not secrets_match("rahasia", None)
