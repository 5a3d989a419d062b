"""MySQL-compatible ``AES_ENCRYPT`` / ``AES_DECRYPT`` in application code.

The SIMRS ``user`` table stores identifiers and passwords encrypted with
MySQL's default ``aes-128-ecb`` block mode. MySQL folds the key string into a
16 byte buffer by XOR and pads the plaintext with PKCS#7, so encryption is
deterministic: a row can be located by encrypting the submitted identifier and
matching ciphertext exactly.
"""

import hmac
from typing import Optional

from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

KEY_SIZE = 16


def fold_key(key: str) -> bytes:
    folded = bytearray(KEY_SIZE)
    for i, byte in enumerate(key.encode("utf-8")):
        folded[i % KEY_SIZE] ^= byte
    return bytes(folded)


def mysql_aes_encrypt(plaintext: str, key: str) -> bytes:
    padder = padding.PKCS7(algorithms.AES.block_size).padder()
    data = padder.update(plaintext.encode("utf-8")) + padder.finalize()
    encryptor = Cipher(algorithms.AES(fold_key(key)), modes.ECB()).encryptor()
    return encryptor.update(data) + encryptor.finalize()


def mysql_aes_decrypt(ciphertext: bytes, key: str) -> Optional[str]:
    """Return the plaintext, or None where MySQL's AES_DECRYPT would return NULL."""
    if not ciphertext or len(ciphertext) % KEY_SIZE:
        return None
    decryptor = Cipher(algorithms.AES(fold_key(key)), modes.ECB()).decryptor()
    data = decryptor.update(bytes(ciphertext)) + decryptor.finalize()
    unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
    try:
        raw = unpadder.update(data) + unpadder.finalize()
        return raw.decode("utf-8")
    except ValueError:
        return None


def secrets_match(submitted: str, stored: Optional[str]) -> bool:
    if stored is None:
        return False
    return hmac.compare_digest(submitted.encode("utf-8"), stored.encode("utf-8"))
