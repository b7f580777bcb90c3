"""Client-side secret encryption for GitHub Actions secrets.

GitHub expects each secret value sealed with the repository's public key
(libsodium sealed box) and base64 encoded.
"""

from __future__ import annotations

from base64 import b64encode

from nacl import encoding, public


def encrypt_secret(public_key: str, value: str) -> str:
    """Seal a secret value for upload.

    Args:
        public_key: Repository public key, base64 encoded.
        value: Plaintext secret.

    Returns:
        Base64-encoded sealed box.
    """
    key = public.PublicKey(public_key.encode("utf-8"), encoding.Base64Encoder())
    sealed_box = public.SealedBox(key)
    encrypted = sealed_box.encrypt(value.encode("utf-8"))
    return b64encode(encrypted).decode("utf-8")
