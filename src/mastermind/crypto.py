"""Opaque primitives: one-way digests, commitments and Ed25519 signatures."""

from __future__ import annotations
import hashlib

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey, Ed25519PublicKey

RAW = serialization.Encoding.Raw


def digest(*parts: object) -> str:
    """SHA-256 over the '|'-joined string form of `parts`."""
    payload = "|".join(p.hex() if isinstance(p, (bytes, bytearray)) else str(p) for p in parts)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def identity_hash(public_key: bytes) -> str:
    return digest("identity", public_key)


def solution_commitment(secret: int, salt: int | str, address: str) -> str:
    """Binds the secret to a salt and to one game instance address."""
    return digest("solution", int(secret), salt, address)


def generate_keypair() -> tuple[Ed25519PrivateKey, bytes]:
    sk = Ed25519PrivateKey.generate()
    return sk, public_bytes(sk)


def public_bytes(sk: Ed25519PrivateKey) -> bytes:
    return sk.public_key().public_bytes(RAW, serialization.PublicFormat.Raw)


def sign(sk: Ed25519PrivateKey, message: bytes) -> bytes:
    return sk.sign(message)


def verify_signature(public_key: bytes, message: bytes, signature: bytes) -> bool:
    try:
        Ed25519PublicKey.from_public_bytes(public_key).verify(signature, message)
    except (InvalidSignature, ValueError):
        return False
    return True
