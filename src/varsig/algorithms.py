"""Signature algorithm implementations for varsig envelopes.

Each algorithm is a small class that satisfies ``AlgorithmImplementation``.
The envelope codec only ever talks to that protocol, so new schemes can be
added without touching the codec.

Built-in algorithms:
- Ed25519 (RFC 8032, pycryptodome): 64-byte deterministic signatures
- RSA PKCS#1 v1.5 over SHA-256 (pycryptodome): 256-byte signatures at 2048 bits
- BLS12-381 minimal-pubkey-size signatures (py_ecc): 96-byte signatures

Key objects are opaque to the codec. Ed25519 and BLS keys are raw bytes,
RSA keys are pycryptodome ``RsaKey`` handles.
"""

import asyncio
import secrets
from dataclasses import dataclass
from typing import Any, Callable, Protocol, runtime_checkable

from Crypto.Hash import SHA256
from Crypto.PublicKey import RSA
from Crypto.Signature import eddsa, pkcs1_15
from py_ecc.bls import G2Basic
from py_ecc.optimized_bls12_381 import curve_order

from .constants import HASH_ALGO_SHA256, SIGNATURE_HEADER_TAGS
from .errors import KeyImportError


@dataclass(frozen=True)
class KeyPair:
    """A private/public key pair in the algorithm's native representation."""

    private_key: Any
    public_key: Any


@runtime_checkable
class AlgorithmImplementation(Protocol):
    """Protocol for signature algorithm implementations."""

    name: str

    def signature_header_tag(self) -> int:
        """Varint tag identifying the algorithm in the envelope."""
        ...

    def hash_algorithm_tag(self) -> int:
        """Varint tag identifying the digest used when signing."""
        ...

    async def sign(self, payload: bytes, private_key: Any) -> bytes:
        """Sign a payload."""
        ...

    async def verify(self, payload: bytes, signature: bytes, public_key: Any) -> bool:
        """Verify a signature. Returns False when it does not check out."""
        ...

    async def generate_key(self) -> KeyPair:
        """Generate a new key pair."""
        ...

    def export_private_key(self, private_key: Any) -> bytes:
        ...

    def export_public_key(self, public_key: Any) -> bytes:
        ...

    def import_private_key(self, data: bytes) -> Any:
        ...

    def import_public_key(self, data: bytes) -> Any:
        ...


class Ed25519Algorithm:
    """Ed25519 signatures using pycryptodome (RFC 8032 pure mode).

    Private keys are 32-byte seeds, public keys are 32-byte encoded points.
    SHA-512 is fixed by Ed25519 itself and handled inside the primitive.
    """

    name = "ed25519"
    PRIVATE_KEY_SIZE = 32
    PUBLIC_KEY_SIZE = 32
    SIGNATURE_SIZE = 64

    def __init__(self, hash_tag: int = HASH_ALGO_SHA256) -> None:
        self._hash_tag = hash_tag

    def signature_header_tag(self) -> int:
        return SIGNATURE_HEADER_TAGS["ed25519"]

    def hash_algorithm_tag(self) -> int:
        return self._hash_tag

    async def sign(self, payload: bytes, private_key: bytes) -> bytes:
        """Sign payload with a 32-byte Ed25519 seed."""
        key = eddsa.import_private_key(bytes(private_key))
        return eddsa.new(key, "rfc8032").sign(bytes(payload))

    async def verify(self, payload: bytes, signature: bytes, public_key: bytes) -> bool:
        """Verify an Ed25519 signature."""
        key = eddsa.import_public_key(bytes(public_key))
        verifier = eddsa.new(key, "rfc8032")
        try:
            verifier.verify(bytes(payload), bytes(signature))
            return True
        except ValueError:
            return False

    async def generate_key(self) -> KeyPair:
        seed = secrets.token_bytes(self.PRIVATE_KEY_SIZE)
        return KeyPair(private_key=seed, public_key=self.public_key_for(seed))

    def public_key_for(self, private_key: bytes) -> bytes:
        """Derive the encoded public key from a seed."""
        key = eddsa.import_private_key(bytes(private_key))
        return key.public_key().export_key(format="raw")

    def export_private_key(self, private_key: bytes) -> bytes:
        return bytes(private_key)

    def export_public_key(self, public_key: bytes) -> bytes:
        return bytes(public_key)

    def import_private_key(self, data: bytes) -> bytes:
        if len(data) != self.PRIVATE_KEY_SIZE:
            raise KeyImportError(
                self.name,
                f"private key must be {self.PRIVATE_KEY_SIZE} bytes "
                f"({self.PRIVATE_KEY_SIZE * 2} hex chars), got {len(data)} bytes",
            )
        return bytes(data)

    def import_public_key(self, data: bytes) -> bytes:
        if len(data) != self.PUBLIC_KEY_SIZE:
            raise KeyImportError(
                self.name,
                f"public key must be {self.PUBLIC_KEY_SIZE} bytes, got {len(data)} bytes",
            )
        try:
            eddsa.import_public_key(bytes(data))
        except ValueError as e:
            raise KeyImportError(self.name, str(e)) from e
        return bytes(data)


class RSAAlgorithm:
    """RSASSA-PKCS1-v1_5 signatures using pycryptodome.

    The digest is injected per instance through ``hash_factory`` together
    with the tag written to the envelope, so two instances with different
    digests can be used side by side.
    """

    name = "rsa"
    DEFAULT_KEY_SIZE = 2048

    def __init__(
        self,
        key_size: int = DEFAULT_KEY_SIZE,
        hash_factory: Callable[[bytes], Any] = SHA256.new,
        hash_tag: int = HASH_ALGO_SHA256,
    ) -> None:
        """Initialize RSA algorithm.

        Args:
            key_size: Modulus size in bits for generated keys
            hash_factory: Callable returning a pycryptodome hash object for a payload
            hash_tag: Varint tag identifying ``hash_factory`` in the envelope
        """
        self.key_size = key_size
        self._hash_factory = hash_factory
        self._hash_tag = hash_tag

    @property
    def signature_size(self) -> int:
        return self.key_size // 8

    def signature_header_tag(self) -> int:
        return SIGNATURE_HEADER_TAGS["rsa"]

    def hash_algorithm_tag(self) -> int:
        return self._hash_tag

    async def sign(self, payload: bytes, private_key: RSA.RsaKey) -> bytes:
        """Sign payload with an RSA private key."""
        digest = self._hash_factory(bytes(payload))
        return pkcs1_15.new(private_key).sign(digest)

    async def verify(self, payload: bytes, signature: bytes, public_key: RSA.RsaKey) -> bool:
        """Verify an RSA PKCS#1 v1.5 signature."""
        digest = self._hash_factory(bytes(payload))
        try:
            pkcs1_15.new(public_key).verify(digest, bytes(signature))
            return True
        except ValueError:
            return False

    async def generate_key(self) -> KeyPair:
        """Generate an RSA key pair in a worker thread."""
        private_key = await asyncio.to_thread(RSA.generate, self.key_size)
        return KeyPair(private_key=private_key, public_key=private_key.public_key())

    def export_private_key(self, private_key: RSA.RsaKey) -> bytes:
        """Export as PKCS#8 DER."""
        return private_key.export_key(format="DER", pkcs=8)

    def export_public_key(self, public_key: RSA.RsaKey) -> bytes:
        """Export as SubjectPublicKeyInfo DER."""
        return public_key.export_key(format="DER")

    def import_private_key(self, data: bytes) -> RSA.RsaKey:
        key = self._import(data)
        if not key.has_private():
            raise KeyImportError(self.name, "not a private key")
        return key

    def import_public_key(self, data: bytes) -> RSA.RsaKey:
        return self._import(data).public_key()

    def _import(self, data: bytes) -> RSA.RsaKey:
        try:
            return RSA.import_key(bytes(data))
        except (ValueError, IndexError, TypeError) as e:
            raise KeyImportError(self.name, str(e) or "unrecognized key encoding") from e


class BLSAlgorithm:
    """BLS12-381 signatures using py_ecc.

    Public keys live in G1 (48 bytes), signatures in G2 (96 bytes). The
    ciphersuite is injected per instance and defaults to the basic scheme
    (``BLS_SIG_BLS12381G2_XMD:SHA-256_SSWU_RO_NUL_``).

    Private keys are 32-byte big-endian scalars.
    """

    name = "bls"
    PRIVATE_KEY_SIZE = 32
    PUBLIC_KEY_SIZE = 48
    SIGNATURE_SIZE = 96

    def __init__(self, ciphersuite: Any = G2Basic, hash_tag: int = HASH_ALGO_SHA256) -> None:
        self._ciphersuite = ciphersuite
        self._hash_tag = hash_tag

    def signature_header_tag(self) -> int:
        return SIGNATURE_HEADER_TAGS["bls"]

    def hash_algorithm_tag(self) -> int:
        return self._hash_tag

    async def sign(self, payload: bytes, private_key: bytes) -> bytes:
        """Sign payload with a 32-byte BLS private key."""
        scalar = int.from_bytes(bytes(private_key), "big")
        return bytes(await asyncio.to_thread(self._ciphersuite.Sign, scalar, bytes(payload)))

    async def verify(self, payload: bytes, signature: bytes, public_key: bytes) -> bool:
        """Verify a BLS signature (pairing check runs in a worker thread)."""
        return bool(
            await asyncio.to_thread(
                self._ciphersuite.Verify, bytes(public_key), bytes(payload), bytes(signature)
            )
        )

    async def generate_key(self) -> KeyPair:
        ikm = secrets.token_bytes(32)
        scalar = self._ciphersuite.KeyGen(ikm)
        private_key = scalar.to_bytes(self.PRIVATE_KEY_SIZE, "big")
        public_key = await asyncio.to_thread(self._ciphersuite.SkToPk, scalar)
        return KeyPair(private_key=private_key, public_key=bytes(public_key))

    def public_key_for(self, private_key: bytes) -> bytes:
        """Derive the compressed G1 public key from a private key."""
        return bytes(self._ciphersuite.SkToPk(int.from_bytes(bytes(private_key), "big")))

    def export_private_key(self, private_key: bytes) -> bytes:
        return bytes(private_key)

    def export_public_key(self, public_key: bytes) -> bytes:
        return bytes(public_key)

    def import_private_key(self, data: bytes) -> bytes:
        if len(data) != self.PRIVATE_KEY_SIZE:
            raise KeyImportError(
                self.name,
                f"private key must be {self.PRIVATE_KEY_SIZE} bytes, got {len(data)} bytes",
            )
        scalar = int.from_bytes(bytes(data), "big")
        if not 0 < scalar < curve_order:
            raise KeyImportError(self.name, "private key out of range for BLS12-381")
        return bytes(data)

    def import_public_key(self, data: bytes) -> bytes:
        if len(data) != self.PUBLIC_KEY_SIZE:
            raise KeyImportError(
                self.name,
                f"public key must be {self.PUBLIC_KEY_SIZE} bytes, got {len(data)} bytes",
            )
        try:
            valid = self._ciphersuite.KeyValidate(bytes(data))
        except Exception:
            valid = False
        if not valid:
            raise KeyImportError(self.name, "public key is not a valid G1 point")
        return bytes(data)


def builtin_algorithms(rsa_key_size: int = RSAAlgorithm.DEFAULT_KEY_SIZE) -> list:
    """Fresh instances of the built-in algorithms in registration order."""
    return [Ed25519Algorithm(), RSAAlgorithm(key_size=rsa_key_size), BLSAlgorithm()]
