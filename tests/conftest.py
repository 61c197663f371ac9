"""Pytest configuration and fixtures for varsig tests."""

import asyncio
import tempfile
from pathlib import Path
from typing import Any, Callable, Generator

import pytest
from Crypto.Hash import HMAC, SHA256

from varsig.algorithms import BLSAlgorithm, Ed25519Algorithm, KeyPair, RSAAlgorithm
from varsig.registry import AlgorithmRegistry, build_default_registry

# RFC 8032 section 7.1, TEST 1 (empty message)
RFC8032_SECRET = bytes.fromhex(
    "9d61b19deffd5a60ba844af492ec2cc44449c5697b326919703bac031cae7f60"
)
RFC8032_PUBLIC = bytes.fromhex(
    "d75a980182b10ab7d54bfed3c964073a0ee172f3daa62325af021a68f707511a"
)
RFC8032_SIGNATURE = bytes.fromhex(
    "e5564300c360ac729086e2cc806e828a84877f1eb8e5d974d873e065224901555f"
    "b8821590a33bacc61e39701cf9b46bd25bf5f0595bbe24655141438e7a100b"
)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def run() -> Callable[[Any], Any]:
    """Run a coroutine to completion."""
    return asyncio.run


@pytest.fixture
def payload() -> bytes:
    """Sample payload used across tests."""
    return "hello world".encode("utf-8")


@pytest.fixture
def registry() -> AlgorithmRegistry:
    """A fresh registry with the built-in algorithms."""
    return build_default_registry()


@pytest.fixture(scope="session")
def ed25519() -> Ed25519Algorithm:
    return Ed25519Algorithm()


@pytest.fixture(scope="session")
def rsa() -> RSAAlgorithm:
    return RSAAlgorithm()


@pytest.fixture(scope="session")
def bls() -> BLSAlgorithm:
    return BLSAlgorithm()


@pytest.fixture(scope="session")
def ed25519_keys(ed25519: Ed25519Algorithm) -> KeyPair:
    """Ed25519 key pair shared by the session."""
    return asyncio.run(ed25519.generate_key())


@pytest.fixture(scope="session")
def rsa_keys(rsa: RSAAlgorithm) -> KeyPair:
    """RSA-2048 key pair shared by the session (generation is slow)."""
    return asyncio.run(rsa.generate_key())


@pytest.fixture(scope="session")
def bls_keys(bls: BLSAlgorithm) -> KeyPair:
    """BLS key pair shared by the session."""
    return asyncio.run(bls.generate_key())


@pytest.fixture
def sample_config_yaml(temp_dir: Path) -> Path:
    """Create a sample YAML configuration file."""
    config_content = """
crypto:
  default_algorithm: ed25519
  rsa_key_size: 3072
output:
  hex_uppercase: true
log_level: INFO
"""
    path = temp_dir / "config.yaml"
    path.write_text(config_content)
    return path


@pytest.fixture
def sample_config_json(temp_dir: Path) -> Path:
    """Create a sample JSON configuration file."""
    config_content = """{
  "crypto": {"default_algorithm": "bls", "rsa_key_size": 2048},
  "output": {"hex_uppercase": false},
  "log_level": "DEBUG"
}"""
    path = temp_dir / "config.json"
    path.write_text(config_content)
    return path


class HMACTestAlgorithm:
    """Symmetric stand-in algorithm for registry and codec tests.

    Uses HMAC-SHA256 so that a "key pair" is the same secret twice.
    """

    def __init__(self, name: str = "hmac-test", tag: int = 0x7A01, fail_with: Exception = None) -> None:
        self.name = name
        self._tag = tag
        self._fail_with = fail_with

    def signature_header_tag(self) -> int:
        return self._tag

    def hash_algorithm_tag(self) -> int:
        return 0x12

    async def sign(self, payload: bytes, private_key: bytes) -> bytes:
        if self._fail_with is not None:
            raise self._fail_with
        return HMAC.new(private_key, payload, digestmod=SHA256).digest()

    async def verify(self, payload: bytes, signature: bytes, public_key: bytes) -> bool:
        expected = HMAC.new(public_key, payload, digestmod=SHA256).digest()
        return expected == signature

    async def generate_key(self) -> KeyPair:
        secret = b"\x42" * 32
        return KeyPair(private_key=secret, public_key=secret)

    def export_private_key(self, private_key: bytes) -> bytes:
        return private_key

    def export_public_key(self, public_key: bytes) -> bytes:
        return public_key

    def import_private_key(self, data: bytes) -> bytes:
        return data

    def import_public_key(self, data: bytes) -> bytes:
        return data
