"""varsig: self-describing signature envelopes.

This package provides:
- A varint codec for the envelope's tagged fields
- Ed25519, RSA and BLS signature algorithm implementations
- An algorithm registry resolving signature header tags
- Envelope creation, inspection and verification
"""

__version__ = "0.1.0"

from .algorithms import (
    AlgorithmImplementation,
    BLSAlgorithm,
    Ed25519Algorithm,
    KeyPair,
    RSAAlgorithm,
)
from .constants import ENCODING_INFO, HASH_ALGO_SHA256, SIGNATURE_HEADER_TAGS, VARSIG_PREFIX
from .envelope import VarsigInfo, create, generate_key, inspect_varsig, verify
from .errors import (
    InvalidPrefixError,
    MalformedVarintError,
    TruncatedSignatureError,
    UnknownAlgorithmError,
    VarsigError,
)
from .registry import AlgorithmEntry, AlgorithmRegistry, build_default_registry, default_registry

__all__ = [
    "AlgorithmEntry",
    "AlgorithmImplementation",
    "AlgorithmRegistry",
    "BLSAlgorithm",
    "Ed25519Algorithm",
    "KeyPair",
    "RSAAlgorithm",
    "VarsigInfo",
    "create",
    "generate_key",
    "inspect_varsig",
    "verify",
    "build_default_registry",
    "default_registry",
    "ENCODING_INFO",
    "HASH_ALGO_SHA256",
    "SIGNATURE_HEADER_TAGS",
    "VARSIG_PREFIX",
    "InvalidPrefixError",
    "MalformedVarintError",
    "TruncatedSignatureError",
    "UnknownAlgorithmError",
    "VarsigError",
]
