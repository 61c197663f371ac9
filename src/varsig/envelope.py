"""Varsig envelope encoding, inspection and verification.

Envelope layout::

    varsig      = prefix || signature-header || varsig-body
    varsig-body = hash-algorithm || signature-length || encoding-info || sig-bytes

Every field after the one-byte prefix is a varint except ``sig-bytes``,
which holds exactly ``signature-length`` raw bytes. The envelope carries
no length of its own. Bytes after the signature belong to an outer framing
and are left alone.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from . import varint
from .algorithms import AlgorithmImplementation, KeyPair
from .constants import ENCODING_INFO, VARSIG_PREFIX
from .errors import InvalidPrefixError, TruncatedSignatureError, UnknownAlgorithmError
from .registry import AlgorithmRegistry, default_registry

logger = logging.getLogger(__name__)

BytesLike = Union[bytes, bytearray, memoryview]


@dataclass(frozen=True)
class VarsigInfo:
    """Decoded components of a varsig envelope."""

    prefix: bytes
    signature_header: int
    hash_algorithm: int
    signature_length: int
    encoding_info: int
    signature: bytes
    algorithm: str
    total_length: int
    envelope_length: int

    # Raw encoded bytes of each varint field
    signature_header_bytes: bytes = b""
    hash_algorithm_bytes: bytes = b""
    signature_length_bytes: bytes = b""
    encoding_info_bytes: bytes = b""

    @property
    def has_trailing_data(self) -> bool:
        """True if the input continues past the end of the signature."""
        return self.total_length > self.envelope_length

    def to_dict(self) -> dict:
        """Hex view of the envelope, as printed by ``varsig-cli inspect``."""
        return {
            "prefix": self.prefix.hex(),
            "signatureHeader": f"{self.signature_header:x}",
            "hashAlgorithm": f"{self.hash_algorithm:x}",
            "signatureByteLength": self.signature_length_bytes.hex(),
            "encodingInfo": f"{self.encoding_info:x}",
            "signature": self.signature.hex(),
            "algorithm": self.algorithm,
            "totalLength": self.total_length,
        }


async def create(
    payload: BytesLike,
    implementation: AlgorithmImplementation,
    private_key: Any,
) -> bytes:
    """Sign ``payload`` and wrap the signature in a varsig envelope.

    Args:
        payload: Data to sign
        implementation: Algorithm used for signing
        private_key: Private key in the algorithm's native representation

    Returns:
        The encoded varsig

    Errors raised by the algorithm's ``sign`` propagate unchanged.
    """
    signature = await implementation.sign(bytes(payload), private_key)

    varsig = b"".join(
        (
            VARSIG_PREFIX,
            varint.encode(implementation.signature_header_tag()),
            varint.encode(implementation.hash_algorithm_tag()),
            varint.encode(len(signature)),
            varint.encode(ENCODING_INFO),
            bytes(signature),
        )
    )

    logger.debug(
        "Created varsig: header=0x%x signature=%d bytes total=%d bytes",
        implementation.signature_header_tag(),
        len(signature),
        len(varsig),
    )
    return varsig


def inspect_varsig(
    varsig: BytesLike,
    registry: Optional[AlgorithmRegistry] = None,
) -> VarsigInfo:
    """Decode the components of a varsig.

    The prefix is checked before anything else is read.

    Args:
        varsig: Encoded envelope, optionally followed by unrelated bytes
        registry: Registry used to resolve the signature header

    Returns:
        Decoded components

    Raises:
        InvalidPrefixError: If the leading bytes are not the varsig prefix
        MalformedVarintError: If a varint field is cut short
        UnknownAlgorithmError: If the signature header is not registered
        TruncatedSignatureError: If fewer signature bytes remain than declared
    """
    if registry is None:
        registry = default_registry()
    data = bytes(varsig)

    prefix = data[: len(VARSIG_PREFIX)]
    if prefix != VARSIG_PREFIX:
        raise InvalidPrefixError(VARSIG_PREFIX, prefix)
    cursor = len(prefix)

    header_start = cursor
    signature_header, consumed = varint.decode(data, cursor)
    cursor += consumed
    header_bytes = data[header_start:cursor]

    try:
        algorithm = registry.by_header_tag(signature_header)
    except UnknownAlgorithmError:
        raise UnknownAlgorithmError(signature_header, header_start) from None

    hash_start = cursor
    hash_algorithm, consumed = varint.decode(data, cursor)
    cursor += consumed
    hash_bytes = data[hash_start:cursor]

    # value is the signature byte count, consumed is the width of this field
    length_start = cursor
    signature_length, consumed = varint.decode(data, cursor)
    cursor += consumed
    length_bytes = data[length_start:cursor]

    encoding_start = cursor
    encoding_info, consumed = varint.decode(data, cursor)
    cursor += consumed
    encoding_bytes = data[encoding_start:cursor]

    available = len(data) - cursor
    if signature_length > available:
        raise TruncatedSignatureError(cursor, signature_length, available)

    signature_end = cursor + signature_length
    signature = data[cursor:signature_end]

    return VarsigInfo(
        prefix=prefix,
        signature_header=signature_header,
        hash_algorithm=hash_algorithm,
        signature_length=signature_length,
        encoding_info=encoding_info,
        signature=signature,
        algorithm=algorithm,
        total_length=len(data),
        envelope_length=signature_end,
        signature_header_bytes=header_bytes,
        hash_algorithm_bytes=hash_bytes,
        signature_length_bytes=length_bytes,
        encoding_info_bytes=encoding_bytes,
    )


async def verify(
    payload: BytesLike,
    varsig: BytesLike,
    public_key: Any,
    registry: Optional[AlgorithmRegistry] = None,
) -> bool:
    """Verify a varsig against a payload and public key.

    Args:
        payload: Data that was signed
        varsig: Encoded envelope
        public_key: Public key in the algorithm's native representation
        registry: Registry used to resolve the algorithm

    Returns:
        True if the signature is valid, False otherwise

    Raises:
        VarsigError: If the envelope is structurally invalid
    """
    if registry is None:
        registry = default_registry()
    info = inspect_varsig(varsig, registry)
    implementation = registry.by_name(info.algorithm).implementation

    valid = await implementation.verify(bytes(payload), info.signature, public_key)
    logger.debug("Verified %s varsig: %s", info.algorithm, valid)
    return valid


async def generate_key(implementation: AlgorithmImplementation) -> KeyPair:
    """Generate a key pair for an algorithm."""
    return await implementation.generate_key()
