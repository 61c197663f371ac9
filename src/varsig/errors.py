"""Error taxonomy for varsig decoding and algorithm registration.

Structural problems with an envelope raise a subclass of ``VarsigError``.
A well-formed envelope whose signature does not check out is *not* an
error: ``verify`` returns ``False`` for it.

Failures raised by an algorithm's signing or key generation routine are
never wrapped and reach the caller unchanged.
"""

from typing import Optional


class VarsigError(ValueError):
    """Base class for all varsig structural errors."""


class MalformedVarintError(VarsigError):
    """A varint could not be decoded at the given offset."""

    def __init__(self, offset: int, reason: str = "buffer ended before varint terminated") -> None:
        self.offset = offset
        self.reason = reason
        super().__init__(f"Malformed varint at offset {offset}: {reason}")


class InvalidPrefixError(VarsigError):
    """Leading bytes do not match the varsig prefix."""

    def __init__(self, expected: bytes, found: bytes) -> None:
        self.expected = expected
        self.found = found
        super().__init__(
            f"Invalid varsig prefix: expected 0x{expected.hex()}, "
            f"found 0x{found.hex() if found else '<empty>'}"
        )


class UnknownAlgorithmError(VarsigError):
    """Signature header tag is not present in the registry."""

    def __init__(self, tag: int, offset: Optional[int] = None) -> None:
        self.tag = tag
        self.offset = offset
        where = f" at offset {offset}" if offset is not None else ""
        super().__init__(f"Unknown signature header code: 0x{tag:x}{where}")


class TruncatedSignatureError(VarsigError):
    """Declared signature length exceeds the bytes left in the buffer."""

    def __init__(self, offset: int, expected: int, available: int) -> None:
        self.offset = offset
        self.expected = expected
        self.available = available
        super().__init__(
            f"Truncated signature at offset {offset}: "
            f"expected {expected} bytes, {available} available"
        )


class KeyImportError(VarsigError):
    """Key bytes could not be decoded for an algorithm."""

    def __init__(self, algorithm: str, reason: str) -> None:
        self.algorithm = algorithm
        self.reason = reason
        super().__init__(f"Invalid {algorithm} key: {reason}")


class RegistryError(VarsigError):
    """Base class for algorithm registry errors."""


class AlgorithmNotFoundError(RegistryError, KeyError):
    """No algorithm is registered under the requested name."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unsupported algorithm: {name}")

    def __str__(self) -> str:
        return self.args[0]


class DuplicateAlgorithmError(RegistryError):
    """An algorithm with the same name is already registered."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Algorithm already registered: {name}")


class TagCollisionError(RegistryError):
    """A signature header tag is already claimed by another algorithm."""

    def __init__(self, tag: int, existing: str, name: str) -> None:
        self.tag = tag
        self.existing = existing
        self.name = name
        super().__init__(
            f"Signature header 0x{tag:x} for {name} is already used by {existing}"
        )


class RegistryFrozenError(RegistryError):
    """Registration attempted after the registry was frozen."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Cannot register {name}: registry is frozen")
