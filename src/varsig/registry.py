"""Algorithm registry mapping names and signature header tags to implementations.

The registry is written during start-up and read-only afterwards. The
first lookup freezes it; ``freeze()`` does the same explicitly. After that
point the registry is safe for unsynchronized concurrent reads.

Reverse lookup by signature header tag scans entries in registration
order and returns the first match. Tag collisions are rejected at
registration unless explicitly allowed, in which case the earlier entry
keeps winning reverse lookups.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Iterator, List, Optional

from .algorithms import AlgorithmImplementation, RSAAlgorithm, builtin_algorithms
from .errors import (
    AlgorithmNotFoundError,
    DuplicateAlgorithmError,
    RegistryFrozenError,
    TagCollisionError,
    UnknownAlgorithmError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlgorithmEntry:
    """A registered algorithm."""

    name: str
    signature_header_tag: int
    hash_algorithm_tag: int
    implementation: AlgorithmImplementation


class AlgorithmRegistry:
    """Ordered registry of signature algorithms."""

    def __init__(self) -> None:
        self._entries: List[AlgorithmEntry] = []
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(
        self,
        implementation: AlgorithmImplementation,
        name: Optional[str] = None,
        allow_tag_collision: bool = False,
    ) -> AlgorithmEntry:
        """Register an algorithm implementation.

        Args:
            implementation: Algorithm to register
            name: Registry name (defaults to ``implementation.name``)
            allow_tag_collision: Accept a signature header tag that is already
                registered. The earlier entry still wins reverse lookups.

        Returns:
            The new entry

        Raises:
            RegistryFrozenError: If the registry has been frozen
            DuplicateAlgorithmError: If the name is already registered
            TagCollisionError: If the tag is taken and collisions are not allowed
        """
        name = name or implementation.name
        if self._frozen:
            raise RegistryFrozenError(name)
        if any(entry.name == name for entry in self._entries):
            raise DuplicateAlgorithmError(name)

        entry = AlgorithmEntry(
            name=name,
            signature_header_tag=implementation.signature_header_tag(),
            hash_algorithm_tag=implementation.hash_algorithm_tag(),
            implementation=implementation,
        )

        existing = self._find_tag(entry.signature_header_tag)
        if existing is not None:
            if not allow_tag_collision:
                raise TagCollisionError(entry.signature_header_tag, existing.name, name)
            logger.warning(
                "Signature header 0x%x for %s shadowed by %s",
                entry.signature_header_tag,
                name,
                existing.name,
            )

        self._entries.append(entry)
        logger.debug("Registered %s with signature header 0x%x", name, entry.signature_header_tag)
        return entry

    def freeze(self) -> None:
        """Close the registry for writes."""
        if not self._frozen:
            self._frozen = True
            logger.debug("Registry frozen with %d algorithms", len(self._entries))

    def by_name(self, name: str) -> AlgorithmEntry:
        """Look up an entry by algorithm name.

        Raises:
            AlgorithmNotFoundError: If no algorithm has that name
        """
        self.freeze()
        for entry in self._entries:
            if entry.name == name:
                return entry
        raise AlgorithmNotFoundError(name)

    def by_header_tag(self, tag: int) -> str:
        """Resolve a signature header tag to the first registered name.

        Raises:
            UnknownAlgorithmError: If no algorithm uses the tag
        """
        self.freeze()
        entry = self._find_tag(tag)
        if entry is None:
            raise UnknownAlgorithmError(tag)
        return entry.name

    def names(self) -> List[str]:
        return [entry.name for entry in self._entries]

    def _find_tag(self, tag: int) -> Optional[AlgorithmEntry]:
        for entry in self._entries:
            if entry.signature_header_tag == tag:
                return entry
        return None

    def __contains__(self, name: object) -> bool:
        return any(entry.name == name for entry in self._entries)

    def __iter__(self) -> Iterator[AlgorithmEntry]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)


def build_default_registry(rsa_key_size: int = RSAAlgorithm.DEFAULT_KEY_SIZE) -> AlgorithmRegistry:
    """Create a registry holding the built-in algorithms (ed25519, rsa, bls).

    The returned registry is not frozen, so callers may add custom
    algorithms before first use.
    """
    registry = AlgorithmRegistry()
    for implementation in builtin_algorithms(rsa_key_size):
        registry.register(implementation)
    return registry


_default_registry: Optional[AlgorithmRegistry] = None
_default_lock = threading.Lock()


def default_registry() -> AlgorithmRegistry:
    """Return the process-wide registry, building it on first call."""
    global _default_registry
    if _default_registry is None:
        with _default_lock:
            if _default_registry is None:
                _default_registry = build_default_registry()
    return _default_registry
