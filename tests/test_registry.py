"""Tests for the varsig algorithm registry."""

import pytest

from varsig.algorithms import Ed25519Algorithm
from varsig.errors import (
    AlgorithmNotFoundError,
    DuplicateAlgorithmError,
    RegistryFrozenError,
    TagCollisionError,
    UnknownAlgorithmError,
)
from varsig.registry import (
    AlgorithmEntry,
    AlgorithmRegistry,
    build_default_registry,
    default_registry,
)

from conftest import HMACTestAlgorithm


class TestDefaultRegistry:
    """Tests for the built-in registry."""

    def test_builtin_names(self, registry: AlgorithmRegistry):
        """Test built-ins are registered in order."""
        assert registry.names() == ["ed25519", "rsa", "bls"]
        assert len(registry) == 3
        assert "ed25519" in registry
        assert "dsa" not in registry

    def test_by_name(self, registry: AlgorithmRegistry):
        """Test lookup by name returns the full entry."""
        entry = registry.by_name("rsa")
        assert isinstance(entry, AlgorithmEntry)
        assert entry.signature_header_tag == 0x1205
        assert entry.hash_algorithm_tag == 0x12
        assert entry.implementation.name == "rsa"

    @pytest.mark.parametrize("tag,name", [(0xED, "ed25519"), (0x1205, "rsa"), (0x1309, "bls")])
    def test_by_header_tag(self, registry: AlgorithmRegistry, tag: int, name: str):
        """Test reverse lookup for every built-in tag."""
        assert registry.by_header_tag(tag) == name

    def test_unknown_name(self, registry: AlgorithmRegistry):
        """Test lookup of an unregistered name."""
        with pytest.raises(AlgorithmNotFoundError) as exc_info:
            registry.by_name("dsa")
        assert exc_info.value.name == "dsa"

    def test_unknown_name_is_key_error(self, registry: AlgorithmRegistry):
        """Test AlgorithmNotFoundError can be handled as a KeyError."""
        with pytest.raises(KeyError):
            registry.by_name("dsa")

    def test_unknown_tag(self, registry: AlgorithmRegistry):
        """Test reverse lookup never falls back to a default."""
        with pytest.raises(UnknownAlgorithmError) as exc_info:
            registry.by_header_tag(0x1234)
        assert exc_info.value.tag == 0x1234

    def test_builtin_tags_unique(self, registry: AlgorithmRegistry):
        """Test no two built-ins share a signature header."""
        tags = [entry.signature_header_tag for entry in registry]
        assert len(tags) == len(set(tags))

    def test_default_registry_is_shared(self):
        """Test the process-wide registry is built once."""
        assert default_registry() is default_registry()
        assert default_registry().names() == ["ed25519", "rsa", "bls"]

    def test_custom_rsa_key_size(self):
        """Test RSA key size reaches the registered implementation."""
        registry = build_default_registry(rsa_key_size=4096)
        assert registry.by_name("rsa").implementation.key_size == 4096


class TestRegistration:
    """Tests for registering custom algorithms."""

    def test_register_custom(self, registry: AlgorithmRegistry):
        """Test a custom algorithm can be added before first use."""
        entry = registry.register(HMACTestAlgorithm())
        assert entry.name == "hmac-test"
        assert registry.by_header_tag(0x7A01) == "hmac-test"

    def test_register_with_name(self):
        """Test registering under an explicit name."""
        registry = AlgorithmRegistry()
        registry.register(HMACTestAlgorithm(), name="mac")
        assert registry.names() == ["mac"]

    def test_duplicate_name(self, registry: AlgorithmRegistry):
        """Test names must be unique."""
        with pytest.raises(DuplicateAlgorithmError):
            registry.register(HMACTestAlgorithm(name="ed25519", tag=0x7A02))

    def test_tag_collision_rejected(self, registry: AlgorithmRegistry):
        """Test colliding header tags are rejected by default."""
        with pytest.raises(TagCollisionError) as exc_info:
            registry.register(HMACTestAlgorithm(name="shadow", tag=0xED))
        assert exc_info.value.existing == "ed25519"
        assert "shadow" not in registry

    def test_tag_collision_first_registered_wins(self, registry: AlgorithmRegistry):
        """Test an allowed collision resolves to the earlier entry."""
        registry.register(HMACTestAlgorithm(name="shadow", tag=0xED), allow_tag_collision=True)

        assert registry.names() == ["ed25519", "rsa", "bls", "shadow"]
        assert registry.by_header_tag(0xED) == "ed25519"
        assert registry.by_name("shadow").signature_header_tag == 0xED

    def test_collision_order_is_registration_order(self):
        """Test the winner depends only on registration order."""
        registry = AlgorithmRegistry()
        registry.register(HMACTestAlgorithm(name="first", tag=0x99))
        registry.register(HMACTestAlgorithm(name="second", tag=0x99), allow_tag_collision=True)
        assert registry.by_header_tag(0x99) == "first"


class TestFreeze:
    """Tests for the initialization barrier."""

    def test_explicit_freeze(self, registry: AlgorithmRegistry):
        """Test registration fails after freeze()."""
        registry.freeze()
        assert registry.frozen
        with pytest.raises(RegistryFrozenError):
            registry.register(HMACTestAlgorithm())

    def test_lookup_freezes(self, registry: AlgorithmRegistry):
        """Test the first read closes the registry for writes."""
        assert not registry.frozen
        registry.by_name("ed25519")
        assert registry.frozen
        with pytest.raises(RegistryFrozenError):
            registry.register(HMACTestAlgorithm())

    def test_reverse_lookup_freezes(self):
        """Test reverse lookups also freeze."""
        registry = AlgorithmRegistry()
        registry.register(Ed25519Algorithm())
        with pytest.raises(UnknownAlgorithmError):
            registry.by_header_tag(0x01)
        assert registry.frozen
