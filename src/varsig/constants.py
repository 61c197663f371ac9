"""Wire-format constants for varsig envelopes."""

VARSIG_PREFIX = b"\x34"

# Single verbatim payload, no key embedded
ENCODING_INFO = 0x5F

# multicodec sha2-256
HASH_ALGO_SHA256 = 0x12

SIGNATURE_HEADER_TAGS = {
    "ed25519": 0xED,
    "rsa": 0x1205,
    "bls": 0x1309,
}
