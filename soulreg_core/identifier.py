"""
soulreg_core.identifier
-----------------------
Collision-resistant 16-byte soul identifiers.

The seed is (timestamp, owner, soul counter, registry fingerprint, chain id),
length-prefix encoded and hashed with SHA-256; the identifier is the first
16 bytes of the digest. A candidate already present in the uniqueness index
is retried up to MAX_RETRIES times.

Two retry modes:

- faithful: every attempt hashes the same seed, so a collision repeats on
  every retry and generation fails with MaxRetriesExceeded.
- corrected: the attempt number is appended to the seed, so each retry
  yields a fresh candidate.
"""

from __future__ import annotations
from typing import Callable, List

from soulreg_core.constants import (
    MAX_RETRIES, UUID_LENGTH, UUID_MODES, UUID_MODE_CORRECTED, UUID_MODE_FAITHFUL,
)
from soulreg_core.crypto import encode_seed, sha256_digest
from soulreg_core.errors import MaxRetriesExceeded
from soulreg_core.logger import get_logger

log = get_logger("SoulReg.Identifier")


class IdentifierGenerator:
    def __init__(
        self,
        registry_fingerprint: bytes,
        chain_id: int,
        is_taken: Callable[[bytes], bool],
        mode: str = UUID_MODE_FAITHFUL,
        max_retries: int = MAX_RETRIES,
    ):
        if mode not in UUID_MODES:
            raise ValueError(f"Unknown uuid mode: {mode}")
        self.registry_fingerprint = registry_fingerprint
        self.chain_id = chain_id
        self.is_taken = is_taken
        self.mode = mode
        self.max_retries = max_retries

    def candidate(self, timestamp: int, owner: str, counter: int, attempt: int = 0) -> bytes:
        parts: List = [timestamp, owner, counter, self.registry_fingerprint, self.chain_id]
        if self.mode == UUID_MODE_CORRECTED and attempt:
            parts.append(attempt)
        return sha256_digest(encode_seed(parts))[:UUID_LENGTH]

    def generate(self, owner: str, timestamp: int, counter: int) -> bytes:
        """
        Return the first candidate not present in the uniqueness index.

        Raises MaxRetriesExceeded after max_retries + 1 colliding attempts.
        Nothing is written here; reserving the identifier is the caller's job.
        """
        attempt = 0
        while attempt <= self.max_retries:
            uuid = self.candidate(timestamp, owner, counter, attempt)
            if not self.is_taken(uuid):
                return uuid
            log.debug(f"[UUID] collision owner={owner} attempt={attempt} mode={self.mode}")
            attempt += 1

        log.warning(f"[UUID] retries exhausted owner={owner} attempts={attempt}")
        raise MaxRetriesExceeded(attempt)
