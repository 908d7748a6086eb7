"""Seeded random sources.

A `RandomSource` is only a 64-bit seed plus a namespace. Generators never
share a numpy generator between stages; they `fork` a child source under a
stage name and draw from that, so every stage sees the same samples no
matter which other stages run.
"""

from __future__ import annotations

from dataclasses import dataclass
import hashlib

import numpy as np

from terr.config import DISTRIBUTIONS, ConfigurationError

NAMESPACE = "terr-v1"
_SEED_MASK = (1 << 64) - 1
_PERSON = b"terrfork"


def derive_seed(parent_seed: int, key: str, *, namespace: str = NAMESPACE) -> int:
    """64-bit child seed for stage `key`, stable across runs and platforms."""

    label = "{}:{}:{}".format(namespace, int(parent_seed) & _SEED_MASK, key)
    digest = hashlib.blake2b(label.encode("utf-8"), digest_size=8, person=_PERSON)
    return int(digest.hexdigest(), 16)


@dataclass(frozen=True)
class RandomSource:
    seed: int
    namespace: str = NAMESPACE

    def fork(self, key: str) -> "RandomSource":
        if not key:
            raise ValueError("fork key must be non-empty")
        return RandomSource(derive_seed(self.seed, key, namespace=self.namespace), self.namespace)

    def generator(self) -> np.random.Generator:
        """Fresh PCG64 generator positioned at the start of this stream."""

        return np.random.Generator(np.random.PCG64(np.uint64(int(self.seed) & _SEED_MASK)))


def draw(rng: np.random.Generator, distribution: str, shape: tuple[int, ...]) -> np.ndarray:
    if distribution == "uniform":
        return rng.uniform(-1.0, 1.0, size=shape)
    if distribution == "normal":
        return rng.standard_normal(size=shape)
    raise ConfigurationError(f"distribution must be one of {', '.join(DISTRIBUTIONS)} (got {distribution!r})")
