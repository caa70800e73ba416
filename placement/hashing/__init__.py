"""Hashing layer: deterministic rendezvous ranking."""

from placement.hashing.ranker import rank, rendezvous_digest

__all__ = ["rank", "rendezvous_digest"]
