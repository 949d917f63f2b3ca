"""Shared layer verdict type for Layers 2–4."""

from dataclasses import dataclass


@dataclass(frozen=True)
class LayerVerdict:
    should_block: bool
    reason: str | None = None


ALLOW = LayerVerdict(should_block=False, reason=None)
