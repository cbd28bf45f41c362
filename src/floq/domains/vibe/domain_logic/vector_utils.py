"""In-place arithmetic over VibeVector distributions.

Both functions are total: they never raise and never produce a negative
weight.
"""

from __future__ import annotations

from floq.domains.vibe.domain_logic.vibe_models import VIBES, Vibe, VibeVector, clamp


def renormalize_vector(vector: VibeVector) -> None:
    """Scale weights in place so they sum to 1.

    A vector whose weights sum to 0 is left all-zero: the "no information"
    sentinel. Callers must check for it before treating the vector as a
    distribution.
    """
    total = vector.total()
    if total <= 0:
        for vibe in VIBES:
            vector[vibe] = 0.0
        return
    for vibe in VIBES:
        vector[vibe] = vector[vibe] / total


def adjust_vector(vector: VibeVector, target: Vibe, delta: float) -> None:
    """Move ``delta`` of probability mass onto (or off) ``target`` in place.

    The target weight is clamped to [0, 1]. The remaining mass, ``1 - target``,
    is shared among the other vibes in proportion to their current weights.
    If the others hold no mass at all it is split evenly between them.
    Expects a normalized vector; the result always sums to 1.
    """
    if delta == 0:
        return

    current = vector[target]
    new_target = clamp(current + delta)
    others = [v for v in VIBES if v != target]
    others_total = sum(vector[v] for v in others)
    remaining = 1.0 - new_target

    if others_total > 0:
        scale = remaining / others_total
        for vibe in others:
            vector[vibe] = vector[vibe] * scale
    else:
        share = remaining / len(others)
        for vibe in others:
            vector[vibe] = share

    vector[target] = new_target
