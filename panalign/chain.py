"""Chaining of maximal exact matches with a minimap2-style dynamic programme."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

Anchor = tuple[int, int]

_LLONG_MAX = 2**63 - 1


@dataclass
class Mem:
    """A maximal exact match between a read and the reference.

    ``occs`` holds the reference positions where the match occurs, ``rpos``
    the position in the read and ``mate`` the mate and orientation it
    belongs to.
    """

    length: int
    occs: list[int]
    rpos: int = 0
    mate: int = 0
    idx: int = 0


@dataclass
class Chain:
    """A chain of anchors, stored from its last anchor back to its first."""

    score: int = 0
    mate: int = 2
    paired: bool = False
    reversed: bool = False
    anchors: list[int] = field(default_factory=list)

    def reverse(self) -> None:
        """Put the anchors in forward order; does nothing if already done."""
        if not self.reversed:
            self.anchors.reverse()
            self.reversed = True

    def reset(self) -> None:
        """Restore the anchors to the order produced by backtracking."""
        if self.reversed:
            self.anchors.reverse()
            self.reversed = False


@dataclass
class ChainConfig:
    """Parameters of the chaining dynamic programme."""

    max_gap: int = _LLONG_MAX
    max_dist_x: int = 500
    max_dist_y: int = 100
    max_iter: int = 50
    max_pred: int = 50
    min_chain_score: int = 40
    min_chain_length: int = 1


def populate_anchors(mems: list[Mem]) -> tuple[list[Anchor], int]:
    """List every (mem index, occurrence index) pair and the total matched length."""
    anchors = [(i, j) for i, mem in enumerate(mems) for j in range(len(mem.occs))]
    total = sum(mem.length * len(mem.occs) for mem in mems)
    return anchors, total


def _as_float32(value: float) -> float:
    return struct.unpack("f", struct.pack("f", value))[0]


def _ilog2(value: int) -> int:
    return value.bit_length() - 1


def _anchor_end(mems: list[Mem], anchor: Anchor) -> int:
    mem = mems[anchor[0]]
    return mem.occs[anchor[1]] + mem.length - 1


def _sorted_anchors(mems: list[Mem]) -> tuple[list[Anchor], float]:
    anchors, total = populate_anchors(mems)
    avg = _as_float32(total / len(anchors)) if anchors else 0.0
    anchors.sort(key=lambda a: _anchor_end(mems, a))
    return anchors, avg


def _gap_cost(mate_i: int, mate_j: int, x_d: int, y_d: int, avg: float) -> int:
    gap = abs(y_d - x_d)
    ilog = _ilog2(gap) if gap > 0 else 0
    if mate_i != mate_j:
        if x_d == 0:
            return 1
        return min(int(gap * 0.01 * avg), ilog)
    if gap > 0:
        return (int(0.01 * gap * avg) + ilog) >> 1
    return 0


def _link_score(
    mems: list[Mem], a_i: Anchor, a_j: Anchor, config: ChainConfig, avg: float
) -> int | None:
    """Score gained by chaining anchor i after anchor j, or None if incompatible.

    Raises StopIteration-like signalling is avoided: distance overflow is
    handled by the caller.
    """
    mem_i, mem_j = mems[a_i[0]], mems[a_j[0]]
    mate_i, mate_j = mem_i.mate, mem_j.mate
    x_d = _anchor_end(mems, a_i) - _anchor_end(mems, a_j)
    y_d = mem_i.rpos - mem_j.rpos
    if (mate_i == mate_j and (mem_j.rpos >= mem_i.rpos or y_d > config.max_dist_y)) or max(
        y_d, x_d
    ) > config.max_gap:
        return None
    alpha = min(y_d, x_d, mem_i.length)
    return alpha - _gap_cost(mate_i, mate_j, x_d, y_d, avg)


def _compatible_mates(mate_i: int, mate_j: int) -> bool:
    return mate_i == mate_j or (mate_i ^ mate_j) == 3


def _update_score_and_pred(
    f: list[int], p: list[int], msc: list[int], max_f: int, max_j: int, i: int
) -> None:
    f[i] = max_f
    p[i] = max_j
    msc[i] = msc[max_j] if max_j >= 0 and msc[max_j] > max_f else max_f


def _find_chain_ends(p: list[int]) -> list[int]:
    t = [0] * len(p)
    for pred in p:
        if pred >= 0:
            t[pred] = 1
    return t


def _find_chain_starts(
    t: list[int], f: list[int], p: list[int], msc: list[int], min_chain_score: int
) -> list[tuple[int, int]]:
    starts = []
    for i, (end_mark, best) in enumerate(zip(t, msc)):
        if end_mark == 0 and best > min_chain_score:
            j = i
            while f[j] < msc[j]:
                j = p[j]
            starts.append((f[j], j))
    starts.sort(reverse=True)
    return starts


def _backtrack(
    starts: list[tuple[int, int]],
    f: list[int],
    p: list[int],
    anchors: list[Anchor],
    mems: list[Mem],
    config: ChainConfig,
) -> list[Chain]:
    t = [0] * len(anchors)
    chains = []
    for start_score, j in starts:
        chain = Chain(score=start_score, mate=mems[anchors[j][0]].mate)
        while True:
            chain.paired = chain.paired or chain.mate != mems[anchors[j][0]].mate
            chain.anchors.append(j)
            t[j] = 1
            j = p[j]
            if j < 0 or t[j] != 0:
                break
        long_enough = len(chain.anchors) >= config.min_chain_length
        if j < 0 or start_score - f[j] >= config.min_chain_score:
            if long_enough:
                chains.append(chain)
    return chains


def find_chains(
    mems: list[Mem], config: ChainConfig | None = None
) -> tuple[list[Anchor], list[Chain]]:
    """Chain the occurrences of the MEMs.

    Returns the anchors sorted by reference end position and the chains,
    best score first. Chain anchors are indices into the returned anchors,
    listed from the last anchor back to the first.
    """
    config = config or ChainConfig()
    anchors, avg = _sorted_anchors(mems)
    n = len(anchors)
    f = [0] * n
    p = [0] * n
    msc = [0] * n
    t = [0] * n

    lb = 0
    for i, a_i in enumerate(anchors):
        mem_i = mems[a_i[0]]
        x_i = _anchor_end(mems, a_i)
        max_f = mem_i.length
        max_j = -1
        n_pred = 0
        if i - lb > config.max_iter:
            lb = i - config.max_iter
        for j in range(i - 1, lb - 1, -1):
            a_j = anchors[j]
            if not _compatible_mates(mem_i.mate, mems[a_j[0]].mate):
                continue
            if x_i > _anchor_end(mems, a_j) + config.max_dist_x:
                lb = j
                break
            gain = _link_score(mems, a_i, a_j, config, avg)
            if gain is None:
                continue
            score = f[j] + gain
            if score > max_f:
                max_f = score
                max_j = j
                if n_pred > 0:
                    n_pred -= 1
            elif t[j] == i:
                n_pred += 1
                if n_pred > config.max_pred:
                    break
            if p[j] > 0:
                t[p[j]] = i
        _update_score_and_pred(f, p, msc, max_f, max_j, i)

    t = _find_chain_ends(p)
    starts = _find_chain_starts(t, f, p, msc, config.min_chain_score)
    if not starts:
        return anchors, []
    chains = _backtrack(starts, f, p, anchors, mems, config)
    chains.sort(key=lambda c: c.score, reverse=True)
    return anchors, chains