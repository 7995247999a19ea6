"""MEM chaining that also reports, for each anchor, a secondary chain."""

from __future__ import annotations

from panalign.chain import (
    Anchor,
    Chain,
    ChainConfig,
    Mem,
    _anchor_end,
    _backtrack,
    _compatible_mates,
    _find_chain_ends,
    _find_chain_starts,
    _link_score,
    _sorted_anchors,
    _update_score_and_pred,
)


def _reference_position(mems: list[Mem], anchor: Anchor) -> int:
    return mems[anchor[0]].occs[anchor[1]]


def _used_by_primary(
    mems: list[Mem], anchors: list[Anchor], p: list[int], head: int, candidate: int
) -> bool:
    """True if the candidate anchor's reference position occurs on the primary path from head."""
    position = _reference_position(mems, anchors[candidate])
    node = head
    while node >= 0:
        if _reference_position(mems, anchors[node]) == position:
            return True
        node = p[node]
    return False


def _chain_starts_by_score(
    t: list[int], f: list[int], p: list[int], msc: list[int], min_chain_score: int
) -> list[tuple[int, int]]:
    starts = _find_chain_starts(t, f, p, msc, min_chain_score)
    starts.sort(key=lambda start: start[0], reverse=True)
    return starts


def find_chains_secondary(
    mems: list[Mem], config: ChainConfig | None = None
) -> tuple[list[Anchor], list[Chain]]:
    """Chain the MEM occurrences, keeping a secondary predecessor for every anchor.

    A secondary link never reuses a reference position already on the
    anchor's primary chain. Returns the anchors sorted by reference end
    position and the primary and secondary chains together, best score
    first. No chains are returned when there is no primary chain.
    """
    config = config or ChainConfig()
    anchors, avg = _sorted_anchors(mems)
    n = len(anchors)
    f = [0] * n
    f_sec = [0] * n
    p = [0] * n
    p_sec = [0] * n
    msc = [0] * n
    msc_sec = [0] * n
    t = [0] * n
    t_sec = [0] * n

    lb = 0
    for i, a_i in enumerate(anchors):
        mem_i = mems[a_i[0]]
        x_i = _anchor_end(mems, a_i)
        max_f = max_sec_f = mem_i.length
        max_j = max_sec_j = -1
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
            score_sec = f_sec[j] + gain
            if score > max_f:
                max_f = score
                max_j = j
                if n_pred > 0:
                    n_pred -= 1
            elif score_sec > max_sec_f:
                if max_j >= 0 and not _used_by_primary(mems, anchors, p, max_j, j):
                    max_sec_f = score_sec
                    max_sec_j = j
            elif t[j] == i:
                n_pred += 1
                if n_pred > config.max_pred:
                    break
            if p[j] > 0:
                t[p[j]] = i
            if p_sec[j] > 0:
                t_sec[p_sec[j]] = i
        _update_score_and_pred(f, p, msc, max_f, max_j, i)
        _update_score_and_pred(f_sec, p_sec, msc_sec, max_sec_f, max_sec_j, i)

    t = _find_chain_ends(p)
    t_sec = _find_chain_ends(p_sec)
    starts = _chain_starts_by_score(t, f, p, msc, config.min_chain_score)
    if not starts:
        return anchors, []
    starts_sec = _chain_starts_by_score(t_sec, f_sec, p_sec, msc_sec, config.min_chain_score)

    chains = _backtrack(starts, f, p, anchors, mems, config)
    chains.extend(_backtrack(starts_sec, f_sec, p_sec, anchors, mems, config))
    chains.sort(key=lambda c: c.score, reverse=True)
    return anchors, chains