import pytest

from panalign.chain import ChainConfig, Mem, find_chains
from panalign.chain_secondary import find_chains_secondary


def _colinear():
    return [
        Mem(length=30, occs=[1000], rpos=0),
        Mem(length=30, occs=[1050], rpos=50),
    ]


def _repetitive():
    return [
        Mem(length=45, occs=[100, 400], rpos=0),
        Mem(length=45, occs=[160, 470], rpos=60),
        Mem(length=45, occs=[220, 530, 900], rpos=120),
        Mem(length=20, occs=[300], rpos=200),
    ]


SAMPLES = [_colinear(), _repetitive(), [Mem(length=50, occs=[10, 5000], rpos=3)]]


def test_empty_input_gives_nothing():
    assert find_chains_secondary([]) == ([], [])


def test_single_anchor_reported_as_primary_and_secondary():
    anchors, chains = find_chains_secondary([Mem(length=50, occs=[7], rpos=0)])
    assert anchors == [(0, 0)]
    assert [(c.score, c.anchors) for c in chains] == [(50, [0]), (50, [0])]


def test_below_minimum_score_gives_no_chains():
    anchors, chains = find_chains_secondary([Mem(length=10, occs=[7], rpos=0)])
    assert anchors == [(0, 0)]
    assert chains == []


def test_min_chain_length_filters_short_chains():
    config = ChainConfig(min_chain_length=2)
    _, chains = find_chains_secondary([Mem(length=50, occs=[7], rpos=0)], config)
    assert chains == []


def test_colinear_matches_primary_only_result():
    anchors, chains = find_chains_secondary(_colinear())
    ref_anchors, ref_chains = find_chains(_colinear())
    assert anchors == ref_anchors
    assert [(c.score, c.anchors) for c in chains] == [
        (c.score, c.anchors) for c in ref_chains
    ]


@pytest.mark.parametrize("mems", SAMPLES)
def test_contains_every_primary_chain(mems):
    _, chains = find_chains_secondary(mems)
    _, primary = find_chains(mems)
    found = [(c.score, c.anchors) for c in chains]
    for chain in primary:
        assert (chain.score, chain.anchors) in found


@pytest.mark.parametrize("mems", SAMPLES)
def test_chains_sorted_and_anchors_valid(mems):
    anchors, chains = find_chains_secondary(mems)
    scores = [c.score for c in chains]
    assert scores == sorted(scores, reverse=True)
    for chain in chains:
        assert all(0 <= a < len(anchors) for a in chain.anchors)
        assert chain.anchors == sorted(chain.anchors, reverse=True)
        assert chain.score > ChainConfig().min_chain_score


@pytest.mark.parametrize("mems", SAMPLES)
def test_anchors_sorted_by_reference_end(mems):
    anchors, _ = find_chains_secondary(mems)
    ends = [mems[i].occs[j] + mems[i].length - 1 for i, j in anchors]
    assert ends == sorted(ends)
    assert len(anchors) == sum(len(m.occs) for m in mems)


def test_reverse_and_reset_on_result_chain():
    _, chains = find_chains_secondary(_colinear())
    chain = chains[0]
    original = list(chain.anchors)
    chain.reverse()
    assert chain.anchors == original[::-1]
    chain.reset()
    assert chain.anchors == original