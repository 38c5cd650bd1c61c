import pytest
from pairselection import compare
from pairselection.compare import Candidates


def _sides():
    side_a = Candidates(pt=[30.0, 45.0, 45.0], iso=[0.9, 0.5, 0.5])
    side_b = Candidates(pt=[25.0, 35.0, 20.0], iso=[0.3, 0.3, 0.8])
    return side_a, side_b


def test_approx_equal_is_symmetric_and_relative():
    assert compare.approx_equal(100.0, 100.0 + 1e-4)
    assert compare.approx_equal(100.0 + 1e-4, 100.0)
    assert not compare.approx_equal(100.0, 100.1)
    # absolute floor around zero
    assert compare.approx_equal(0.0, 1e-9)
    assert not compare.approx_equal(0.0, 1e-6)


def test_tolerance_is_configurable():
    side_a = Candidates(pt=[30.0, 30.3], iso=[0.5, 0.5])
    side_b = Candidates(pt=[20.0], iso=[0.4])

    # 1% apart: a real difference with the default tolerance
    assert compare.is_better((1, 0), (0, 0), side_a, side_b)
    # ... but a tie with a 5% tolerance, and side B is identical
    assert not compare.is_better((1, 0), (0, 0), side_a, side_b, rel_tol=0.05)


def test_side_a_isolation_decides_first():
    side_a, side_b = _sides()
    # iso 0.9 beats 0.5 even though pt is lower
    assert compare.is_better((0, 0), (1, 0), side_a, side_b)
    assert not compare.is_better((1, 0), (0, 0), side_a, side_b)


def test_side_a_pt_decides_on_isolation_tie():
    side_a = Candidates(pt=[30.0, 45.0], iso=[0.5, 0.5])
    side_b = Candidates(pt=[25.0], iso=[0.3])
    assert compare.is_better((1, 0), (0, 0), side_a, side_b)


def test_side_b_isolation_then_pt():
    side_a, side_b = _sides()
    # same side A candidate: side B iso 0.8 wins over 0.3
    assert compare.is_better((1, 2), (1, 0), side_a, side_b)
    # side B iso tied: pt 35 wins over 25
    assert compare.is_better((1, 1), (1, 0), side_a, side_b)
    # identical side A attributes on two different candidates behave the same
    assert compare.is_better((2, 1), (1, 0), side_a, side_b)


def test_full_tie_is_not_better_either_way():
    side_a, side_b = _sides()
    assert not compare.is_better((1, 0), (2, 0), side_a, side_b)
    assert not compare.is_better((2, 0), (1, 0), side_a, side_b)
    assert compare.compare_pairs((1, 0), (2, 0), side_a, side_b) == 0


def test_strict_order_on_distinct_values():
    side_a = Candidates(pt=[10.0, 20.0, 30.0], iso=[0.1, 0.2, 0.3])
    side_b = Candidates(pt=[15.0, 25.0, 35.0], iso=[0.6, 0.5, 0.4])
    p1, p2, p3 = (2, 0), (1, 1), (0, 2)

    assert compare.is_better(p1, p2, side_a, side_b)
    assert compare.is_better(p2, p3, side_a, side_b)
    assert compare.is_better(p1, p3, side_a, side_b)
    for x, y in [(p1, p2), (p2, p3), (p1, p3)]:
        assert not compare.is_better(y, x, side_a, side_b)


def test_sort_and_fold_agree():
    side_a, side_b = _sides()
    pairs = [(i, j) for i in range(3) for j in range(3)]

    ordered = compare.sort_pairs(pairs, side_a, side_b)

    assert ordered[0] == compare.best_pair(pairs, side_a, side_b) == (0, 2)
    assert sorted(ordered) == pairs


def test_sort_is_stable_on_ties():
    side_a = Candidates(pt=[40.0, 40.0], iso=[0.5, 0.5])
    side_b = Candidates(pt=[30.0], iso=[0.2])
    pairs = [(0, 0), (1, 0)]

    assert compare.sort_pairs(pairs, side_a, side_b) == [(0, 0), (1, 0)]
    assert compare.best_pair(pairs, side_a, side_b) == (0, 0)
    assert compare.best_pair([(1, 0), (0, 0)], side_a, side_b) == (1, 0)


def test_best_pair_of_nothing():
    side_a, side_b = _sides()
    assert compare.best_pair([], side_a, side_b) is None


def test_cross_indices_reads_next_first_against_candidate_second():
    side_a = Candidates(pt=[10.0, 20.0], iso=[0.2, 0.7])
    side_b = Candidates(pt=[30.0, 30.0], iso=[0.4, 0.4])

    # corresponding indices: side A local 0 (iso 0.2) vs 1 (iso 0.7)
    assert not compare.is_better((0, 0), (1, 1), side_a, side_b)
    # crossed: side A iso[next[0] = 0] vs iso[candidate[1] = 0], a tie
    # everywhere, so not better either way
    assert not compare.is_better((0, 0), (1, 0), side_a, side_b, cross_indices=True)
    # crossed: iso[1] = 0.7 against iso[0] = 0.2
    assert compare.is_better((1, 1), (0, 0), side_a, side_b, cross_indices=True)


def test_cross_indices_out_of_range_raises():
    side_a = Candidates(pt=[10.0], iso=[0.2])
    side_b = Candidates(pt=[30.0, 40.0, 50.0], iso=[0.4, 0.5, 0.6])

    # candidate's side B index 2 used on the single-element side A arrays
    with pytest.raises(IndexError):
        compare.is_better((0, 0), (0, 2), side_a, side_b, cross_indices=True)


def test_trace_receives_decisions():
    side_a, side_b = _sides()
    messages = []

    def trace(msg, *args):
        messages.append(msg % args)

    assert compare.is_better((1, 2), (1, 0), side_a, side_b, trace=trace)
    assert "Decided on iso B: 0.8 vs 0.3" in messages


def test_side_b_pt_uses_tolerance_too():
    side_a = Candidates(pt=[30.0], iso=[0.5])
    side_b = Candidates(pt=[20.0, 20.0 * (1 + 1e-7), 20.5], iso=[0.4, 0.4, 0.4])

    # within tolerance: a tie, neither pair is better
    assert not compare.is_better((0, 1), (0, 0), side_a, side_b)
    assert not compare.is_better((0, 0), (0, 1), side_a, side_b)
    assert compare.compare_pairs((0, 1), (0, 0), side_a, side_b) == 0
    # a real difference still counts
    assert compare.is_better((0, 2), (0, 0), side_a, side_b)


def test_compare_pairs_traces_one_direction():
    side_a, side_b = _sides()
    messages = []

    def trace(msg, *args):
        messages.append(msg % args)

    assert compare.compare_pairs((1, 0), (1, 2), side_a, side_b, trace=trace) == -1
    assert [m for m in messages if m.startswith("Next pair")] == [
        "Next pair: (1, 0), previous pair: (1, 2)"
    ]
