"""
Cascading comparator for ranking candidate pairs.

A pair is a tuple of local indices (local_a, local_b) into the eligible
candidates of side A and side B. Pairs are ranked by:

  1. side A isolation, higher wins
  2. side A pt, higher wins
  3. side B isolation, higher wins
  4. side B pt, higher wins

A level is only consulted when the previous one is a tie within tolerance.
Variables where lower is better (e.g. relative isolation) must be negated
by the caller.
"""

import math
from collections import namedtuple
from functools import cmp_to_key


Candidates = namedtuple("Candidates", ["pt", "iso"])

REL_TOL = 1e-5
ABS_TOL = 1e-8


def approx_equal(a, b, rel_tol=REL_TOL, abs_tol=ABS_TOL):
    """
    Symmetric closeness check, |a - b| <= max(rel_tol * max(|a|, |b|), abs_tol).
    """
    return math.isclose(a, b, rel_tol=rel_tol, abs_tol=abs_tol)


def _indices(next_pair, candidate_pair, cross_indices):
    if cross_indices:
        # historical mu-tau behaviour: next.first against candidate.second
        # on both sides
        i_next, i_cand = next_pair[0], candidate_pair[1]
        return (i_next, i_cand), (i_next, i_cand)
    return (
        (next_pair[0], candidate_pair[0]),
        (next_pair[1], candidate_pair[1]),
    )


def is_better(
    next_pair,
    candidate_pair,
    side_a,
    side_b,
    rel_tol=REL_TOL,
    abs_tol=ABS_TOL,
    cross_indices=False,
    trace=None,
):
    """
    Return True if `next_pair` ranks strictly above `candidate_pair`.

    Parameters
    ----------
    next_pair, candidate_pair : tuple of int
        Local pairs (local_a, local_b).
    side_a, side_b : Candidates
        Attributes of the eligible candidates of each side.
    rel_tol, abs_tol : float
        Tolerance used to decide whether a level is a tie.
    cross_indices : bool
        Reproduce the historical index crossing instead of comparing
        corresponding indices.
    trace : callable, optional
        Called as trace(msg, *args) with intermediate values.
    """
    (a_next, a_cand), (b_next, b_cand) = _indices(
        next_pair, candidate_pair, cross_indices
    )
    if trace is not None:
        trace("Next pair: %s, previous pair: %s", next_pair, candidate_pair)

    levels = (
        ("iso A", side_a.iso, a_next, a_cand),
        ("pt A", side_a.pt, a_next, a_cand),
        ("iso B", side_b.iso, b_next, b_cand),
        ("pt B", side_b.pt, b_next, b_cand),
    )
    for name, values, i_next, i_cand in levels:
        v_next = values[i_next]
        v_cand = values[i_cand]
        if not approx_equal(v_next, v_cand, rel_tol, abs_tol):
            if trace is not None:
                trace("Decided on %s: %s vs %s", name, v_next, v_cand)
            return bool(v_next > v_cand)
        if trace is not None:
            trace("%s too similar (%s, %s), falling through", name, v_next, v_cand)

    # tied within tolerance on every level
    return False


def compare_pairs(first, second, side_a, side_b, **options):
    """
    Three-way version of `is_better`: 1, -1 or 0.
    """
    if is_better(first, second, side_a, side_b, **options):
        return 1
    # trace only the forward comparison
    reverse_options = dict(options, trace=None)
    if is_better(second, first, side_a, side_b, **reverse_options):
        return -1
    return 0


def sort_pairs(pairs, side_a, side_b, **options):
    """
    Sort pairs best first.

    The sort is stable, so pairs that compare equal keep their
    enumeration order and the first element is the one `best_pair`
    returns.
    """
    key = cmp_to_key(lambda x, y: compare_pairs(x, y, side_a, side_b, **options))
    return sorted(pairs, key=key, reverse=True)


def best_pair(pairs, side_a, side_b, **options):
    """
    Fold the maximum over `pairs`; the earliest pair wins full ties.

    Returns None for an empty sequence.
    """
    best = None
    for pair in pairs:
        if best is None or is_better(pair, best, side_a, side_b, **options):
            best = pair
    return best
