"""
Best-pair selection between two candidate collections.

For each record, the eligible candidates of side A and side B are paired
in every combination, the best pair is picked with the cascade in
`pairselection.compare`, and its local indices are translated back to
positions in the original collections.
"""

import numpy as np

from pairselection.compare import ABS_TOL, REL_TOL, Candidates, best_pair


SENTINEL = -1
SENTINEL_PAIR = (SENTINEL, SENTINEL)


def eligible_indices(mask):
    """
    Ascending positions where `mask` is true.
    """
    mask = np.asarray(mask, dtype=bool)
    return [int(i) for i in np.flatnonzero(mask)]


def enumerate_pairs(m, n):
    """
    All (local_a, local_b) combinations for m side-A and n side-B
    candidates, local_a in the outer loop.

    The order matters: on a full tie the earliest pair is selected.
    """
    if m < 0 or n < 0:
        raise ValueError(f"Candidate counts must be non-negative, got {m}, {n}")
    return [(i, j) for i in range(m) for j in range(n)]


def _check_side(name, side, mask):
    n_pt = len(side.pt)
    n_iso = len(side.iso)
    n_mask = len(mask)
    if not n_pt == n_iso == n_mask:
        raise ValueError(
            f"Side {name}: pt, iso and mask lengths differ "
            f"({n_pt}, {n_iso}, {n_mask})"
        )


def _take(side, indices):
    pt = np.asarray(side.pt, dtype=float)
    iso = np.asarray(side.iso, dtype=float)
    return Candidates(pt=pt[indices], iso=iso[indices])


def select_pair(
    side_a,
    mask_a,
    side_b,
    mask_b,
    rel_tol=REL_TOL,
    abs_tol=ABS_TOL,
    cross_indices=False,
    trace=None,
):
    """
    Select the best (global_a, global_b) pair of one record.

    Parameters
    ----------
    side_a, side_b : Candidates
        pt and iso of every candidate of the record, eligible or not.
    mask_a, mask_b : sequence of bool
        Eligibility of each candidate.
    rel_tol, abs_tol, cross_indices, trace
        Passed on to `pairselection.compare.is_better`.

    Returns
    -------
    tuple of int
        Global indices of the selected pair, or SENTINEL_PAIR if either
        side has no eligible candidate.
    """
    _check_side("A", side_a, mask_a)
    _check_side("B", side_b, mask_b)

    good_a = eligible_indices(mask_a)
    good_b = eligible_indices(mask_b)
    if not good_a or not good_b:
        if trace is not None:
            trace("No eligible pair: %d side A, %d side B", len(good_a), len(good_b))
        return SENTINEL_PAIR

    selected_a = _take(side_a, good_a)
    selected_b = _take(side_b, good_b)
    if trace is not None:
        trace("Side A pt: %s iso: %s", selected_a.pt, selected_a.iso)
        trace("Side B pt: %s iso: %s", selected_b.pt, selected_b.iso)

    pairs = enumerate_pairs(len(good_a), len(good_b))
    local_a, local_b = best_pair(
        pairs,
        selected_a,
        selected_b,
        rel_tol=rel_tol,
        abs_tol=abs_tol,
        cross_indices=cross_indices,
        trace=trace,
    )

    assert 0 <= local_a < len(good_a) and 0 <= local_b < len(good_b), (
        f"local pair ({local_a}, {local_b}) outside eligible lists"
    )
    selected = (good_a[local_a], good_b[local_b])
    if trace is not None:
        trace("Selected original pair indices: %d, %d", *selected)
    return selected


def has_valid_pair(pair):
    """
    True unless a component of `pair` is the sentinel.
    """
    return all(int(index) != SENTINEL for index in pair)
