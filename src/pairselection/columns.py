"""
Column-level helpers: run the pair selection on every record of an
Awkward Array of events and filter on the result.
"""

import awkward as ak
import numpy as np

from pairselection.compare import ABS_TOL, REL_TOL, Candidates
from pairselection.selection import has_valid_pair, select_pair


# mu-tau channel: muon isolation is a relative isolation (lower is better),
# tau isolation is a raw discriminator score (higher is better)
MUTAU_COLUMNS = {
    "side_a": {
        "pt": "Muon_pt",
        "iso": "Muon_pfRelIso04_all",
        "mask": "Muon_good",
        "invert_iso": True,
    },
    "side_b": {
        "pt": "Tau_pt",
        "iso": "Tau_rawDeepTau2017v2p1VSjet",
        "mask": "Tau_good",
        "invert_iso": False,
    },
}


def candidate_mask(events, prefix, pt_min=0.0, eta_max=None):
    """
    Per-candidate jagged mask from simple kinematic cuts on
    `<prefix>_pt` and `<prefix>_eta`.
    """
    mask = events[f"{prefix}_pt"] > pt_min
    if eta_max is not None:
        mask = mask & (abs(events[f"{prefix}_eta"]) < eta_max)
    return mask


def _side_lists(events, side, label):
    lists = {}
    for key in ("pt", "iso", "mask"):
        column = side[key]
        if column not in events.fields:
            raise KeyError(f"Column {column!r} for side {label} not found in events")
        lists[key] = ak.to_list(events[column])
    if side.get("invert_iso", False):
        lists["iso"] = [[-value for value in iso] for iso in lists["iso"]]
    return lists


def pair_selection(
    events,
    side_a=None,
    side_b=None,
    pairname="pair",
    rel_tol=REL_TOL,
    abs_tol=ABS_TOL,
    cross_indices=False,
    trace=None,
):
    """
    Add a field `pairname` with the selected (index_a, index_b) pair of
    every record; records without a valid pair get (-1, -1).

    `side_a` and `side_b` map "pt", "iso" and "mask" to column names and
    may set "invert_iso". They default to the mu-tau columns.
    """
    side_a = side_a if side_a is not None else MUTAU_COLUMNS["side_a"]
    side_b = side_b if side_b is not None else MUTAU_COLUMNS["side_b"]

    a = _side_lists(events, side_a, "A")
    b = _side_lists(events, side_b, "B")

    pairs = []
    for pt_a, iso_a, mask_a, pt_b, iso_b, mask_b in zip(
        a["pt"], a["iso"], a["mask"], b["pt"], b["iso"], b["mask"]
    ):
        pair = select_pair(
            Candidates(pt=pt_a, iso=iso_a),
            mask_a,
            Candidates(pt=pt_b, iso=iso_b),
            mask_b,
            rel_tol=rel_tol,
            abs_tol=abs_tol,
            cross_indices=cross_indices,
            trace=trace,
        )
        pairs.append(pair)

    pairs = np.array(pairs, dtype=np.int64).reshape(-1, 2)
    return ak.with_field(events, ak.from_regular(ak.Array(pairs)), pairname)


def good_pair_mask(events, pairname="pair"):
    """
    Boolean per record: True where a valid pair was selected.
    """
    return np.array(
        [has_valid_pair(pair) for pair in ak.to_list(events[pairname])],
        dtype=bool,
    )


def filter_good_pairs(events, pairname="pair"):
    """
    Keep only records with a valid pair.
    """
    return events[good_pair_mask(events, pairname)]
