"""
Kinematic quantities of the selected pair.

The selected candidates are picked out of their collections with the
pair indices and turned into vector Momentum4D arrays, from which pt,
eta, phi and the visible mass of the pair are derived.
"""

import awkward as ak
import numpy as np
import vector


vector.register_awkward()


def selected_p4(events, prefix, pairname="pair", position=0):
    """
    Four-vector of the selected candidate of every record.

    Parameters
    ----------
    events : ak.Array
        Events that all carry a valid pair (see
        `pairselection.columns.filter_good_pairs`); a sentinel index
        would silently pick the last candidate.
    prefix : str
        Collection name, e.g. "Muon" reads Muon_pt, Muon_eta,
        Muon_phi and Muon_mass.
    pairname : str
        Field holding the selected pair.
    position : int
        0 for the side A candidate, 1 for the side B candidate.

    Returns
    -------
    ak.Array
        One Momentum4D record per event.
    """
    index = events[pairname][:, position : position + 1]

    def pick(field):
        return events[f"{prefix}_{field}"][index][:, 0]

    return ak.zip(
        {
            "pt": pick("pt"),
            "eta": pick("eta"),
            "phi": pick("phi"),
            "mass": pick("mass"),
        },
        with_name="Momentum4D",
    )


def pt(p4):
    return ak.to_numpy(p4.pt)


def eta(p4):
    return ak.to_numpy(p4.eta)


def phi(p4):
    return ak.to_numpy(p4.phi)


def m_vis(p4_1, p4_2):
    """
    Visible mass of the two selected candidates.
    """
    dilepton = p4_1 + p4_2
    mass = ak.to_numpy(dilepton.mass)
    # guard against small negative values from numerical precision
    return np.where(mass > 0.0, mass, 0.0)
