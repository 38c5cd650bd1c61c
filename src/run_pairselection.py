"""
Main entry point for the mu-tau pair selection.

Reads NanoAOD-style ROOT files, marks the good muons and taus with simple
kinematic cuts, selects the best muon-tau pair in every event, drops
events without a pair and fills the visible mass of the selected pairs.
"""

import argparse
import glob
import logging
import os
import time

import yaml
import awkward as ak
import numpy as np
import matplotlib.pyplot as plt
from hist import Hist
import hist

from pairselection.columns import (
    candidate_mask,
    filter_good_pairs,
    pair_selection,
)
from pairselection.compare import ABS_TOL, REL_TOL
from pairselection.io import load_events
from pairselection.physics import eta, m_vis, phi, pt, selected_p4


PAIRNAME = "pair"


# Argument parsing and config loading
def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Best muon-tau pair selection on NanoAOD-style ROOT files."
    )
    parser.add_argument(
        "--config",
        default="config/config.yaml",
        help="Path to YAML configuration file.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Trace every pair comparison through the logging module.",
    )
    return parser.parse_args(argv)


def load_config(path):
    with open(path) as f:
        return yaml.safe_load(f)


def required_branches(selection_cfg):
    """
    Branches to read for both sides: kinematics for the mask and the
    four-vectors, plus the ranking columns.
    """
    branches = set()
    for key in ("side_a", "side_b"):
        side = selection_cfg[key]
        prefix = side["prefix"]
        branches.update(f"{prefix}_{field}" for field in ("pt", "eta", "phi", "mass"))
        branches.update([side["pt"], side["iso"]])
    return sorted(branches)


def _empty_info(filename, n_events):
    empty = np.array([], dtype=float)
    return {
        "filename": filename,
        "n_events": n_events,
        "n_pairs": 0,
        "pt_1": empty,
        "eta_1": empty,
        "phi_1": empty,
        "pt_2": empty,
        "eta_2": empty,
        "phi_2": empty,
        "m_vis": empty,
    }


# Per-file analysis
def process_file(filename, config, trace=None):
    """
    Per-file pair selection.

    Steps:
      1. Load the branches of both collections.
      2. Build the eligibility masks from the pt and |eta| cuts.
      3. Select the best pair in every event.
      4. Drop events without a valid pair.
      5. Compute the kinematics of the selected candidates and m_vis.
    """
    selection_cfg = config["selection"]
    side_a = selection_cfg["side_a"]
    side_b = selection_cfg["side_b"]

    # 1) Load events
    events = load_events(
        filename,
        required_branches(selection_cfg),
        treename=config.get("tree", "Events"),
    )

    # 2) Eligibility masks
    for side in (side_a, side_b):
        mask = candidate_mask(
            events,
            side["prefix"],
            pt_min=side.get("pt_min", 0.0),
            eta_max=side.get("eta_max"),
        )
        events = ak.with_field(events, mask, side["mask"])

    # 3) Pair selection
    events = pair_selection(
        events,
        side_a,
        side_b,
        pairname=PAIRNAME,
        rel_tol=selection_cfg.get("rel_tol", REL_TOL),
        abs_tol=selection_cfg.get("abs_tol", ABS_TOL),
        cross_indices=selection_cfg.get("cross_indices", False),
        trace=trace,
    )
    n_events = len(events)

    # 4) Keep events with a pair
    events = filter_good_pairs(events, PAIRNAME)

    hist_cfg = config["hist"]
    m_vis_axis = hist.axis.Regular(
        hist_cfg["nbins"],
        hist_cfg["min"],
        hist_cfg["max"],
        name="m_vis",
        label=r"$m_{vis}\,\mathrm{[GeV]}$",
    )
    h_m_vis = Hist(m_vis_axis)

    if len(events) == 0:
        return h_m_vis, _empty_info(filename, n_events)

    # 5) Quantities of the selected pair
    p4_1 = selected_p4(events, side_a["prefix"], PAIRNAME, position=0)
    p4_2 = selected_p4(events, side_b["prefix"], PAIRNAME, position=1)
    mass = m_vis(p4_1, p4_2)
    h_m_vis.fill(mass)

    info = {
        "filename": filename,
        "n_events": n_events,
        "n_pairs": len(events),
        "pt_1": pt(p4_1),
        "eta_1": eta(p4_1),
        "phi_1": phi(p4_1),
        "pt_2": pt(p4_2),
        "eta_2": eta(p4_2),
        "phi_2": phi(p4_2),
        "m_vis": mass,
    }
    return h_m_vis, info


def safe_process_file(fname, config, trace=None):
    """
    Wrapper so that a bad file doesn't kill the whole job.
    """
    try:
        return process_file(fname, config, trace=trace)
    except (OSError, RuntimeError, KeyError, ValueError) as e:
        print(f"[WARN] Error in file {fname}: {e}")
        return None


def plot_m_vis(total_hist, path):
    counts = total_hist.values()
    edges = total_hist.axes[0].edges
    centers = 0.5 * (edges[:-1] + edges[1:])
    errors = np.sqrt(counts)

    fig, ax = plt.subplots()
    ax.step(edges[:-1], counts, where="post", label="Events")
    ax.errorbar(
        centers,
        counts,
        yerr=errors,
        fmt=".",
        markersize=2,
        linewidth=0.5,
        label="Statistical errors",
    )
    ax.set_xlabel(r"$m_{vis}\,\mathrm{[GeV]}$")
    ax.set_ylabel("Events")
    ax.set_title(r"Visible mass of the selected $\mu\tau$ pair")
    ax.legend(loc="best", frameon=False)
    fig.tight_layout()
    fig.savefig(path)
    plt.close(fig)


def main(argv=None):
    args = parse_args(argv)
    config = load_config(args.config)

    trace = None
    if args.debug:
        logging.basicConfig(level=logging.DEBUG)
        trace = logging.getLogger("pairselection").debug

    pattern = os.path.join(config["data_dir"], config["file_pattern"])
    files = sorted(glob.glob(pattern))

    if not files:
        raise RuntimeError(f"No input files found for pattern {pattern}")

    print(f"Found {len(files)} input files.")

    start_time = time.perf_counter()

    results = []
    for i, fname in enumerate(files, start=1):
        out = safe_process_file(fname, config, trace=trace)
        if out is not None:
            results.append(out)
        print(f"[{i}/{len(files)}] Completed {fname}")

    wall_time = time.perf_counter() - start_time

    if not results:
        raise RuntimeError("No successful per-file results; nothing to merge.")

    hists, infos = zip(*results)

    # Merge histograms by adding them bin-by-bin
    total_hist = hists[0].copy()
    for h in hists[1:]:
        total_hist += h

    total_events = sum(info["n_events"] for info in infos)
    total_pairs = sum(info["n_pairs"] for info in infos)

    outdir = config["output_dir"]
    os.makedirs(outdir, exist_ok=True)

    np.save(os.path.join(outdir, "m_vis_counts.npy"), total_hist.values())
    np.save(os.path.join(outdir, "m_vis_edges.npy"), total_hist.axes[0].edges)

    if config.get("analysis", {}).get("make_plots", True):
        plot_m_vis(total_hist, os.path.join(outdir, "m_vis.png"))

    # Final summary
    print(f"Processed {len(results)} files.")
    print(f"Total events: {total_events}")
    if total_events > 0:
        print(
            f"Events with a valid pair: {total_pairs} "
            f"({100.0 * total_pairs / total_events:.1f}%)"
        )
    print(f"Total wall time: {wall_time:.2f} s")
    print(f"Saved outputs to {outdir}")


if __name__ == "__main__":
    main()
