"""
I/O utilities for reading NanoAOD-style ROOT files with uproot
"""

import uproot


def _find_tree(file, treename="Events"):
    """
    Detect the correct TTree inside the ROOT file.

    Logic:
    1. If `treename` exists, use it.
    2. Otherwise, search for exactly one TTree.
    3. Otherwise, search for a TTree inside subdirectories.
    """
    # Direct match, with or without ';1' versioning
    for key in (treename, f"{treename};1"):
        if key in file.keys():
            return file[key]

    # If there is exactly one TTree in the root file:
    tt_keys = [k for k, v in file.classnames().items() if v == "TTree"]
    if len(tt_keys) == 1:
        return file[tt_keys[0]]

    # Search inside directories
    for key in file.keys():
        directory = file[key]
        if not hasattr(directory, "keys"):
            continue
        for subkey in directory.keys():
            full = f"{key}/{subkey}"
            if getattr(file[full], "classname", None) == "TTree":
                return file[full]

    raise RuntimeError(f"No TTree found in file {file.file_path}")


def load_events(filename, branches, treename="Events"):
    """
    Load selected branches into an Awkward Array.
    Automatically detects the correct TTree name.
    """
    with uproot.open(filename) as f:
        tree = _find_tree(f, treename)
        arrays = tree.arrays(branches, library="ak")

    return arrays
