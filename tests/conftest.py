import sys
import os

# Absolute path to the src/ layout
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_PATH = os.path.join(PROJECT_ROOT, "src")

# Prepend src so the package is importable without installing it
sys.path.insert(0, SRC_PATH)
