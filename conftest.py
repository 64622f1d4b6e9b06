"""
Pytest configuration for the Notehub deployer tests.

The deployer ships as flat modules under src/; put that directory on
sys.path so tests import them the same way the installed package does.
"""

import os
import sys

SRC_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "src")

if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)
