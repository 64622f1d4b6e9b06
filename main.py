#!/usr/bin/env python3
"""
Notehub Host Firmware Deployment Tool

- Authenticate with Notehub using OAuth2 client credentials
- Upload a host firmware binary to a project
- Trigger a device firmware update (unless --issue-dfu false)

This script supports running directly from a source checkout. It adds the
local `src/` directory to sys.path before importing. For production use,
prefer installing the project and using the `notehub-deploy` console script.
"""

import os
import sys

# Add src/ to path to import modules directly
REPO_ROOT = os.path.dirname(os.path.abspath(__file__))
SRC_PATH = os.path.join(REPO_ROOT, "src")
if SRC_PATH not in sys.path:
    sys.path.insert(0, SRC_PATH)

from cli import main

if __name__ == "__main__":
    sys.exit(main())
