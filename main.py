#!/usr/bin/env python3
"""
Workspace Bootstrapper - Main Entry Point

Clones a set of repositories from a prioritized list of remotes and
installs them as editable packages for development.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from repobootstrap.cli import main

if __name__ == "__main__":
    main()
