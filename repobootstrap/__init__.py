"""
Development workspace bootstrapper.

Clones a set of repositories from a prioritized list of remotes, retrying
transient transport failures, and installs them in order as editable
packages.
"""

__version__ = "1.0.0"
__author__ = "Workspace Bootstrap"
