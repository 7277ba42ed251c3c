"""
Installation of acquired repositories.
"""

from repobootstrap.installation.planner import InstallPlanner
from repobootstrap.installation.installer import PipInstaller
from repobootstrap.installation.stage import InstallationStage

__all__ = [
    "InstallPlanner",
    "PipInstaller",
    "InstallationStage",
]
