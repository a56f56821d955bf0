"""monocle: a terminal dashboard for the recent CircleCI builds of a branch."""

__version__ = "0.1.0"

from monocle.core.refresh_coordinator import RefreshCoordinator
from monocle.monitor.projection import DisplayModelBuilder
from monocle.cli.app import app as cli

__all__ = ["RefreshCoordinator", "DisplayModelBuilder", "cli", "__version__"]
