"""Fetchgate: verification and orchestration for package artifact fetches.

Sits between a request to fetch package archives or changelogs and the
engine that moves the bytes:
  - Trust and reproducibility gates with one shared confirm/override policy
  - Free-space preflight before any transfer starts
  - Run executor that separates transient from hard failures per item
  - Download and changelog workflows with print-URI dry runs
  - Archive cache maintenance: full wipe and index-aware sweep
"""

__version__ = "0.1.0"
__description__ = "Verified package archive and changelog downloads"

from fetchgate.cli.app import app as cli
from fetchgate.core.workflows import FetchWorkflow

__all__ = ["FetchWorkflow", "cli", "__version__"]
