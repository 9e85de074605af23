"""GitHub label sync.

Declaratively reconcile a repository's issue labels with a desired state:
- desired labels loaded from a YAML file
- settings and credentials loaded from `.env`
- create missing, update recolored and optionally delete absent labels
"""

__version__ = "0.1.0"

from github_label_sync.labels import Label, LabelSet
from github_label_sync.reconciler import Reconciler

__all__ = ["__version__", "Label", "LabelSet", "Reconciler"]
