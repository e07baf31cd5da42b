"""K8s Manifest Sync - Drift detection for directories of Kubernetes manifests."""

__version__ = "0.1.0"

# Directory and file constants
SYNC_DIR = ".k8s-manifest-sync"
CONFIG_FILE = "config.json"
STATE_FILE = "state.json"
