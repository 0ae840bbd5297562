"""Version of the running provisioner.

Lambda bundles are not installed as distributions, so the build pipeline
sets PROVISIONER_VERSION there. Source checkouts read pyproject.toml.
"""

import os
import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

DISTRIBUTION_NAME = "tenant-infra-provisioner"
UNKNOWN_VERSION = "0.0.0+unknown"

# src/api/infrastructure/version.py -> repository root
_PYPROJECT = Path(__file__).resolve().parents[3] / "pyproject.toml"


def get_version() -> str:
    """Resolve the version from the environment, metadata, or pyproject.toml."""
    if override := os.environ.get("PROVISIONER_VERSION"):
        return override
    try:
        return version(DISTRIBUTION_NAME)
    except PackageNotFoundError:
        return _version_from_pyproject()


def _version_from_pyproject() -> str:
    if not _PYPROJECT.is_file():
        return UNKNOWN_VERSION
    with _PYPROJECT.open("rb") as f:
        return tomllib.load(f)["project"]["version"]


__version__ = get_version()
