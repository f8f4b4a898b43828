"""Discovery of packages already present in an output or extension directory.

Both kinds of directory hold ``<packages dir>/<name>/<version><suffix>``
artifacts; scoped names add one level (``@scope/name``). The artifact path is
kept opaque: only the emitter looks inside it.
"""

from __future__ import annotations

import logging
import os
from typing import Dict, Mapping, Optional

from .constants import Constants
from .errors import InvalidSemVerSyntax
from .models import FromExtensionDir, FromOutput, PreExistingPackage
from .store import PackageStore
from .versioning.semver import SemanticVersion

logger = logging.getLogger(__name__)


def _scan_package_dir(path: str) -> Dict[SemanticVersion, str]:
    found: Dict[SemanticVersion, str] = {}
    for entry in sorted(os.listdir(path)):
        full = os.path.join(path, entry)
        if not entry.endswith(Constants.ARTIFACT_SUFFIX) or not os.path.isfile(full):
            continue
        stem = entry[: -len(Constants.ARTIFACT_SUFFIX)]
        try:
            found[SemanticVersion.parse(stem)] = full
        except InvalidSemVerSyntax:
            continue  # latest.nix and other non-version files
    return found


def scan_directory(root: str) -> Dict[str, Dict[SemanticVersion, str]]:
    """Map package name -> version -> artifact path for one directory.

    A missing packages directory yields an empty mapping.
    """
    packages_dir = os.path.join(root, Constants.PACKAGES_DIR)
    result: Dict[str, Dict[SemanticVersion, str]] = {}
    if not os.path.isdir(packages_dir):
        return result
    for entry in sorted(os.listdir(packages_dir)):
        full = os.path.join(packages_dir, entry)
        if not os.path.isdir(full):
            continue
        if entry.startswith("@"):
            for scoped in sorted(os.listdir(full)):
                scoped_path = os.path.join(full, scoped)
                if os.path.isdir(scoped_path):
                    versions = _scan_package_dir(scoped_path)
                    if versions:
                        result[f"{entry}/{scoped}"] = versions
            continue
        versions = _scan_package_dir(full)
        if versions:
            result[entry] = versions
    return result


def load_existing(
    output_dir: Optional[str] = None,
    extensions: Optional[Mapping[str, str]] = None,
) -> PackageStore[PreExistingPackage]:
    """Scan extension directories, then the output directory.

    Entries from the output directory overwrite extension entries for the
    same (name, version).
    """
    store: PackageStore[PreExistingPackage] = PackageStore()
    for ext_name, ext_path in (extensions or {}).items():
        scanned = scan_directory(ext_path)
        logger.info("Found %d packages in extension %s", len(scanned), ext_name)
        for name, versions in scanned.items():
            for version, artifact in versions.items():
                store.insert(name, version, FromExtensionDir(ext_name, artifact))
    if output_dir:
        scanned = scan_directory(output_dir)
        logger.info("Found %d packages in output directory %s", len(scanned), output_dir)
        for name, versions in scanned.items():
            for version, artifact in versions.items():
                store.insert(name, version, FromOutput(artifact))
    return store
