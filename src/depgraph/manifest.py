"""Conversion of package.json and registry documents into models.

Covers the two JSON shapes the resolver consumes: a single version object
(``package.json`` or one entry of a registry ``versions`` table) and a
registry package document (``versions`` + ``dist-tags``).
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional, Tuple

from .constants import Constants
from .errors import InvalidSemVerSyntax, ManifestParseError
from .models import DistributionInfo, PackageInfo, PackageManifest, PackageMeta
from .versioning.semver import SemanticVersion

logger = logging.getLogger(__name__)


def _get_dict(data: Dict[str, Any], key: str) -> Dict[str, str]:
    """Return a string-to-string mapping, ignoring a missing or malformed field."""
    value = data.get(key)
    if not isinstance(value, dict):
        return {}
    return {k: v for k, v in value.items() if isinstance(k, str) and isinstance(v, str)}


def _get_keywords(value: Any) -> Tuple[str, ...]:
    # Some packages publish keywords as one comma-separated string.
    if isinstance(value, str):
        return tuple(k.strip() for k in value.split(",") if k.strip())
    if isinstance(value, list):
        return tuple(k for k in value if isinstance(k, str))
    return ()


def _get_homepage(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value or None
    if isinstance(value, list):
        for item in value:
            if isinstance(item, str) and item:
                return item
    return None


def _get_dist(value: Any) -> Optional[DistributionInfo]:
    if not isinstance(value, dict):
        return None
    tarball = value.get("tarball")
    shasum = value.get("shasum")
    if not isinstance(tarball, str) or not isinstance(shasum, str):
        return None
    return DistributionInfo(url=tarball, shasum=shasum)


def manifest_from_json(data: Any, source: str) -> PackageManifest:
    """Build a PackageManifest from a parsed version object.

    Args:
        data: Decoded JSON object.
        source: Where the object came from, for error messages.

    Raises:
        ManifestParseError: if the object lacks a name or version.
    """
    if not isinstance(data, dict):
        raise ManifestParseError(source, "expected a JSON object")
    name = data.get("name")
    version = data.get("version")
    if not isinstance(name, str) or not name:
        raise ManifestParseError(source, "missing 'name'")
    if not isinstance(version, str) or not version:
        raise ManifestParseError(source, "missing 'version'")
    description = data.get("description")
    meta = PackageMeta(
        description=description if isinstance(description, str) else None,
        homepage=_get_homepage(data.get("homepage")),
        keywords=_get_keywords(data.get("keywords")),
    )
    return PackageManifest(
        name=name,
        version=version,
        dependencies=_get_dict(data, "dependencies"),
        dev_dependencies=_get_dict(data, "devDependencies"),
        dist=_get_dist(data.get("dist")),
        meta=meta,
    )


def manifest_from_bytes(raw: bytes, source: str) -> PackageManifest:
    """Decode and convert a package.json payload."""
    try:
        data = json.loads(raw.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ManifestParseError(source, exc) from exc
    return manifest_from_json(data, source)


def load_package_json(path: str) -> PackageManifest:
    """Read a package.json file (or a directory containing one).

    Raises:
        ManifestParseError: if the file is missing, unreadable or malformed.
    """
    if os.path.isdir(path):
        path = os.path.join(path, Constants.PACKAGE_JSON_FILE)
    logger.info("Reading information from %s", path)
    try:
        with open(path, "rb") as fh:
            raw = fh.read()
    except OSError as exc:
        raise ManifestParseError(path, exc) from exc
    return manifest_from_bytes(raw, path)


def package_info_from_json(data: Any, source: str) -> PackageInfo:
    """Build PackageInfo from a registry package document.

    Version entries that are not valid manifests, or whose version is not a
    semantic version, are skipped. A dist-tag naming an invalid version
    string rejects the whole document.

    Raises:
        ManifestParseError: if the document is not in the registry shape.
    """
    if not isinstance(data, dict):
        raise ManifestParseError(source, "expected a JSON object")
    raw_versions = data.get("versions")
    raw_tags = data.get("dist-tags", {})
    if not isinstance(raw_versions, dict) or not isinstance(raw_tags, dict):
        raise ManifestParseError(source, "missing 'versions' or 'dist-tags'")

    versions: Dict[SemanticVersion, PackageManifest] = {}
    for key, entry in raw_versions.items():
        try:
            manifest = manifest_from_json(entry, f"{source} (version {key})")
            versions[manifest.semver] = manifest
        except (ManifestParseError, InvalidSemVerSyntax) as exc:
            logger.debug("Skipping registry version %s of %s: %s", key, source, exc)

    tags: Dict[str, SemanticVersion] = {}
    for tag, version in raw_tags.items():
        if not isinstance(version, str):
            raise ManifestParseError(source, f"tag {tag!r} is not a version string")
        try:
            tags[tag] = SemanticVersion.parse(version)
        except InvalidSemVerSyntax as exc:
            raise ManifestParseError(
                source, f"tag {tag!r} refers to an invalid semver string {version!r}"
            ) from exc
    return PackageInfo(versions=versions, tags=tags)
