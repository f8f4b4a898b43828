"""Download-hash-extract step shared by the VCS and URL fetchers.

The tarball is downloaded once and hashed; the digest becomes the package's
content-addressing key. The archive is opened in memory and its shallowest
package.json becomes the manifest.
"""

from __future__ import annotations

import hashlib
import io
import logging
import lzma
import tarfile
import zlib
from typing import Dict, Optional

from ..common.http_client import get_bytes
from ..common.logging_utils import extra_context, safe_url
from ..constants import Constants
from ..errors import ManifestParseError, UpstreamFetchError
from ..manifest import manifest_from_bytes
from ..models import DistributionInfo, PackageManifest
from ..versioning.semver import SemanticVersion

logger = logging.getLogger(__name__)


def content_hash(body: bytes, algorithm: str = Constants.HASH_ALGORITHM) -> str:
    """Hex digest of ``body``."""
    return hashlib.new(algorithm, body).hexdigest()


def _manifest_member(archive: tarfile.TarFile) -> Optional[tarfile.TarInfo]:
    candidates = [
        member for member in archive.getmembers()
        if member.isfile()
        and member.name.rsplit("/", 1)[-1] == Constants.PACKAGE_JSON_FILE
        and "node_modules" not in member.name.split("/")
    ]
    if not candidates:
        return None
    return min(candidates, key=lambda m: (m.name.strip("./").count("/"), m.name))


def extract_manifest(body: bytes, source: str) -> PackageManifest:
    """Locate and parse the package.json inside a tarball.

    Raises:
        UpstreamFetchError: if the bytes are not a readable tar archive.
        ManifestParseError: if no package.json is present or it is malformed.
    """
    try:
        with tarfile.open(fileobj=io.BytesIO(body), mode="r:*") as archive:
            member = _manifest_member(archive)
            if member is None:
                raise ManifestParseError(source, "No package.json found")
            handle = archive.extractfile(member)
            if handle is None:
                raise ManifestParseError(source, f"Cannot read {member.name}")
            raw = handle.read()
    except (tarfile.TarError, EOFError, OSError, zlib.error, lzma.LZMAError) as exc:
        raise UpstreamFetchError(source, f"unreadable archive: {exc}") from exc
    return manifest_from_bytes(raw, f"{source}!{member.name}")


def fetch_archive(
    url: str,
    *,
    timeout: Optional[float] = None,
    headers: Optional[Dict[str, str]] = None,
) -> PackageManifest:
    """Download ``url`` and return its manifest with distribution info injected.

    Raises:
        UpstreamFetchError: on transport failure or a non-success status.
        ManifestParseError: if the archive carries no usable package.json.
        InvalidSemVerSyntax: if the manifest version is not a semantic version.
    """
    target = safe_url(url)
    logger.info("Fetching %s", target)
    status, _, body = get_bytes(url, headers=headers, timeout=timeout)
    if status == 0:
        raise UpstreamFetchError(target, "no response")
    if not 200 <= status < 300:
        raise UpstreamFetchError(target, f"HTTP {status}")

    digest = content_hash(body)
    logger.debug(
        "Downloaded archive",
        extra=extra_context(
            event="archive_downloaded",
            component="archive",
            target=target,
            size=len(body),
            digest=digest,
        )
    )
    manifest = extract_manifest(body, target)
    SemanticVersion.parse(manifest.version)
    return manifest.with_dist(DistributionInfo(url=url, shasum=digest))
