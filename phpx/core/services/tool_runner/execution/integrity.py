"""
L4 Execution — Artifact integrity.

Hash format is ``algo:hex`` (``sha256:ab12…``).  Bare hex digests found
in older cache documents are accepted and their algorithm inferred from
the digest length.

Release-side verification of freshly downloaded phars:
    - ``.sha256`` / ``.sha512`` checksum assets are fetched and compared
    - ``.asc`` / ``.sig`` PGP signatures are NOT verified; this is
      reported as ``unverified`` with a warning, never as success
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path

from phpx.core.errors import SecurityError
from phpx.core.services.tool_runner.execution.http import HttpClient

logger = logging.getLogger(__name__)

DEFAULT_ALGO = "sha256"

_ALGO_BY_LENGTH = {32: "md5", 40: "sha1", 64: "sha256", 128: "sha512"}
_CHECKSUM_SUFFIXES = {".sha256": "sha256", ".sha512": "sha512"}
_SIGNATURE_SUFFIXES = (".asc", ".sig")


def compute_hash(path: Path, algo: str = DEFAULT_ALGO) -> str:
    """Return ``algo:hexdigest`` of a file."""
    h = hashlib.new(algo)
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            h.update(chunk)
    return f"{algo}:{h.hexdigest()}"


def _split_expected(expected: str) -> tuple[str, str]:
    expected = expected.strip().lower()
    if ":" in expected:
        algo, digest = expected.split(":", 1)
        return algo, digest
    algo = _ALGO_BY_LENGTH.get(len(expected))
    if algo is None:
        raise SecurityError(f"Unrecognized hash format: {expected!r}")
    return algo, expected


def verify_hash(path: Path, expected: str) -> None:
    """Raise SecurityError unless ``path`` hashes to ``expected``."""
    algo, digest = _split_expected(expected)
    try:
        actual = compute_hash(path, algo).split(":", 1)[1]
    except ValueError as e:
        raise SecurityError(f"Unsupported hash algorithm: {algo}") from e

    if actual != digest:
        raise SecurityError(f"Hash mismatch for {path.name}: expected {digest}, got {actual}")
    logger.debug("Hash verified for %s (%s)", path, algo)


def verify_release_signature(
    path: Path,
    signature_url: str | None,
    http: HttpClient,
) -> str:
    """Check a downloaded artifact against its release-side companion file.

    Returns:
        ``"verified"`` (checksum matched), ``"unverified"`` (a signature
        exists but is not checked) or ``"none"`` (nothing to check).

    Raises:
        SecurityError: the published checksum does not match.
        NetworkError: the checksum file could not be fetched.
    """
    if not signature_url:
        return "none"

    lowered = signature_url.lower()
    for suffix, algo in _CHECKSUM_SUFFIXES.items():
        if lowered.endswith(suffix):
            text = http.get_text(signature_url)
            tokens = text.split()
            if not tokens:
                raise SecurityError(f"Empty checksum file at {signature_url}")
            verify_hash(path, f"{algo}:{tokens[0]}")
            logger.info("Checksum verified for %s", path.name)
            return "verified"

    if lowered.endswith(_SIGNATURE_SUFFIXES):
        logger.warning(
            "Signature %s for %s was not verified (PGP verification is not supported)",
            signature_url,
            path.name,
        )
        return "unverified"

    logger.debug("Unrecognized signature asset %s — skipped", signature_url)
    return "none"
