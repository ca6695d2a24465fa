"""
ItemsBlocker: Canonical JSON Encoding — RFC 8785 (JCS)

The state file is always written in canonical form, so two saves of the
same rule set are byte-identical and the digest stored alongside the
rules is reproducible on load.

RFC 8785: https://www.rfc-editor.org/rfc/rfc8785
"""

import hashlib

try:
    import jcs as _jcs
except ImportError as exc:
    raise ImportError(
        "ItemsBlocker requires the 'jcs' package for RFC 8785 compliance.\n"
        "Install with: pip install jcs\n"
        f"Original error: {exc}"
    ) from exc


def canonicalize(obj: dict) -> bytes:
    """
    Encode a dict to RFC 8785 canonical JSON bytes.

    All values must be JSON-primitive (str, int, float, bool, None, list, dict).
    Do NOT pass datetime objects; convert with core.time.to_wire() first.
    """
    return _jcs.canonicalize(obj)


def canonical_hash(obj: dict) -> str:
    """
    SHA-256 of the RFC 8785 canonical form.

    Returns:
        Lowercase hex-encoded SHA-256 digest (64 characters).
    """
    return hashlib.sha256(canonicalize(obj)).hexdigest()
