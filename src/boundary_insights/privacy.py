"""
Privacy utilities for Boundary Insights tool output.

Relationship references are hashed and free text echoed back in output
(planned locations and topics in alerts, logged location names in the time
report) is scrubbed of obvious PII before it leaves the server.
"""

import hashlib
import re
from typing import Any, Dict, Optional

from .config import get_config

# PII regex patterns
PATTERNS = {
    "phone": re.compile(r"\b(?:\+\d{1,2}\s?)?(?:\(\d{3}\)\s?|\d{3}[-.\s]?)\d{3}[-.\s]?\d{4}\b"),
    "email": re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Z|a-z]{2,}\b"),
    "address": re.compile(
        r"\b\d+\s+[A-Za-z0-9\s,]+(?:Avenue|Lane|Road|Boulevard|Drive|Street|Ave|Dr|Rd|Blvd|Ln|St)\.?\b"
    ),
}


def hash_relationship_id(relationship_id: str, salt: Optional[bytes] = None) -> str:
    """
    Hash a relationship reference using BLAKE2b with per-session salt.

    Args:
        relationship_id: The relationship identifier to hash
        salt: Optional salt (uses session salt if not provided)

    Returns:
        Hashed identifier in format "hash:xxxxxxxx"
    """
    if not relationship_id:
        return relationship_id

    # Skip if already hashed
    if relationship_id.startswith("hash:"):
        return relationship_id

    if salt is None:
        salt = get_config().session_salt

    h = hashlib.blake2b(relationship_id.encode("utf-8"), salt=salt, digest_size=16)

    return f"hash:{h.hexdigest()[:8]}"


def redact_pii(text: Optional[str]) -> Optional[str]:
    """
    Redact personally identifiable information from text.

    Args:
        text: Text to redact

    Returns:
        Redacted text
    """
    if not text:
        return text

    result = PATTERNS["address"].sub("[ADDRESS REDACTED]", text)

    # Partial redaction for phones
    def redact_phone(match):
        phone = match.group(0)
        if len(phone) > 4:
            return phone[:2] + "X" * (len(phone) - 4) + phone[-2:]
        return phone

    result = PATTERNS["phone"].sub(redact_phone, result)
    result = PATTERNS["email"].sub("[EMAIL REDACTED]", result)

    return result


def sanitize_result(result: Dict[str, Any], redact: bool = True) -> Dict[str, Any]:
    """
    Apply output privacy rules to a serialized analytics result.

    Args:
        result: JSON-ready result dictionary
        redact: Whether redaction was requested for this call

    Returns:
        A sanitized copy of the result
    """
    config = get_config()
    if not config.should_redact(redact):
        return result

    sanitized = dict(result)

    if config.privacy.hash_identifiers and sanitized.get("relationship_id"):
        sanitized["relationship_id"] = hash_relationship_id(sanitized["relationship_id"])

    if config.privacy.redact_free_text and isinstance(sanitized.get("warnings"), dict):
        warnings = dict(sanitized["warnings"])
        warnings["alerts"] = [
            {**alert, "triggers": [redact_pii(t) for t in alert.get("triggers", [])]}
            for alert in warnings.get("alerts", [])
        ]
        sanitized["warnings"] = warnings

    if config.privacy.redact_free_text and isinstance(sanitized.get("time_report"), dict):
        time_report = dict(sanitized["time_report"])
        time_report["locations"] = [
            {**bucket, "key": redact_pii(bucket.get("key"))} for bucket in time_report.get("locations", [])
        ]
        time_report["riskiest_location"] = redact_pii(time_report.get("riskiest_location"))
        sanitized["time_report"] = time_report

    return sanitized
