"""Kubernetes resource name helpers."""

import re

MAX_NAME_LENGTH = 63

_INVALID_CHARS = re.compile(r"[^a-z0-9]+")


def to_valid_name(name: str) -> str:
    """Turn an arbitrary string into a valid Kubernetes resource name.

    Lower-cases, replaces each run of other characters with a single dash
    and trims dashes from both ends.

    Examples:
        >>> to_valid_name("Jane.Doe@example.com-cluster-admin-binding")
        'jane-doe-example-com-cluster-admin-binding'
    """
    valid = _INVALID_CHARS.sub("-", name.lower()).strip("-")
    return valid[:MAX_NAME_LENGTH].rstrip("-")
