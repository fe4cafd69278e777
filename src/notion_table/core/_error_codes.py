# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

# Status codes worth retrying
TRANSIENT_STATUS_CODES = frozenset({429, 502, 503, 504})

# Validation subcodes
VALIDATION_REQUIRED_MISSING = "validation_required_missing"
VALIDATION_REQUIRED_EMPTY = "validation_required_empty"
VALIDATION_TYPE_MISMATCH = "validation_type_mismatch"
VALIDATION_READ_ONLY = "validation_read_only"
VALIDATION_UNKNOWN_FIELD = "validation_unknown_field"
VALIDATION_SORT_DIRECTION = "validation_sort_direction"
VALIDATION_UPSERT_NON_EQUALITY = "validation_upsert_non_equality"

# Configuration subcodes
CONFIG_UNKNOWN_FIELD_TYPE = "config_unknown_field_type"
CONFIG_READ_ONLY_FIELD_TYPE = "config_read_only_field_type"
CONFIG_UNSUPPORTED_OPERATOR = "config_unsupported_operator"

# Remote subcodes
REMOTE_NETWORK = "remote_network"
REMOTE_INVALID_RESPONSE = "remote_invalid_response"
REFETCH_EMPTY = "refetch_empty"


def http_subcode(status: int) -> str:
    """Return the ``http_<status>`` subcode for an HTTP status code."""
    return f"http_{status}"
