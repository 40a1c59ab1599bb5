"""Core constants used across Partons modules.

This module centralizes file-name templates, markers, and defaults.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

APP_NAME = "partons"
CONFIG_FILE_NAME = "partons.toml"
INDEX_FILE_NAME = "index.csv"
INFO_FILE_NAME = "info.yaml"
SET_FILE_NAME = "set.tar.gz"
MEMBER_FILE_PATTERN = "{member}.member.lz4"
MEMBER_FILE_WIDTH = 6
ORIGINAL_MARKER = "original"
NAME_PLACEHOLDER = "{name}"
MEMBER_PLACEHOLDER = "{member}"
DEFAULT_INFO_PATTERN = "{name}/info.yaml"
DEFAULT_GRID_PATTERN = "{name}/{member}.member.lz4"
ARCHIVE_SUFFIXES = (".tar.gz", ".tgz")
LEGACY_INFO_SUFFIX = ".info"
LEGACY_MEMBER_WIDTH = 4
SECTION_DELIMITER = "---"
MIN_FLAVOR_COUNT = 3
MAX_FLAVOR_COUNT = 6
FLAVOR_SLOTS = MAX_FLAVOR_COUNT - MIN_FLAVOR_COUNT + 1
MEMBER_PAYLOAD_MAGIC = b"PRTN"
MEMBER_PAYLOAD_VERSION = 1
DEFAULT_HTTP_TIMEOUT = 60.0
DEFAULT_HTTP_RETRIES = 2
HTTP_BACKOFF_SECONDS = 0.5
RETRYABLE_STATUS_CODES = (429, 500, 502, 503, 504)
CL_1_SIGMA = 68.26894921370858
