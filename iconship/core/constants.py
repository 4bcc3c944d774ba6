"""
Constants for the iconship package.

This module provides constants used throughout the iconship package.
These constants can be easily changed in one place.
"""

# Markup normalization
# All upstream assets are drawn on a 512x512 design grid.
CANONICAL_VIEWBOX = "0 0 512 512"
CANONICAL_COLOR = "black"
SVG_EXTENSION = ".svg"

# Package layout
UNTYPED_SUBDIR = "dist/jsx"
TYPED_SUBDIR = "dist/tsx"
UNTYPED_EXTENSION = ".jsx"
TYPED_EXTENSION = ".tsx"
DECLARATION_EXTENSION = ".d.ts"
UNTYPED_BARREL = "index.js"
TYPED_BARREL = "index.ts"
DECLARATION_BARREL = "index.d.ts"
MANIFEST_FILENAME = "package.json"
ARCHIVE_EXTENSION = ".tgz"

# Manifest defaults
DEFAULT_PACKAGE_VERSION = "1.0.0"
DEFAULT_PEER_REQUIREMENTS = {
    "react": ">= 16",
    "react-dom": ">= 16",
}

# Identifier collisions
COLLISION_POLICY_FAIL = "fail"
COLLISION_POLICY_SUFFIX = "suffix"
SUPPORTED_COLLISION_POLICIES = [COLLISION_POLICY_FAIL, COLLISION_POLICY_SUFFIX]
DEFAULT_COLLISION_POLICY = COLLISION_POLICY_FAIL

# Archivers
DEFAULT_ARCHIVER = "tarball"
SUPPORTED_ARCHIVERS = ["tarball", "npm"]
DEFAULT_ARCHIVER_TIMEOUT = 120  # seconds

# Icon service
DEFAULT_ICON_SERVICE_URL = "http://localhost:8088"
DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 100
DEFAULT_SORT = "-iconId"

# Fetching
DEFAULT_FETCH_WORKERS = 8
MAX_FETCH_WORKERS = 16
DEFAULT_REQUEST_TIMEOUT = 30  # seconds
DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY = 1  # seconds, doubled on each retry

# Artifact feed
DEFAULT_UPLOAD_TIMEOUT = 120  # seconds
FEED_TOKEN_ENV_VAR = "ICONSHIP_FEED_TOKEN"

# HTTP trigger
DEFAULT_SERVER_HOST = "0.0.0.0"
DEFAULT_SERVER_PORT = 1000
