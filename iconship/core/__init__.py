"""
Core utilities and configuration for the iconship package.
"""

from iconship.core.config import get_config, get_config_value
from iconship.core.credentials import get_feed_token
from iconship.core.logging_config import get_logger, configure_logging
from iconship.core.error_handler import (
    APIError,
    ValidationError,
    ConfigurationError,
    PipelineError,
    FetchError,
    GenerationError,
    AssemblyError,
    PublishError,
    CleanupError,
)
from iconship.core.models import (
    RawAsset,
    ComponentArtifactSet,
    PackageManifest,
    PackageLayout,
    ErrorInfo,
    PublishResult,
    RunResult,
)
