"""
Pipeline orchestration.
"""

from iconship.pipeline.pipeline_runner import PipelineRunner
from iconship.pipeline.run_config import PublishRequest, RunConfig
from iconship.pipeline.request_validator import RequestValidator
