"""
Publish request validation.

This module validates publish requests coming from the CLI or the HTTP
trigger against the publish_request JSON schema and turns them into
PublishRequest objects.
"""

from typing import Dict, Any

import jsonschema

from iconship.core.error_handler import ValidationError
from iconship.core.logging_config import get_logger
from iconship.pipeline.run_config import PublishRequest
from iconship.schemas import load_schema

# Initialize logger
logger = get_logger(__name__)

# Field names used by the icon service front end
CAMEL_CASE_ALIASES = {
    "projectId": "project_id",
    "projectName": "project_name",
    "perPage": "per_page",
}

class RequestValidator:
    """
    Validates publish requests.
    """

    def __init__(self):
        """
        Initialize the validator with its schema.
        """
        self.publish_request_schema = load_schema("publish_request")
        logger.debug("Loaded publish request schema")

    def validate_publish_request(self, data: Dict[str, Any]) -> PublishRequest:
        """
        Validate a publish request.

        camelCase keys (projectId, projectName, perPage) are accepted and
        mapped to their snake_case names first.

        Args:
            data (Dict[str, Any]): The request body

        Returns:
            PublishRequest: The validated request

        Raises:
            ValidationError: If the request does not conform to the schema
        """
        if not isinstance(data, dict):
            raise ValidationError("Publish request must be a JSON object")

        normalized = {CAMEL_CASE_ALIASES.get(key, key): value for key, value in data.items()}

        try:
            jsonschema.validate(instance=normalized, schema=self.publish_request_schema)
        except jsonschema.exceptions.ValidationError as e:
            field = ".".join(str(part) for part in e.absolute_path) or None
            error_msg = f"Publish request validation failed: {e.message}"
            logger.error(error_msg)
            raise ValidationError(error_msg, field=field, value=e.instance)

        return PublishRequest.from_dict(normalized)
