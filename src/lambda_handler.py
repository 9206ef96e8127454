"""AWS Lambda handler for API Gateway requests.

Wraps the FastAPI application with the Mangum ASGI adapter. The application
is built once per Lambda container and reused across invocations. The
lifespan is off; the upload directory is created when the app is built, so
UPLOAD_DIR must be writable there (under /tmp on Lambda).
"""

import json
import logging
import os
from typing import Any

from mangum import Mangum

from main import app

logger = logging.getLogger(__name__)

# Reuse the app built by main during cold start (skip in test mode)
if os.getenv("ENVIRONMENT") != "test":
    mangum_handler = Mangum(app, lifespan="off")
else:
    mangum_handler = None  # type: ignore


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Handle an API Gateway request.

    Args:
        event: The API Gateway event payload
        context: The Lambda context object

    Returns:
        Response dict with statusCode and body
    """
    logger.info(f"Received Lambda invocation, request_id: {context.aws_request_id}")

    try:
        result: dict[str, Any] = mangum_handler(event, context)
        return result

    except Exception as e:
        logger.exception(f"Unhandled error in Lambda handler: {e}")
        return {
            "statusCode": 500,
            "headers": {"content-type": "application/json"},
            "body": json.dumps({"message": f"Internal server error: {e}"}),
        }
