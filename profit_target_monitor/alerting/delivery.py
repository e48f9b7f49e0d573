"""JSON POST with retry and backoff, shared by the alert channels."""

import logging
import time
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
RETRY_BACKOFF_SECONDS = [1, 2]


def post_json(
    channel: str,
    url: str,
    payload: Dict[str, Any],
    timeout: float,
    transport: Optional[httpx.BaseTransport] = None,
    follow_redirects: bool = False,
) -> bool:
    """POST ``payload`` to ``url``, retrying transport errors and non-2xx answers.

    Returns:
        True once the endpoint answers with a 2xx status, False after
        MAX_RETRIES failed attempts. Never raises for delivery errors.
    """
    last_error = None

    for attempt in range(MAX_RETRIES):
        try:
            with httpx.Client(
                transport=transport,
                timeout=timeout,
                follow_redirects=follow_redirects,
            ) as client:
                response = client.post(url, json=payload)

            if response.is_success:
                logger.debug(f"{channel} accepted request")
                return True

            last_error = f"{channel} error: {response.status_code} - {response.text[:200]}"
            logger.error(last_error)

        except httpx.HTTPError as e:
            last_error = str(e)
            logger.error(f"Failed to send to {channel} (attempt {attempt + 1}/{MAX_RETRIES}): {e}")

        if attempt < MAX_RETRIES - 1:
            delay = RETRY_BACKOFF_SECONDS[attempt]
            logger.info(f"Retrying {channel} send in {delay}s...")
            time.sleep(delay)

    logger.error(f"All {MAX_RETRIES} {channel} send attempts failed. Last error: {last_error}")
    return False
