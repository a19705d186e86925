"""Single HTTP GET returning decoded JSON, with typed failures."""
import logging
from typing import Any, Dict, Optional

import requests

from errors import FetchError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


def fetch_json(
    url: str,
    params: Optional[Dict[str, Any]] = None,
    error_message: str = "Failed to fetch data",
    timeout: float = DEFAULT_TIMEOUT,
) -> Any:
    """
    GET ``url`` and decode the JSON body.

    Raises:
        FetchError: On transport failure, a non-2xx status or a body that is not JSON.
            ``status_code`` is set only when the server answered.
    """
    try:
        logger.debug(f"GET {url} params={params}")
        response = requests.get(url, params=params, timeout=timeout)
    except requests.exceptions.RequestException as e:
        logger.error(f"{error_message}: network error: {e}")
        raise FetchError(f"{error_message}: network error: {e}", url=url) from e

    if not response.ok:
        details = f"HTTP {response.status_code}: {response.reason}"
        logger.error(f"{error_message} - {details}")
        raise FetchError(
            f"{error_message}: {details}", status_code=response.status_code, url=url, body=response.text
        )

    try:
        return response.json()
    except ValueError as e:
        logger.error(f"{error_message}: response is not valid JSON")
        raise FetchError(
            f"{error_message}: invalid JSON body", status_code=response.status_code, url=url
        ) from e
