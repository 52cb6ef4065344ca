"""Loading and saving of the Icinga2 endpoint record."""

import json
import logging
import os
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from .client import PreconditionError
from .models import EndpointContext

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "ICINGA2_DOWNTIME_CONFIG"
DEFAULT_CONFIG_PATH = Path("~/.config/icinga2-downtime/endpoint.json")


def config_path() -> Path:
    """Return the location of the endpoint record."""
    return Path(os.getenv(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH).expanduser()


def save_endpoint(endpoint: EndpointContext, path: Optional[Union[str, Path]] = None) -> Path:
    """
    Persist the endpoint record as JSON, readable only by the owner.

    Returns:
        Path the record was written to
    """
    path = Path(path).expanduser() if path else config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    record = {
        "host": endpoint.host,
        "port": endpoint.port,
        "username": endpoint.username,
        "password": endpoint.password.get_secret_value(),
        "verify_ssl": endpoint.verify_ssl,
        "timeout": endpoint.timeout,
    }

    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    # the mode above only applies to newly created files
    os.chmod(path, 0o600)
    with os.fdopen(fd, "w", encoding="utf-8") as f:
        json.dump(record, f, indent=2)

    logger.info(f"Saved Icinga2 endpoint {endpoint.host}:{endpoint.port} to {path}")
    return path


def _from_environment() -> Optional[EndpointContext]:
    """
    Build the record from environment variables, if they are set.

    Environment variables:
    - Required:
      - ICINGA2_API_HOST: API host
      - ICINGA2_API_USER: API username
      - ICINGA2_API_PASSWORD: API password
    - Optional:
      - ICINGA2_API_PORT: API port (default: 5665)
      - ICINGA2_VERIFY_SSL: Verify SSL certificates (default: false)
    """
    host = os.getenv("ICINGA2_API_HOST")
    user = os.getenv("ICINGA2_API_USER")
    password = os.getenv("ICINGA2_API_PASSWORD")

    if not all([host, user, password]):
        return None

    verify_ssl_str = os.getenv("ICINGA2_VERIFY_SSL", "false").lower()

    return EndpointContext(
        host=host,
        port=int(os.getenv("ICINGA2_API_PORT", "5665")),
        username=user,
        password=password,
        verify_ssl=verify_ssl_str in ("true", "1", "yes", "on"),
    )


def load_endpoint(path: Optional[Union[str, Path]] = None) -> EndpointContext:
    """
    Load the endpoint record.

    The environment takes precedence over the stored file when no explicit
    path is given.

    Raises:
        PreconditionError: If no complete record is available
    """
    if path is None:
        endpoint = _from_environment()
        if endpoint:
            return endpoint

    path = Path(path).expanduser() if path else config_path()

    if not path.exists():
        raise PreconditionError(
            f"No Icinga2 endpoint configured: {path} does not exist. "
            "Save one first or set ICINGA2_API_HOST, ICINGA2_API_USER and ICINGA2_API_PASSWORD."
        )

    try:
        with open(path, "r", encoding="utf-8") as f:
            record = json.load(f)
        return EndpointContext(**record)
    except (ValueError, TypeError, ValidationError) as e:
        raise PreconditionError(f"Invalid Icinga2 endpoint record in {path}: {e}") from e
