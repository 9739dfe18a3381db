"""Utility functions for loading credential files.

A credential file supplies the database ``url``, ``username`` and
``password`` so they do not have to appear on the command line. JSON files
and ``key=value`` properties files are supported.
"""

import configparser
import json
from pathlib import Path

from .codegen.core.errors import ConfigurationError
from .logging_config import get_logger

logger = get_logger(__name__)

CREDENTIAL_KEYS = ("url", "username", "password")

_PROPERTIES_SECTION = "credentials"


def load_credentials_from_json(file_path: Path) -> dict[str, str]:
    """Load credentials from a JSON object file.

    Raises:
        ConfigurationError: If the file cannot be read or is not a JSON object.
    """
    try:
        with file_path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error("Invalid JSON in credential file %s: %s", file_path, e)
        raise ConfigurationError(f"Invalid JSON in credential file {file_path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Error reading credential file {file_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Credential file must contain a JSON object: {file_path}")

    return {key: str(data[key]) for key in CREDENTIAL_KEYS if data.get(key) is not None}


def load_credentials_from_properties(file_path: Path) -> dict[str, str]:
    """Load credentials from a ``key=value`` properties file.

    Lines starting with ``#`` or ``!`` are comments.

    Raises:
        ConfigurationError: If the file cannot be read or parsed.
    """
    parser = configparser.ConfigParser(
        delimiters=("=", ":"),
        comment_prefixes=("#", "!"),
        interpolation=None,
    )
    # Preserve key case; properties keys are case-sensitive
    parser.optionxform = str

    try:
        text = file_path.read_text(encoding="utf-8")
        parser.read_string(f"[{_PROPERTIES_SECTION}]\n{text}", source=str(file_path))
    except (OSError, configparser.Error) as e:
        raise ConfigurationError(f"Error reading credential file {file_path}: {e}") from e

    section = parser[_PROPERTIES_SECTION]
    return {key: section[key].strip() for key in CREDENTIAL_KEYS if key in section}


def load_credentials(file_path: str | Path) -> dict[str, str]:
    """Load database credentials from a file.

    Args:
        file_path: Path to a ``.json`` or properties credential file.

    Returns:
        Mapping with any of ``url``, ``username`` and ``password``.

    Raises:
        ConfigurationError: If the file does not exist or cannot be parsed.
    """
    file_path = Path(file_path)
    logger.debug("Loading credentials from %s", file_path)

    if not file_path.exists():
        logger.error("Credential file not found: %s", file_path)
        raise ConfigurationError(f"Credential file {file_path} not found.")

    if file_path.suffix.lower() == ".json":
        credentials = load_credentials_from_json(file_path)
    else:
        credentials = load_credentials_from_properties(file_path)

    logger.info("Loaded credentials from %s", file_path)
    return credentials
