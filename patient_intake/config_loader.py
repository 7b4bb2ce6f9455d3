"""Configuration loading utilities for the patient intake pipeline.

Provides a centralized way to load and validate the parameters.yaml
configuration file, and to derive the immutable runtime settings threaded
into record construction.
"""

from pathlib import Path
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from babel import Locale, UnknownLocaleError

from .data_models import RuntimeSettings

SCRIPT_DIR = Path(__file__).resolve().parent
DEFAULT_CONFIG_PATH = SCRIPT_DIR.parent / "config" / "parameters.yaml"

DEFAULT_TIMEZONE = "America/Detroit"
DEFAULT_LOCALE = "en"
DEFAULT_TIMEOUT_SECONDS = 30


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """Load and parse the parameters.yaml configuration file.

    Automatically validates the configuration after loading. Raises
    clear exceptions if validation fails, enabling fail-fast behavior
    for infrastructure errors.

    Parameters
    ----------
    config_path : Path, optional
        Path to the configuration file. If not provided, uses the default
        location (config/parameters.yaml in the project root).

    Returns
    -------
    Dict[str, Any]
        Parsed and validated YAML configuration as a nested dictionary.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist.
    yaml.YAMLError
        If the configuration file is invalid YAML.
    ValueError
        If the configuration fails validation (see validate_config).
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    validate_config(config)
    return config


def validate_timezone(name: Any) -> str:
    """Check that ``name`` is a known IANA timezone and return it."""
    if not isinstance(name, str) or not name.strip():
        raise ValueError(
            f"runtime.timezone must be a non-empty string, got {name!r}"
        )
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Unknown runtime.timezone: {name}") from exc
    return name


def validate_config(config: Dict[str, Any]) -> None:
    """Validate the entire configuration for consistency and required values.

    Parameters
    ----------
    config : Dict[str, Any]
        Configuration dictionary (result of load_config).

    Raises
    ------
    ValueError
        If required configuration is missing or invalid.

    Notes
    -----
    **Validation checks:**

    - **Runtime:** timezone must be a known IANA name; locale must be known to Babel
    - **Source:** url, if set, must be an http(s) string; timeout_seconds must be positive
    - **Output:** indent must be null or a non-negative integer

    Config is validated once at load time; the timezone is never changed
    after records start processing.
    """
    runtime_config = config.get("runtime") or {}
    validate_timezone(runtime_config.get("timezone", DEFAULT_TIMEZONE))

    locale = runtime_config.get("locale", DEFAULT_LOCALE)
    try:
        Locale.parse(locale)
    except (UnknownLocaleError, ValueError, TypeError) as exc:
        raise ValueError(f"Unknown runtime.locale: {locale!r}") from exc

    source_config = config.get("source") or {}
    url = source_config.get("url")
    if url is not None:
        if not isinstance(url, str) or not url.lower().startswith(
            ("http://", "https://")
        ):
            raise ValueError(f"source.url must be an http(s) URL, got {url!r}")

    timeout = source_config.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
        raise ValueError(
            f"source.timeout_seconds must be a number, got {type(timeout).__name__}"
        )
    if timeout <= 0:
        raise ValueError(f"source.timeout_seconds must be positive, got {timeout}")

    output_config = config.get("output") or {}
    indent = output_config.get("indent")
    if indent is not None:
        if isinstance(indent, bool) or not isinstance(indent, int):
            raise ValueError(
                f"output.indent must be an integer, got {type(indent).__name__}"
            )
        if indent < 0:
            raise ValueError(f"output.indent must be non-negative, got {indent}")


def settings_from_config(
    config: Dict[str, Any], timezone_override: Optional[str] = None
) -> RuntimeSettings:
    """Read the process-wide runtime settings once from configuration."""
    runtime_config = config.get("runtime") or {}
    timezone = timezone_override or runtime_config.get("timezone", DEFAULT_TIMEZONE)
    return RuntimeSettings(
        timezone=validate_timezone(timezone),
        locale=runtime_config.get("locale", DEFAULT_LOCALE),
    )
