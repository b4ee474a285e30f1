"""
Run configuration for community detection.

The configuration file is a flat JSON object. Values may be given as JSON
natives or as strings ("0.85", "true"); any key that is missing or does not
parse falls back to its default so that a partially written file still
yields a usable configuration.
"""

import json
from pathlib import Path
from typing import Any, Dict, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from .exceptions import ConfigurationError, require_open_unit_interval
from .logging_config import get_logger, setup_logging

logger = get_logger(__name__)


class InfoFlowConfig(BaseModel):
    """
    Parsed run configuration.

    Fields are populated from the JSON keys given as aliases (``Pajek``,
    ``Algo``, ``damping``, ``logDir``, ...) or by attribute name.

    Attributes
    ----------
    graph_file : str
        Path of the Pajek network file (read by the graph-source collaborator)
    merge_algorithm : str
        Name of the merge algorithm used by the search loop
    damping : float
        Teleport probability handed to build_network
    log_dir : str
        Directory receiving log output
    log_write_log : bool
        Whether to write a log file into log_dir
    log_graph_text : bool
        Whether the search loop dumps intermediate graphs as text
    log_graph_json : int
        Number of intermediate graphs the search loop dumps as JSON
    log_steps : bool
        Whether pipeline steps are logged in detail (DEBUG level)
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    graph_file: str = Field(default="pajek.net", alias="Pajek")
    merge_algorithm: str = Field(default="InfoFlow", alias="Algo")
    damping: float = Field(default=0.85, alias="damping")
    log_dir: str = Field(default=".", alias="logDir")
    log_write_log: bool = Field(default=False, alias="logWriteLog")
    log_graph_text: bool = Field(default=False, alias="logRddText")
    log_graph_json: int = Field(default=0, alias="logRddJSon")
    log_steps: bool = Field(default=False, alias="logSteps")

    @field_validator("*", mode="wrap")
    @classmethod
    def fall_back_to_default(cls, value: Any, handler, info: ValidationInfo) -> Any:
        """Replace a value that does not parse with the field's default."""
        try:
            return handler(value)
        except PydanticValidationError:
            field = cls.model_fields[info.field_name]
            logger.warning(
                "Could not parse configuration key %s=%r; using default %r",
                field.alias or info.field_name, value, field.default
            )
            return field.default

    @model_validator(mode="after")
    def validate_damping(self) -> "InfoFlowConfig":
        require_open_unit_interval(self.damping, "damping")
        return self


def parse_config(raw: Dict[str, Any]) -> InfoFlowConfig:
    """
    Build a configuration from an already decoded JSON object.

    Parameters
    ----------
    raw : Dict[str, Any]
        Mapping of configuration keys to values

    Returns
    -------
    InfoFlowConfig
        Configuration with defaults substituted for missing or bad values

    Raises
    ------
    ConfigurationError
        If raw is not a mapping, or the damping value lies outside (0, 1)
    """
    if not isinstance(raw, dict):
        raise ConfigurationError(
            f"Configuration must be a JSON object, got {type(raw).__name__}",
            function="parse_config"
        )

    known = {field.alias or name for name, field in InfoFlowConfig.model_fields.items()}
    unknown = sorted(set(raw) - known)
    if unknown:
        logger.debug("Ignoring unknown configuration keys: %s", unknown)

    try:
        return InfoFlowConfig.model_validate(raw)
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration: {e}",
            function="parse_config",
            cause=e
        )


def load_config(path: Union[str, Path]) -> InfoFlowConfig:
    """
    Read a JSON configuration file.

    Raises
    ------
    ConfigurationError
        If the file cannot be read or does not contain a JSON object
    """
    config_path = Path(path)
    try:
        with open(config_path, "r", encoding="utf-8") as fh:
            raw = json.load(fh)
    except OSError as e:
        raise ConfigurationError(
            f"Cannot read configuration file: {config_path}",
            function="load_config",
            cause=e
        )
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            f"Configuration file is not valid JSON: {config_path}",
            function="load_config",
            details={"line": e.lineno, "column": e.colno},
            cause=e
        )

    config = parse_config(raw)
    logger.info("Loaded configuration from %s: damping=%s, algorithm=%s",
                config_path, config.damping, config.merge_algorithm)
    return config


def configure_logging(config: InfoFlowConfig, force_setup: bool = False):
    """
    Apply the logging toggles of a configuration.

    ``log_steps`` switches the library to DEBUG level and ``log_write_log``
    adds a rotating log file in ``log_dir``.
    """
    return setup_logging(
        level="DEBUG" if config.log_steps else "INFO",
        log_dir=config.log_dir if config.log_write_log else None,
        force_setup=force_setup
    )
