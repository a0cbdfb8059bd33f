import logging
from pathlib import Path
from typing import Type, TypeVar

import yaml
from pydantic import BaseModel

from orgpilot.config.schema import OrgPilotConfig
from orgpilot.utils import expand_env_vars

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


def _warn_unknown_keys(model: BaseModel, path: str, config_path: Path) -> None:
    """Recursively warn about unknown keys in a model and its nested models."""
    if model.model_extra:
        logger.warning("Unknown keys in %s at %s: %s", path, config_path, list(model.model_extra.keys()))

    for field_name, field_value in model.__dict__.items():
        if isinstance(field_value, BaseModel):
            _warn_unknown_keys(field_value, f"{path}.{field_name}", config_path)


def load_model(path: Path, model_class: Type[T]) -> T:
    """Load and validate a YAML file into a pydantic model.

    A missing or unreadable file yields the model defaults. Validation errors
    propagate: a config that parses but is wrong should fail loudly.
    """
    if not path.exists():
        return model_class()

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Failed to read config file %s: %s", path, e)
        return model_class()

    expanded = expand_env_vars(raw)
    model = model_class.model_validate(expanded)
    _warn_unknown_keys(model, "root", path)
    return model


def load_config(path: Path) -> OrgPilotConfig:
    """Load the OrgPilot configuration file."""
    return load_model(path.expanduser(), OrgPilotConfig)
