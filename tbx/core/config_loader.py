# tbx/core/config_loader.py

"""
Loads the classification config (thresholds, weights, keywords, ontology)
from YAML.

Never fails: a missing, unparsable or invalid file resolves to the built-in
defaults.
"""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from tbx.models import ClassificationConfig

logger = logging.getLogger(__name__)


def load_classification_config(path: str | Path | None) -> ClassificationConfig:
    """Load a ClassificationConfig from a YAML file, falling back to defaults."""
    if path is None:
        return ClassificationConfig()

    path = Path(path)
    if not path.is_file():
        logger.info("No classification config at %s, using defaults", path)
        return ClassificationConfig()

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        logger.warning("Could not read classification config %s: %s", path, e)
        return ClassificationConfig()

    if data is None:
        return ClassificationConfig()

    if not isinstance(data, dict):
        logger.warning("Classification config %s is not a mapping, using defaults", path)
        return ClassificationConfig()

    try:
        config = ClassificationConfig.model_validate(data)
    except ValidationError as e:
        logger.warning("Invalid classification config %s: %s", path, e)
        return ClassificationConfig()

    logger.info(
        "Loaded classification config from %s (%d keyword rules, %d ontology prefixes)",
        path, len(config.keywords), len(config.ontology),
    )
    return config
