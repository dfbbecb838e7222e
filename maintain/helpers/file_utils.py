"""File handling utilities."""

import json
import logging
from pathlib import Path

from ruamel.yaml import YAML

from maintain import exceptions

logger = logging.getLogger(__name__)
yaml = YAML()
yaml.default_flow_style = False
yaml.sort_keys = False


def load_file(file, warn=True):
    """Verify the existence of and load data from json and yaml files."""
    file = Path(file)
    if not file.exists() or file.suffix not in (".json", ".yaml", ".yml"):
        if warn:
            logger.warning(f"File {file.absolute()} is invalid or does not exist.")
        return {}
    if file.suffix == ".json":
        return json.loads(file.read_text())
    return yaml.load(file) or {}


def load_args_file(file):
    """Load a json or yaml file of scenario parameters into a plain dictionary."""
    data = load_file(file)
    if not isinstance(data, dict):
        raise exceptions.ParameterError(f"Arguments file {file} must contain a mapping")
    # ruamel returns CommentedMap/CommentedSeq, flatten those to builtins
    return json.loads(json.dumps(data))

