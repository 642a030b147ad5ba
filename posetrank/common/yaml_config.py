from pathlib import Path

import yaml
from pydantic import ValidationError

from posetrank.common.config import ConfigError, Settings
from posetrank.ranking.errors import MalformedRelationError
from posetrank.ranking.partial_order import PartialOrder


def load_settings(path: str | Path = "posetrank.yaml") -> Settings:
    """Load settings from a YAML file layered over environment defaults.

    Args:
        path: Path to the settings YAML file

    Returns:
        Settings built from the file, or defaults if the file doesn't exist

    Raises:
        ConfigError: If the file is not a mapping or fails validation
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        return Settings()

    if data is None:
        return Settings()
    if not isinstance(data, dict):
        raise ConfigError(f"{str(path)!r} must contain a mapping at the top level")

    try:
        return Settings(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings in {str(path)!r}: {e}") from e


def load_relation(path: str | Path, check_transitivity: bool = True) -> PartialOrder:
    """Load a partial order from a YAML (or JSON) relation file.

    Two layouts are accepted:

    1. ``matrix``: an n x n list of 0/1 or booleans, ``matrix[i][j]`` true
       when element i is dominated by element j
    2. ``relations``: a list of ``[lower, upper]`` label pairs, closed
       transitively and reflexively on load

    ``labels`` is optional with a matrix and required with relations.

    Args:
        path: Path to the relation file
        check_transitivity: Report missing implied pairs of a matrix

    Returns:
        PartialOrder built from the file

    Raises:
        FileNotFoundError: If the file doesn't exist
        MalformedRelationError: If the content does not describe a partial order
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except FileNotFoundError as e:
        raise FileNotFoundError(f"{str(path)!r} not found. Provide a relation file.") from e

    if not isinstance(data, dict):
        raise MalformedRelationError(f"{str(path)!r} must contain a mapping at the top level")

    labels = data.get("labels")
    if labels is not None:
        labels = [str(label) for label in labels]

    if "matrix" in data:
        matrix = data["matrix"]
        if not isinstance(matrix, list) or not all(isinstance(row, list) for row in matrix):
            raise MalformedRelationError("'matrix' must be a list of rows")
        return PartialOrder(matrix, labels=labels, check_transitivity=check_transitivity)

    if "relations" in data:
        if labels is None:
            raise MalformedRelationError("'labels' are required with 'relations'")
        index = {label: i for i, label in enumerate(labels)}
        pairs = []
        for pair in data["relations"] or []:
            if not isinstance(pair, list) or len(pair) != 2:
                raise MalformedRelationError(f"relation {pair!r} must be a [lower, upper] pair")
            lower, upper = (str(p) for p in pair)
            if lower not in index or upper not in index:
                raise MalformedRelationError(f"relation {pair!r} references an unknown label")
            pairs.append((index[lower], index[upper]))
        return PartialOrder.from_pairs(len(labels), pairs, labels=labels)

    raise MalformedRelationError(f"{str(path)!r} needs either 'matrix' or 'relations'")
