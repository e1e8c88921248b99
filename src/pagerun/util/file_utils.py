import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml


def ensure_dir(file_path):
    """
    Check if a directory of the given file path exists, if not, create it.

    Args:
    file_path (str): The path of the file.

    Returns:
    dir_path (str): The directory path.
    """
    dir_path = os.path.dirname(str(file_path))
    if dir_path and not os.path.exists(dir_path):
        os.makedirs(dir_path, exist_ok=True)
    return dir_path


def from_json_or_yaml(file_path: Optional[Union[str, Path]]) -> Dict[str, Any]:
    """
    Load a dictionary from a JSON or YAML file, picked by file suffix.

    Args:
        file_path: Path to a .json, .yaml or .yml file.

    Returns:
        The parsed mapping ({} for an empty file).

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the suffix is unsupported or the top level is not a mapping.
    """
    if file_path is None:
        raise FileNotFoundError("No config file path given")
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    text = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text) if text.strip() else {}
    else:
        raise ValueError(f"Unsupported config file type: {path.suffix}")

    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping at top level: {path}")
    return data
