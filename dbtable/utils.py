##############################################################################
# Copyright (c) dbtable Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details.
##############################################################################

"""
Small helpers shared across dbtable.
"""

import os
from types import SimpleNamespace
from typing import Any, Dict

import yaml


def load_yaml(filepath: str) -> Dict:
    """
    Safely read a YAML file and return its contents.

    Args:
        filepath: The file path to the YAML file to be read.

    Returns:
        A dict representing the contents of the YAML file. An empty file
        gives an empty dict.
    """
    with open(os.path.expanduser(filepath), "r") as _file:
        return yaml.safe_load(_file) or {}


def merge_dicts(base: Dict, override: Dict) -> Dict:
    """
    Recursively merge `override` on top of `base` without touching either.

    Args:
        base: The dictionary holding default values.
        override: The dictionary whose values win.

    Returns:
        A new merged dictionary.
    """
    merged = dict(base)
    for key, val in (override or {}).items():
        if isinstance(val, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_dicts(merged[key], val)
        else:
            merged[key] = val
    return merged


def nested_dict_to_namespaces(dic: Dict) -> SimpleNamespace:
    """
    Convert a nested dictionary into a nested SimpleNamespace structure.

    Args:
        dic: The nested dictionary to be converted.

    Returns:
        A SimpleNamespace object representing the nested structure of the input dictionary.

    Raises:
        TypeError: If the input is not a dictionary.
    """
    if not isinstance(dic, dict):
        raise TypeError(f"Expected a dict, got {type(dic).__name__}")

    def recurse(val: Any) -> Any:
        if not isinstance(val, dict):
            return val
        return SimpleNamespace(**{key: recurse(sub) for key, sub in val.items()})

    return recurse(dic)
