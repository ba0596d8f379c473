"""Various utils"""
import json


def load_json(fn):
    """
    Load a json file and return the content as a dictionary.
    """
    with open(fn, "r") as f:
        data = json.load(f)
    return data


def save_json(fn, data, indent=None):
    """
    Save a dictionary to a json file.
    """
    with open(fn, "w") as f:
        json.dump(data, f, indent=indent)


def load_fixed_transitions(fn):
    """
    Load pinned transition systems from a json file.

    The file maps vertex indices (as strings) to lists of rotation position
    pairs, e.g. ``{"0": [[0, 3], [1, 2]]}``.

    Returns
    -------
    dict
        Vertex index to list of ``(position, position)`` tuples.
    """
    data = load_json(fn)
    if not isinstance(data, dict):
        raise ValueError(f"{fn} must contain a json object")
    return {int(v): [tuple(pair) for pair in pairs] for v, pairs in data.items()}
