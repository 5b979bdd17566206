from typing import Any, Dict, List, Mapping, Optional, Tuple

from csv_i18n.diagnostics import Diagnostic, warning

KEY_SEPARATOR = '.'


def build_key_tree(flat_translations: Mapping[str, str]) -> Tuple[Dict[str, Any], List[Diagnostic]]:
    """
    Convert a flat mapping of dotted keys into a nested dictionary.

    Keys are inserted in the order given. When keys collide because one is a
    prefix of another:
    - a leaf landing on an existing branch replaces the whole branch;
    - a key whose path runs into an existing leaf is dropped, and the leaf stays.
    Each collision produces a warning.

    Args:
        flat_translations: e.g. {"common.greeting": "Hello"}.

    Returns:
        Tuple[Dict[str, Any], List[Diagnostic]]: The tree, e.g.
            {"common": {"greeting": "Hello"}}, and the collision warnings.
    """
    tree: Dict[str, Any] = {}
    diagnostics: List[Diagnostic] = []

    for key, value in flat_translations.items():
        parts = key.split(KEY_SEPARATOR)
        current = tree
        for part in parts[:-1]:
            node = current.get(part)
            if node is None:
                node = current[part] = {}
            elif not isinstance(node, dict):
                diagnostics.append(warning(
                    f"Warning: Key part \"{part}\" in \"{key}\" conflicts with an existing value. "
                    f"Skipping creation of deeper path."
                ))
                current = None
                break
            current = node
        if current is None:
            continue

        leaf = parts[-1]
        if isinstance(current.get(leaf), dict):
            diagnostics.append(warning(
                f"Warning: Key part \"{leaf}\" in \"{key}\" conflicts with an existing node. "
                f"Overwriting node with value \"{value}\"."
            ))
        current[leaf] = value

    return tree, diagnostics


def flatten_key_tree(tree: Mapping[str, Any], prefix: Optional[str] = None) -> Dict[str, str]:
    """Join the path to every leaf of a key tree back into a dotted key."""
    flat: Dict[str, str] = {}
    for part, node in tree.items():
        key = part if prefix is None else f"{prefix}{KEY_SEPARATOR}{part}"
        if isinstance(node, Mapping):
            flat.update(flatten_key_tree(node, key))
        else:
            flat[key] = node
    return flat
