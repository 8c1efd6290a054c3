"""YAML loading that keeps mapping keys as written.

Version keys such as `1.10` or `2.0` must stay strings; plain
`yaml.safe_load` would read them as floats and lose trailing zeros.
"""

from typing import Any

import yaml


class _KeyPreservingLoader(yaml.SafeLoader):
    pass


def _construct_mapping(loader: yaml.SafeLoader, node: yaml.MappingNode) -> dict[Any, Any]:
    loader.flatten_mapping(node)
    mapping: dict[Any, Any] = {}
    for key_node, value_node in node.value:
        if isinstance(key_node, yaml.ScalarNode):
            key = key_node.value
        else:
            key = loader.construct_object(key_node, deep=True)
        mapping[key] = loader.construct_object(value_node, deep=True)
    return mapping


_KeyPreservingLoader.add_constructor(
    yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG, _construct_mapping
)


def load_yaml(text: str) -> Any:
    """Parse YAML text with string mapping keys.

    Raises:
        yaml.YAMLError: If the text is not valid YAML
    """
    return yaml.load(text, Loader=_KeyPreservingLoader)  # noqa: S506 - SafeLoader subclass


def scalar_text(value: Any) -> str:
    """Render a scalar read from YAML back to text ("" for null)."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
