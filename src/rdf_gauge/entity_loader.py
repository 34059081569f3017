"""
Entity Loader

Loads the fixed list of entities (qnames) evaluated in every run.

Supported JSON formats:
- {"entities": ["d3f:AccountLocking", ...], "description": "..."}
- ["d3f:AccountLocking", ...]
"""

import json
from dataclasses import dataclass, field


@dataclass
class EntityList:
    """Entity list definition"""
    entities: list[str]
    description: str = ""
    metadata: dict = field(default_factory=dict)

    def __post_init__(self):
        """Post-initialization validation"""
        seen = set()
        for qname in self.entities:
            read_qname(qname)
            if qname in seen:
                raise ValueError(f"Duplicate entity: {qname}")
            seen.add(qname)


def read_qname(qname: str) -> tuple[str, str]:
    """
    Split a qname into (prefix, local name)

    Raises:
        ValueError: If the qname has no prefix separator
    """
    prefix, sep, local = qname.partition(":")
    if not sep or not prefix or not local:
        raise ValueError(f"Invalid qname: {qname!r}")
    return prefix, local


def expand_qname(qname: str, namespaces: dict[str, str]) -> str:
    """
    Resolve a qname to a full IRI

    Raises:
        KeyError: If the prefix is not declared
    """
    prefix, local = read_qname(qname)
    if prefix not in namespaces:
        raise KeyError(f"Undeclared prefix '{prefix}' in {qname}")
    return namespaces[prefix] + local


def load_entities(file_path: str) -> EntityList:
    """
    Load an entity list JSON

    Args:
        file_path: Path to the entity list JSON file

    Returns:
        EntityList: Entity list in file order

    Raises:
        FileNotFoundError: If the file does not exist
        KeyError: If the required field is missing
    """
    with open(file_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, list):
        return EntityList(entities=[str(e) for e in data])

    if "entities" not in data:
        raise KeyError(f"Required field 'entities' is missing: {file_path}")

    return EntityList(
        entities=[str(e) for e in data["entities"]],
        description=data.get("description", ""),
        metadata={k: v for k, v in data.items() if k not in ("entities", "description")},
    )
