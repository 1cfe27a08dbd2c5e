"""Serializing and writing the generated document."""

import json
from pathlib import Path

import yaml

from api_doc_extractor.errors import OutputError

YAML_SUFFIXES = (".yaml", ".yml")


def dump_document(document: dict, fmt: str = "json") -> str:
    """Serialize ``document`` as ``json`` or ``yaml``, keeping key order."""
    if fmt == "yaml":
        return yaml.safe_dump(document, sort_keys=False, allow_unicode=True)
    return json.dumps(document, indent=2, ensure_ascii=False) + "\n"


def write_document(document: dict, output: Path) -> Path:
    """Write the document, as YAML when the file name says so, creating parent directories."""
    fmt = "yaml" if output.suffix in YAML_SUFFIXES else "json"
    try:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(dump_document(document, fmt), encoding="utf-8")
    except OSError as e:
        raise OutputError(f"Cannot write {output}: {e}") from e
    return output
