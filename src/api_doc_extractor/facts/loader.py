"""Loading fact sheets.

A fact sheet is YAML or JSON. Source files it lists are read relative to
the sheet unless their text is inlined.
"""

import json
import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from api_doc_extractor.errors import FactsError

from .base import FactSheet, SourceFile

logger = logging.getLogger(__name__)


def _load_document(file_path: Path) -> dict:
    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise FactsError(f"Cannot read fact sheet {file_path}: {e}") from e

    try:
        if file_path.suffix == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise FactsError(f"Fact sheet {file_path} is not valid YAML or JSON: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise FactsError(f"Fact sheet {file_path} must be a mapping")
    return data


def _read_source(base: Path, source: SourceFile) -> SourceFile:
    if source.text is not None:
        return source
    try:
        text = (base / source.path).read_text(encoding="utf-8")
    except OSError as e:
        logger.warning("Source %s unreadable, its comments are skipped: %s", source.path, e)
        return source
    return source.model_copy(update={"text": text})


def load_facts(file_path: Path) -> FactSheet:
    """Load and validate a fact sheet, reading the source files it lists.

    Calls are sorted into source order per file.
    """
    data = _load_document(file_path)
    try:
        sheet = FactSheet.model_validate(data)
    except ValidationError as e:
        raise FactsError(f"Invalid fact sheet {file_path}: {e}") from e

    base = file_path.parent
    files = {source.path: source for source in sheet.files}
    for call in sheet.calls:
        for path in (call.file, call.declaration.file if call.declaration else None):
            if path is not None and path not in files:
                files[path] = SourceFile(path=path)
    files = {path: _read_source(base, source) for path, source in files.items()}

    order = {path: index for index, path in enumerate(files)}
    calls = sorted(sheet.calls, key=lambda call: (order[call.file], call.start, -call.end))
    logger.info("Loaded %d calls from %d files", len(calls), len(files))
    return sheet.model_copy(update={"files": list(files.values()), "calls": calls})
