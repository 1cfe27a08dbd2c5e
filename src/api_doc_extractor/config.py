"""Extractor configuration, loadable from a YAML file."""

from pathlib import Path

import yaml
from pydantic import BaseModel, ValidationError

from api_doc_extractor.errors import ExtractorError


class Contact(BaseModel):
    name: str | None = None
    url: str | None = None
    email: str | None = None


class License(BaseModel):
    name: str
    identifier: str | None = None
    url: str | None = None


class SpecInfo(BaseModel):
    """The ``info`` object of the generated document."""

    title: str = "Open API Document"
    version: str = "1.0.0"
    summary: str | None = None
    description: str | None = None
    terms_of_service: str | None = None
    contact: Contact | None = None
    license: License | None = None

    def to_openapi(self) -> dict:
        info: dict = {"title": self.title, "version": self.version}
        if self.summary:
            info["summary"] = self.summary
        if self.description:
            info["description"] = self.description
        if self.terms_of_service:
            info["termsOfService"] = self.terms_of_service
        if self.contact:
            info["contact"] = self.contact.model_dump(exclude_none=True)
        if self.license:
            info["license"] = self.license.model_dump(exclude_none=True)
        return info


class ExtractorConfig(BaseModel):
    output_file: Path = Path("build/openapi.json")
    info: SpecInfo = SpecInfo()
    default_content_type: str | None = None  # unset: inferred, else application/json
    openapi_version: str = "3.1.1"
    code_inference: bool = True
    only_commented: bool = False
    routes: list[str] = []


def load_config(file_path: Path) -> ExtractorConfig:
    """Load configuration from YAML; an empty file gives the defaults."""
    try:
        data = yaml.safe_load(file_path.read_text(encoding="utf-8")) or {}
        return ExtractorConfig.model_validate(data)
    except (OSError, yaml.YAMLError, ValidationError) as e:
        raise ExtractorError(f"Invalid configuration {file_path}: {e}") from e
