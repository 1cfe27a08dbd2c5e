from pathlib import Path

import pytest

from api_doc_extractor.config import ExtractorConfig, SpecInfo, load_config
from api_doc_extractor.errors import ExtractorError


class TestLoadConfig:
    def test_defaults(self):
        config = ExtractorConfig()
        assert config.output_file == Path("build/openapi.json")
        assert config.info.title == "Open API Document"
        assert config.openapi_version == "3.1.1"
        assert config.code_inference is True
        assert config.only_commented is False
        assert config.default_content_type is None

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "extractor.yaml"
        path.write_text(
            "output_file: out/api.yaml\n"
            "info:\n"
            "  title: Acme API\n"
            "  version: 2.1.0\n"
            "  contact: {name: Team, email: api@acme.com}\n"
            "  license: {name: MIT}\n"
            "code_inference: false\n"
            "routes: ['GET /users*']\n"
        )
        config = load_config(path)
        assert config.output_file == Path("out/api.yaml")
        assert config.info.title == "Acme API"
        assert config.code_inference is False
        assert config.routes == ["GET /users*"]

    def test_empty_file(self, tmp_path):
        path = tmp_path / "extractor.yaml"
        path.write_text("")
        assert load_config(path) == ExtractorConfig()

    def test_invalid_value(self, tmp_path):
        path = tmp_path / "extractor.yaml"
        path.write_text("code_inference: sometimes\n")
        with pytest.raises(ExtractorError, match="Invalid configuration"):
            load_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ExtractorError):
            load_config(tmp_path / "nope.yaml")


class TestSpecInfo:
    def test_minimal(self):
        assert SpecInfo().to_openapi() == {"title": "Open API Document", "version": "1.0.0"}

    def test_full(self):
        info = SpecInfo.model_validate(
            {
                "title": "Acme",
                "version": "1",
                "summary": "S",
                "description": "D",
                "terms_of_service": "https://acme.com/tos",
                "contact": {"name": "Team"},
                "license": {"name": "MIT", "identifier": "MIT"},
            }
        )
        assert info.to_openapi() == {
            "title": "Acme",
            "version": "1",
            "summary": "S",
            "description": "D",
            "termsOfService": "https://acme.com/tos",
            "contact": {"name": "Team"},
            "license": {"name": "MIT", "identifier": "MIT"},
        }
