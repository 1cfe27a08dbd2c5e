"""The extraction pipeline: facts in, resolved routes and document out."""

import logging
from dataclasses import dataclass, field

from api_doc_extractor.config import ExtractorConfig
from api_doc_extractor.facts.base import FactSheet, SecuritySchemeDecl, TypeDecl
from api_doc_extractor.generator.schemas import SchemaAssembler
from api_doc_extractor.generator.spec import DEFAULT_CONTENT_TYPE, build_specification
from api_doc_extractor.routing.collector import ResolvedRoute, collect_routes
from api_doc_extractor.routing.graph import CallGraph
from api_doc_extractor.routing.interpreters import CallInterpreter

logger = logging.getLogger(__name__)


@dataclass
class Extraction:
    routes: list[ResolvedRoute]
    security_schemes: dict[str, SecuritySchemeDecl] = field(default_factory=dict)
    content_type: str | None = None
    types: list[TypeDecl] = field(default_factory=list)


class Extractor:
    def __init__(self, config: ExtractorConfig | None = None):
        self.config = config or ExtractorConfig()

    def build_graph(self, facts: FactSheet) -> tuple[CallGraph, CallInterpreter]:
        """Interpret every call of every file, then connect helper declarations."""
        interpreter = CallInterpreter({source.path: source for source in facts.files})
        graph = CallGraph()
        for call in facts.calls:
            try:
                node = interpreter.interpret(call)
            except (ValueError, LookupError) as e:
                logger.warning("Call %s at %s:%d skipped: %s", call.name, call.file, call.start, e)
                continue
            if node is not None:
                graph.add(node)
        graph.build()
        return graph, interpreter

    def extract(self, facts: FactSheet) -> Extraction:
        graph, interpreter = self.build_graph(facts)
        routes = collect_routes(
            graph,
            infer_from_calls=self.config.code_inference,
            only_commented=self.config.only_commented,
        )
        schemes = dict(interpreter.security_schemes)
        schemes.update({decl.name: decl for decl in facts.security_schemes})
        return Extraction(
            routes=routes,
            security_schemes=schemes,
            content_type=interpreter.content_type,
            types=list(facts.types),
        )

    def document(self, extraction: Extraction, routes: list[ResolvedRoute] | None = None) -> dict:
        """Build the OpenAPI document, optionally for a subset of the routes."""
        content_type = self.config.default_content_type or extraction.content_type or DEFAULT_CONTENT_TYPE
        return build_specification(
            extraction.routes if routes is None else routes,
            SchemaAssembler(extraction.types),
            info=self.config.info,
            default_content_type=content_type,
            security_schemes=extraction.security_schemes,
            openapi_version=self.config.openapi_version,
        )
