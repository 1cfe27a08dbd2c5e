"""Merging documentation fields.

``merge_fields(self, other)`` is left-biased: values from ``self`` win and
``other`` fills the gaps. Callers put the field list closest to the leaf
route on the left.
"""

from typing import Sequence

from api_doc_extractor.parser.base import (
    Body,
    DocumentationField,
    Method,
    OperationId,
    Parameter,
    PathSegment,
    Response,
    ResponseHeader,
    Security,
    Summary,
    Tag,
)


def join_paths(parent: str, child: str) -> str:
    """Join two path segments with single separators, e.g. ``/a/`` + ``/b`` = ``/a/b``."""
    segments = [s for s in parent.split("/") if s] + [s for s in child.split("/") if s]
    return "/" + "/".join(segments)


def _first(a, b):
    return a if a is not None else b


def merge_field(self: DocumentationField, other: DocumentationField) -> DocumentationField | None:
    """Merge two fields, or return None when they do not describe the same thing."""
    match self, other:
        case PathSegment(), PathSegment():
            return PathSegment(segment=join_paths(other.segment, self.segment))
        case Method(), Method():
            return self if self.name == other.name else None
        case Tag(), Tag():
            return self if self.name == other.name else None
        case OperationId(), OperationId():
            return self if self.value == other.value else None
        case Security(), Security():
            if self.scheme != other.scheme:
                return None
            return Security(scheme=self.scheme, scopes=_first(self.scopes, other.scopes))
        case Parameter(), Parameter():
            if self.name != other.name:
                return None
            if self.location and other.location and self.location != other.location:
                return None
            return Parameter(
                location=_first(self.location, other.location),
                name=self.name,
                type_ref=_first(self.type_ref, other.type_ref),
                description=_first(self.description, other.description),
                attributes={**other.attributes, **self.attributes},
            )
        case Response(), Response():
            if self.effective_code != other.effective_code:
                return None
            return Response(
                status_code=_first(self.status_code, other.status_code),
                content_type=_first(self.content_type, other.content_type),
                type_ref=_first(self.type_ref, other.type_ref),
                description=_first(self.description, other.description),
                attributes={**other.attributes, **self.attributes},
            )
        case ResponseHeader(), ResponseHeader():
            if self.name.lower() != other.name.lower():
                return None
            return ResponseHeader(
                name=self.name,
                type_ref=_first(self.type_ref, other.type_ref),
                description=_first(self.description, other.description),
                attributes={**other.attributes, **self.attributes},
            )
        case Body(), Body():
            return Body(
                content_type=_first(self.content_type, other.content_type),
                type_ref=_first(self.type_ref, other.type_ref),
                description=_first(self.description, other.description),
                attributes={**other.attributes, **self.attributes},
            )
    if type(self) is type(other):
        return self
    return None


def merge_fields(
    self: Sequence[DocumentationField], other: Sequence[DocumentationField]
) -> list[DocumentationField]:
    """Merge two field lists.

    Each field of ``self`` absorbs the first unmatched compatible field of
    ``other`` and keeps its position. Unmatched fields of ``other`` follow,
    except summaries: a summary only describes the declaration it sits on.
    """
    used = [False] * len(other)
    result = []
    for field in self:
        merged = field
        for i, candidate in enumerate(other):
            if used[i]:
                continue
            combined = merge_field(field, candidate)
            if combined is not None:
                used[i] = True
                merged = combined
                break
        result.append(merged)
    for i, candidate in enumerate(other):
        if not used[i] and not isinstance(candidate, Summary):
            result.append(candidate)
    return result
