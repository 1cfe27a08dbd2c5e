"""Data models for the facts the host environment supplies.

A fact sheet describes the routing-related call sites of a code base, the
class-like types they reference and any explicitly declared security
schemes. The extractor never looks at source code beyond the comment text
that precedes a call or a declaration.
"""

from pydantic import BaseModel


class TypeExpr(BaseModel):
    """A concrete static type, e.g. ``kotlin.collections.List<com.acme.User>``."""

    name: str
    arguments: list["TypeExpr"] = []
    nullable: bool = False

    @property
    def short_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]

    def substitute(self, bindings: dict[str, "TypeExpr"]) -> "TypeExpr":
        """Replace the type parameters named in ``bindings``, keeping nullability."""
        bound = bindings.get(self.name)
        if bound is not None and not self.arguments:
            return bound.model_copy(update={"nullable": bound.nullable or self.nullable})
        if not self.arguments:
            return self
        return self.model_copy(update={"arguments": [arg.substitute(bindings) for arg in self.arguments]})


class Span(BaseModel):
    """A half-open character range ``[start, end)`` in one source file."""

    file: str
    start: int
    end: int

    def contains(self, other: "Span") -> bool:
        """True when ``other`` starts inside this range and is not this range."""
        if other.file != self.file or other == self:
            return False
        return self.start <= other.start < self.end


class Argument(BaseModel):
    """One argument of a call site.

    ``value`` is a literal, ``symbol`` the name of an enclosing function's
    parameter, ``text`` the argument's source text for expressions such as
    ``HttpStatusCode.NotFound``.
    """

    name: str | None = None
    value: str | int | float | bool | None = None
    symbol: str | None = None
    text: str | None = None
    type: TypeExpr | None = None


class CallSite(BaseModel):
    """A routing-related call: its location, callee and arguments."""

    file: str
    start: int
    end: int
    name: str
    namespace: str = ""
    receiver: str | None = None  # receiver source text, e.g. call.parameters
    receiver_type: TypeExpr | None = None
    arguments: list[Argument] = []
    type_arguments: list[TypeExpr] = []
    returns: TypeExpr | None = None
    declaration: Span | None = None  # body of the called helper, if known
    parameters: list[str] = []  # declared parameter names of the helper
    type_parameters: list[str] = []  # declared type parameter names of the helper

    @property
    def span(self) -> Span:
        return Span(file=self.file, start=self.start, end=self.end)

    def argument(self, name: str, index: int = 0) -> Argument | None:
        """Find an argument by name, falling back to its position among unnamed ones."""
        for arg in self.arguments:
            if arg.name == name:
                return arg
        positional = [arg for arg in self.arguments if arg.name is None]
        if index < len(positional):
            return positional[index]
        return None

    def bindings(self) -> dict[str, Argument]:
        """Map the helper's declared parameter names to the arguments passed in."""
        bound = {arg.name: arg for arg in self.arguments if arg.name in self.parameters}
        positional = [arg for arg in self.arguments if arg.name is None]
        free = [p for p in self.parameters if p not in bound]
        for param, arg in zip(free, positional):
            bound[param] = arg
        return bound

    def type_bindings(self) -> dict[str, TypeExpr]:
        """Map the helper's type parameters to the type arguments of this call."""
        return dict(zip(self.type_parameters, self.type_arguments))


class PropertyDecl(BaseModel):
    name: str
    type: TypeExpr
    contextual: bool = False  # serialized by a custom serializer
    description: str | None = None


class TypeDecl(BaseModel):
    """A class-like declaration used to expand object schemas."""

    name: str
    type_parameters: list[str] = []
    properties: list[PropertyDecl] = []
    description: str | None = None

    @property
    def short_name(self) -> str:
        return self.name.rsplit(".", 1)[-1]


class SecuritySchemeDecl(BaseModel):
    """A security scheme as it appears under components.securitySchemes."""

    name: str
    type: str  # http / apiKey / oauth2 / openIdConnect
    scheme: str | None = None
    bearer_format: str | None = None
    description: str | None = None
    location: str | None = None  # apiKey only: query / header / cookie
    parameter_name: str | None = None  # apiKey only
    open_id_connect_url: str | None = None
    flows: dict | None = None


class SourceFile(BaseModel):
    path: str
    namespace: str = ""
    text: str | None = None


class FactSheet(BaseModel):
    files: list[SourceFile] = []
    calls: list[CallSite] = []
    types: list[TypeDecl] = []
    security_schemes: list[SecuritySchemeDecl] = []
