"""Data structures shared by every extractor and analysis pass."""

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass
class Port:
    """A parameter or attribute slot."""
    name: str
    type: str = "Any"
    default: str | None = None


@dataclass
class Callable:
    """A function or method declaration."""
    name: str
    params: list[Port] = field(default_factory=list)
    return_type: str = "Any"
    decorators: list[str] = field(default_factory=list)
    line_number: int = 0
    is_async: bool = False
    is_private: bool = False
    complexity: int = 0  # branch-introducing constructs in the body span


@dataclass
class TypeDecl:
    """A class-like declaration (class, interface, trait, markup section, selector)."""
    name: str
    bases: list[str] = field(default_factory=list)
    methods: list[Callable] = field(default_factory=list)
    attributes: list[Port] = field(default_factory=list)
    decorators: list[str] = field(default_factory=list)
    line_number: int = 0


@dataclass
class ImportDecl:
    """An import statement."""
    module: str
    names: list[str]
    is_from: bool
    line_number: int
    end_line_number: int = 0  # last line of a multi-line statement

    def __post_init__(self):
        if self.end_line_number < self.line_number:
            self.end_line_number = self.line_number


@dataclass
class AnnotationBlock:
    """Structured ``---meta`` comment block declared at the top of a file."""
    name: str | None = None
    type: str | None = None
    desc: str | None = None
    inputs: list[str] | None = None
    outputs: list[str] | None = None
    deps: list[str] | None = None
    methods: list[str] | None = None
    errors: list[str] | None = None
    raw: dict[str, str] = field(default_factory=dict)


@dataclass
class HardcodedValue:
    """A literal that probably belongs in configuration."""
    value: str
    kind: str  # credential, url, ip, path, number, string
    line_number: int
    context: str


@dataclass
class UnusedItem:
    """A declared symbol with no reference in the file."""
    name: str
    kind: str  # import, callable, variable
    line_number: int


@dataclass
class DependencyIssue:
    """Install status of one external dependency."""
    name: str
    status: str  # installed, missing, unknown
    line_number: int
    install_hint: str | None = None


@dataclass
class MarkerComment:
    """A TODO/FIXME-style annotation."""
    text: str
    kind: str  # TODO, FIXME, HACK, BUG, NOTE
    line_number: int


@dataclass
class ExternalUsage:
    """Evidence that a public symbol is referenced from other workspace files."""
    name: str
    kind: str  # class, method, function
    used_in: list[str] = field(default_factory=list)


@dataclass
class ExtractionResult:
    """Output shared by all per-language extractors."""
    imports: list[ImportDecl] = field(default_factory=list)
    types: list[TypeDecl] = field(default_factory=list)
    callables: list[Callable] = field(default_factory=list)
    globals: list[Port] = field(default_factory=list)
    error_names: list[str] = field(default_factory=list)
    risk_points: list[int] = field(default_factory=list)


@dataclass(frozen=True)
class StructuralSummary:
    """Complete per-file extraction result; one snapshot per parse call."""
    file_name: str
    language: str
    annotation: AnnotationBlock | None
    types: list[TypeDecl]
    callables: list[Callable]
    imports: list[ImportDecl]
    globals: list[Port]
    connections: list[str]
    error_type_names: list[str]
    risk_point_lines: list[int]
    total_lines: int
    code_lines: int
    warnings: list[str] = field(default_factory=list)
    description: str = ""
    type_descriptions: dict[str, str] = field(default_factory=dict)
    hardcoded: list[HardcodedValue] = field(default_factory=list)
    unused: list[UnusedItem] = field(default_factory=list)
    dependency_issues: list[DependencyIssue] = field(default_factory=list)
    markers: list[MarkerComment] = field(default_factory=list)
    external_usage: list[ExternalUsage] = field(default_factory=list)

    def all_callables(self) -> list[Callable]:
        """Top-level callables followed by every type's methods."""
        result = list(self.callables)
        for type_decl in self.types:
            result.extend(type_decl.methods)
        return result

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict form suitable for JSON output."""
        return asdict(self)
