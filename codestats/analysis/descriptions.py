"""Plain-English summaries of a file and its types, plus annotation cross-checks."""

import re

from ..models import AnnotationBlock, Callable, ImportDecl, TypeDecl

CONSTRUCTORS = frozenset({"__init__", "constructor", "__construct"})
EXCEPTION_BASE_RE = re.compile(r"Error|Exception")
CAMEL_SPLIT_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

# Leading name word -> verb phrase used in method summaries
VERB_PHRASES = {
    "get": "gets", "find": "finds", "search": "searches",
    "create": "creates", "add": "adds", "insert": "inserts",
    "update": "updates", "edit": "edits", "modify": "modifies",
    "delete": "deletes", "remove": "removes", "destroy": "destroys",
    "validate": "validates", "check": "checks", "verify": "verifies",
    "send": "sends", "emit": "emits", "notify": "notifies",
    "save": "saves", "store": "stores", "persist": "persists",
    "load": "loads", "fetch": "fetches", "retrieve": "retrieves",
    "process": "processes", "handle": "handles", "execute": "executes",
    "convert": "converts", "transform": "transforms", "parse": "parses",
    "init": "initializes", "setup": "sets up", "configure": "configures",
    "login": "authenticates", "logout": "logs out", "auth": "authenticates",
    "register": "registers", "signup": "signs up",
    "list": "lists", "count": "counts", "filter": "filters",
    "sort": "sorts", "group": "groups", "merge": "merges",
    "export": "exports", "import": "imports", "download": "downloads",
    "upload": "uploads", "sync": "syncs", "refresh": "refreshes",
    "start": "starts", "stop": "stops", "run": "runs",
    "open": "opens", "close": "closes", "connect": "connects",
    "disconnect": "disconnects", "reset": "resets", "clear": "clears",
    "set": "sets", "enable": "enables", "disable": "disables",
    "show": "shows", "hide": "hides", "render": "renders",
    "build": "builds", "generate": "generates", "compute": "computes",
    "calculate": "calculates", "compare": "compares", "format": "formats",
    "log": "logs", "track": "tracks", "monitor": "monitors",
    "subscribe": "subscribes", "unsubscribe": "unsubscribes", "publish": "publishes",
    "map": "maps", "reduce": "reduces", "collect": "collects",
    "assign": "assigns", "allocate": "allocates", "distribute": "distributes",
    "lock": "locks", "unlock": "unlocks", "encrypt": "encrypts",
    "decrypt": "decrypts", "hash": "hashes", "sign": "signs",
    "schedule": "schedules", "queue": "queues", "retry": "retries",
    "rollback": "rolls back", "commit": "commits", "migrate": "migrates",
    "backup": "backs up", "restore": "restores", "archive": "archives",
    "test": "tests", "mock": "mocks", "stub": "stubs",
    "assert": "asserts", "expect": "expects", "match": "matches",
    "is": "checks whether it is", "has": "checks whether it has", "can": "checks whether it can",
}

# Return types that say nothing about the result
VOID_TYPES = frozenset({"Any", "None", "any", "void", "mixed", "undefined", "unknown"})


def plural(count: int, word: str, suffix: str = "s") -> str:
    return f"{count} {word}{'' if count == 1 else suffix}"


def public_methods(type_decl: TypeDecl) -> list[Callable]:
    return [m for m in type_decl.methods if not m.is_private and m.name not in CONSTRUCTORS]


def describe_method(method: Callable) -> str:
    """Verb phrase such as ``gets user by id (returns User)``; empty when the name has no known verb."""
    words = [w.lower() for part in method.name.strip("_#$").split("_") for w in CAMEL_SPLIT_RE.split(part) if w]
    if len(words) < 2 or words[0] not in VERB_PHRASES:
        return ""
    phrase = f"{VERB_PHRASES[words[0]]} {' '.join(words[1:])}"
    if method.return_type and method.return_type not in VOID_TYPES:
        phrase += f" (returns {method.return_type})"
    return phrase


def external_modules(imports: list[ImportDecl]) -> list[str]:
    modules: list[str] = []
    for imp in imports:
        if not imp.module.startswith(".") and imp.module not in modules:
            modules.append(imp.module)
    return modules


def describe_file(
    annotation: AnnotationBlock | None,
    types: list[TypeDecl],
    callables: list[Callable],
    imports: list[ImportDecl],
    file_name: str,
) -> str:
    """One-paragraph summary of a code file; the annotation's ``desc`` wins when present."""
    if annotation and annotation.desc:
        return annotation.desc

    name = (annotation.name if annotation else None) or re.sub(r"\.\w+$", "", file_name)
    kind = (annotation.type if annotation else None) or "module"
    parts: list[str] = []

    if kind == "service":
        main = next((t for t in types if "service" in t.name.lower()), types[0] if types else None)
        if main:
            actions = [a for a in (describe_method(m) for m in public_methods(main)) if a]
            parts.append(f"{name} is a service that {', '.join(actions) if actions else 'manages business operations'}.")
        else:
            parts.append(f"{name} is a service.")
    elif kind == "model":
        models = [t for t in types if not any(EXCEPTION_BASE_RE.search(b) for b in t.bases)]
        if models:
            attrs = ", ".join(a.name for a in models[0].attributes)
            parts.append(f"{name} defines the data model {models[0].name}{' with attributes: ' + attrs if attrs else ''}.")
    elif kind == "controller":
        parts.append(f"{name} handles the routes and HTTP requests of its resource.")
    elif kind == "util":
        parts.append(f"{name} provides utility functions: {', '.join(f.name for f in callables)}.")
    else:
        parts.append(
            f"{name} is a module with {plural(len(types), 'class', 'es')} and {plural(len(callables), 'function')}."
        )

    modules = external_modules(imports)
    if modules:
        more = "..." if len(modules) > 5 else ""
        parts.append(f"Depends on: {', '.join(modules[:5])}{more}.")

    async_count = sum(1 for f in callables if f.is_async)
    async_count += sum(1 for t in types for m in t.methods if m.is_async)
    if async_count:
        parts.append(f"Uses asynchronous operations ({plural(async_count, 'async method')}).")

    return " ".join(parts)


def describe_types(types: list[TypeDecl]) -> dict[str, str]:
    """Summary per class-like declaration, keyed by name."""
    descriptions: dict[str, str] = {}
    for type_decl in types:
        name = type_decl.name
        if any(EXCEPTION_BASE_RE.search(b) for b in type_decl.bases):
            descriptions[name] = f"{name} is a custom exception extending {', '.join(type_decl.bases)}."
            continue

        parts: list[str] = []
        methods = public_methods(type_decl)
        if not methods:
            if type_decl.attributes:
                attrs = ", ".join(a.name for a in type_decl.attributes)
                parts.append(f"{name} is a data model with {plural(len(type_decl.attributes), 'attribute')}: {attrs}.")
            else:
                parts.append(f"{name} is a base class.")
        else:
            actions = [a for a in (describe_method(m) for m in methods) if a]
            summary = ", ".join(actions) if actions else f"has {plural(len(methods), 'public method')}"
            parts.append(f"{name} {summary}.")

        constructor = next((m for m in type_decl.methods if m.name in CONSTRUCTORS), None)
        if constructor and constructor.params:
            parts.append(f"Takes {', '.join(p.name for p in constructor.params)} in its constructor.")
        if type_decl.bases:
            parts.append(f"Extends {', '.join(type_decl.bases)}.")
        descriptions[name] = " ".join(parts)
    return descriptions


def describe_markup(
    annotation: AnnotationBlock | None, sections: list[TypeDecl], imports: list[ImportDecl], file_name: str
) -> str:
    if annotation and annotation.desc:
        return annotation.desc
    scripts = sum(1 for imp in imports if "script" in imp.names)
    styles = sum(1 for imp in imports if "stylesheet" in imp.names or "css" in imp.names)
    return (
        f"{file_name} has {plural(len(sections), 'main section')}, "
        f"{plural(scripts, 'script')} and {plural(styles, 'stylesheet')}."
    )


def describe_sections(sections: list[TypeDecl]) -> dict[str, str]:
    return {s.name: f"Section <{s.name}> with {plural(len(s.attributes), 'attribute')}." for s in sections}


def describe_stylesheet(annotation: AnnotationBlock | None, rules: list[TypeDecl], imports: list[ImportDecl]) -> str:
    if annotation and annotation.desc:
        return annotation.desc
    description = f"Stylesheet with {plural(len(rules), 'selector')}."
    if imports:
        description += f" Imports: {', '.join(imp.module for imp in imports)}."
    return description


def annotation_warnings(
    annotation: AnnotationBlock | None, imports: list[ImportDecl], check_undeclared: bool = False
) -> list[str]:
    """Mismatches between the annotation's ``deps`` and the actual imports.

    Declared dependencies missing from the imports are always reported; with
    ``check_undeclared`` imports missing from ``deps`` are reported too. Names
    match when either one contains the other.
    """
    if not annotation or not annotation.deps:
        return []

    def related(a: str, b: str) -> bool:
        return a in b or b in a

    modules = [imp.module for imp in imports]
    warnings = [
        f'Annotation declares dependency "{dep}" not found in imports'
        for dep in annotation.deps
        if not any(related(dep, module) for module in modules)
    ]
    if check_undeclared:
        for module in dict.fromkeys(modules):
            if not any(related(dep, module) for dep in annotation.deps):
                warnings.append(f'Import "{module}" is not declared in annotation deps')
    return warnings
