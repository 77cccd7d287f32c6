"""Static safety scan for synthesized code.

A best-effort denylist, not a security boundary: it catches named references
to process, operating-system and filesystem capabilities, imports, and dunder
introspection. Semantically equivalent code that avoids those names is not
caught. A candidate is accepted or rejected; it is never rewritten.
"""

import ast
import textwrap
from dataclasses import dataclass

from operator_agent.errors import SynthesisRejected
from operator_agent.telemetry import SYNTHESIS_REJECTED, get_logger

log = get_logger(__name__)

DENYLISTED_SUBSTRINGS: frozenset[str] = frozenset(
    {
        "process.",
        "__import__",
        "__builtins__",
        "__globals__",
        "__subclasses__",
        "__code__",
    }
)

DENYLISTED_MODULES: frozenset[str] = frozenset(
    {
        "os",
        "sys",
        "subprocess",
        "shutil",
        "pathlib",
        "io",
        "socket",
        "signal",
        "ctypes",
        "importlib",
        "builtins",
        "multiprocessing",
        "threading",
        "tempfile",
        "pickle",
        "marshal",
        "pty",
    }
)

DENYLISTED_NAMES: frozenset[str] = frozenset(
    {
        "eval",
        "exec",
        "compile",
        "open",
        "input",
        "breakpoint",
        "globals",
        "locals",
        "vars",
        "getattr",
        "setattr",
        "delattr",
        "exit",
        "quit",
    }
)

# Reading the bot token or the raw HTTP session bypasses every other rule
DENYLISTED_ATTRIBUTES: frozenset[str] = frozenset({"token", "_connection", "http"})

BODY_PARSE_FLAGS = ast.PyCF_ONLY_AST | ast.PyCF_ALLOW_TOP_LEVEL_AWAIT


def parse_action_body(body: str, filename: str = "<synthesized>") -> ast.Module:
    """Parse an action body as written.

    Top-level await and return are accepted; the body becomes the inside of an
    async function later. Lines are not re-indented, so string literals keep
    their exact text and line numbers match the body.

    Raises:
        SyntaxError: If the body does not parse.
    """
    return compile(textwrap.dedent(body), filename, "exec", BODY_PARSE_FLAGS)


@dataclass(frozen=True)
class Violation:
    """One denylisted reference found in a candidate."""

    kind: str
    reference: str
    line: int | None = None

    def __str__(self) -> str:
        where = f" (line {self.line})" if self.line is not None else ""
        return f"{self.kind} '{self.reference}'{where}"


class SafetyFilter:
    """Accept-or-reject scan over a candidate function body."""

    def __init__(
        self,
        substrings: frozenset[str] = DENYLISTED_SUBSTRINGS,
        modules: frozenset[str] = DENYLISTED_MODULES,
        names: frozenset[str] = DENYLISTED_NAMES,
        attributes: frozenset[str] = DENYLISTED_ATTRIBUTES,
    ) -> None:
        self.substrings = substrings
        self.modules = modules
        self.names = names
        self.attributes = attributes

    def scan(self, body: str) -> list[Violation]:
        """Return every violation found in the body (empty if it is acceptable)."""
        violations = [
            Violation(kind="reference", reference=needle)
            for needle in sorted(self.substrings)
            if needle in body
        ]

        try:
            tree = parse_action_body(body)
        except SyntaxError as e:
            violations.append(Violation(kind="syntax error", reference=str(e.msg), line=e.lineno))
            return violations

        for node in ast.walk(tree):
            violations.extend(self._check_node(node))
        return violations

    def check(self, body: str) -> None:
        """Accept the body or raise.

        Raises:
            SynthesisRejected: If any denylisted reference is present.
        """
        violations = self.scan(body)
        if not violations:
            return

        described = [str(v) for v in violations]
        log.warning(SYNTHESIS_REJECTED, violations=described, code=body)
        raise SynthesisRejected(
            f"Execution blocked: generated code uses {described[0]}.", violations=described
        )

    def _check_node(self, node: ast.AST) -> list[Violation]:
        line = getattr(node, "lineno", None)
        match node:
            case ast.Import(names=aliases):
                return [Violation("import of", alias.name, line) for alias in aliases]
            case ast.ImportFrom(module=module):
                return [Violation("import of", module or ".", line)]
            case ast.Name(id=name) if name in self.names or name in self.modules:
                return [Violation("name", name, line)]
            case ast.Attribute(attr=attr) if attr.startswith("__") and attr.endswith("__"):
                return [Violation("dunder attribute", attr, line)]
            case ast.Attribute(attr=attr) if attr in self.attributes:
                return [Violation("attribute", attr, line)]
            case ast.Global() | ast.Nonlocal():
                return [Violation("scope statement", type(node).__name__.lower(), line)]
            case _:
                return []
