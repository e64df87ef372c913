"""
Cogniscope Syntax Providers

Turn source text into the language-neutral trees of
:mod:`cogniscope.core.nodes`.  Providers never raise on bad input: a file
that cannot be parsed comes back as a :class:`ParsedFile` with ``error``
set, and the pipeline reports it as skipped.

Python is supported through the standard ``ast`` module.  Other languages
plug in by subclassing :class:`SyntaxProvider` and registering an
extension in ``_PROVIDER_REGISTRY``.
"""

import ast
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union

from cogniscope.core import nodes as n
from cogniscope.core.config import CogniscopeConfig
from cogniscope.core.engine import ScopeRequest
from cogniscope.core.nodes import SourceLocation, SyntaxNode

logger = logging.getLogger(__name__)


# =============================================================================
# Data Models
# =============================================================================

@dataclass(frozen=True)
class ParsedFile:
    """Top-level function boundaries of one file, or the reason there are none."""
    path: str
    scopes: Tuple[ScopeRequest, ...] = ()
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


# =============================================================================
# Provider Abstraction
# =============================================================================

class SyntaxProvider:
    """
    Abstract base for syntax providers.

    Each subclass handles one language and exposes a uniform
    ``parse(path, source)`` so the pipeline never touches a grammar
    directly.
    """

    language: str = ""

    def parse(self, path: str, source: Union[str, bytes]) -> ParsedFile:
        """Return the file's top-level function scopes, or a parse error."""
        raise NotImplementedError


class PythonSyntaxProvider(SyntaxProvider):
    """Python provider built on the standard ``ast`` module."""

    language = "Python"

    def parse(self, path: str, source: Union[str, bytes]) -> ParsedFile:
        path = str(path)
        try:
            tree = ast.parse(source, filename=path)
            scopes = tuple(_PythonTreeBuilder(path).discover(tree))
        except SyntaxError as e:
            logger.warning(f"Syntax error in {path}: {e}")
            return ParsedFile(path=path, error=f"Syntax error: {e.msg} (line {e.lineno})")
        except ValueError as e:
            # e.g. source containing null bytes
            logger.warning(f"Cannot parse {path}: {e}")
            return ParsedFile(path=path, error=f"Cannot parse: {e}")
        except RecursionError:
            logger.warning(f"Cannot parse {path}: nesting too deep")
            return ParsedFile(path=path, error="Cannot parse: nesting too deep")
        return ParsedFile(path=path, scopes=scopes)


# =============================================================================
# Python AST → syntax model
# =============================================================================

_FUNCTION_DEFS = (ast.FunctionDef, ast.AsyncFunctionDef)

# Receivers through which a method reaches its own class.
_SELF_NAMES = frozenset(("self", "cls"))


class _PythonTreeBuilder:
    """Converts one module's ``ast`` into :class:`SyntaxNode` trees."""

    def __init__(self, path: str):
        self.path = path
        self._in_method = False

    # ── Discovery ────────────────────────────────────────────────

    def discover(self, node: ast.AST, prefix: str = "",
                 in_class: bool = False) -> Iterator[ScopeRequest]:
        """Yield every function boundary not enclosed by another function.

        Classes are descended into (``Class.method``), as are module-level
        ``if``/``try`` blocks holding conditional definitions.
        """
        for child in ast.iter_child_nodes(node):
            if isinstance(child, _FUNCTION_DEFS):
                converted = self._function(child, child.name, child.body, method=in_class)
                yield ScopeRequest(converted, prefix + child.name)
            elif isinstance(child, ast.Lambda):
                yield ScopeRequest(self.convert(child), prefix + "<lambda>")
            elif isinstance(child, ast.ClassDef):
                yield from self.discover(child, prefix + child.name + ".", in_class=True)
            else:
                yield from self.discover(child, prefix, in_class)

    # ── Conversion ───────────────────────────────────────────────

    def loc(self, node: ast.AST) -> SourceLocation:
        return SourceLocation(self.path, getattr(node, "lineno", 0))

    def convert(self, node: ast.AST) -> Optional[SyntaxNode]:
        method = getattr(self, f"_convert_{type(node).__name__}", None)
        if method is not None:
            return method(node)
        return self._generic(node)

    def _many(self, nodes) -> Tuple[SyntaxNode, ...]:
        converted = (self.convert(child) for child in nodes if child is not None)
        return tuple(c for c in converted if c is not None)

    def _generic(self, node: ast.AST) -> Optional[SyntaxNode]:
        children = self._many(ast.iter_child_nodes(node))
        if not children:
            return None
        return n.block(*children, location=self.loc(node))

    # Functions

    def _function(self, node, name: str, body: List[ast.AST],
                  method: bool = False) -> SyntaxNode:
        args = node.args
        header = self._many(
            list(getattr(node, "decorator_list", []))
            + list(args.defaults)
            + [d for d in args.kw_defaults if d is not None]
        )
        outer, self._in_method = self._in_method, method
        try:
            children = self._many(body)
        finally:
            self._in_method = outer
        return n.function(name, *children, header=header, location=self.loc(node))

    def _convert_FunctionDef(self, node):
        return self._function(node, node.name, node.body)

    _convert_AsyncFunctionDef = _convert_FunctionDef

    def _convert_Lambda(self, node):
        return self._function(node, "<lambda>", [node.body])

    def _convert_ClassDef(self, node):
        # A class defined inside a function: its methods are still methods.
        parts = list(self._many(
            list(node.decorator_list) + list(node.bases)
            + [kw.value for kw in node.keywords]
        ))
        for stmt in node.body:
            if isinstance(stmt, _FUNCTION_DEFS):
                parts.append(self._function(stmt, stmt.name, stmt.body, method=True))
            else:
                parts.extend(self._many([stmt]))
        if not parts:
            return None
        return n.block(*parts, location=self.loc(node))

    # Branches

    def _convert_If(self, node):
        orelse = None
        if len(node.orelse) == 1 and isinstance(node.orelse[0], ast.If) \
                and node.orelse[0].col_offset == node.col_offset:
            # ``elif`` sits at the column of its ``if``; a nested ``if``
            # under a plain ``else:`` is indented further.
            orelse = n.else_(self.convert(node.orelse[0]), location=self.loc(node.orelse[0]))
        elif node.orelse:
            body = self._many(node.orelse)
            # Wrap so a lone nested ``if`` is not mistaken for ``else if``.
            orelse = n.else_(n.block(*body), location=self.loc(node.orelse[0]))
        return n.branch(
            *self._many(node.body),
            condition=self._many([node.test]),
            orelse=orelse,
            location=self.loc(node),
        )

    def _convert_IfExp(self, node):
        return n.ternary(
            *self._many([node.body, node.orelse]),
            condition=self._many([node.test]),
            location=self.loc(node),
        )

    # Loops

    def _loop(self, node, header: List[ast.AST]) -> SyntaxNode:
        body = self._many(node.body)
        if node.orelse:
            body += (n.else_(n.block(*self._many(node.orelse)), location=self.loc(node.orelse[0])),)
        return n.loop(*body, header=self._many(header), location=self.loc(node))

    def _convert_For(self, node):
        return self._loop(node, [node.target, node.iter])

    _convert_AsyncFor = _convert_For

    def _convert_While(self, node):
        return self._loop(node, [node.test])

    # Switch

    def _convert_Match(self, node):
        cases = []
        for case in node.cases:
            cases.append(n.block(*self._many([case.guard] + list(case.body)),
                                 location=self.loc(case.pattern)))
        return n.switch(*cases, subject=self._many([node.subject]), location=self.loc(node))

    # Exceptions

    def _convert_Try(self, node):
        parts = list(self._many(node.body))
        for handler in node.handlers:
            parts.append(n.catch(
                *self._many(handler.body),
                header=self._many([handler.type]),
                location=self.loc(handler),
            ))
        parts.extend(self._many(node.orelse))
        parts.extend(self._many(node.finalbody))
        return n.block(*parts, location=self.loc(node))

    _convert_TryStar = _convert_Try

    # Boolean expressions

    def _convert_BoolOp(self, node):
        op = n.LogicalOp.AND if isinstance(node.op, ast.And) else n.LogicalOp.OR
        # Keep a placeholder for leaf operands: operator count depends on arity.
        operands = [self.convert(value) or n.block() for value in node.values]
        return n.logical(op, *operands, location=self.loc(node))

    def _convert_UnaryOp(self, node):
        if isinstance(node.op, ast.Not):
            return n.logical(n.LogicalOp.NOT, *self._many([node.operand]), location=self.loc(node))
        return self._generic(node)

    # Jumps

    def _convert_Break(self, node):
        return n.jump(n.JumpKind.BREAK, location=self.loc(node))

    def _convert_Continue(self, node):
        return n.jump(n.JumpKind.CONTINUE, location=self.loc(node))

    def _convert_Return(self, node):
        return n.jump(n.JumpKind.RETURN, *self._many([node.value]), location=self.loc(node))

    # Calls

    def _convert_Call(self, node):
        arguments = self._many(
            [node.func] + list(node.args) + [kw.value for kw in node.keywords]
        )
        return n.call(self._callee(node.func), *arguments, location=self.loc(node))

    def _callee(self, func: ast.AST) -> Optional[str]:
        """Identity of a call target, compared against function names.

        ``f()`` is ``f``.  ``self.f()`` and ``cls.f()`` are ``f`` only
        inside a method; any other attribute call keeps its receiver
        (``os.path.join``), so it never equals a bare function name.
        Calls through other objects (``child.size()``) are not treated
        as recursion.
        """
        if isinstance(func, ast.Name):
            return func.id
        if not isinstance(func, ast.Attribute):
            return None
        receiver = func.value
        if self._in_method and isinstance(receiver, ast.Name) and receiver.id in _SELF_NAMES:
            return func.attr
        parts = [func.attr]
        while isinstance(receiver, ast.Attribute):
            parts.append(receiver.attr)
            receiver = receiver.value
        if not isinstance(receiver, ast.Name):
            return None
        parts.append(receiver.id)
        return ".".join(reversed(parts))


# =============================================================================
# Registry
# =============================================================================

_PROVIDER_REGISTRY: Dict[str, type] = {
    ".py": PythonSyntaxProvider,
}


def provider_for(path: Union[str, Path]) -> Optional[SyntaxProvider]:
    """Return a provider instance for *path*'s extension, or None."""
    provider_cls = _PROVIDER_REGISTRY.get(Path(path).suffix.lower())
    return provider_cls() if provider_cls else None


def supported_extensions() -> frozenset:
    return frozenset(_PROVIDER_REGISTRY)


# =============================================================================
# Utility Functions
# =============================================================================

def scan_directory(root_path: Path, config: Optional[CogniscopeConfig] = None) -> List[Path]:
    """
    Recursively collect source files under *root_path*.

    Uses :func:`os.walk` with early directory pruning so that excluded
    subtrees (``.git/``, ``__pycache__/``...) are never entered.  Respects
    ``config.target_extensions``, ``config.exclude_dirs`` and the size cap.
    """
    cfg = config or CogniscopeConfig()
    source_files: List[Path] = []
    exclude = cfg.exclude_dirs
    extensions = cfg.target_extensions
    max_bytes = cfg.max_file_bytes()

    for dirpath, dirnames, filenames in os.walk(root_path):
        dirnames[:] = [d for d in dirnames if d not in exclude]

        for fname in filenames:
            _, ext = os.path.splitext(fname)
            if ext not in extensions:
                continue

            full = os.path.join(dirpath, fname)
            try:
                size = os.path.getsize(full)
            except OSError:
                continue

            if size <= max_bytes:
                source_files.append(Path(full))
            else:
                logger.warning(
                    f"Skipping large file: {full} ({size / (1024 * 1024):.1f}MB)"
                )

    source_files.sort()
    return source_files
