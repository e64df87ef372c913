"""
Cogniscope Syntax Node Model

A small, language-neutral tree that syntax providers produce and the
scoring engine consumes.  The set of node kinds is closed: anything a
provider emits outside :class:`NodeKind` is treated as unrecognized by
the engine (scored 0, reported as a warning).

Every node has two ordered child sequences:

* ``header`` — condition, loop iterable, switch subject, exception type.
  Visited at the *enclosing* nesting depth.
* ``children`` — the body.  For the nesting kinds (branch, loop, switch,
  catch, ternary) the body is visited one level deeper.

An ``else`` node whose only child is a ``branch`` is an ``else if``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Tuple


# =============================================================================
# Enumerations
# =============================================================================

class NodeKind(str, Enum):
    """Closed set of node kinds understood by the scoring engine."""
    BRANCH = "branch"
    ELSE = "else"
    LOOP = "loop"
    SWITCH = "switch"
    CATCH = "catch"
    TERNARY = "ternary"
    LOGICAL = "logical"
    JUMP = "jump"
    FUNCTION = "function"
    CALL = "call"
    BLOCK = "block"


class LogicalOp(str, Enum):
    AND = "and"
    OR = "or"
    NOT = "not"


class JumpKind(str, Enum):
    BREAK = "break"
    CONTINUE = "continue"
    RETURN = "return"
    GOTO = "goto"


# =============================================================================
# Data Models
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """Where a node starts in the source."""
    file: str
    line: int

    def __str__(self) -> str:
        return f"{self.file}:{self.line}"

    def to_dict(self) -> dict:
        return {"file": self.file, "line": self.line}


UNKNOWN_LOCATION = SourceLocation("<unknown>", 0)


@dataclass(frozen=True)
class SyntaxNode:
    """One node of the syntax model.

    ``kind`` is normally a :class:`NodeKind`.  It is typed loosely so
    foreign providers can hand over their own kinds; the engine decides
    what it recognizes.
    """
    kind: Any
    children: Tuple["SyntaxNode", ...] = ()
    location: SourceLocation = UNKNOWN_LOCATION
    name: Optional[str] = None
    """Logical operator, jump kind, callee identity, or function name."""
    header: Tuple["SyntaxNode", ...] = field(default=())

    @property
    def line(self) -> int:
        return self.location.line

    def is_else_if(self) -> bool:
        return (
            self.kind == NodeKind.ELSE
            and len(self.children) == 1
            and self.children[0].kind == NodeKind.BRANCH
        )


# =============================================================================
# Constructors
# =============================================================================
# Thin helpers so providers and tests can build trees without spelling out
# every keyword.  ``*body`` always lands in ``children``.

def _loc(location: Optional[SourceLocation]) -> SourceLocation:
    return location if location is not None else UNKNOWN_LOCATION


def block(*body: SyntaxNode, location: Optional[SourceLocation] = None) -> SyntaxNode:
    return SyntaxNode(NodeKind.BLOCK, tuple(body), _loc(location))


def branch(*body: SyntaxNode, condition: Tuple[SyntaxNode, ...] = (),
           orelse: Optional[SyntaxNode] = None,
           location: Optional[SourceLocation] = None) -> SyntaxNode:
    """An ``if``.  *orelse* should be an ``else`` node (see :func:`else_`)."""
    children = tuple(body) + ((orelse,) if orelse is not None else ())
    return SyntaxNode(NodeKind.BRANCH, children, _loc(location), header=tuple(condition))


def else_(*body: SyntaxNode, location: Optional[SourceLocation] = None) -> SyntaxNode:
    """A plain ``else``; pass a single :func:`branch` to build an ``else if``."""
    return SyntaxNode(NodeKind.ELSE, tuple(body), _loc(location))


def loop(*body: SyntaxNode, header: Tuple[SyntaxNode, ...] = (),
         location: Optional[SourceLocation] = None) -> SyntaxNode:
    return SyntaxNode(NodeKind.LOOP, tuple(body), _loc(location), header=tuple(header))


def switch(*cases: SyntaxNode, subject: Tuple[SyntaxNode, ...] = (),
           location: Optional[SourceLocation] = None) -> SyntaxNode:
    return SyntaxNode(NodeKind.SWITCH, tuple(cases), _loc(location), header=tuple(subject))


def catch(*body: SyntaxNode, header: Tuple[SyntaxNode, ...] = (),
          location: Optional[SourceLocation] = None) -> SyntaxNode:
    return SyntaxNode(NodeKind.CATCH, tuple(body), _loc(location), header=tuple(header))


def ternary(*branches: SyntaxNode, condition: Tuple[SyntaxNode, ...] = (),
            location: Optional[SourceLocation] = None) -> SyntaxNode:
    return SyntaxNode(NodeKind.TERNARY, tuple(branches), _loc(location), header=tuple(condition))


def logical(op, *operands: SyntaxNode,
            location: Optional[SourceLocation] = None) -> SyntaxNode:
    """``and``/``or`` over two or more operands, or ``not`` over one."""
    return SyntaxNode(NodeKind.LOGICAL, tuple(operands), _loc(location), name=LogicalOp(op).value)


def jump(kind, *operands: SyntaxNode,
         location: Optional[SourceLocation] = None) -> SyntaxNode:
    return SyntaxNode(NodeKind.JUMP, tuple(operands), _loc(location), name=JumpKind(kind).value)


def function(name: str, *body: SyntaxNode, header: Tuple[SyntaxNode, ...] = (),
             location: Optional[SourceLocation] = None) -> SyntaxNode:
    return SyntaxNode(NodeKind.FUNCTION, tuple(body), _loc(location), name=name, header=tuple(header))


def call(callee: Optional[str], *arguments: SyntaxNode,
         location: Optional[SourceLocation] = None) -> SyntaxNode:
    return SyntaxNode(NodeKind.CALL, tuple(arguments), _loc(location), name=callee)
