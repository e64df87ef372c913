"""
Cogniscope Core Engine

Cognitive Complexity scoring over the language-neutral syntax model in
:mod:`cogniscope.core.nodes`.  One :class:`Scope` per function or closure,
one traversal per scope, one :class:`ComplexityScore` out.

Scoring rules (per node met while walking a scope):

* branch, loop, switch, catch, ternary: +1 plus the current nesting depth,
  and their bodies are walked one level deeper.
* ``else if``: +1 plus the depth of the ``if`` it hangs off.
* plain ``else``, jumps, blocks: nothing.
* boolean operators: +1 per run of identical operators inside one
  expression, +1 per negation.
* a call whose callee is the scope's own identity: +1 (direct recursion).

Nothing here is shared between scopes, so scopes can be scored on any
thread in any order.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from cogniscope.core.nodes import (
    UNKNOWN_LOCATION,
    LogicalOp,
    NodeKind,
    SourceLocation,
    SyntaxNode,
)

# Application code (CLI, MCP server) is responsible for configuring logging.
logger = logging.getLogger(__name__)


# =============================================================================
# Data Models
# =============================================================================

class Rule(str, Enum):
    """Why an increment was applied."""
    BRANCH = "branch"
    ELSE_IF = "else_if"
    LOOP = "loop"
    SWITCH = "switch"
    CATCH = "catch"
    TERNARY = "ternary"
    LOGICAL_SEQUENCE = "logical_sequence"
    NEGATION = "negation"
    RECURSION = "recursion"


@dataclass(frozen=True)
class Increment:
    """One line of a score breakdown."""
    rule: Rule
    amount: int
    location: SourceLocation
    nesting: int = 0
    """Portion of ``amount`` that comes from nesting depth."""

    def to_dict(self) -> dict:
        return {
            "rule": self.rule.value,
            "amount": self.amount,
            "nesting": self.nesting,
            "line": self.location.line,
        }


@dataclass(frozen=True)
class Diagnostic:
    """A non-fatal finding attached to the score or file it concerns."""
    message: str
    location: SourceLocation = UNKNOWN_LOCATION

    def __str__(self) -> str:
        return f"{self.location}: {self.message}"

    def to_dict(self) -> dict:
        return {"message": self.message, "line": self.location.line}


@dataclass(frozen=True)
class ComplexityScore:
    """Cognitive Complexity of one function or closure.

    ``total`` always equals the sum of ``breakdown`` amounts; construction
    fails otherwise.
    """
    function: str
    """Qualified display name, e.g. ``Parser.parse.visit``."""
    location: SourceLocation
    total: int
    breakdown: Tuple[Increment, ...] = ()
    warnings: Tuple[Diagnostic, ...] = ()
    identity: Optional[str] = None
    """Callee identity used for recursion matching."""

    def __post_init__(self):
        if any(inc.amount < 0 for inc in self.breakdown):
            raise ValueError(f"Negative increment in breakdown of {self.function}")
        if self.total != sum(inc.amount for inc in self.breakdown):
            raise ValueError(
                f"Total {self.total} of {self.function} does not match its breakdown"
            )

    @property
    def line(self) -> int:
        return self.location.line

    def by_rule(self) -> Dict[str, int]:
        """Sum of increments per rule, in first-seen order."""
        summary: Dict[str, int] = {}
        for inc in self.breakdown:
            summary[inc.rule.value] = summary.get(inc.rule.value, 0) + inc.amount
        return summary

    def to_dict(self) -> dict:
        return {
            "function": self.function,
            "line": self.location.line,
            "total": self.total,
            "breakdown": [inc.to_dict() for inc in self.breakdown],
            "warnings": [w.to_dict() for w in self.warnings],
        }


@dataclass(frozen=True)
class ScopeRequest:
    """A function boundary waiting to be scored as its own scope."""
    node: SyntaxNode
    qualname: str


@dataclass(frozen=True)
class ScopeResult:
    """Output of scoring one scope: its score plus nested scopes it found."""
    score: ComplexityScore
    nested: Tuple[ScopeRequest, ...] = field(default=())


# =============================================================================
# Scope Tracker
# =============================================================================

class Scope:
    """
    Mutable state for walking one function body.

    Owned by a single traversal; never shared between threads.  Depth
    starts at 0 on every new scope, so nesting in an enclosing function
    does not leak into a nested one.
    """

    def __init__(self, identity: Optional[str], qualname: str,
                 location: SourceLocation = UNKNOWN_LOCATION):
        self.identity = identity
        self.qualname = qualname
        self.location = location
        self.depth = 0
        self._increments: List[Increment] = []
        self._warnings: List[Diagnostic] = []

    # ── Nesting ──────────────────────────────────────────────────

    def enter_nesting_structure(self) -> None:
        self.depth += 1

    def exit_nesting_structure(self) -> None:
        if self.depth == 0:
            raise RuntimeError(f"Unbalanced nesting exit in scope {self.qualname}")
        self.depth -= 1

    @contextmanager
    def nested(self):
        self.enter_nesting_structure()
        try:
            yield self
        finally:
            self.exit_nesting_structure()

    # ── Accumulation ─────────────────────────────────────────────

    def add_structural(self, rule: Rule, location: SourceLocation) -> None:
        """+1 plus the current nesting depth."""
        self._increments.append(
            Increment(rule, 1 + self.depth, location, nesting=self.depth)
        )

    def add_flat(self, rule: Rule, location: SourceLocation) -> None:
        """+1 regardless of depth."""
        self._increments.append(Increment(rule, 1, location))

    def warn(self, message: str, location: SourceLocation) -> None:
        self._warnings.append(Diagnostic(message, location))

    def to_score(self) -> ComplexityScore:
        breakdown = tuple(self._increments)
        return ComplexityScore(
            function=self.qualname,
            location=self.location,
            total=sum(inc.amount for inc in breakdown),
            breakdown=breakdown,
            warnings=tuple(self._warnings),
            identity=self.identity,
        )


# =============================================================================
# Score Accumulator
# =============================================================================

_STRUCTURAL_RULES = {
    NodeKind.LOOP: Rule.LOOP,
    NodeKind.SWITCH: Rule.SWITCH,
    NodeKind.CATCH: Rule.CATCH,
    NodeKind.TERNARY: Rule.TERNARY,
}

_BINARY_OPS = frozenset((LogicalOp.AND.value, LogicalOp.OR.value))


def _coerce_kind(kind) -> Optional[NodeKind]:
    if isinstance(kind, NodeKind):
        return kind
    try:
        return NodeKind(kind)
    except (ValueError, TypeError):
        return None


def _is_binary_logical(node: SyntaxNode) -> bool:
    return _coerce_kind(node.kind) is NodeKind.LOGICAL and node.name in _BINARY_OPS


class ScoreAccumulator:
    """
    Walks one scope's subtree and applies the scoring rules.

    Args:
        separate_nested_scopes: When True (default) a nested function is
            not walked; it is handed back as a :class:`ScopeRequest` to be
            scored independently.  When False its body is folded into the
            enclosing scope, one nesting level deeper.

    The accumulator itself holds no per-walk state, so one instance can
    serve many threads.
    """

    def __init__(self, separate_nested_scopes: bool = True):
        self.separate_nested_scopes = separate_nested_scopes
        self._dispatch: Dict[NodeKind, Callable] = {
            NodeKind.BLOCK: self._visit_block,
            NodeKind.BRANCH: self._visit_branch,
            NodeKind.ELSE: self._visit_else,
            NodeKind.LOOP: self._visit_structure,
            NodeKind.SWITCH: self._visit_structure,
            NodeKind.CATCH: self._visit_structure,
            NodeKind.TERNARY: self._visit_structure,
            NodeKind.LOGICAL: self._visit_logical,
            NodeKind.JUMP: self._visit_block,
            NodeKind.CALL: self._visit_call,
            NodeKind.FUNCTION: self._visit_function,
        }
        missing = set(NodeKind) - set(self._dispatch)
        if missing:
            raise RuntimeError(f"No scoring handler for {sorted(k.value for k in missing)}")

    # ── Public API ───────────────────────────────────────────────

    def score(self, node: SyntaxNode, qualname: Optional[str] = None) -> ScopeResult:
        """Score the scope rooted at *node* (normally a function boundary)."""
        identity = node.name
        scope = Scope(
            identity=identity,
            qualname=qualname or identity or "<anonymous>",
            location=node.location,
        )
        nested: List[ScopeRequest] = []
        self._visit_all(node.header, scope, nested)
        self._visit_all(node.children, scope, nested)
        score = scope.to_score()
        for warning in score.warnings:
            logger.debug(f"[{score.function}] {warning}")
        return ScopeResult(score=score, nested=tuple(nested))

    # ── Traversal ────────────────────────────────────────────────

    def _visit_all(self, nodes, scope: Scope, nested: List[ScopeRequest]) -> None:
        for child in nodes:
            self._visit(child, scope, nested)

    def _visit(self, node: SyntaxNode, scope: Scope, nested: List[ScopeRequest]) -> None:
        kind = _coerce_kind(node.kind)
        if kind is None:
            scope.warn(f"Unrecognized node kind {node.kind!r}; scored as 0", node.location)
            self._visit_block(node, scope, nested)
            return
        self._dispatch[kind](node, scope, nested)

    def _visit_block(self, node, scope, nested) -> None:
        self._visit_all(node.header, scope, nested)
        self._visit_all(node.children, scope, nested)

    def _visit_body(self, node, scope, nested) -> None:
        """Walk a structure's body one level deeper; ``else`` parts after leaving it."""
        trailing = []
        with scope.nested():
            for child in node.children:
                if _coerce_kind(child.kind) is NodeKind.ELSE:
                    trailing.append(child)
                else:
                    self._visit(child, scope, nested)
        self._visit_all(trailing, scope, nested)

    def _visit_branch(self, node, scope, nested, rule: Rule = Rule.BRANCH) -> None:
        scope.add_structural(rule, node.location)
        self._visit_all(node.header, scope, nested)
        self._visit_body(node, scope, nested)

    def _visit_else(self, node, scope, nested) -> None:
        if node.is_else_if():
            # Same depth as the originating ``if``.
            self._visit_branch(node.children[0], scope, nested, rule=Rule.ELSE_IF)
            return
        with scope.nested():
            self._visit_all(node.children, scope, nested)

    def _visit_structure(self, node, scope, nested) -> None:
        scope.add_structural(_STRUCTURAL_RULES[_coerce_kind(node.kind)], node.location)
        self._visit_all(node.header, scope, nested)
        self._visit_body(node, scope, nested)

    def _visit_call(self, node, scope, nested) -> None:
        if node.name and scope.identity and node.name == scope.identity:
            scope.add_flat(Rule.RECURSION, node.location)
        self._visit_block(node, scope, nested)

    def _visit_function(self, node, scope, nested) -> None:
        qualname = f"{scope.qualname}.{node.name or '<anonymous>'}"
        if self.separate_nested_scopes:
            nested.append(ScopeRequest(node=node, qualname=qualname))
            return
        self._visit_all(node.header, scope, nested)
        with scope.nested():
            self._visit_all(node.children, scope, nested)

    # ── Boolean expressions ──────────────────────────────────────

    def _visit_logical(self, node, scope, nested) -> None:
        if node.name == LogicalOp.NOT.value:
            scope.add_flat(Rule.NEGATION, node.location)
            self._visit_all(node.children, scope, nested)
            return
        if node.name not in _BINARY_OPS:
            scope.warn(f"Unrecognized logical operator {node.name!r}; scored as 0", node.location)
            self._visit_block(node, scope, nested)
            return

        # ``node`` is the root of an uninterrupted boolean expression: flatten
        # directly nested and/or nodes into one in-order operator sequence.
        operators: List[Tuple[str, SourceLocation]] = []
        operands: List[SyntaxNode] = []
        self._flatten(node, operators, operands)

        previous = None
        for op, location in operators:
            if op != previous:
                scope.add_flat(Rule.LOGICAL_SEQUENCE, location)
            previous = op
        self._visit_all(operands, scope, nested)

    def _flatten(self, node: SyntaxNode, operators: list, operands: list) -> None:
        for index, operand in enumerate(node.children):
            if index:
                operators.append((node.name, node.location))
            if _is_binary_logical(operand):
                self._flatten(operand, operators, operands)
            else:
                operands.append(operand)


# =============================================================================
# Convenience
# =============================================================================

def score_function_tree(node: SyntaxNode,
                        accumulator: Optional[ScoreAccumulator] = None,
                        qualname: Optional[str] = None) -> List[ComplexityScore]:
    """
    Score *node* and every nested scope it contains, sequentially.

    Returns the root's score first, followed by nested scopes in
    discovery order.
    """
    acc = accumulator or ScoreAccumulator()
    scores: List[ComplexityScore] = []
    pending = [ScopeRequest(node=node, qualname=qualname or node.name or "<anonymous>")]
    while pending:
        request = pending.pop(0)
        result = acc.score(request.node, request.qualname)
        scores.append(result.score)
        pending.extend(result.nested)
    return scores
