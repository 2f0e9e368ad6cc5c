"""
Blind Rule Engine

Decides if a candidate move is admissible during the blind phase.
Composes the standard chess legality check (Oracle) with the two blind phase limits:

1. a global move limit (max_moves per player)
2. a per piece move limit (max_per_piece)

All rules are evaluated, in registration order. A move can collect multiple violations;
the order of the violations follows the order of the rules (first one is what the UI shows first).
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Self

import chess

from src.blind_phase.moves import Move
from src.blind_phase.oracle import ChessOracle
from src.blind_phase.tracker import PieceMovementTracker
from src.core.config import BlindPhaseConfig
from src.core.exceptions import IllegalMoveError
from src.core.models import MovementSummary, RecordedMove
from src.core.shared_types import Color, ViolationKind

logger = logging.getLogger(__name__)


# --- VIOLATIONS ---
@dataclass(frozen=True)
class Violation:
    """Base of the violation variants. 'kind' is what the UI maps to a message category."""

    kind: ViolationKind = field(init=False)


@dataclass(frozen=True)
class MoveLimitReached(Violation):
    current: int
    max: int
    kind: ViolationKind = field(default=ViolationKind.MOVE_LIMIT, init=False)


@dataclass(frozen=True)
class PieceExhausted(Violation):
    square: str
    move_count: int
    limit: int
    kind: ViolationKind = field(default=ViolationKind.PIECE_EXHAUSTED, init=False)


@dataclass(frozen=True)
class IllegalMove(Violation):
    reason: str
    kind: ViolationKind = field(default=ViolationKind.ILLEGAL_MOVE, init=False)


@dataclass(frozen=True)
class TurnViolation(Violation):
    """A piece of the opponent's color was picked up."""

    expected: Color
    kind: ViolationKind = field(default=ViolationKind.TURN_VIOLATION, init=False)


@dataclass(frozen=True)
class ValidationVerdict:
    violations: tuple[Violation, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.violations

    @classmethod
    def rejected(cls, *violations: Violation) -> Self:
        return cls(tuple(violations))


@dataclass(frozen=True)
class RuleEngineState:
    """Snapshot for the surrounding screen."""

    summary: MovementSummary
    can_add_more_moves: bool
    remaining_moves: int
    total_moves: int


# A rule inspects the (current) position and the candidate move and reports what is wrong with it.
Rule = Callable[[chess.Board, Move], list[Violation]]

MOVE_LIMIT_RULE = "total_move_limit"
PIECE_LIMIT_RULE = "piece_move_limit"
CHESS_VALIDITY_RULE = "chess_validity"


class BlindRuleEngine:
    """Validation of blind moves for a single player."""

    def __init__(
        self,
        max_moves: int = 5,
        max_per_piece: int = 2,
        oracle: Optional[ChessOracle] = None,
    ) -> None:
        self.max_moves = max_moves
        self.max_per_piece = max_per_piece
        self.oracle = oracle or ChessOracle()
        self.tracker = PieceMovementTracker(max_per_piece, max_moves)
        self.enabled = True
        self._rules: dict[str, Rule] = {}
        self._register_default_rules()

    @classmethod
    def from_config(
        cls, config: BlindPhaseConfig, oracle: Optional[ChessOracle] = None
    ) -> Self:
        return cls(config.max_moves, config.max_per_piece, oracle)

    # --- VALIDATION ---
    def validate_move(self, position: chess.Board, move: Move) -> ValidationVerdict:
        """
        Run every rule against the candidate move.
        ----
        No short-circuiting: all violations are collected. Does not touch the tracker or the position.
        A disabled engine accepts anything.
        """
        if not self.enabled:
            return ValidationVerdict()

        violations: list[Violation] = []
        for rule in self._rules.values():
            violations.extend(rule(position, move))
        return ValidationVerdict(tuple(violations))

    # --- BOOKKEEPING ---
    def process_move(
        self,
        position_after_move: chess.Board,
        move: Move,
        san: str,
        sequence_index: int,
    ) -> RecordedMove:
        """Record a move that was already validated and applied. Not a second validation pass."""
        return self.tracker.record_move(
            position_after_move, move.from_square, move.to_square, san, sequence_index
        )

    def reset(self) -> None:
        self.tracker.reset()

    def rule_state(self) -> RuleEngineState:
        return RuleEngineState(
            summary=self.tracker.get_movement_summary(),
            can_add_more_moves=self.tracker.can_add_more_moves(),
            remaining_moves=self.tracker.remaining_moves,
            total_moves=self.tracker.total_moves,
        )

    def clone(self) -> Self:
        """Independent copy (tracker state included). The oracle is stateless and gets shared."""
        cloned = type(self)(self.max_moves, self.max_per_piece, self.oracle)
        cloned.tracker = self.tracker.clone()
        cloned.enabled = self.enabled
        # default rules are bound methods: point them at the clone's own tracker
        cloned._rules = {
            name: (
                getattr(cloned, rule.__name__)
                if getattr(rule, "__self__", None) is self
                else rule
            )
            for name, rule in self._rules.items()
        }
        return cloned

    # --- RULE MANAGEMENT ---
    def add_rule(self, name: str, rule: Rule) -> None:
        """Registers a rule (at the end). Re-using a name replaces that rule in place."""
        self._rules[name] = rule

    def remove_rule(self, name: str) -> bool:
        return self._rules.pop(name, None) is not None

    @property
    def rule_names(self) -> list[str]:
        return list(self._rules.keys())

    def debug_state(self) -> None:
        logger.debug(
            "Rule engine: enabled=%s, rules=%s", self.enabled, ",".join(self.rule_names)
        )
        self.tracker.debug_state()

    # --- DEFAULT RULES ---
    def _register_default_rules(self) -> None:
        self.add_rule(MOVE_LIMIT_RULE, self._check_move_limit)
        self.add_rule(PIECE_LIMIT_RULE, self._check_piece_limit)
        self.add_rule(CHESS_VALIDITY_RULE, self._check_chess_validity)

    def _check_move_limit(self, position: chess.Board, move: Move) -> list[Violation]:
        total_moves = self.tracker.total_moves
        if total_moves >= self.max_moves:
            return [MoveLimitReached(current=total_moves, max=self.max_moves)]
        return []

    def _check_piece_limit(self, position: chess.Board, move: Move) -> list[Violation]:
        """An empty source square is left for the chess validity rule to report."""
        piece = position.piece_at(chess.parse_square(move.from_square))
        if piece is None:
            return []

        move_count = self.tracker.get_piece_move_count(piece, move.from_square)
        if move_count >= self.max_per_piece:
            return [
                PieceExhausted(
                    square=move.from_square,
                    move_count=move_count,
                    limit=self.max_per_piece,
                )
            ]
        return []

    def _check_chess_validity(
        self, position: chess.Board, move: Move
    ) -> list[Violation]:
        try:
            self.oracle.apply_move(position, move)
        except IllegalMoveError as e:
            return [IllegalMove(reason=str(e))]
        return []

