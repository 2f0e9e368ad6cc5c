"""
Boundary layer data model(s).

These objects are passed between the domain layer (tracker / session), the persistence layer and the service.
(Decouples the data model specific to the DB layer or API layer from the information needed to send across boundaries)
"""

from dataclasses import dataclass, field

# Type aliases to make the models easier to read
SquareName = str


@dataclass(frozen=True)
class RecordedMove:
    """An accepted blind move, in the order it was played (sequence_index starts at 1)."""

    from_square: SquareName
    to_square: SquareName
    san: str
    sequence_index: int


@dataclass(frozen=True)
class MovementSummary:
    """Counters derived from the move log of one player."""

    total_moves: int = 0
    per_piece_move_counts: dict[SquareName, int] = field(default_factory=dict)
    pieces_moved: int = 0
    exhausted_pieces: int = 0
    remaining_moves: int = 0
