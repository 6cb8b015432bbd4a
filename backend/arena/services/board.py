from typing import NamedTuple, Optional, Sequence, Tuple

EMPTY = ''
X = 'X'
O = 'O'
DRAW = 'draw'

# Rows, columns, diagonals. Order matters: the first completed line wins.
WIN_LINES: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),
    (0, 3, 6), (1, 4, 7), (2, 5, 8),
    (0, 4, 8), (2, 4, 6),
)


class Result(NamedTuple):
    winner: str  # 'X', 'O' or 'draw'
    line: Optional[Tuple[int, int, int]]

    @property
    def is_draw(self) -> bool:
        return self.winner == DRAW


def new_board():
    return [EMPTY] * 9


def evaluate(board: Sequence[str]) -> Optional[Result]:
    """Return the terminal result of a 3x3 board, or None if play continues."""
    for line in WIN_LINES:
        a, b, c = line
        if board[a] and board[a] == board[b] == board[c]:
            return Result(board[a], line)
    if all(cell != EMPTY for cell in board):
        return Result(DRAW, None)
    return None
