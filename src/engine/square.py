from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator


FILES = "ABCDEFGH"


@dataclass(frozen=True)
class Square:
    """Board coordinate.

    Attributes:
        x (int): File, 0..7 maps to A..H.
        y (int): Rank, 0..7 maps to 1..8.

    Notes:
        Coordinates outside 0..7 are allowed so that offset arithmetic never
        fails; such squares convert to an empty bitmask.
    """

    x: int
    y: int

    @classmethod
    def from_index(cls, idx: int) -> "Square":
        return cls(idx % 8, idx // 8)

    @classmethod
    def from_algebraic(cls, s: str) -> "Square":
        """Parse a square name such as ``"E4"`` (case-insensitive).

        Raises:
            ValueError: If ``s`` is not a file letter followed by a rank digit.
        """
        if not isinstance(s, str) or len(s) != 2:
            raise ValueError(f"invalid square: {s!r}")
        file_ch = s[0].upper()
        if file_ch not in FILES or s[1] < "1" or s[1] > "8":
            raise ValueError(f"invalid square: {s!r}")
        return cls(FILES.index(file_ch), int(s[1]) - 1)

    def in_bounds(self) -> bool:
        return 0 <= self.x < 8 and 0 <= self.y < 8

    def index(self) -> int:
        return self.y * 8 + self.x

    def to_bitmap(self) -> int:
        """Return the single-bit mask for this square, or 0 when off-board."""
        if not self.in_bounds():
            return 0
        return 1 << self.index()

    def to_algebraic(self) -> str:
        if not self.in_bounds():
            raise ValueError(f"square off board: ({self.x}, {self.y})")
        return FILES[self.x] + str(self.y + 1)

    def moved(self, dx: int, dy: int) -> "Square":
        return Square(self.x + dx, self.y + dy)

    def left(self, i: int = 1) -> "Square":
        return Square(self.x - i, self.y)

    def right(self, i: int = 1) -> "Square":
        return Square(self.x + i, self.y)

    def up(self, i: int = 1) -> "Square":
        return Square(self.x, self.y + i)

    def down(self, i: int = 1) -> "Square":
        return Square(self.x, self.y - i)

    def __str__(self) -> str:
        return self.to_algebraic() if self.in_bounds() else f"({self.x}, {self.y})"


# Sentinel for "no move yet" in last-move tracking
NO_SQUARE = Square(-1, -1)


def squares_in(mask: int) -> Iterator[Square]:
    """Yield the squares of every set bit in ``mask``, lowest index first."""
    while mask:
        lsb = mask & -mask
        yield Square.from_index(lsb.bit_length() - 1)
        mask ^= lsb
