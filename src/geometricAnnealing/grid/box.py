"""Rectangular grid regions used to restrict energy evaluation."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BoundingBox:
    """Inclusive rectangle ``[min_row, max_row] x [min_col, max_col]``."""

    min_row: int
    max_row: int
    min_col: int
    max_col: int

    def __post_init__(self) -> None:
        if self.min_row > self.max_row:
            raise ValueError("min_row must be <= max_row")
        if self.min_col > self.max_col:
            raise ValueError("min_col must be <= max_col")

    @classmethod
    def full(cls, size: int) -> "BoundingBox":
        if size <= 0:
            raise ValueError("size must be > 0")
        return cls(0, size - 1, 0, size - 1)

    @classmethod
    def around(cls, row: int, col: int, radius: int, size: int) -> "BoundingBox":
        """Square of ``radius`` around a cell, clamped to an ``size`` grid."""
        if radius < 0:
            raise ValueError("radius must be >= 0")
        return cls(
            max(0, row - radius),
            min(size - 1, row + radius),
            max(0, col - radius),
            min(size - 1, col + radius),
        )

    @property
    def height(self) -> int:
        return self.max_row - self.min_row + 1

    @property
    def width(self) -> int:
        return self.max_col - self.min_col + 1

    @property
    def shape(self) -> tuple[int, int]:
        return self.height, self.width

    @property
    def area(self) -> int:
        return self.height * self.width

    def contains(self, row: int, col: int) -> bool:
        return self.min_row <= row <= self.max_row and self.min_col <= col <= self.max_col

    def overlaps(self, other: "BoundingBox") -> bool:
        """True when the boxes share at least one cell.

        Boxes that merely touch edge to edge (rows 0..3 and 4..7) do not
        overlap.
        """
        return not (
            self.max_row < other.min_row
            or other.max_row < self.min_row
            or self.max_col < other.min_col
            or other.max_col < self.min_col
        )

    def union(self, other: "BoundingBox") -> "BoundingBox":
        """Smallest box covering both boxes."""
        return BoundingBox(
            min(self.min_row, other.min_row),
            max(self.max_row, other.max_row),
            min(self.min_col, other.min_col),
            max(self.max_col, other.max_col),
        )

    def expand(self, margin: int, size: int) -> "BoundingBox":
        return BoundingBox(
            max(0, self.min_row - margin),
            min(size - 1, self.max_row + margin),
            max(0, self.min_col - margin),
            min(size - 1, self.max_col + margin),
        )

    def slices(self) -> tuple[slice, slice]:
        return slice(self.min_row, self.max_row + 1), slice(self.min_col, self.max_col + 1)


__all__ = ["BoundingBox"]
