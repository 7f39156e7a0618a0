"""Exceptions raised by the placement solver."""


class ShapeError(ValueError):
    """A mask's declared dimensions disagree with its cell buffer."""

    def __init__(self, shape, length):
        self.shape = tuple(shape)
        self.length = length
        super().__init__(
            f"mask shape {self.shape[0]}x{self.shape[1]} needs "
            f"{self.shape[0] * self.shape[1]} cells, got {length}"
        )


class PlaceError(Exception):
    """A mask could not be placed on a grid."""


class SourceClipped(PlaceError):
    """An occupied mask cell would fall off the grid."""


class DestinationClobbered(PlaceError):
    """An occupied mask cell would land on a non-empty grid cell."""


class ShapesMismatched(PlaceError):
    """Mask and grid dimensions differ (configuration error)."""

    def __init__(self, mask_shape, grid_shape):
        self.mask_shape = tuple(mask_shape)
        self.grid_shape = tuple(grid_shape)
        super().__init__(f"mask shape {self.mask_shape} does not match grid shape {self.grid_shape}")


class MismatchedConstraintCount(ValueError):
    """Number of attribute constraints differs from a part's effect count."""

    def __init__(self, expected, got, part_index=None):
        self.expected = expected
        self.got = got
        self.part_index = part_index
        where = "" if part_index is None else f" (part {part_index})"
        super().__init__(f"expected {expected} attribute effects, got {got}{where}")
