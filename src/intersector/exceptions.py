"""Exception hierarchy for Intersector."""


class IntersectorError(Exception):
    """Base exception for all Intersector errors."""

    pass


class NumericInputError(IntersectorError):
    """Invalid numeric input passed to the polynomial engine."""

    def __init__(self, operation: str, value: float, reason: str) -> None:
        self.operation = operation
        self.value = value
        self.reason = reason
        super().__init__(f"{operation}: {reason} (got {value!r})")


class GeometryError(IntersectorError):
    """Errors in geometric data or calculations."""

    pass


class ShapeError(GeometryError):
    """Malformed shape data."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class UnsupportedShapePairError(GeometryError):
    """No intersection routine exists for a pair of shape kinds."""

    def __init__(self, kind_a: str, kind_b: str) -> None:
        self.kind_a = kind_a
        self.kind_b = kind_b
        super().__init__(f"No intersection routine for '{kind_a}' and '{kind_b}'")


class BatchError(IntersectorError):
    """Errors related to batch intersection runs."""

    pass


class BatchCancelledError(BatchError):
    """Batch run was cancelled by user."""

    def __init__(self, processed_count: int, pending_count: int) -> None:
        self.processed_count = processed_count
        self.pending_count = pending_count
        super().__init__(
            f"Batch cancelled: {processed_count} completed, {pending_count} pending"
        )
