"""Error taxonomy for workflow and settlement operations."""


class WorkflowError(Exception):
    """Base class for failures surfaced to callers."""

    kind = "WorkflowError"

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class NotFoundError(WorkflowError):
    """Unknown photo id or processor identity."""

    kind = "NotFound"


class UnauthorizedError(WorkflowError):
    """Caller lacks the required role or ownership."""

    kind = "Unauthorized"


class InvalidTransitionError(WorkflowError):
    """A state machine guard failed."""

    kind = "InvalidTransition"


class InsufficientPaymentError(WorkflowError):
    """Payment is below the configured fee."""

    kind = "InsufficientPayment"

    def __init__(self, fee_name: str, required: int, paid: int) -> None:
        super().__init__(f"{fee_name} requires {required}, got {paid}")
        self.fee_name = fee_name
        self.required = required
        self.paid = paid


class AlreadyRegisteredError(WorkflowError):
    """Processor identity is already registered."""

    kind = "AlreadyRegistered"


class OutOfRangeError(WorkflowError):
    """Value outside its permitted range."""

    kind = "OutOfRange"


class InsufficientEscrowError(WorkflowError):
    """Disbursement exceeds pooled funds. Indicates a broken invariant."""

    kind = "InsufficientEscrow"
