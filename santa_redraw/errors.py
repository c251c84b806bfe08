class AssignmentError(Exception):
    pass


class ConflictError(AssignmentError):
    def __init__(self, receiver: str, givers: tuple[str, str]):
        self.receiver = receiver
        self.givers = givers
        super().__init__(
            "Conflict: More than one person has purchased a gift for the same receiver. "
            "Manual intervention is required."
        )


class MultiplePurchasesError(AssignmentError):
    def __init__(self, giver: str, receivers: tuple[str, str]):
        self.giver = giver
        self.receivers = receivers
        super().__init__(
            f"'{giver}' has purchased gifts for both '{receivers[0]}' and '{receivers[1]}'. "
            "Manual intervention is required."
        )


class UnbalancedPoolError(AssignmentError):
    pass


class NoValidMatchingError(AssignmentError):
    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__(f"Failed to find a valid assignment without self-pairing after {attempts} attempts.")


class SourceError(Exception):
    """Raised when a roster or submission file cannot be read."""


class DeliveryError(Exception):
    def __init__(self, to: str, detail: str, status_code: int | None = None):
        self.to = to
        self.status_code = status_code
        super().__init__(f"Delivery to {to} failed: {detail}")
