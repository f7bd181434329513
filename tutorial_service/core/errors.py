class StoreError(Exception):
    """Raised when one or more writes or reads against the store fail.

    Dual-writes are not rolled back: when ``failures`` lists fewer
    operations than were issued, the remaining writes were applied.
    """

    def __init__(self, operation: str, failures: list[BaseException]):
        self.operation = operation
        self.failures = failures
        super().__init__(
            f"{operation} failed: " + "; ".join(str(failure) for failure in failures)
        )
