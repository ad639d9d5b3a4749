from collections.abc import Collection


class ReconciliationError(Exception):
    """
    A batch of errors of one reconcile pass.

    The pass does not stop on the first failed object: all other objects
    are still reconciled, and all the failures are reported together.
    """

    def __init__(self, message: str, errors: Collection[BaseException] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.errors = list(errors)

    def __str__(self) -> str:
        if not self.errors:
            return self.message
        details = '; '.join(str(error) for error in self.errors)
        return f"{self.message} {details}"


class PruningError(Exception):
    """
    The owned objects cannot be listed, so it is unknown which ones are orphaned.

    Nothing is deleted in that case: it is safer to keep an orphan until
    the next pass than to delete an object that is still desired.
    """
