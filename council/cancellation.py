"""Cooperative cancellation shared by the session controller and the stages."""


class TurnCancelled(Exception):
    """Raised when a turn's token was cancelled (user stop or superseded)."""


class CancellationToken:
    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise TurnCancelled()


def check(token: CancellationToken | None) -> None:
    """Raise TurnCancelled if the optional token has been cancelled."""
    if token is not None:
        token.raise_if_cancelled()
