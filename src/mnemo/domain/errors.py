"""Error taxonomy for the scheduling engine."""


class MnemoError(Exception):
    """Base class for all mnemo domain errors."""


class InvalidQualityError(MnemoError, ValueError):
    def __init__(self, quality: object):
        self.quality = quality
        super().__init__(f"Quality must be an integer between 0 and 5, got {quality!r}")


class NoActiveSessionError(MnemoError):
    def __init__(self, message: str = "No active session"):
        super().__init__(message)


class CardNotFoundError(MnemoError):
    def __init__(self, card_id: str):
        self.card_id = card_id
        super().__init__(f"Card not found in session: {card_id}")


class SessionAlreadyActiveError(MnemoError):
    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session {session_id} is still active; end it before starting another")
