class DomainError(Exception):
    """Base for domain (business) errors."""
    reason = "DomainError"
    status = 400

    def __init__(self, message: str = ""):
        super().__init__(message or self.reason)
        self.message = message or self.reason


class BadInput(DomainError):
    """Comment payload outside its contract."""
    reason = "InvalidInput"


class InvalidCommentId(DomainError):
    """commentId is not a positive integer."""
    reason = "InvalidCommentId"


class MissingClientId(DomainError):
    """No client identifier could be derived."""
    reason = "MissingClientId"


class AlreadyLiked(DomainError):
    """The (comment, client) pair is already recorded."""
    reason = "AlreadyLiked"


class CommentNotFound(DomainError):
    """Referenced comment does not exist."""
    reason = "CommentNotFound"
    status = 404


class StorageFailure(DomainError):
    """The database could not complete the operation.

    `recorded` tells the caller whether the like row was committed even
    though the visible count may be stale.
    """
    reason = "StorageFailure"
    status = 503

    def __init__(self, message: str = "", recorded: bool = False):
        super().__init__(message)
        self.recorded = recorded
