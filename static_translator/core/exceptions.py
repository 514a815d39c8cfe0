"""
Exception hierarchy for the static site translator.

Every error raised by the extraction, translation and reinjection stages
derives from TranslationError so that a per-document task can capture it in
its result record without aborting sibling tasks.
"""

from typing import Optional, Dict, Any


class TranslationError(Exception):
    """Base exception for all translation-related errors.

    Attributes:
        message: Human-readable error message
        context: Additional context about the error
        recoverable: Whether the error can potentially be recovered from
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        recoverable: bool = False
    ):
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        base = f"{self.__class__.__name__}: {self.message}"
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base += f" (context: {context_str})"
        return base


# ============================================================================
# Configuration errors
# ============================================================================

class ConfigurationError(TranslationError):
    """Raised when configuration is invalid or missing.

    Always fatal: the run is aborted before any task is dispatched.
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context, recoverable=False)


# ============================================================================
# File errors
# ============================================================================

class FileFormatError(TranslationError):
    """Base exception for file-level errors."""
    pass


class SourceUnreadableError(FileFormatError):
    """Raised when a source document cannot be read or decoded."""

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        ctx = context or {}
        if path is not None:
            ctx['path'] = path
        super().__init__(message, ctx, recoverable=False)


class FileWriteError(FileFormatError):
    """Raised when writing an output document fails."""
    pass


# ============================================================================
# HTML processing errors
# ============================================================================

class HtmlProcessingError(TranslationError):
    """Base exception for extraction and reinjection errors."""
    pass


class StructuredDataError(HtmlProcessingError):
    """Raised when a JSON-LD block cannot be parsed.

    Handled locally: the block is skipped and kept verbatim.
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context, recoverable=True)


class PlaceholderLeakError(HtmlProcessingError):
    """Raised when a placeholder token survives restoration.

    Attributes:
        leaked_tokens: Tokens still present in the output
    """

    def __init__(
        self,
        message: str,
        leaked_tokens: Optional[list] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        ctx = context or {}
        if leaked_tokens:
            ctx['leaked_tokens'] = leaked_tokens
        super().__init__(message, ctx, recoverable=False)
        self.leaked_tokens = leaked_tokens or []


# ============================================================================
# LLM-related errors
# ============================================================================

class LLMError(TranslationError):
    """Base exception for LLM provider errors."""
    pass


class LLMConnectionError(LLMError):
    """Raised when the request to the LLM provider fails in transport
    (timeout, refused connection, unexpected HTTP status).

    Classified as a non rate-limit failure: it is not retried.
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context, recoverable=False)


class LLMRateLimitError(LLMError):
    """Raised when rate limit is exceeded.

    This is recoverable by waiting and retrying.
    """

    def __init__(
        self,
        message: str,
        retry_after: Optional[float] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        ctx = context or {}
        if retry_after is not None:
            ctx['retry_after'] = retry_after
        super().__init__(message, ctx, recoverable=True)
        self.retry_after = retry_after


class LLMAuthenticationError(LLMError):
    """Raised when authentication fails (missing/invalid API key).

    This is NOT recoverable without user intervention.
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context, recoverable=False)


class LLMResponseError(LLMError):
    """Raised when LLM response is invalid or unparseable.

    This is recoverable by retrying the request.
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context, recoverable=True)


# ============================================================================
# Retry exhaustion
# ============================================================================

class TranslationFailedError(TranslationError):
    """Raised when a batch could not be translated.

    Either every retry attempt was used up, or the failure was not one that
    is retried at all.

    Attributes:
        original_error: The last error raised by the provider
        attempts: Number of attempts made
    """

    def __init__(
        self,
        message: str,
        original_error: Optional[Exception] = None,
        attempts: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        ctx = context or {}
        if original_error:
            ctx['original_error'] = str(original_error)
            ctx['original_error_type'] = type(original_error).__name__
        if attempts is not None:
            ctx['attempts'] = attempts
        super().__init__(message, ctx, recoverable=False)
        self.original_error = original_error
        self.attempts = attempts
