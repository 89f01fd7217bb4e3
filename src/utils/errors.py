"""Custom exception hierarchy for cratedigger.

All application exceptions inherit from :class:`CrateDiggerError`, which
carries an optional ``provider_name`` so log lines can say which external
service (``"lastfm"``, ``"nomic_embedding"``, ``"chromadb"``) failed.

The hierarchy mirrors the containment levels of the ingestion loop:

    CrateDiggerError  (base)
    +-- TransportError             (Last.fm network / HTTP failure)
    +-- MalformedResponseError     (Last.fm payload has an unexpected shape)
    +-- EmbeddingUnavailableError  (embedding service unreachable)
    +-- StoreUnavailableError      (vector collection unreachable)
    +-- ConfigurationError         (startup / missing config)

Transport and shape errors are recovered inside the metadata provider,
embedding errors are recovered per album, store errors travel up to the
sweep boundary, and configuration errors stop the process before it starts.
"""


class CrateDiggerError(Exception):
    """Base exception for all cratedigger errors.

    ``__str__`` prefixes the provider name in brackets, e.g.
    ``[lastfm] tag.gettopalbums returned HTTP 503``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Metadata source errors (recovered locally as "no data")
# ---------------------------------------------------------------------------

class TransportError(CrateDiggerError):
    """Raised when a metadata request fails at the network or HTTP level."""

    def __init__(
        self,
        message: str = "Metadata request failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class MalformedResponseError(CrateDiggerError):
    """Raised when a metadata payload does not have the expected shape."""

    def __init__(
        self,
        message: str = "Malformed metadata response",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Embedding / vector-store errors
# ---------------------------------------------------------------------------

class EmbeddingUnavailableError(CrateDiggerError):
    """Raised when the embedding service cannot produce a vector.

    The ingestion loop skips the current album and keeps sweeping.
    """

    def __init__(
        self,
        message: str = "Embedding service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class StoreUnavailableError(CrateDiggerError):
    """Raised when the vector collection cannot be reached or written.

    Not recoverable per album: it propagates to the sweep boundary, which
    waits out the recovery delay and tries again on the next sweep.
    """

    def __init__(
        self,
        message: str = "Vector store is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Startup errors
# ---------------------------------------------------------------------------

class ConfigurationError(CrateDiggerError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
