class ReconciliationError(Exception):
    """Base class for errors raised by the reconciliation engine."""


class InvalidIdFormat(ReconciliationError):
    def __init__(self, station_id):
        super().__init__(f"Invalid station ID format: {station_id!r}")

        self.station_id = station_id


class NotFound(ReconciliationError):
    def __init__(self, station_id):
        super().__init__(f"Station not found: {station_id}")

        self.station_id = station_id


class ProviderUnavailable(ReconciliationError):
    def __init__(self, provider: str, reason):
        super().__init__(f"{provider} is unavailable: {reason}")

        self.provider = provider
        self.reason = reason


class PartialEnrichmentFailure(ReconciliationError):
    """A single enrichment step failed, the station is kept as it was before that step."""

    def __init__(self, step: str, station_id: str, cause: Exception):
        super().__init__(f"Enrichment step {step!r} failed for {station_id}: {cause}")

        self.step = step
        self.station_id = station_id
        self.cause = cause
