from reconcile.assemble import StationAssembler
from reconcile.errors import InvalidIdFormat, NotFound, PartialEnrichmentFailure, ProviderUnavailable, ReconciliationError
from reconcile.models import ConnectorRecord, Location, Station


__all__ = [
    "ConnectorRecord",
    "InvalidIdFormat",
    "Location",
    "NotFound",
    "PartialEnrichmentFailure",
    "ProviderUnavailable",
    "ReconciliationError",
    "Station",
    "StationAssembler",
]
