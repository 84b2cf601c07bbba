from .common import ErrorCode, ErrorDetail, ErrorResponse
from .health import HealthResponse
from .records import RECORD_SCHEMAS, EntityKind, SeedRecord
from .seed import BatchReport, SeedRun, VerificationResponse

__all__ = [
    # common
    "ErrorDetail",
    "ErrorCode",
    "ErrorResponse",
    # health
    "HealthResponse",
    # records
    "EntityKind",
    "SeedRecord",
    "RECORD_SCHEMAS",
    # seed
    "BatchReport",
    "SeedRun",
    "VerificationResponse",
]
