from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class DocumentStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass(frozen=True)
class Document:
    """Domain model for an uploaded document row."""

    id: str
    user_id: str
    filename: str
    file_url: str
    file_type: str
    file_size: int
    status: DocumentStatus = DocumentStatus.PENDING
    error_message: str | None = None
    source_id: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class Caller:
    """The authenticated user behind a request, plus request metadata for auditing."""

    user_id: str
    email: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True)
class ProcessingRequest:
    document_id: str
    caller: Caller
    source_id_override: str | None = None


@dataclass(frozen=True)
class ProcessingOutcome:
    """Summary returned to the API layer after a successful run."""

    document_id: str
    extracted_data_id: str
    source_id: str | None
    schema_applied: bool
    csv_rebuilt: bool
    column_count: int
