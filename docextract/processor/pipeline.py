from abc import ABC, abstractmethod
from dataclasses import dataclass

from docextract.database.models import UserSettingsRecord
from docextract.parsing.response_parser import ParsedResponse
from docextract.processor.models import Document, ProcessingRequest
from docextract.security.credentials import ResolvedCredential
from docextract.storage.file_retriever import RetrievedFile


@dataclass(slots=True)
class PipelineContext:
    request: ProcessingRequest
    document_id: str = ""
    document: Document | None = None
    status_marked: bool = False
    user_settings: UserSettingsRecord | None = None
    source_id: str | None = None
    credential: ResolvedCredential | None = None
    expected_headers: list[str] | None = None
    retrieved_file: RetrievedFile | None = None
    extracted_text: str = ""
    parsed_response: ParsedResponse | None = None
    csv_data: str = ""
    csv_rebuilt: bool = False
    column_count: int = 0
    extracted_data_id: str = ""
    error_message: str = ""

    def require_document(self) -> Document:
        if self.document is None:
            raise ValueError("PipelineContext.document must be set before this step")
        return self.document


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
