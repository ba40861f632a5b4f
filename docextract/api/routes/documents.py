from fastapi import APIRouter, Depends

from docextract.api.dependencies import enforce_rate_limit, get_caller, get_services
from docextract.api.schemas import ProcessDocumentRequest, ProcessDocumentResponse
from docextract.container import Services
from docextract.processor.models import Caller, ProcessingRequest

router = APIRouter(tags=["documents"])


@router.post(
    "/process-document",
    response_model=ProcessDocumentResponse,
    dependencies=[Depends(enforce_rate_limit)],
)
def process_document(
    body: ProcessDocumentRequest,
    caller: Caller = Depends(get_caller),
    services: Services = Depends(get_services),
) -> ProcessDocumentResponse:
    """Extract one uploaded document into JSON, Markdown and CSV."""
    outcome = services.processor.process(
        ProcessingRequest(
            document_id=body.document_id or "",
            caller=caller,
            source_id_override=body.source_id or None,
        )
    )
    return ProcessDocumentResponse(
        extracted_data_id=outcome.extracted_data_id,
        source_id=outcome.source_id,
        schema_applied=outcome.schema_applied,
        csv_rebuilt=outcome.csv_rebuilt,
        column_count=outcome.column_count,
    )
