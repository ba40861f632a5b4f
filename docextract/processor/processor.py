from collections.abc import Sequence
from dataclasses import dataclass

from docextract.ai.factory import CompletionClientFactory
from docextract.audit.audit_logger import AuditLogger
from docextract.audit.models import AuditEvent, AuditEventType, AuditSeverity, AuditStatus
from docextract.config.settings import Settings
from docextract.database.repositories.audit_log_repository import AuditLogRepository
from docextract.database.repositories.documents_repository import DocumentsRepository
from docextract.database.repositories.extracted_data_repository import ExtractedDataRepository
from docextract.database.repositories.user_settings_repository import UserSettingsRepository
from docextract.extraction.factory import TextExtractorFactory
from docextract.logging.logger import Log
from docextract.notion.schema_fetcher import NotionSchemaFetcher
from docextract.processor.exceptions import (
    ConfigurationError,
    InvalidInputError,
    ProcessingFailedError,
    ProcessorError,
    UnauthorizedError,
)
from docextract.processor.models import ProcessingOutcome, ProcessingRequest
from docextract.processor.pipeline import PipelineContext, PipelineStep
from docextract.processor.steps import (
    AnalyzeDocumentStep,
    AuthorizeOwnerStep,
    EnsureAiConfiguredStep,
    ExtractTextStep,
    FetchSchemaStep,
    LoadDocumentStep,
    MarkCompletedStep,
    MarkFailedStep,
    MarkProcessingStep,
    PersistExtractedDataStep,
    ReconcileCsvStep,
    ResolveCredentialStep,
    ResolveSourceStep,
    RetrieveFileStep,
    ValidateFileStep,
    ValidateRequestStep,
)
from docextract.security.credentials import CredentialResolver
from docextract.storage.file_retriever import FileRetriever
from docextract.storage.storage_client import SupabaseStorageClient


class Processor:
    """Runs the document pipeline and owns its single failure path.

    Pipeline: validate -> load -> authorize -> gate -> mark processing ->
    resolve source and credential -> fetch schema -> retrieve -> extract ->
    analyze -> reconcile CSV -> persist -> mark completed.
    """

    def __init__(
        self,
        steps: Sequence[PipelineStep],
        failed_step: PipelineStep,
        audit_logger: AuditLogger,
    ) -> None:
        self._steps = list(steps)
        self._failed_step = failed_step
        self._audit_logger = audit_logger

    def process(self, request: ProcessingRequest) -> ProcessingOutcome:
        """Process one document.

        Raises:
            ProcessorError: a typed failure; the document status and audit log
                have already been updated where applicable.
        """
        Log.info(f"Processing document {request.document_id} for user {request.caller.user_id}")
        context = PipelineContext(request=request)

        try:
            for step in self._steps:
                context = step.run(context)
        except ProcessorError as exc:
            self._handle_failure(context, exc)
            raise
        except Exception as exc:
            self._handle_failure(context, exc)
            raise ProcessingFailedError(str(exc) or type(exc).__name__) from exc

        self._audit_success(context)
        return ProcessingOutcome(
            document_id=context.document_id,
            extracted_data_id=context.extracted_data_id,
            source_id=context.source_id,
            schema_applied=bool(context.expected_headers),
            csv_rebuilt=context.csv_rebuilt,
            column_count=context.column_count,
        )

    def _handle_failure(self, context: PipelineContext, exc: Exception) -> None:
        """Record the failure on the document and in the audit log. Never raises."""
        message = str(exc) or type(exc).__name__
        context.error_message = message
        Log.error(f"Processing failed for document {context.request.document_id}: {message}")

        if context.status_marked and context.document_id:
            try:
                self._failed_step.run(context)
            except Exception as status_exc:
                Log.error(
                    f"Failed to mark document {context.document_id} as error: {status_exc}"
                )

        try:
            self._audit_logger.log_event(self._failure_event(context, exc))
        except Exception as audit_exc:
            Log.error(f"Failed to audit processing failure: {audit_exc}")

    @staticmethod
    def _failure_event(context: PipelineContext, exc: Exception) -> AuditEvent:
        caller = context.request.caller
        if isinstance(exc, UnauthorizedError):
            event_type, severity = AuditEventType.UNAUTHORIZED_ACCESS, AuditSeverity.WARNING
        elif isinstance(exc, InvalidInputError):
            event_type, severity = AuditEventType.INVALID_INPUT, AuditSeverity.WARNING
        elif isinstance(exc, ConfigurationError):
            event_type, severity = AuditEventType.CONFIGURATION_ERROR, AuditSeverity.CRITICAL
        else:
            event_type, severity = AuditEventType.DOCUMENT_PROCESS, AuditSeverity.ERROR

        metadata = None
        if isinstance(exc, UnauthorizedError) and context.document is not None:
            metadata = {"reason": exc.reason, "owner_id": context.document.user_id}

        return AuditEvent(
            event_type=event_type,
            severity=severity,
            action="process_document",
            status=AuditStatus.FAILURE,
            user_id=caller.user_id,
            user_email=caller.email,
            ip_address=caller.ip_address,
            user_agent=caller.user_agent,
            resource="document",
            resource_id=context.document_id or context.request.document_id,
            error_message=context.error_message[:500],
            metadata=metadata,
        )

    def _audit_success(self, context: PipelineContext) -> None:
        document = context.require_document()
        caller = context.request.caller
        metadata: dict[str, object] = {
            "filename": document.filename,
            "file_type": document.file_type,
            "schema_applied": bool(context.expected_headers),
            "column_count": context.column_count,
        }
        if context.credential is not None:
            metadata["credential_source"] = context.credential.source.value
        self._audit_logger.log_event(
            AuditEvent(
                event_type=AuditEventType.DOCUMENT_PROCESSED,
                severity=AuditSeverity.INFO,
                action="process_document",
                status=AuditStatus.SUCCESS,
                user_id=caller.user_id,
                user_email=caller.email,
                ip_address=caller.ip_address,
                user_agent=caller.user_agent,
                resource="document",
                resource_id=context.document_id,
                metadata=metadata,
            )
        )


@dataclass
class ProcessorResources:
    """HTTP clients owned by a built processor; closed on shutdown."""

    schema_fetcher: NotionSchemaFetcher
    storage_client: SupabaseStorageClient
    file_retriever: FileRetriever

    def close(self) -> None:
        self.schema_fetcher.close()
        self.file_retriever.close()
        self.storage_client.close()


def build_processor(
    settings: Settings,
    audit_logger: AuditLogger | None = None,
) -> tuple[Processor, ProcessorResources]:
    """Build a Processor with all required adapters."""
    audit_logger = audit_logger or AuditLogger(AuditLogRepository())
    doc_repo = DocumentsRepository()

    storage_client = SupabaseStorageClient(
        base_url=settings.supabase_url,
        service_key=settings.supabase_service_role_key,
        timeout_seconds=settings.storage_timeout_seconds,
    )
    resources = ProcessorResources(
        schema_fetcher=NotionSchemaFetcher(
            base_url=settings.notion_api_base_url,
            api_version=settings.notion_api_version,
            timeout_seconds=settings.notion_timeout_seconds,
        ),
        storage_client=storage_client,
        file_retriever=FileRetriever(
            storage_client,
            bucket=settings.storage_bucket,
            path_marker=settings.storage_path_marker,
            timeout_seconds=settings.storage_timeout_seconds,
        ),
    )

    resolver = CredentialResolver(
        encryption_secret=settings.encryption_secret,
        fallback_api_key=settings.notion_api_key,
        audit_logger=audit_logger,
    )

    steps: list[PipelineStep] = [
        ValidateRequestStep(),
        LoadDocumentStep(doc_repo),
        AuthorizeOwnerStep(),
        ValidateFileStep(max_file_size_mb=settings.max_file_size_mb),
        MarkProcessingStep(doc_repo),
        EnsureAiConfiguredStep(
            settings.ai_api_key,
            key_required=CompletionClientFactory.requires_api_key(settings),
        ),
        ResolveSourceStep(UserSettingsRepository()),
        ResolveCredentialStep(resolver),
        FetchSchemaStep(resources.schema_fetcher),
        RetrieveFileStep(resources.file_retriever),
        ExtractTextStep(TextExtractorFactory.create(settings)),
        AnalyzeDocumentStep(CompletionClientFactory.create_analyzer(settings)),
        ReconcileCsvStep(),
        PersistExtractedDataStep(ExtractedDataRepository()),
        MarkCompletedStep(doc_repo),
    ]
    return Processor(steps, MarkFailedStep(doc_repo), audit_logger), resources
