from docextract.ai.analyzer import DocumentAnalyzer
from docextract.ai.models import Attachment, BinaryAttachment, TextAttachment
from docextract.database.repositories.documents_repository import DocumentsRepository
from docextract.database.repositories.extracted_data_repository import ExtractedDataRepository
from docextract.database.repositories.user_settings_repository import UserSettingsRepository
from docextract.extraction.local_extractor import LocalTextExtractor, is_image_type
from docextract.logging.logger import Log
from docextract.notion.schema_fetcher import NotionSchemaFetcher
from docextract.parsing.csv_reconciler import read_header, reconcile_csv
from docextract.parsing.response_parser import tag_with_source
from docextract.processor.exceptions import (
    ConfigurationError,
    InvalidInputError,
    InvalidSourceIdError,
    UnauthorizedError,
    UnsupportedFileTypeError,
)
from docextract.processor.pipeline import PipelineContext, PipelineStep
from docextract.security.credentials import CredentialResolver, classify_stored_key
from docextract.storage.file_retriever import FileRetriever
from docextract.validation.validators import (
    DEFAULT_ALLOWED_FILE_TYPES,
    validate_file_size,
    validate_file_type,
    validate_source_id,
    validate_uuid,
)

ERROR_MESSAGE_MAX_LENGTH = 500


class ValidateRequestStep(PipelineStep):
    def run(self, context: PipelineContext) -> PipelineContext:
        result = validate_uuid(context.request.document_id)
        if not result.valid:
            raise InvalidInputError(result.error or "Invalid document ID")
        context.document_id = result.sanitized
        return context


class LoadDocumentStep(PipelineStep):
    def __init__(self, doc_repo: DocumentsRepository) -> None:
        self._doc_repo = doc_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        context.document = self._doc_repo.find_by_id(context.document_id)
        Log.info(f"Loaded document {context.document_id} ({context.document.filename})")
        return context


class AuthorizeOwnerStep(PipelineStep):
    def run(self, context: PipelineContext) -> PipelineContext:
        document = context.require_document()
        if document.user_id != context.request.caller.user_id:
            raise UnauthorizedError(reason="ownership mismatch")
        return context


class ValidateFileStep(PipelineStep):
    def __init__(
        self,
        max_file_size_mb: int = 20,
        allowed_types: tuple[str, ...] = DEFAULT_ALLOWED_FILE_TYPES,
    ) -> None:
        self._max_file_size_mb = max_file_size_mb
        self._allowed_types = allowed_types

    def run(self, context: PipelineContext) -> PipelineContext:
        document = context.require_document()
        size = validate_file_size(document.file_size, self._max_file_size_mb)
        if not size.valid:
            raise UnsupportedFileTypeError(size.error or "Invalid file size")
        file_type = validate_file_type(document.file_type, self._allowed_types)
        if not file_type.valid:
            raise UnsupportedFileTypeError(file_type.error or "File type not allowed")
        return context


class MarkProcessingStep(PipelineStep):
    def __init__(self, doc_repo: DocumentsRepository) -> None:
        self._doc_repo = doc_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        self._doc_repo.mark_processing(context.document_id)
        context.status_marked = True
        Log.info(f"Document {context.document_id} marked as processing")
        return context


class EnsureAiConfiguredStep(PipelineStep):
    """Fails the run before any external I/O when the AI provider has no API key."""

    def __init__(self, api_key: str, *, key_required: bool = True) -> None:
        self._api_key = api_key
        self._key_required = key_required

    def run(self, context: PipelineContext) -> PipelineContext:
        if self._key_required and not self._api_key.strip():
            raise ConfigurationError("AI_API_KEY is not configured")
        return context


class ResolveSourceStep(PipelineStep):
    """Picks the target Notion database: request override, document, then user default."""

    def __init__(self, settings_repo: UserSettingsRepository) -> None:
        self._settings_repo = settings_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        document = context.require_document()
        context.user_settings = self._settings_repo.find_by_user_id(document.user_id)

        default_source_id = (
            context.user_settings.default_source_id if context.user_settings else None
        )
        candidate = (
            context.request.source_id_override
            or document.source_id
            or default_source_id
        )
        if not candidate:
            Log.info(f"No source_id for document {context.document_id}; generic CSV will be used")
            return context

        result = validate_source_id(candidate)
        if not result.valid:
            raise InvalidSourceIdError(result.error or "Invalid source_id format")
        context.source_id = result.sanitized
        Log.info(f"Resolved source_id {context.source_id} for document {context.document_id}")
        return context


class ResolveCredentialStep(PipelineStep):
    def __init__(self, resolver: CredentialResolver) -> None:
        self._resolver = resolver

    def run(self, context: PipelineContext) -> PipelineContext:
        if not context.source_id:
            return context
        raw_key = context.user_settings.notion_api_key if context.user_settings else None
        context.credential = self._resolver.resolve(
            classify_stored_key(raw_key),
            context.request.caller,
        )
        return context


class FetchSchemaStep(PipelineStep):
    def __init__(self, schema_fetcher: NotionSchemaFetcher) -> None:
        self._schema_fetcher = schema_fetcher

    def run(self, context: PipelineContext) -> PipelineContext:
        if not context.source_id or context.credential is None:
            return context
        headers = self._schema_fetcher.fetch_property_names(
            context.source_id,
            context.credential.token,
        )
        context.expected_headers = headers or None
        if context.expected_headers:
            Log.info(
                f"Fetched {len(context.expected_headers)} headers for database {context.source_id}"
            )
        return context


class RetrieveFileStep(PipelineStep):
    def __init__(self, file_retriever: FileRetriever) -> None:
        self._file_retriever = file_retriever

    def run(self, context: PipelineContext) -> PipelineContext:
        document = context.require_document()
        context.retrieved_file = self._file_retriever.retrieve(document.file_url, document.file_type)
        return context


class ExtractTextStep(PipelineStep):
    def __init__(self, text_extractor: LocalTextExtractor) -> None:
        self._text_extractor = text_extractor

    def run(self, context: PipelineContext) -> PipelineContext:
        document = context.require_document()
        retrieved = context.retrieved_file
        if retrieved is None:
            raise ValueError("PipelineContext.retrieved_file must be set before text extraction")

        context.extracted_text = self._text_extractor.extract(
            retrieved.data,
            retrieved.mime_type,
            document.filename,
        ).strip()

        if not context.extracted_text and not is_image_type(retrieved.mime_type):
            raise UnsupportedFileTypeError(
                f"Unsupported file type for extraction: {document.file_type or retrieved.mime_type}"
            )
        Log.info(
            f"Extracted {len(context.extracted_text)} chars locally from document "
            f"{context.document_id}"
        )
        return context


class AnalyzeDocumentStep(PipelineStep):
    def __init__(self, analyzer: DocumentAnalyzer) -> None:
        self._analyzer = analyzer

    def run(self, context: PipelineContext) -> PipelineContext:
        retrieved = context.retrieved_file
        if retrieved is None:
            raise ValueError("PipelineContext.retrieved_file must be set before analysis")

        attachment: Attachment
        if context.extracted_text:
            attachment = TextAttachment(context.extracted_text)
        else:
            attachment = BinaryAttachment(retrieved.data, retrieved.mime_type)

        context.parsed_response = self._analyzer.analyze(
            attachment,
            headers=context.expected_headers,
            source_id=context.source_id,
        )
        return context


class ReconcileCsvStep(PipelineStep):
    def run(self, context: PipelineContext) -> PipelineContext:
        parsed = context.parsed_response
        if parsed is None:
            raise ValueError("PipelineContext.parsed_response must be set before CSV reconciliation")

        csv_text = parsed.csv_or_fallback()
        if context.expected_headers:
            reconciled = reconcile_csv(csv_text, parsed.structured_content(), context.expected_headers)
            context.csv_data = reconciled.csv
            context.csv_rebuilt = reconciled.rebuilt
            context.column_count = reconciled.column_count
            if reconciled.rebuilt:
                Log.warning(
                    f"CSV headers did not match database {context.source_id}; rebuilt from JSON"
                )
        else:
            context.csv_data = csv_text
            context.column_count = len(read_header(csv_text))
        return context


class PersistExtractedDataStep(PipelineStep):
    def __init__(self, extracted_repo: ExtractedDataRepository) -> None:
        self._extracted_repo = extracted_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        parsed = context.parsed_response
        if parsed is None:
            raise ValueError("PipelineContext.parsed_response must be set before persist")
        context.extracted_data_id = self._extracted_repo.insert(
            context.document_id,
            content=tag_with_source(parsed.structured_content(), context.source_id),
            markdown_content=parsed.markdown_or_raw(),
            csv_data=context.csv_data,
        )
        Log.info(
            f"Stored extracted data {context.extracted_data_id} for document {context.document_id}"
        )
        return context


class MarkCompletedStep(PipelineStep):
    def __init__(self, doc_repo: DocumentsRepository) -> None:
        self._doc_repo = doc_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        self._doc_repo.mark_completed(context.document_id)
        Log.info(f"Document {context.document_id} marked as completed")
        return context


class MarkFailedStep(PipelineStep):
    def __init__(self, doc_repo: DocumentsRepository) -> None:
        self._doc_repo = doc_repo

    def run(self, context: PipelineContext) -> PipelineContext:
        message = context.error_message[:ERROR_MESSAGE_MAX_LENGTH]
        self._doc_repo.mark_error(context.document_id, message)
        Log.error(f"Document {context.document_id} marked as error: {message}")
        return context
