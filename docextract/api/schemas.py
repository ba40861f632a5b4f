from pydantic import BaseModel, ConfigDict, Field


class ProcessDocumentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    document_id: str | None = Field(default=None, alias="documentId")
    source_id: str | None = Field(default=None, alias="sourceId")


class ProcessDocumentResponse(BaseModel):
    success: bool = True
    message: str = "Document processed successfully"
    extracted_data_id: str
    source_id: str | None = None
    schema_applied: bool = False
    csv_rebuilt: bool = False
    column_count: int = 0


class UserSettingsRequest(BaseModel):
    notion_api_key: str | None = None
    default_source_id: str | None = None


class UserSettingsResponse(BaseModel):
    notion_api_key: str = ""
    default_source_id: str = ""
