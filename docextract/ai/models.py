import base64
from dataclasses import dataclass


@dataclass(frozen=True)
class TextAttachment:
    """Locally extracted document text sent alongside the prompt."""

    text: str


@dataclass(frozen=True)
class BinaryAttachment:
    """Raw document bytes sent inline, tagged with their MIME type."""

    data: bytes
    mime_type: str

    def to_data_url(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"


Attachment = TextAttachment | BinaryAttachment
