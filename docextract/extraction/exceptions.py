class TextExtractionError(Exception):
    """Raised when a document's text layer cannot be read."""
