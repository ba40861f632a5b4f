from docextract.ai.analyzer import DocumentAnalyzer
from docextract.ai.factory import CompletionClientFactory

__all__ = ["CompletionClientFactory", "DocumentAnalyzer"]
