"""Data models for page metadata and conversion results."""

from src.models.conversion_metadata import ConversionMetadata
from src.models.conversion_result import ConversionResult, UploadDocument

__all__ = ['ConversionMetadata', 'ConversionResult', 'UploadDocument']
