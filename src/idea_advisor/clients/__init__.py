"""
External service clients for the Idea Advisor service.
"""

from .openai_client import OpenAIClient
from .store import DocumentStore, InMemoryStore, SqlDocumentStore, create_store

__all__ = [
    'OpenAIClient',
    'DocumentStore',
    'InMemoryStore',
    'SqlDocumentStore',
    'create_store',
]
