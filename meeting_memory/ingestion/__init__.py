"""Recording ingestion - transcription, summary, actions, illustration, embeddings."""

from .inference import InferenceClient, TranscriptionResult
from .pipeline import IngestionPipeline
from .transcoder import Transcoder

__all__ = [
    "InferenceClient",
    "IngestionPipeline",
    "Transcoder",
    "TranscriptionResult",
]
