"""
ASR Backend Layer - Speech segment sources feeding the recitation matcher
Every source delivers (text, is_final) events; the matcher does not care which one
"""

from abc import ABC, abstractmethod
import io
import logging
import os
from typing import Callable, Iterable, List, Optional, Tuple

from azkar_tracker import config as app_config

SegmentHandler = Callable[[str, bool], None]


class SegmentSource(ABC):
    """Produces partial/final transcript segments for subscribed handlers"""

    def __init__(self):
        self._handlers: List[SegmentHandler] = []

    def subscribe(self, handler: SegmentHandler):
        self._handlers.append(handler)

    def unsubscribe(self, handler: SegmentHandler):
        if handler in self._handlers:
            self._handlers.remove(handler)

    def emit(self, text: str, is_final: bool):
        for handler in list(self._handlers):
            handler(text, is_final)

    @abstractmethod
    def info(self) -> dict:
        """Describe the source for monitoring"""


class ScriptedSegmentSource(SegmentSource):
    """Replays a fixed list of (text, is_final) segments"""

    def __init__(self, segments: Iterable[Tuple[str, bool]]):
        super().__init__()
        self.segments = list(segments)

    def run(self) -> int:
        """Emit every segment in order, returns the number emitted"""
        for text, is_final in self.segments:
            self.emit(text, is_final)
        return len(self.segments)

    def info(self) -> dict:
        return {"backend": "scripted", "segments": len(self.segments)}


# ==============================================================================
# Cloud Whisper Backend (Groq/OpenAI API)
# ==============================================================================

def _get_cloud_provider() -> str:
    """Get cloud provider for Whisper backend"""
    provider = os.getenv("ASR_CLOUD_PROVIDER", app_config.ASR_CLOUD_PROVIDER).lower()
    if provider not in ["groq", "openai"]:
        logging.warning(f"Invalid ASR_CLOUD_PROVIDER '{provider}', defaulting to 'groq'")
        provider = "groq"
    return provider


def _create_groq_client():
    from groq import Groq
    api_key = os.getenv("GROQ_API_KEY")
    if not api_key:
        raise RuntimeError("Missing Groq API key. Set GROQ_API_KEY in your environment or .env file.")
    logging.info("Groq Whisper client initialized")
    return Groq(api_key=api_key)


def _create_openai_client():
    from openai import OpenAI
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise RuntimeError("Missing OpenAI API key. Set OPENAI_API_KEY in your environment or .env file.")
    logging.info("OpenAI Whisper client initialized")
    return OpenAI(api_key=api_key)


class WhisperSegmentSource(SegmentSource):
    """
    Cloud Whisper transcription of recorded chunks

    Whisper returns one transcript per request, so every chunk becomes one
    final segment. Chunk boundaries are the caller's business.
    """

    def __init__(self, provider: Optional[str] = None, client=None):
        super().__init__()
        self.provider = provider.lower() if provider else _get_cloud_provider()
        if self.provider not in ["groq", "openai"]:
            raise RuntimeError(f"Unknown cloud provider: {self.provider}")
        self._client = client
        logging.info(f"Cloud Whisper provider selected: {self.provider}")

    @property
    def client(self):
        """Get or create the API client (lazy initialization)"""
        if self._client is None:
            if self.provider == "groq":
                self._client = _create_groq_client()
            else:
                self._client = _create_openai_client()
        return self._client

    @property
    def model(self) -> str:
        if self.provider == "groq":
            return app_config.GROQ_WHISPER_MODEL
        return app_config.OPENAI_WHISPER_MODEL

    def transcribe(self, wav_bytes: bytes) -> str:
        """
        Transcribe audio using the cloud Whisper provider

        Args:
            wav_bytes: WAV audio data as bytes (16kHz mono recommended)

        Returns:
            Transcribed text in Arabic
        """
        try:
            wav_buffer = io.BytesIO(wav_bytes)
            return self.client.audio.transcriptions.create(
                file=("audio.wav", wav_buffer),
                model=self.model,
                language=app_config.ASR_LANGUAGE
            ).text
        except Exception as e:
            logging.error(f"Whisper transcription error: {e}")
            raise

    def feed_wav(self, wav_bytes: bytes) -> str:
        """Transcribe one chunk and emit it as a final segment"""
        text = self.transcribe(wav_bytes)
        if text:
            self.emit(text, True)
        return text

    def info(self) -> dict:
        return {
            "backend": "whisper",
            "type": "cloud",
            "provider": self.provider,
            "model": self.model,
            "initialized": self._client is not None,
        }


def get_backend_info(source: SegmentSource) -> dict:
    """
    Get information about a segment source

    Returns:
        Dictionary with backend name and status
    """
    return source.info()
