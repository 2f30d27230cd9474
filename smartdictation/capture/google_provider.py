"""Microphone capture provider backed by Google Speech-to-Text streaming recognition."""

import queue
import logging
import threading
from typing import Any, Callable, Iterator, List, Optional, Tuple

import numpy as np
from google.cloud import speech
from google.api_core import exceptions as gax_exceptions
from google.oauth2 import service_account

from .base import AbstractCaptureProvider, CaptureAlreadyStartedError, CaptureProviderError
from ..models.capture import RecognitionSegment

logger = logging.getLogger(__name__)

PA_INT16 = 8  # pyaudio.paInt16


class GoogleStreamingCaptureProvider(AbstractCaptureProvider):
    """Streams microphone audio to Google and reports results as provider events.

    Recognition runs on a background thread that only enqueues events; they
    are delivered to the bound callbacks on the caller's thread by
    process_events(), so the capture engine never sees concurrent calls.

    Google closes a stream on its own after roughly five minutes. That shows
    up here as a plain session end, which a continuous engine turns into a
    restart.
    """

    def __init__(self,
                 credentials_path: Optional[str] = None,
                 language: str = "en-US",
                 continuous: bool = True,
                 sample_rate: int = 16000,
                 chunk_size: int = 1600,
                 model: str = "latest_long",
                 enable_automatic_punctuation: bool = True,
                 client: Optional[Any] = None,
                 audio_interface_factory: Optional[Callable[[], Any]] = None):
        """Initialize Google streaming provider.

        Args:
            credentials_path: Service account JSON file (application default credentials if None)
            language: Language code (e.g., 'en-US')
            continuous: Keep the stream open across pauses (single utterance otherwise)
            sample_rate: Microphone sample rate in Hz
            chunk_size: Samples read from the microphone per request
            model: Google recognition model name
            enable_automatic_punctuation: Let Google insert punctuation
            client: Pre-built SpeechClient (created lazily when None)
            audio_interface_factory: Returns a PyAudio-compatible object (pyaudio.PyAudio when None)
        """
        super().__init__(language=language, continuous=continuous)
        self.credentials_path = credentials_path
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.model = model
        self.enable_automatic_punctuation = enable_automatic_punctuation
        self.client = client
        self.audio_interface_factory = audio_interface_factory
        self.sample_format = PA_INT16

        self.peak_level = 0.0
        self.total_chunks = 0

        self._events: "queue.Queue[Tuple]" = queue.Queue()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._active = False
        self._discard_results = False
        self._lock = threading.Lock()

    def initialize(self) -> bool:
        """Create the Speech client from configured credentials."""
        if self.credentials_path:
            logger.info(f"Loading Google credentials from: {self.credentials_path}")
            credentials = service_account.Credentials.from_service_account_file(self.credentials_path)
            self.client = speech.SpeechClient(credentials=credentials)
            logger.info(f"Using Google Cloud project: {credentials.project_id}")
        else:
            logger.info("Using application default credentials for Google Speech")
            self.client = speech.SpeechClient()
        return True

    def build_streaming_config(self) -> speech.StreamingRecognitionConfig:
        recognition_config = speech.RecognitionConfig(
            encoding=speech.RecognitionConfig.AudioEncoding.LINEAR16,
            sample_rate_hertz=self.sample_rate,
            language_code=self.language,
            enable_automatic_punctuation=self.enable_automatic_punctuation,
            model=self.model,
        )
        return speech.StreamingRecognitionConfig(
            config=recognition_config,
            interim_results=self.interim_results,
            single_utterance=not self.continuous,
        )

    @property
    def is_active(self) -> bool:
        return self._active

    def start(self) -> None:
        with self._lock:
            if self._active:
                raise CaptureAlreadyStartedError()
            if self.client is None:
                try:
                    self.initialize()
                except Exception as e:
                    raise CaptureProviderError("network", f"Could not create Google Speech client: {e}") from e

            self._stop_event.clear()
            self._discard_results = False
            self._active = True
            self._thread = threading.Thread(target=self._run_session, daemon=True)
            self._thread.name = "GoogleCaptureThread"
            self._thread.start()
        logger.info(f"Google capture session requested (continuous={self.continuous}, language={self.language})")

    def stop(self) -> None:
        """End the audio stream; Google still returns results for audio already sent."""
        self._stop_event.set()
        logger.debug("Google capture stop requested")

    def abort(self) -> None:
        self._discard_results = True
        self._stop_event.set()
        dropped = 0
        while True:
            try:
                self._events.get_nowait()
                dropped += 1
            except queue.Empty:
                break
        logger.debug(f"Google capture aborted; dropped {dropped} pending events")

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the recognition thread to finish."""
        if self._thread is not None:
            self._thread.join(timeout)

    def process_events(self, timeout: float = 0.0) -> int:
        """Deliver queued events to the bound callbacks on the calling thread.

        Args:
            timeout: Seconds to wait for the first event when none is queued

        Returns:
            Number of events delivered
        """
        delivered = 0
        while True:
            try:
                if delivered == 0 and timeout > 0:
                    item = self._events.get(timeout=timeout)
                else:
                    item = self._events.get_nowait()
            except queue.Empty:
                break
            self._deliver(item)
            delivered += 1
        return delivered

    def _deliver(self, item: Tuple) -> None:
        kind = item[0]
        if kind == "start" and self.on_start:
            self.on_start()
        elif kind == "end" and self.on_end:
            self.on_end()
        elif kind == "result" and self.on_result:
            self.on_result(item[1], item[2])
        elif kind == "error" and self.on_error:
            self.on_error(item[1], item[2])

    def _enqueue_result(self, segments: List[RecognitionSegment]) -> None:
        if self._discard_results:
            return
        self._events.put(("result", segments, 0))

    def _enqueue_error(self, code: str, message: str) -> None:
        self._events.put(("error", code, message))

    def _create_audio_interface(self):
        if self.audio_interface_factory is None:
            import pyaudio
            self.audio_interface_factory = pyaudio.PyAudio
            self.sample_format = pyaudio.paInt16
        return self.audio_interface_factory()

    def _audio_chunks(self, stream) -> Iterator[bytes]:
        while not self._stop_event.is_set():
            chunk = stream.read(self.chunk_size, exception_on_overflow=False)
            self.total_chunks += 1
            samples = np.frombuffer(chunk, dtype=np.int16)
            self.peak_level = float(np.abs(samples.astype(np.int32)).max()) / 32768.0 if samples.size else 0.0
            yield chunk

    def _run_session(self) -> None:
        """Background thread: open the microphone and stream it to Google."""
        audio_interface = None
        stream = None
        try:
            try:
                audio_interface = self._create_audio_interface()
                stream = audio_interface.open(
                    format=self.sample_format,
                    channels=1,
                    rate=self.sample_rate,
                    input=True,
                    frames_per_buffer=self.chunk_size,
                )
            except OSError as e:
                logger.error(f"Could not open microphone: {e}")
                self._enqueue_error("audio-capture", str(e))
                return

            self._events.put(("start",))
            logger.info(f"Microphone stream opened: {self.sample_rate}Hz, {self.chunk_size} samples/chunk")

            requests = (speech.StreamingRecognizeRequest(audio_content=chunk)
                        for chunk in self._audio_chunks(stream))
            responses = self.client.streaming_recognize(config=self.build_streaming_config(), requests=requests)

            for response in responses:
                segments = [
                    RecognitionSegment(
                        text=result.alternatives[0].transcript,
                        is_final=result.is_final,
                        confidence=result.alternatives[0].confidence or None,
                    )
                    for result in response.results
                    if result.alternatives
                ]
                if segments:
                    self._enqueue_result(segments)

        except gax_exceptions.OutOfRange as e:
            logger.info(f"Google stream reached its duration limit: {e}")
        except (gax_exceptions.PermissionDenied, gax_exceptions.Unauthenticated) as e:
            logger.error(f"Google Speech refused the request: {e}")
            self._enqueue_error("not-allowed", str(e))
        except (gax_exceptions.ServiceUnavailable, gax_exceptions.DeadlineExceeded) as e:
            logger.error(f"Google Speech unreachable: {e}")
            self._enqueue_error("network", str(e))
        except gax_exceptions.GoogleAPICallError as e:
            logger.error(f"Google Speech API error: {e}")
            self._enqueue_error("network", str(e))
        finally:
            if stream is not None:
                stream.stop_stream()
                stream.close()
            if audio_interface is not None:
                audio_interface.terminate()
            self._active = False
            self._events.put(("end",))
            logger.info("Google capture session ended")
