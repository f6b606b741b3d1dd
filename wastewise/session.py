"""
Classification session
Explicit state machine holding the current image, the current verdict and
the bounded history for one user
"""

import logging
import threading
from enum import Enum
from typing import Callable, Optional

from .camera_interface import CameraInterface, decode_image, read_image_file
from .exceptions import CameraError, WasteWiseError
from .models.disposal_classifier import DisposalVerdict, classify
from .models.prediction_source import PredictionSource
from .utils.data_logger import DataLogger
from .utils.history import ClassificationHistory

INVALID_IMAGE_MESSAGE = "Please select a valid image file (PNG, JPG, etc.)."
NO_IMAGE_MESSAGE = "Please upload an image or enable camera mode before classifying."
CAPTURE_FAILED_MESSAGE = "Failed to capture image from camera."


class SessionState(Enum):
    IDLE = "idle"
    CAMERA_ACTIVE = "camera_active"
    CLASSIFYING = "classifying"
    RESULT_SHOWN = "result_shown"
    ERROR = "error"


class WasteSession:
    """
    Drives one capture/upload -> classify -> result cycle at a time

    Transitions:
    - start_camera: any -> CAMERA_ACTIVE (or ERROR)
    - stop_camera: CAMERA_ACTIVE -> IDLE
    - load_image: any -> IDLE with an image (or ERROR)
    - classify: IDLE/CAMERA_ACTIVE/RESULT_SHOWN -> CLASSIFYING -> RESULT_SHOWN (or ERROR)
    """

    def __init__(self, prediction_source: PredictionSource,
                 history: Optional[ClassificationHistory] = None,
                 data_logger: Optional[DataLogger] = None,
                 camera_factory: Optional[Callable[[], CameraInterface]] = None,
                 camera_source='auto'):
        """
        Initialize session

        Args:
            prediction_source: Remote model client
            history: History store, a fresh 5-item history by default
            data_logger: Optional audit logger for verdicts
            camera_factory: Builds the camera when camera mode starts
            camera_source: Camera source name shown when the camera cannot be opened
        """
        self.prediction_source = prediction_source
        self.history = history if history is not None else ClassificationHistory()
        self.data_logger = data_logger
        self.camera_factory = camera_factory or CameraInterface
        self.camera_source = camera_source

        self.state = SessionState.IDLE
        self.image_bytes: Optional[bytes] = None
        self.mime_type: Optional[str] = None
        self.image_source: Optional[str] = None
        self.verdict: Optional[DisposalVerdict] = None
        self.error: str = ''
        self.camera: Optional[CameraInterface] = None

        # One classification in flight per session
        self.lock = threading.Lock()

        self.setup_logging()

    def setup_logging(self):
        """Setup logging for the session"""
        self.logger = logging.getLogger(__name__)

    def _fail(self, message: str) -> None:
        self.error = message
        self.state = SessionState.ERROR
        self.logger.error(message)

    def _clear_current(self):
        self.image_bytes = None
        self.mime_type = None
        self.image_source = None
        self.verdict = None
        self.error = ''

    def start_camera(self) -> bool:
        """Enter camera mode, dropping any loaded image or result"""
        self.stop_camera()
        self._clear_current()

        try:
            self.camera = self.camera_factory()
        except CameraError as e:
            self.logger.error(f"Camera setup failed: {e}")
            self._fail(f"Could not access camera ({self.camera_source}). "
                       "Please ensure permissions are granted.")
            return False

        self.state = SessionState.CAMERA_ACTIVE
        self.logger.info("Camera mode started")
        return True

    def stop_camera(self):
        """Leave camera mode and release the device"""
        if self.camera is not None:
            self.camera.release()
            self.camera = None
        if self.state == SessionState.CAMERA_ACTIVE:
            self.state = SessionState.IDLE

    def load_image(self, image_bytes: bytes, mime_type: Optional[str],
                   source: str = 'upload') -> bool:
        """
        Hold an uploaded image for the next classification

        Returns:
            True if the image was accepted
        """
        self.stop_camera()
        self._clear_current()

        if not mime_type or not mime_type.startswith('image/') or decode_image(image_bytes) is None:
            self._fail(INVALID_IMAGE_MESSAGE)
            return False

        self.image_bytes = image_bytes
        self.mime_type = mime_type
        self.image_source = source
        self.state = SessionState.IDLE
        self.logger.info(f"Loaded {mime_type} image ({len(image_bytes)} bytes)")
        return True

    def load_image_file(self, path) -> bool:
        """Load an image from disk"""
        try:
            image_bytes, mime_type = read_image_file(path)
        except OSError as e:
            self.stop_camera()
            self._clear_current()
            self._fail(f"{INVALID_IMAGE_MESSAGE} ({e})")
            return False
        return self.load_image(image_bytes, mime_type)

    def _capture_from_camera(self) -> bool:
        captured = self.camera.capture_image() if self.camera is not None else None
        self.stop_camera()

        if captured is None:
            self._fail(CAPTURE_FAILED_MESSAGE)
            return False

        self.image_bytes, self.mime_type = captured
        self.image_source = 'camera'
        return True

    def classify(self) -> Optional[DisposalVerdict]:
        """
        Classify the current image (capturing one first in camera mode)

        Returns:
            The verdict, or None when the session moved to ERROR
        """
        with self.lock:
            if self.state == SessionState.CAMERA_ACTIVE:
                if not self._capture_from_camera():
                    return None
            elif self.image_bytes is None:
                self._fail(NO_IMAGE_MESSAGE)
                return None

            self.state = SessionState.CLASSIFYING
            self.error = ''
            self.verdict = None

            try:
                predictions = self.prediction_source.fetch_predictions(self.image_bytes, self.mime_type)
                verdict = classify(predictions)
                # History only holds verdicts that reached the audit log
                if self.data_logger:
                    self.data_logger.log_verdict(verdict, source=self.image_source or 'upload')
                self.history.add(verdict, self.image_bytes, self.mime_type)
            except WasteWiseError as e:
                self._fail(f"Inference failed: {e}")
                return None
            except Exception as e:
                self._fail(f"Classification failed: {e}")
                return None

            self.verdict = verdict
            self.state = SessionState.RESULT_SHOWN
            self.logger.info(
                f"Classified '{verdict.raw_label}' as {verdict.type} ({verdict.outcome.value})"
            )
            return verdict

    def clear_history(self):
        self.history.clear()

    def reset(self):
        """Back to IDLE with nothing loaded; history is kept"""
        self.stop_camera()
        self._clear_current()
        self.state = SessionState.IDLE
