"""
Camera Interface for image acquisition
Supports USB cameras, video files, and simulated mode with sample images
"""

import cv2
import numpy as np
from typing import Optional, Tuple, List
import logging
import mimetypes
import os
from pathlib import Path

from .exceptions import CameraError

CAPTURE_MIME_TYPE = "image/png"
DEFAULT_SAMPLE_DIR = Path(__file__).parent.parent / "data" / "samples"


def decode_image(image_bytes: bytes) -> Optional[np.ndarray]:
    """Decode encoded image bytes, returning None if OpenCV cannot read them"""
    if not image_bytes:
        return None
    buffer = np.frombuffer(image_bytes, dtype=np.uint8)
    return cv2.imdecode(buffer, cv2.IMREAD_COLOR)


def encode_png(frame: np.ndarray) -> Optional[bytes]:
    """Encode a BGR frame as PNG bytes"""
    ok, buffer = cv2.imencode(".png", frame)
    return buffer.tobytes() if ok else None


def read_image_file(path) -> Tuple[bytes, str]:
    """
    Read an uploaded image file

    Args:
        path: Image file path

    Returns:
        (file bytes, MIME type guessed from the extension)
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    mime_type, _ = mimetypes.guess_type(path.name)
    return path.read_bytes(), mime_type or "application/octet-stream"


class CameraInterface:
    """
    Unified camera interface supporting:
    - USB/Webcam (via OpenCV)
    - Video files
    - Simulated mode with sample images
    """

    def __init__(self, source='auto', resolution=(640, 480), sample_dir=None):
        """
        Initialize camera interface

        Args:
            source: 'auto', 'usb', 'simulated', video file path, or device index
            resolution: (width, height) tuple
            sample_dir: Directory of sample images for simulated mode
        """
        self.source = source
        self.resolution = tuple(resolution)
        self.sample_dir = Path(sample_dir) if sample_dir else DEFAULT_SAMPLE_DIR
        self.camera = None
        self.camera_type = None
        self.sample_images: List[np.ndarray] = []
        self._sample_index = 0

        self.setup_logging()

        if source == 'auto':
            self.auto_detect_camera()
        else:
            self.setup_camera(source)

    def setup_logging(self):
        """Setup logging for camera interface"""
        self.logger = logging.getLogger(__name__)

    def setup_sample_images(self):
        """Load real sample images for simulated mode"""
        self.sample_images = []

        if not self.sample_dir.is_dir():
            self.logger.warning(f"Sample directory not found: {self.sample_dir}")
            return

        for img_path in sorted(self.sample_dir.iterdir()):
            if img_path.suffix.lower() not in ('.jpg', '.jpeg', '.png'):
                continue
            img = cv2.imread(str(img_path))
            if img is not None:
                self.sample_images.append(cv2.resize(img, self.resolution))
                self.logger.info(f"Loaded sample image: {img_path.name}")
            else:
                self.logger.warning(f"Failed to load sample image {img_path}")

        if not self.sample_images:
            self.logger.warning(f"No sample images found in {self.sample_dir}. "
                                "Simulated captures will fail until images are added.")

    def auto_detect_camera(self):
        """
        Use the first USB camera if one answers, otherwise simulate

        Raises:
            CameraError: No camera answered and there are no sample images to simulate with
        """
        if self._test_usb_camera():
            self.setup_camera('usb')
            return

        self.logger.warning("No cameras detected, using simulation mode")
        self.setup_camera('simulated')
        if not self.sample_images:
            raise CameraError(f"No camera detected and no sample images in {self.sample_dir}")

    def _test_usb_camera(self) -> bool:
        """Test if USB camera is available"""
        cap = cv2.VideoCapture(0)
        try:
            if cap.isOpened():
                ret, frame = cap.read()
                return ret and frame is not None
            return False
        finally:
            cap.release()

    def setup_camera(self, source):
        """
        Setup camera based on source type

        Raises:
            CameraError: If the requested source cannot be opened
        """
        if source == 'usb' or isinstance(source, int):
            self._setup_usb_camera(source)
        elif source == 'simulated':
            self._setup_simulated_camera()
        elif isinstance(source, str) and os.path.exists(source):
            self._setup_video_file(source)
        else:
            raise CameraError(f"Unknown camera source: {source}")

    def _setup_usb_camera(self, source='usb'):
        """Setup USB/webcam"""
        device_id = 0 if source == 'usb' else source
        self.camera = cv2.VideoCapture(device_id)
        self.camera.set(cv2.CAP_PROP_FRAME_WIDTH, self.resolution[0])
        self.camera.set(cv2.CAP_PROP_FRAME_HEIGHT, self.resolution[1])

        if not self.camera.isOpened():
            self.camera.release()
            self.camera = None
            raise CameraError(f"Failed to open camera {device_id}")

        self.camera_type = 'usb'
        self.logger.info(f"USB Camera {device_id} initialized successfully")

    def _setup_simulated_camera(self):
        """Setup simulated camera mode"""
        self.camera = None
        self.camera_type = 'simulated'
        self.setup_sample_images()
        self.logger.info("Simulated camera mode initialized")

    def _setup_video_file(self, video_path):
        """Setup video file as camera source"""
        self.camera = cv2.VideoCapture(video_path)
        if not self.camera.isOpened():
            self.camera.release()
            self.camera = None
            raise CameraError(f"Could not open video file: {video_path}")

        self.camera_type = 'video'
        self.video_path = video_path
        self.logger.info(f"Video file initialized: {video_path}")

    def capture_frame(self) -> Optional[np.ndarray]:
        """
        Capture a single frame

        Returns:
            Image as numpy array or None if capture fails
        """
        if self.camera_type == 'simulated':
            return self._capture_simulated_frame()
        if self.camera is None:
            self.logger.error("Camera has been released")
            return None

        ret, frame = self.camera.read()
        if not ret and self.camera_type == 'video':
            # End of video - loop back to start
            self.camera.set(cv2.CAP_PROP_POS_FRAMES, 0)
            ret, frame = self.camera.read()

        if not ret or frame is None:
            self.logger.error(f"{self.camera_type} frame capture failed")
            return None
        return frame

    def _capture_simulated_frame(self) -> Optional[np.ndarray]:
        """Return the next sample image, cycling through the set"""
        if not self.sample_images:
            self.logger.warning("No real sample images available for simulation")
            return None

        frame = self.sample_images[self._sample_index % len(self.sample_images)].copy()
        self._sample_index += 1
        return frame

    def capture_image(self) -> Optional[Tuple[bytes, str]]:
        """
        Capture a frame and encode it for upload

        Returns:
            (PNG bytes, MIME type) or None if capture or encoding fails
        """
        frame = self.capture_frame()
        if frame is None:
            return None

        png_bytes = encode_png(frame)
        if png_bytes is None:
            self.logger.error("Failed to encode captured frame")
            return None
        return png_bytes, CAPTURE_MIME_TYPE

    def get_camera_info(self) -> dict:
        """Get camera information"""
        info = {
            "type": self.camera_type,
            "resolution": self.resolution,
            "available": self.camera is not None or self.camera_type == 'simulated'
        }

        if self.camera_type == 'video':
            info["video_path"] = getattr(self, 'video_path', None)
        elif self.camera_type == 'simulated':
            info["sample_images"] = len(self.sample_images)

        return info

    def release(self):
        """Release camera resources"""
        if self.camera is not None:
            self.camera.release()
            self.camera = None
            self.logger.info("Camera resources released")

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit"""
        self.release()
