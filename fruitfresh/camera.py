"""Camera capture and image loading using OpenCV."""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path


@dataclass
class CameraCapture:
    camera_index: int
    image_path: str
    captured_at: str  # ISO8601


def load_image(path: str | Path) -> tuple[bytes, str]:
    """Read an image file and guess its MIME type."""
    path = Path(path)
    mime_type = mimetypes.guess_type(path.name)[0] or "image/jpeg"
    return path.read_bytes(), mime_type


class FruitCamera:
    """Capture a photo of the fruit from an attached camera."""

    def __init__(self, camera_index: int = 0, save_dir: str = "/tmp/fruitfresh") -> None:
        self._camera_index = camera_index
        self._save_dir = Path(save_dir)
        self._save_dir.mkdir(parents=True, exist_ok=True)

    def capture(self) -> CameraCapture:
        """Capture a single frame and save it as PNG."""
        try:
            import cv2
        except ImportError:
            raise ImportError(
                "opencv-python is required: pip install 'fruitfresh[camera]'"
            ) from None

        cap = cv2.VideoCapture(self._camera_index)
        if not cap.isOpened():
            raise RuntimeError(
                f"Could not access camera {self._camera_index}. "
                "Please check permissions."
            )

        try:
            ret, frame = cap.read()
            if not ret or frame is None:
                raise RuntimeError(
                    f"Could not read a frame from camera {self._camera_index}."
                )

            now = datetime.now(timezone.utc)
            filename = f"capture_{now.strftime('%Y%m%d_%H%M%S')}.png"
            filepath = self._save_dir / filename

            cv2.imwrite(str(filepath), frame)

            return CameraCapture(
                camera_index=self._camera_index,
                image_path=str(filepath),
                captured_at=now.isoformat(),
            )
        finally:
            cap.release()

    @staticmethod
    def list_cameras(max_check: int = 10) -> list[int]:
        """List available camera indices by probing."""
        try:
            import cv2
        except ImportError:
            raise ImportError(
                "opencv-python is required: pip install 'fruitfresh[camera]'"
            ) from None

        available: list[int] = []
        for i in range(max_check):
            cap = cv2.VideoCapture(i)
            if cap.isOpened():
                available.append(i)
                cap.release()
        return available
