"""Shared fixtures for face pipeline tests."""

import cv2
import httpx
import numpy as np
import pytest

from core.config import Settings
from services.face_api_client import FaceApiClient
from services.face_cropper import FaceCropper
from services.face_detector import DetectorPass, DetectorState, FaceDetector
from services.face_pipeline import FacePipelineService


class StubCascade:
    """Stands in for cv2.CascadeClassifier: one box unless the image is blank white."""

    def __init__(self, boxes=((40, 40, 100, 100),)):
        self.boxes = boxes
        self.calls = 0

    def detectMultiScale(self, gray, scaleFactor=1.1, minNeighbors=3, minSize=(0, 0)):
        self.calls += 1
        if gray.mean() > 250:
            return ()
        return np.array(self.boxes, dtype=np.int32)


class RecordingTransport:
    """httpx.MockTransport handler that records requests and replays canned responses."""

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key not in self.responses:
            return httpx.Response(404, json={"detail": "Not Found"})
        status, body = self.responses[key]
        if isinstance(body, (dict, list)):
            return httpx.Response(status, json=body)
        return httpx.Response(status, text=body)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def encode(raster: np.ndarray, ext: str = ".jpg") -> bytes:
    ok, buf = cv2.imencode(ext, raster)
    assert ok
    return buf.tobytes()


@pytest.fixture
def settings(tmp_path):
    """Settings with auth disabled and crops written to a temp dir."""
    return Settings(
        AUTH_ENABLED=False,
        FACE_API_BASE_URL="http://face-api.test",
        CROP_OUTPUT_DIR=str(tmp_path / "crops"),
    )


@pytest.fixture
def face_image() -> bytes:
    """300x300 noisy image; StubCascade reports a face in it."""
    rng = np.random.default_rng(42)
    return encode(rng.integers(0, 200, (300, 300, 3), dtype=np.uint8))


@pytest.fixture
def blank_image() -> bytes:
    """300x300 white frame with no face."""
    return encode(np.full((300, 300, 3), 255, dtype=np.uint8))


@pytest.fixture
def stub_cascades():
    return StubCascade(), StubCascade(boxes=((50, 50, 60, 60),))


@pytest.fixture
def detector(stub_cascades) -> FaceDetector:
    frontal, profile = stub_cascades
    state = DetectorState(
        ready=True,
        passes=(
            DetectorPass(name="frontal", classifier=frontal),
            DetectorPass(name="profile", classifier=profile),
        ),
    )
    return FaceDetector(state, min_face_size=20)


@pytest.fixture
def cropper() -> FaceCropper:
    return FaceCropper(margin_horizontal=0.2, margin_vertical=0.3)


@pytest.fixture
def remote():
    """Recorded remote service with successful default answers."""
    return RecordingTransport({
        ("POST", "/register"): (200, {
            "success": True,
            "name": "alice",
            "model_used": "magface",
            "message": "Registered 5 faces",
            "total_registered": 5,
            "failed_count": 0,
            "qualities": [0.9, 0.8, 0.85, 0.7, 0.75],
        }),
        ("POST", "/recognize"): (200, {
            "name": "alice",
            "confidence": 0.93,
            "matches": [{"name": "alice", "similarity": 0.93}],
        }),
        ("GET", "/database/info"): (200, {"total_persons": 3, "total_faces": 15}),
        ("POST", "/database/save"): (200, {"success": True, "message": "Saved"}),
    })


@pytest.fixture
def client(remote) -> FaceApiClient:
    return FaceApiClient("http://face-api.test", transport=remote.transport())


@pytest.fixture
def pipeline(detector, cropper, client, tmp_path) -> FacePipelineService:
    return FacePipelineService(
        detector, cropper, client,
        crop_output_dir=str(tmp_path / "crops"),
    )


@pytest.fixture
def five_angles(face_image):
    return {angle: face_image for angle in ("front", "left", "right", "up", "down")}


@pytest.fixture
def make_client():
    """Factory: FaceApiClient backed by a RecordingTransport with the given answers."""
    def factory(responses):
        remote = RecordingTransport(responses)
        return FaceApiClient("http://face-api.test/", transport=remote.transport()), remote
    return factory
