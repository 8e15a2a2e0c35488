"""Unit tests for angles, model selection and the registration run."""

import pytest

from core.exceptions import AppException, InvalidModelError, ValidationError
from models.domain.face import FaceAngle, RecognitionModel, validate_angle_set
from models.domain.registration import RegistrationPhase, RegistrationRun


# === RecognitionModel ===

@pytest.mark.parametrize("raw", [" MagFace  ", "magface", "MAGFACE", "\tmagface\n"])
def test_normalize_is_case_and_whitespace_insensitive(raw):
    assert RecognitionModel.normalize(raw) == "magface"


@pytest.mark.parametrize("raw", ["qmagface", " QMagFace ", "magface", RecognitionModel.QMAGFACE])
def test_normalize_is_idempotent(raw):
    once = RecognitionModel.normalize(raw)
    assert RecognitionModel.normalize(once) == once


@pytest.mark.parametrize("blank", [None, "", "   "])
def test_blank_model_uses_default(blank):
    assert RecognitionModel.normalize(blank, "QMAGFACE") == "qmagface"


@pytest.mark.parametrize("raw", ["arcface", "mag face", "magface2"])
def test_unknown_model_rejected(raw):
    with pytest.raises(InvalidModelError) as exc:
        RecognitionModel.normalize(raw, "magface")

    assert exc.value.status_code == 400
    assert exc.value.details["allowed_values"] == ["magface", "qmagface"]
    assert exc.value.message == f"Invalid model '{raw}'. Must be 'magface' or 'qmagface'"


def test_bad_default_is_not_accepted():
    with pytest.raises(InvalidModelError):
        RecognitionModel.normalize(None, "facenet")


def test_quality_aware_model():
    assert RecognitionModel.is_quality_aware("qmagface")
    assert not RecognitionModel.is_quality_aware("magface")


# === FaceAngle / angle set ===

def test_angle_lookup_is_case_insensitive():
    assert FaceAngle.from_key("FRONT") is FaceAngle.FRONT
    assert FaceAngle.from_key(" Down ") is FaceAngle.DOWN


def test_unknown_angle_is_an_error():
    with pytest.raises(ValidationError) as exc:
        FaceAngle.from_key("back")
    assert exc.value.field == "angle"


def test_angle_set_returns_fixed_order():
    images = {"down": b"5", "UP": b"4", "right": b"3", "Left": b"2", "front": b"1"}

    result = validate_angle_set(images)

    assert list(result) == list(FaceAngle)
    assert [result[a] for a in FaceAngle] == [b"1", b"2", b"3", b"4", b"5"]


def test_angle_set_lists_all_missing_angles():
    with pytest.raises(ValidationError) as exc:
        validate_angle_set({"left": b"x", "right": b"x", "up": b"", "down": None})

    assert exc.value.message == "Missing required face angles: front, up, down. All 5 angles must be provided."
    assert exc.value.details["missing"] == ["front", "up", "down"]


# === RegistrationRun ===

def test_run_happy_path_history():
    run = RegistrationRun("alice")
    run.advance(RegistrationPhase.COMMITTING)
    run.mark_committed("emp-1")
    run.advance(RegistrationPhase.SUBMITTING)
    run.complete(outcome=None)

    assert run.succeeded
    assert run.history == [
        RegistrationPhase.VALIDATING,
        RegistrationPhase.COMMITTING,
        RegistrationPhase.SUBMITTING,
        RegistrationPhase.DONE,
    ]


def test_run_failure_after_commit_keeps_commit():
    run = RegistrationRun("alice")
    run.advance(RegistrationPhase.COMMITTING)
    run.mark_committed("emp-1")
    run.advance(RegistrationPhase.SUBMITTING)
    run.fail(AppException("boom"))

    assert run.phase is RegistrationPhase.FAILED
    assert run.failed_phase is RegistrationPhase.SUBMITTING
    assert run.committed


def test_run_rejects_skipping_the_gate():
    run = RegistrationRun("alice")

    with pytest.raises(RuntimeError):
        run.advance(RegistrationPhase.SUBMITTING)
