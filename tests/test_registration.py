"""Tests for the five-angle registration state machine."""

from unittest.mock import Mock

import pytest

from core.exceptions import (
    DecodeError,
    InvalidModelError,
    NoFaceDetectedError,
    RemoteServiceError,
    ValidationError,
)
from models.domain.registration import RegistrationPhase, RegistrationRequest
from services.registration import RegistrationOrchestrator


@pytest.fixture
def orchestrator(detector, cropper, client):
    return RegistrationOrchestrator(detector, cropper, client, default_model="magface", default_min_quality=1)


@pytest.fixture
def commit():
    hook = Mock(return_value="emp-42")
    return hook


async def test_blank_up_image_aborts_before_commit(orchestrator, commit, remote, five_angles, blank_image):
    five_angles["up"] = blank_image

    run = await orchestrator.execute(RegistrationRequest(person_name="alice", images=five_angles), commit=commit)

    assert isinstance(run.error, NoFaceDetectedError)
    assert run.error.angle == "up"
    assert run.failed_phase is RegistrationPhase.VALIDATING
    assert not run.committed
    assert commit.call_count == 0
    assert remote.requests == []


async def test_all_detectable_commits_once_and_submits(orchestrator, commit, remote, five_angles):
    run = await orchestrator.execute(RegistrationRequest(person_name="alice", images=five_angles), commit=commit)

    assert run.succeeded
    assert commit.call_count == 1
    assert run.person_id == "emp-42"
    assert run.outcome.total_registered == 5
    assert run.outcome.qualities == [0.9, 0.8, 0.85, 0.7, 0.75]
    assert len(remote.requests) == 1
    request = remote.requests[0]
    assert b"emp-42" in request.content
    assert request.content.count(b'name="files"') == 5
    assert run.history == [
        RegistrationPhase.VALIDATING,
        RegistrationPhase.COMMITTING,
        RegistrationPhase.SUBMITTING,
        RegistrationPhase.DONE,
    ]


async def test_async_commit_hook(orchestrator, five_angles):
    async def commit():
        return "emp-async"

    run = await orchestrator.execute(RegistrationRequest(person_name="alice", images=five_angles), commit=commit)

    assert run.person_id == "emp-async"


async def test_without_hook_person_name_is_used(orchestrator, remote, five_angles):
    outcome = await orchestrator.register(RegistrationRequest(person_name="alice", images=five_angles))

    assert outcome.success
    assert b"alice" in remote.requests[0].content


async def test_remote_failure_after_commit_is_not_rolled_back(detector, cropper, make_client, commit, five_angles):
    client, _ = make_client({("POST", "/register"): (500, "backend exploded")})
    orchestrator = RegistrationOrchestrator(detector, cropper, client)

    run = await orchestrator.execute(RegistrationRequest(person_name="alice", images=five_angles), commit=commit)

    assert isinstance(run.error, RemoteServiceError)
    assert run.phase is RegistrationPhase.FAILED
    assert run.failed_phase is RegistrationPhase.SUBMITTING
    assert run.committed
    assert commit.call_count == 1


async def test_missing_angles_rejected_without_detection(orchestrator, stub_cascades, commit, face_image):
    request = RegistrationRequest(person_name="alice", images={"front": face_image, "left": face_image})

    with pytest.raises(ValidationError) as exc:
        await orchestrator.register(request, commit=commit)

    assert "right, up, down" in exc.value.message
    assert all(cascade.calls == 0 for cascade in stub_cascades)
    assert commit.call_count == 0


async def test_invalid_model_rejected_before_detection(orchestrator, stub_cascades, remote, five_angles):
    request = RegistrationRequest(person_name="alice", model="arcface", images=five_angles)

    with pytest.raises(InvalidModelError):
        await orchestrator.register(request)

    assert all(cascade.calls == 0 for cascade in stub_cascades)
    assert remote.requests == []


async def test_undecodable_angle_is_named(orchestrator, commit, five_angles):
    five_angles["left"] = b"not an image"

    run = await orchestrator.execute(RegistrationRequest(person_name="alice", images=five_angles), commit=commit)

    assert isinstance(run.error, DecodeError)
    assert run.error.details["field"] == "left"
    assert commit.call_count == 0


async def test_qmagface_gets_default_min_quality(orchestrator, remote, five_angles):
    await orchestrator.register(RegistrationRequest(person_name="alice", model=" QMagFace ", images=five_angles))

    params = remote.requests[0].url.params
    assert params["model"] == "qmagface"
    assert params["min_quality"] == "1"


async def test_gate_boxes_are_reused_for_cropping(orchestrator, stub_cascades, five_angles):
    await orchestrator.register(RegistrationRequest(person_name="alice", images=five_angles))

    # one detection per angle and pass, none repeated for cropping
    assert [cascade.calls for cascade in stub_cascades] == [5, 5]
