import json
import uuid

import pytest

from run_service.contracts import (
    AcquireJobRequest,
    CompleteJobRequest,
    RenewJobRequest,
    TaskResult,
    coerce_uuid,
    decode_object,
    encode_request,
)

PLAN_ID = uuid.UUID("6b1a0f49-3b7c-4e07-8f53-1a2b3c4d5e6f")
JOB_ID = uuid.UUID("0f0e0d0c-0b0a-4909-8807-060504030201")


def test_acquire_request_wire_names() -> None:
    raw = encode_request(AcquireJobRequest(job_message_id="m1", runner_os="Linux"))
    assert json.loads(raw) == {"jobMessageId": "m1", "runnerOS": "Linux"}


def test_renew_request_encodes_uuids_as_strings() -> None:
    raw = encode_request(RenewJobRequest(plan_id=PLAN_ID, job_id=JOB_ID))
    assert json.loads(raw) == {"planId": str(PLAN_ID), "jobId": str(JOB_ID)}


def test_complete_request_carries_opaque_payloads() -> None:
    req = CompleteJobRequest(
        plan_id=PLAN_ID,
        job_id=JOB_ID,
        conclusion=TaskResult.SUCCEEDED_WITH_ISSUES,
        outputs={"digest": {"value": "sha256:abc", "isSecret": False}},
        step_results=[{"externalID": "s1", "conclusion": "succeeded", "number": 1}],
        annotations=[{"level": "warning", "message": "deprecated input"}],
        environment_url="https://example.test/env",
    )
    body = json.loads(encode_request(req))
    assert body == {
        "planId": str(PLAN_ID),
        "jobId": str(JOB_ID),
        "conclusion": "succeededWithIssues",
        "outputs": {"digest": {"value": "sha256:abc", "isSecret": False}},
        "stepResults": [{"externalID": "s1", "conclusion": "succeeded", "number": 1}],
        "annotations": [{"level": "warning", "message": "deprecated input"}],
        "environmentUrl": "https://example.test/env",
    }


def test_decode_object_leaves_values_untouched() -> None:
    raw = b'{"lockedUntil":"2024-05-01T12:00:00.1234567Z","ratio":0.1,"count":3,"flag":null}'
    out = decode_object(raw)
    assert out["lockedUntil"] == "2024-05-01T12:00:00.1234567Z"
    assert out["ratio"] == 0.1
    assert out["count"] == 3
    assert out["flag"] is None


@pytest.mark.parametrize("raw", [b"", b"[]", b"null", b'"text"'])
def test_decode_object_rejects_non_objects(raw: bytes) -> None:
    with pytest.raises(ValueError):
        decode_object(raw)


def test_coerce_uuid() -> None:
    assert coerce_uuid(str(PLAN_ID), "plan_id") == PLAN_ID
    assert coerce_uuid(PLAN_ID, "plan_id") is PLAN_ID
    with pytest.raises(ValueError, match="plan_id is required"):
        coerce_uuid("", "plan_id")
    with pytest.raises(ValueError, match="must be a UUID"):
        coerce_uuid("not-a-uuid", "job_id")
