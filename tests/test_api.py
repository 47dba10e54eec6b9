import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.settings import settings
from api.deps import build_services, get_services
from domain.schemas import ResumeContext, SuccessResponse

from conftest import FakeAI, FakeKeyValueStore, FakeRasterizer, FakeStorage, feedback_text


@pytest.fixture
def services():
    ai = FakeAI(outcomes={None: SuccessResponse(content=feedback_text(overall=73))})
    svc = build_services(FakeStorage(), FakeKeyValueStore(), ai, rasterizer=FakeRasterizer())
    app.dependency_overrides[get_services] = lambda: svc
    yield svc
    app.dependency_overrides.clear()


@pytest.fixture
def client(services):
    return TestClient(app)


def _analyze(client, **headers):
    return client.post(
        "/analyze",
        files={"resume": ("resume.pdf", b"%PDF-1.4 resume", "application/pdf")},
        data={"company_name": "Acme", "job_title": "SRE", "job_description": "Kubernetes"},
        headers=headers,
    )


def test_analyze_runs_pipeline_and_exposes_record(client):
    resp = _analyze(client)
    assert resp.status_code == 200
    record_id = resp.json()["record_id"]

    status = client.get(f"/analyze/{record_id}").json()
    assert status["stage"] == "done"
    assert status["status"] == "Analysis complete!"
    assert status["used_fallback"] is False

    record = client.get(f"/records/{record_id}").json()
    assert record["id"] == record_id
    assert record["context"] == {"org": "Acme", "role": "SRE", "roleDescription": "Kubernetes"}
    assert record["evaluation"]["overallScore"] == 73

    preview = client.get(f"/records/{record_id}/preview")
    assert preview.status_code == 200
    assert preview.headers["content-type"] == "image/png"
    assert client.get(f"/records/{record_id}/source").content == b"%PDF-1.4 resume"


def test_analyze_requires_a_file(client):
    resp = client.post("/analyze", data={"job_title": "SRE"})
    assert resp.status_code == 400


def test_analyze_requires_authentication(client, monkeypatch):
    monkeypatch.setattr(settings, "API_KEY", "secret")

    assert _analyze(client).status_code == 401
    assert _analyze(client, **{"X-API-Key": "secret"}).status_code == 200


def test_unknown_record_and_run_are_404(client):
    assert client.get("/records/nope").status_code == 404
    assert client.get("/analyze/nope").status_code == 404


def test_analyze_rejects_non_pdf_upload(client):
    resp = client.post(
        "/analyze",
        files={"resume": ("notes.docx", b"PK\x03\x04 document", "application/vnd.openxmlformats-officedocument.wordprocessingml.document")},
        data={"job_title": "SRE"},
    )

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Only PDF files are accepted"


def test_analyze_rejects_oversized_upload(client, services, monkeypatch):
    monkeypatch.setattr(settings, "MAX_UPLOAD_BYTES", 8)

    resp = _analyze(client)

    assert resp.status_code == 413
    assert services.runs == {}


def test_finished_runs_and_idle_sessions_are_evicted(client, services):
    services.max_runs = 2
    services.max_sessions = 2

    record_ids = [
        _analyze(client, **{"X-Session-Id": f"s{i}"}).json()["record_id"] for i in range(3)
    ]

    assert list(services.runs) == record_ids[1:]
    assert list(services.pipelines) == ["s1", "s2"]
    assert client.get(f"/analyze/{record_ids[0]}").status_code == 404
    # the record itself is still stored
    assert client.get(f"/records/{record_ids[0]}").status_code == 200


def test_busy_session_is_never_evicted(client, services):
    services.max_sessions = 1
    busy = services.pipeline_for("busy")
    busy.prepare(ResumeContext())

    assert _analyze(client, **{"X-Session-Id": "a"}).status_code == 200
    assert _analyze(client, **{"X-Session-Id": "b"}).status_code == 200

    assert list(services.pipelines) == ["busy", "b"]
    assert services.pipelines["busy"] is busy


def test_busy_session_is_rejected(client, services):
    services.pipeline_for("default").prepare(ResumeContext())

    assert _analyze(client).status_code == 409
    assert _analyze(client, **{"X-Session-Id": "other"}).status_code == 200


def test_chat_session_flow(client):
    session_id = client.post("/chat/sessions").json()["session_id"]

    resp = client.post(f"/chat/sessions/{session_id}/messages", json={"content": "How long should a resume be?"})

    assert resp.status_code == 200
    messages = resp.json()["messages"]
    assert [m["role"] for m in messages] == ["user", "assistant"]
    assert client.get(f"/chat/sessions/{session_id}").json()["messages"] == messages


def test_chat_ignores_unauthenticated_turns(client, monkeypatch):
    monkeypatch.setattr(settings, "API_KEY", "secret")
    session_id = client.post("/chat/sessions").json()["session_id"]

    resp = client.post(f"/chat/sessions/{session_id}/messages", json={"content": "Hello"})

    assert resp.json()["messages"] == []


def test_oldest_chat_session_is_evicted(client, services):
    services.max_sessions = 1
    first = client.post("/chat/sessions").json()["session_id"]
    second = client.post("/chat/sessions").json()["session_id"]

    assert client.get(f"/chat/sessions/{first}").status_code == 404
    assert client.get(f"/chat/sessions/{second}").status_code == 200


def test_unknown_chat_session_is_404(client):
    assert client.post("/chat/sessions/missing/messages", json={"content": "Hi"}).status_code == 404


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
