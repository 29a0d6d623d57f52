from urllib.parse import parse_qs, urlparse

import pytest

from client.orchestrator import LocalFile, PartState, UploadFailed, UploadOrchestrator
from client.progress_store import ProgressStore
from core.errors import ValidationError
from models.enums import UploadKind

BASE = "http://portal.test"


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload
        self.text = "" if payload is None else str(payload)

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON body")
        return self._payload


class FakePortal:
    """Stands in for requests.Session talking to the portal API."""

    def __init__(self, part_size=10):
        self.headers = {}
        self.part_size = part_size
        self.inits = []
        self.relayed = []
        self.completed = []
        self.aborted = []
        # part number -> status codes returned before the part succeeds
        self.relay_failures = {}
        # filename -> (status, message) returned by init
        self.init_errors = {}
        self.url_shortfall = 0

    def post(self, url, json=None, timeout=None):
        if url.endswith("/complete"):
            self.completed.append(json)
            return FakeResponse(200, {"ok": True, "id": f"rec-{len(self.completed)}", "location": "https://storage.test/x"})
        if url.endswith("/uploads/abort"):
            self.aborted.append(json)
            return FakeResponse(200, {"ok": True})

        if json["filename"] in self.init_errors:
            status, message = self.init_errors[json["filename"]]
            return FakeResponse(status, {"error": message})
        self.inits.append(json)
        upload_id = f"up-{len(self.inits)}"
        count = -(-json["sizeBytes"] // self.part_size)
        return FakeResponse(200, {
            "uploadId": upload_id,
            "key": f"assets/p1/{json['filename']}",
            "partSize": self.part_size,
            "presignedPartUrls": [
                f"https://storage.test/b/k?partNumber={n}&uploadId={upload_id}" for n in range(1, count + 1 - self.url_shortfall)
            ],
            "completeUrl": f"{BASE}/projects/p1/assets/complete",
            "abortUrl": f"{BASE}/projects/p1/uploads/abort",
            "folderId": json.get("folderId"),
        })

    def put(self, url, params=None, data=None, headers=None, timeout=None):
        target = params["url"]
        number = int(parse_qs(urlparse(target).query)["partNumber"][0])
        pending = self.relay_failures.get(number)
        if pending:
            status = pending.pop(0)
            return FakeResponse(status, {"error": f"Upload failed: HTTP {status}"})
        self.relayed.append((number, data))
        return FakeResponse(200, {"etag": f"etag-{number}"})


def _file(tmp_path, name="clip.bin", size=25):
    path = tmp_path / name
    path.write_bytes(bytes(range(size)))
    return str(path)


def _orchestrator(portal, **kwargs):
    kwargs.setdefault("sleep", lambda s: None)
    return UploadOrchestrator(BASE, "client-token", "p1", session=portal, **kwargs)


def test_uploads_parts_in_order_and_completes(tmp_path):
    portal = FakePortal()
    progress = []
    orch = _orchestrator(portal, on_progress=progress.append)

    results = orch.upload_files([_file(tmp_path)], folder_id="f-assets")

    assert portal.headers["Authorization"] == "Bearer client-token"
    assert portal.inits[0]["sizeBytes"] == 25
    assert portal.inits[0]["folderId"] == "f-assets"
    assert [n for n, _ in portal.relayed] == [1, 2, 3]
    assert portal.relayed[2][1] == bytes(range(20, 25))

    done = portal.completed[0]
    assert done["parts"] == [
        {"ETag": "etag-1", "PartNumber": 1},
        {"ETag": "etag-2", "PartNumber": 2},
        {"ETag": "etag-3", "PartNumber": 3},
    ]
    assert progress == [33, 66, 99, 100]
    assert results[0].ok and results[0].id == "rec-1"
    assert all(p.state == PartState.SUCCEEDED for p in results[0].parts)


def test_progress_spans_files(tmp_path):
    portal = FakePortal()
    progress = []
    orch = _orchestrator(portal, on_progress=progress.append)
    orch.upload_files([_file(tmp_path, "a.bin", 10), _file(tmp_path, "b.bin", 10)])
    assert progress == [50, 99, 100]


def test_transient_part_failure_is_retried(tmp_path):
    portal = FakePortal()
    portal.relay_failures = {2: [502]}
    sleeps = []
    orch = _orchestrator(portal, sleep=sleeps.append, backoff_base=0.5)

    results = orch.upload_files([_file(tmp_path)])

    assert results[0].ok
    assert sleeps == [0.5]
    assert results[0].parts[1].attempts == 2
    assert len(portal.completed) == 1


def test_retries_exhausted_aborts_session(tmp_path):
    portal = FakePortal()
    portal.relay_failures = {1: [504, 504, 504]}
    sleeps = []
    orch = _orchestrator(portal, sleep=sleeps.append, max_part_retries=2)

    with pytest.raises(UploadFailed) as exc:
        orch.upload_files([_file(tmp_path)])

    assert exc.value.message == "Upload failed: HTTP 504"
    assert exc.value.filename == "clip.bin"
    assert sleeps == [1.0, 2.0]
    assert portal.completed == []
    assert portal.aborted == [{"key": "assets/p1/clip.bin", "uploadId": "up-1"}]


def test_client_errors_are_not_retried(tmp_path):
    portal = FakePortal()
    portal.relay_failures = {1: [403]}
    sleeps = []
    orch = _orchestrator(portal, sleep=sleeps.append)

    with pytest.raises(UploadFailed) as exc:
        orch.upload_files([_file(tmp_path)])
    assert exc.value.status == 403
    assert sleeps == []


def test_first_failure_halts_batch(tmp_path):
    portal = FakePortal()
    portal.init_errors = {"a.bin": (400, "Assets can only be uploaded to an ASSETS folder")}
    orch = _orchestrator(portal)

    with pytest.raises(UploadFailed) as exc:
        orch.upload_files([_file(tmp_path, "a.bin"), _file(tmp_path, "b.bin")])

    assert exc.value.message == "Assets can only be uploaded to an ASSETS folder"
    assert portal.inits == []


def test_continue_on_error_reports_each_file(tmp_path):
    portal = FakePortal()
    portal.init_errors = {"a.bin": (403, "Forbidden")}
    orch = _orchestrator(portal, continue_on_error=True)

    results = orch.upload_files([_file(tmp_path, "a.bin"), _file(tmp_path, "b.bin")])

    assert [(r.filename, r.ok, r.error) for r in results] == [
        ("a.bin", False, "Forbidden"),
        ("b.bin", True, None),
    ]


def test_all_failed_batch_never_reports_done(tmp_path):
    portal = FakePortal()
    portal.init_errors = {"a.bin": (403, "Forbidden"), "b.bin": (403, "Forbidden")}
    progress = []
    orch = _orchestrator(portal, continue_on_error=True, on_progress=progress.append)

    results = orch.upload_files([_file(tmp_path, "a.bin"), _file(tmp_path, "b.bin")])

    assert not any(r.ok for r in results)
    assert 100 not in progress


def test_target_folder_type_checked_before_any_request(tmp_path):
    portal = FakePortal()
    orch = _orchestrator(portal, kind=UploadKind.DELIVERY)

    with pytest.raises(ValidationError):
        orch.upload_files([_file(tmp_path)], folder_id="f-assets", folder_type="ASSETS")
    assert portal.inits == []

    orch.upload_files([_file(tmp_path)], folder_id="f-del", folder_type="DELIVERABLES")
    assert len(portal.completed) == 1


def test_resume_skips_finished_parts(tmp_path):
    portal = FakePortal()
    portal.relay_failures = {3: [403]}
    store = ProgressStore(str(tmp_path / "progress.json"))
    path = _file(tmp_path)

    with pytest.raises(UploadFailed):
        _orchestrator(portal, progress_store=store).upload_files([path])
    # Resumable, so the session is left open
    assert portal.aborted == []
    fingerprint = LocalFile.from_path(path).fingerprint()
    assert store.load(fingerprint)["etags"] == {"1": "etag-1", "2": "etag-2"}

    results = _orchestrator(portal, progress_store=store).upload_files([path])

    assert results[0].ok
    assert len(portal.inits) == 1
    assert [n for n, _ in portal.relayed] == [1, 2, 3]
    assert [p["ETag"] for p in portal.completed[0]["parts"]] == ["etag-1", "etag-2", "etag-3"]
    assert store.load(fingerprint) is None


def test_progress_store_ignores_stale_entries(tmp_path):
    store = ProgressStore(str(tmp_path / "progress.json"), max_age=-1)
    store.save("fp", {"uploadId": "u1"}, {1: "e1"})
    assert store.load("fp") is None


def test_mismatched_part_plan_is_rejected(tmp_path):
    portal = FakePortal()
    portal.url_shortfall = 1
    with pytest.raises(UploadFailed) as exc:
        _orchestrator(portal).upload_files([_file(tmp_path)])
    assert "expected 3 part URL(s), got 2" in exc.value.message
    assert portal.relayed == []
