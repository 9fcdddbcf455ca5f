import recap.app as app_module
from recap.config import RecapConfig
from recap.errors import NothingToSummarizeError
from recap.pipeline import PipelineResult


def client_with(monkeypatch, run):
    monkeypatch.setattr(app_module.pipeline, "run", run)
    app_module.app.config["RECAP_CONFIG"] = RecapConfig()
    return app_module.app.test_client()


def test_summarise_endpoint(monkeypatch):
    seen = {}

    def run(requests, config):
        seen["speakers"] = [r.speaker_id for r in requests]
        return PipelineResult(turns=[], transcript="Hero: hi", chunks=["Hero: hi"], summary="A greeting.")

    client = client_with(monkeypatch, run)
    rv = client.post("/summarise", json={"speakers": [{"speaker": "Hero", "path": "input/user1.flac"}]})
    assert rv.status_code == 200
    assert rv.get_json() == {"transcript": "Hero: hi", "chunks": 1, "summary": "A greeting."}
    assert seen["speakers"] == ["Hero"]


def test_malformed_body_is_rejected(monkeypatch):
    client = client_with(monkeypatch, lambda requests, config: None)
    assert client.post("/summarise", json={}).status_code == 400
    assert client.post("/summarise", json={"speakers": [{"speaker": "Hero"}]}).status_code == 400
    assert client.post("/summarise", data="not json").status_code == 400


def test_empty_conversation(monkeypatch):
    def run(requests, config):
        raise NothingToSummarizeError("nothing")

    client = client_with(monkeypatch, run)
    rv = client.post("/summarise", json={"speakers": [{"speaker": "Hero", "path": "x.flac"}]})
    assert rv.status_code == 422


def test_pipeline_failure(monkeypatch):
    def run(requests, config):
        raise RuntimeError("boom")

    client = client_with(monkeypatch, run)
    rv = client.post("/summarise", json={"speakers": [{"speaker": "Hero", "path": "x.flac"}]})
    assert rv.status_code == 500
    assert "boom" in rv.get_json()["error"]
