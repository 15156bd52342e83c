from cycle_nlu.exceptions import ClassificationError, MalformedLLMResponseError
from tests.conftest import days_ago_iso, make_classification, make_entities

URL = "/api/nlu/process"


def test_process_returns_structured_response(client, fake_classifier):
    fake_classifier.classify.return_value = make_classification(
        entities=make_entities(dates=[days_ago_iso(1)], symptoms=["cramps"])
    )

    resp = client.post(URL, json={"userId": "user-1", "message": "My period started yesterday"})

    assert resp.status_code == 200
    data = resp.json()
    assert data["intent"]["primary"] == "cycle_tracking"
    assert data["cycleData"]["periodStart"].startswith(days_ago_iso(1))
    assert data["entities"]["symptoms"][0]["name"] == "menstrual_cramps"
    assert data["entities"]["temporal"]["dates"][0].startswith(days_ago_iso(1))
    assert data["contextAwareness"] == {"currentCyclePhase": None, "lastPeriodStart": None}


def test_second_request_reports_previous_context(client, fake_classifier):
    fake_classifier.classify.return_value = make_classification(
        entities=make_entities(dates=[days_ago_iso(1)])
    )
    client.post(URL, json={"userId": "user-1", "message": "My period started yesterday"})
    fake_classifier.classify.return_value = make_classification(
        primary="health_query", subtype="next_period"
    )

    data = client.post(URL, json={"userId": "user-1", "message": "When is my next period?"}).json()

    assert data["contextAwareness"]["lastPeriodStart"].startswith(days_ago_iso(1))
    assert data["cycleData"] == {"periodStart": None, "cyclePhase": "menstrual"}
    assert data["entities"]["temporal"]["cycle_phase"] == "menstrual"


def test_missing_fields_are_rejected(client, fake_classifier):
    for body in ({}, {"userId": "user-1"}, {"message": "hi"}, {"userId": "", "message": "hi"}):
        resp = client.post(URL, json=body)
        assert resp.status_code == 400
        assert resp.json() == {"error": "Missing required fields"}
    fake_classifier.classify.assert_not_called()


def test_non_json_body_is_rejected(client):
    resp = client.post(URL, content=b"not json", headers={"Content-Type": "application/json"})
    assert resp.status_code == 400


def test_non_string_fields_are_rejected(client):
    resp = client.post(URL, json={"userId": 42, "message": ["hi"]})
    assert resp.status_code == 400


def test_classification_failure_maps_to_500(client, fake_classifier):
    fake_classifier.classify.side_effect = ClassificationError("connection refused")

    resp = client.post(URL, json={"userId": "user-1", "message": "hi"})

    assert resp.status_code == 500
    assert resp.json() == {
        "error": "Failed to process input",
        "message": "Failed to process with LLM: connection refused",
    }


def test_malformed_llm_output_maps_to_500(client, fake_classifier):
    fake_classifier.classify.side_effect = MalformedLLMResponseError("oops")

    resp = client.post(URL, json={"userId": "user-1", "message": "hi"})

    assert resp.status_code == 500
    assert resp.json()["error"] == "Failed to process input"


def test_unexpected_error_maps_to_500(client, fake_classifier):
    fake_classifier.classify.side_effect = RuntimeError("secret internals")

    resp = client.post(URL, json={"userId": "user-1", "message": "hi"})

    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to process input", "message": "secret internals"}
