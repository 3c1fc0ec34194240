import json

from services.analytics import hash_contact, lead_event, log_event


def test_hash_contact_ignores_formatting():
    assert hash_contact("555-0100") == hash_contact("555 0100")
    assert hash_contact("") == ""
    assert "555" not in hash_contact("555-0100")


def test_lead_event_has_no_raw_phone(honda_lead):
    ev = lead_event(honda_lead, 200, {"success": True})
    assert ev["type"] == "lead_saved"
    assert ev["make"] == "Honda"
    assert ev["has_part"] is True
    assert "555-0100" not in json.dumps(ev)

    failed = lead_event("garbage", 500, {"success": False, "error": "MalformedPayload"})
    assert failed["type"] == "lead_failed"
    assert failed["error"] == "MalformedPayload"


def test_log_event_appends_jsonl(tmp_path):
    path = tmp_path / "out" / "events.jsonl"
    log_event({"type": "lead_saved"}, path=str(path), enabled=True)
    log_event({"type": "lead_failed"}, path=str(path), enabled=True)

    lines = [json.loads(l) for l in path.read_text(encoding="utf-8").splitlines()]
    assert [l["type"] for l in lines] == ["lead_saved", "lead_failed"]
    assert lines[0]["ts_iso"].endswith("Z")


def test_log_event_disabled_writes_nothing(tmp_path):
    path = tmp_path / "events.jsonl"
    log_event({"type": "lead_saved"}, path=str(path), enabled=False)
    assert not path.exists()
