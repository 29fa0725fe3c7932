import requests

from availboard.sheets import SheetConfig, fetch_sheet_data
from availboard.sheets.fetcher import (
    API_FAILED_HINT,
    API_TROUBLESHOOTING,
    CSV_TROUBLESHOOTING,
    NO_API_KEY_HINT,
    rows_to_records,
)

CSV_TEXT = 'Name,Days Out,Error Code\r\n"HRT Clinic A",7,\r\nTRT Downtown,20,TIMEOUT\r\n'

METADATA = {"sheets": [
    {"properties": {"sheetId": 0, "title": "Sheet1"}},
    {"properties": {"sheetId": 42, "title": "Links & Days"}},
]}
VALUES = {"values": [["Name ", "Days Out"], ["HRT Clinic A", "7"], ["TRT Downtown"]]}


def _cfg(api_key=None):
    return SheetConfig(sheet_id="abc", gid="42", api_key=api_key)


def test_csv_only_without_api_key(fake_session, fake_response):
    s = fake_session([("export?format=csv", fake_response(200, CSV_TEXT))])
    res = fetch_sheet_data(_cfg(), session=s)
    assert res.success and res.source == "csv"
    assert res.headers == ["Name", "Days Out", "Error Code"]
    assert res.rows[1] == {"Name": "TRT Downtown", "Days Out": "20", "Error Code": "TIMEOUT"}
    # API never attempted
    assert all("sheets.googleapis.com" not in url for url, _ in s.calls)
    assert s.calls[0][1]["headers"] == {"Accept": "text/csv"}

def test_api_path_resolves_sheet_name(fake_session, fake_response):
    s = fake_session([
        ("/values/", fake_response(200, json_data=VALUES)),
        ("sheets.googleapis.com", fake_response(200, json_data=METADATA)),
    ])
    res = fetch_sheet_data(_cfg("key"), session=s)
    assert res.success and res.source == "api"
    assert res.headers == ["Name", "Days Out"]
    # missing trailing cell defaults to ''
    assert res.rows == [
        {"Name": "HRT Clinic A", "Days Out": "7"},
        {"Name": "TRT Downtown", "Days Out": ""},
    ]
    assert s.calls[1][0].endswith("/values/Links%20%26%20Days")
    assert s.calls[1][1]["params"] == {"key": "key"}

def test_api_failure_falls_back_to_csv(fake_session, fake_response):
    s = fake_session([
        ("sheets.googleapis.com", fake_response(401, "unauthorized")),
        ("export?format=csv", fake_response(200, CSV_TEXT)),
    ])
    res = fetch_sheet_data(_cfg("bad-key"), session=s)
    assert res.success and res.source == "csv"
    assert len(res.rows) == 2

def test_malformed_values_payload_falls_back_to_csv(fake_session, fake_response):
    s = fake_session([
        ("/values/", fake_response(200, json_data={"values": {"a": 1}})),
        ("sheets.googleapis.com", fake_response(200, json_data=METADATA)),
        ("export?format=csv", fake_response(200, CSV_TEXT)),
    ])
    res = fetch_sheet_data(_cfg("key"), session=s)
    assert res.success and res.source == "csv"
    assert len(res.rows) == 2

def test_malformed_row_in_values_is_an_api_failure(fake_session, fake_response):
    s = fake_session([
        ("/values/", fake_response(200, json_data={"values": [["Name"], {"x": 1}]})),
        ("sheets.googleapis.com", fake_response(200, json_data=METADATA)),
    ])
    res = fetch_sheet_data(_cfg("key"), session=s)
    assert not res.success
    assert API_FAILED_HINT in res.troubleshooting

def test_both_fail_merges_hints(fake_session, fake_response):
    s = fake_session([
        ("sheets.googleapis.com", fake_response(403, "forbidden")),
        ("export?format=csv", fake_response(404, "nope")),
    ])
    res = fetch_sheet_data(_cfg("bad-key"), session=s)
    assert res.success is False
    assert res.error == "CSV fetch failed: 404"
    assert res.troubleshooting[0] == API_FAILED_HINT
    for hint in API_TROUBLESHOOTING + CSV_TROUBLESHOOTING:
        assert hint in res.troubleshooting

def test_no_key_failure_mentions_missing_key(fake_session, fake_response):
    s = fake_session([("export?format=csv", fake_response(500, "boom"))])
    res = fetch_sheet_data(_cfg(), session=s)
    assert res.success is False
    assert res.troubleshooting == [NO_API_KEY_HINT] + CSV_TROUBLESHOOTING

def test_html_body_is_a_failure(fake_session, fake_response):
    html = "<!DOCTYPE html><html><body>Sign in</body></html>"
    s = fake_session([("export?format=csv", fake_response(200, html))])
    res = fetch_sheet_data(_cfg(), session=s)
    assert res.success is False
    assert "HTML instead of CSV" in res.error

def test_transport_errors_are_captured(fake_session):
    s = fake_session([
        ("sheets.googleapis.com", requests.ConnectionError("dns failure")),
        ("export?format=csv", requests.Timeout("read timed out")),
    ])
    res = fetch_sheet_data(_cfg("key"), session=s)
    assert res.success is False
    assert "read timed out" in res.error
    assert API_FAILED_HINT in res.troubleshooting

def test_empty_sheet_is_success(fake_session, fake_response):
    s = fake_session([("export?format=csv", fake_response(200, ""))])
    res = fetch_sheet_data(_cfg(), session=s)
    assert res.success and res.headers == [] and res.rows == []

def test_timeout_is_passed_through(fake_session, fake_response):
    s = fake_session([("export?format=csv", fake_response(200, CSV_TEXT))])
    fetch_sheet_data(SheetConfig(sheet_id="abc", gid="1", timeout=5), session=s)
    assert s.calls[0][1]["timeout"] == 5

def test_rows_to_records_trims_headers():
    res = rows_to_records([[" A ", None], ["1"]], "api")
    assert res.headers == ["A", ""]
    assert res.rows == [{"A": "1", "": ""}]
