import datetime
import io
import threading
from unittest import mock

import requests

from junction_bridge.monitor import (
    ProposalMonitor,
    ProposalSnapshot,
    fetch_proposals,
    format_timestamp,
    parse_timestamp,
)

NOW = datetime.datetime(2025, 1, 1, 0, 10, tzinfo=datetime.timezone.utc)


def response(payload=None, status=200):
    resp = mock.Mock(status_code=status, text=str(payload))
    resp.json.return_value = payload
    return resp


def proposal(pid="1", status="PROPOSAL_STATUS_VOTING_PERIOD", end="2025-01-01T00:05:00.123456789Z"):
    return {
        "id": pid,
        "status": status,
        "voting_start_time": "2025-01-01T00:00:00Z",
        "voting_end_time": end,
        "final_tally_result": {"yes_count": "10", "no_count": "0", "abstain_count": "1", "no_with_veto_count": "0"},
    }


def build_monitor(session, sleeps):
    return ProposalMonitor(
        "http://localhost:1317/",
        interval=2,
        session=session,
        stream=io.StringIO(),
        now=lambda: NOW,
        sleep=sleeps.append,
        clear_screen=False,
    )


def test_parse_timestamp_handles_nanoseconds_and_bad_values():
    parsed = parse_timestamp("2025-01-01T00:05:00.123456789Z")
    assert parsed == datetime.datetime(2025, 1, 1, 0, 5, 0, 123456, tzinfo=datetime.timezone.utc)
    assert parse_timestamp("") is None
    assert parse_timestamp("yesterday") is None
    assert format_timestamp("2025-01-01T00:05:00Z") == "2025-01-01 00:05:00"
    assert format_timestamp("yesterday") == "yesterday"


def test_parse_timestamp_pads_short_fractions():
    # Go drops trailing zeros from RFC3339Nano fractions
    assert parse_timestamp("2025-01-01T00:05:00.12345Z") == datetime.datetime(
        2025, 1, 1, 0, 5, 0, 123450, tzinfo=datetime.timezone.utc
    )
    assert parse_timestamp("2025-01-01T00:05:00.5Z").microsecond == 500000


def test_voting_ended_with_five_digit_fraction():
    snapshot = ProposalSnapshot(status="PROPOSAL_STATUS_VOTING_PERIOD", id="1", voting_end="2025-01-01T00:05:00.12345Z")
    assert snapshot.voting_ended(NOW)


def test_voting_ended_requires_voting_status_and_past_end():
    assert ProposalSnapshot.from_api(proposal()).voting_ended(NOW)
    assert not ProposalSnapshot.from_api(proposal(end="2025-01-01T00:15:00Z")).voting_ended(NOW)
    assert not ProposalSnapshot.from_api(proposal(status="PROPOSAL_STATUS_PASSED")).voting_ended(NOW)
    assert not ProposalSnapshot.from_api(proposal(end=None)).voting_ended(NOW)


def test_fetch_proposals_queries_unspecified_status():
    session = mock.Mock(spec=requests.Session)
    session.get.return_value = response({"proposals": [proposal()]})
    proposals = fetch_proposals(session, "http://localhost:1317/")
    session.get.assert_called_once_with(
        "http://localhost:1317/cosmos/gov/v1/proposals?proposal_status=PROPOSAL_STATUS_UNSPECIFIED", timeout=10.0
    )
    assert proposals[0].tally.yes == "10"
    assert proposals[0].tally.abstain == "1"


def test_monitor_survives_fetch_errors_and_stops_when_voting_ends():
    session = mock.Mock(spec=requests.Session)
    session.get.side_effect = [
        requests.ConnectionError("refused"),
        response({"error": "bad"}, status=500),
        response({"proposals": [proposal(status="PROPOSAL_STATUS_DEPOSIT_PERIOD")]}),
        response({"proposals": [proposal()]}),
        response({"proposals": [proposal()]}),
    ]
    sleeps = []
    monitor = build_monitor(session, sleeps)

    finished = monitor.run()

    assert finished.id == "1"
    assert session.get.call_count == 4
    assert sleeps[:3] == [2, 2, 2]
    assert sleeps[3:] == [0.5] * 10
    output = monitor.stream.getvalue()
    assert "Error fetching proposals: refused" in output
    assert "HTTP 500" in output
    assert "VOTING PERIOD COMPLETED!" in output
    assert "PROPOSAL COMPLETED!" in output
    assert "Tally: Yes: 10, No: 0, Abstain: 1, No with Veto: 0" in output


def test_monitor_renders_empty_list_with_spinner_frame():
    session = mock.Mock(spec=requests.Session)
    monitor = build_monitor(session, [])
    assert monitor.render([]) is None
    assert "No proposals found" in monitor.stream.getvalue()


def test_monitor_stops_when_signalled():
    session = mock.Mock(spec=requests.Session)
    stop = threading.Event()
    stop.set()
    assert build_monitor(session, []).run(stop) is None
    session.get.assert_not_called()
