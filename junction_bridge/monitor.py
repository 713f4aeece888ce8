"""Terminal dashboard that polls the gov REST endpoint until voting closes."""
from __future__ import annotations

import datetime
import re
import sys
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, TextIO

import requests
from rich.console import Console

from .constants import PROPOSALS_QUERY_PATH, SPINNER_FRAMES, STATUS_LABELS, STATUS_VOTING_PERIOD
from .errors import JunctionBridgeError
from .logging_utils import get_logger

logger = get_logger()

_FRACTION = re.compile(r"\.(\d+)")


class ProposalFetchError(JunctionBridgeError):
    """Raised when the proposals endpoint cannot be read this tick."""


def parse_timestamp(value: Optional[str]) -> Optional[datetime.datetime]:
    """Parse an RFC3339 timestamp, including nanosecond precision."""

    if not value:
        return None
    # fromisoformat before 3.11 wants exactly 3 or 6 fraction digits
    text = _FRACTION.sub(lambda match: "." + match.group(1)[:6].ljust(6, "0"), value.strip(), count=1)
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=datetime.timezone.utc)
    return parsed


def format_timestamp(value: Optional[str]) -> str:
    parsed = parse_timestamp(value)
    if parsed is None:
        return value or "-"
    return parsed.strftime("%Y-%m-%d %H:%M:%S")


@dataclass
class TallySnapshot:
    yes: str = "0"
    no: str = "0"
    abstain: str = "0"
    no_with_veto: str = "0"

    @classmethod
    def from_api(cls, data: Optional[Dict[str, Any]]) -> "TallySnapshot":
        data = data or {}
        return cls(
            yes=str(data.get("yes_count", "0")),
            no=str(data.get("no_count", "0")),
            abstain=str(data.get("abstain_count", "0")),
            no_with_veto=str(data.get("no_with_veto_count", "0")),
        )


@dataclass
class ProposalSnapshot:
    id: str
    status: str
    voting_start: Optional[str] = None
    voting_end: Optional[str] = None
    tally: TallySnapshot = field(default_factory=TallySnapshot)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "ProposalSnapshot":
        return cls(
            id=str(data.get("id", "?")),
            status=str(data.get("status", "")),
            voting_start=data.get("voting_start_time"),
            voting_end=data.get("voting_end_time"),
            tally=TallySnapshot.from_api(data.get("final_tally_result")),
        )

    @property
    def status_label(self) -> str:
        return STATUS_LABELS.get(self.status, f"❓ {self.status}")

    def voting_ended(self, now: datetime.datetime) -> bool:
        if self.status != STATUS_VOTING_PERIOD:
            return False
        end = parse_timestamp(self.voting_end)
        return end is not None and end < now


def fetch_proposals(session: requests.Session, rest_endpoint: str, timeout: float = 10.0) -> List[ProposalSnapshot]:
    url = f"{rest_endpoint.rstrip('/')}{PROPOSALS_QUERY_PATH}"
    try:
        response = session.get(url, timeout=timeout)
    except requests.RequestException as exc:
        raise ProposalFetchError(str(exc)) from exc
    if response.status_code != 200:
        body = (response.text or "")[:200]
        raise ProposalFetchError(f"HTTP {response.status_code} from {url} {body}".rstrip())
    try:
        payload = response.json()
    except ValueError as exc:
        raise ProposalFetchError(f"invalid JSON from {url}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ProposalFetchError(f"unexpected payload from {url}")
    return [ProposalSnapshot.from_api(item) for item in payload.get("proposals") or [] if isinstance(item, dict)]


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class ProposalMonitor:
    """Poll, render and stop once a proposal's voting period has ended.

    A failed fetch is printed and retried on the next tick; there is no
    backoff and no retry budget.
    """

    def __init__(
        self,
        rest_endpoint: str,
        interval: float = 2.0,
        session: Optional[requests.Session] = None,
        stream: Optional[TextIO] = None,
        now: Callable[[], datetime.datetime] = utc_now,
        sleep: Callable[[float], None] = time.sleep,
        clear_screen: bool = True,
    ) -> None:
        self.rest_endpoint = rest_endpoint
        self.interval = interval
        self.session = session or requests.Session()
        self.stream = stream or sys.stdout
        self.console = Console(file=self.stream)
        self.now = now
        self.sleep = sleep
        self.clear_screen = clear_screen
        self.ticks = 0

    def _write(self, text: str = "") -> None:
        self.stream.write(text + "\n")

    def render(self, proposals: List[ProposalSnapshot]) -> Optional[ProposalSnapshot]:
        """Draw one frame; return the proposal whose voting just ended, if any."""

        if self.clear_screen:
            self.console.clear()
        self._write("🔍 Governance Proposals Monitor")
        self._write("================================")
        if not proposals:
            frame = SPINNER_FRAMES[self.ticks % len(SPINNER_FRAMES)]
            self._write(f"{frame} No proposals found")
            self.stream.flush()
            return None

        now = self.now()
        finished = None
        for proposal in proposals:
            self._write(f"📋 Proposal #{proposal.id} - {proposal.status_label}")
            if proposal.status == STATUS_VOTING_PERIOD:
                self._write(
                    f"   ⏰ Voting Period: {format_timestamp(proposal.voting_start)}"
                    f" to {format_timestamp(proposal.voting_end)}"
                )
                if finished is None and proposal.voting_ended(now):
                    self._write("   🎉 VOTING PERIOD COMPLETED!")
                    finished = proposal
            tally = proposal.tally
            self._write(
                f"   📊 Tally: Yes: {tally.yes}, No: {tally.no}, "
                f"Abstain: {tally.abstain}, No with Veto: {tally.no_with_veto}"
            )
            self._write()
        self.stream.flush()
        return finished

    def show_completion(self, blinks: int = 5) -> None:
        banner = "🎉" * 20
        self._write()
        self._write(banner)
        self._write("🎉" + " " * 47 + "🎉")
        self._write("🎉           PROPOSAL COMPLETED!                🎉")
        self._write("🎉" + " " * 47 + "🎉")
        self._write(banner)
        for _ in range(blinks):
            self.stream.write("\r🎉 PROPOSAL COMPLETED! 🎉")
            self.stream.flush()
            self.sleep(0.5)
            self.stream.write("\r" + " " * 26)
            self.stream.flush()
            self.sleep(0.5)
        self._write("\r🎉 PROPOSAL COMPLETED! 🎉")
        self.stream.flush()

    def run(self, stop: Optional[threading.Event] = None) -> Optional[ProposalSnapshot]:
        """Loop until voting ends (returns that proposal) or ``stop`` is set."""

        while stop is None or not stop.is_set():
            try:
                proposals = fetch_proposals(self.session, self.rest_endpoint)
            except ProposalFetchError as exc:
                self.stream.write(f"\r❌ Error fetching proposals: {exc}\n")
                self.stream.flush()
                logger.warning("Proposal fetch failed: %s", exc)
            else:
                finished = self.render(proposals)
                if finished is not None:
                    self.show_completion()
                    return finished
            self.ticks += 1
            self.sleep(self.interval)
        return None
