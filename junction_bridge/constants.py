from __future__ import annotations

from pathlib import Path
import re


DEFAULT_ENV_FILE = Path(".env")
DEFAULT_LOG_FILE = Path("junction_bridge_results.log")
CONFIG_SEARCH_PATHS = (
    Path("config.yaml"),
    Path("~/.junction-bridge/config.yaml"),
)

PROPOSAL_FILE = Path("proposal.json")
METADATA_FILE = Path("metadata.json")
DRAFT_METADATA_FILE = Path("draft_metadata.json")
STATE_FILE = Path("testing_state.json")

KEYRING_BACKEND = "os"
GAS_ADJUSTMENT = "1.5"
VOTE_OPTIONS = ("yes", "no", "abstain", "no_with_veto")

PROPOSAL_MSG_TYPE = "/junction.evmbridge.MsgUpdateParams"
GOV_AUTHORITY = "air10d07y265gmmuvt4z0w9aw880jnsr700jszsute"
PLACEHOLDER_BRIDGE_WORKER = "air1h58eezgk5j4jwwpk3nxggx63gfuhnfcj78z5vj"
PLACEHOLDER_CONTRACT_ADDRESS = "0xd47248E2f6C725Dd20C82893162aA545C345834e"
DEFAULT_PROPOSAL_TITLE = "Update EVM Bridge Authorized Unlockers"
DEFAULT_PROPOSAL_SUMMARY = (
    "This proposal aims to update the EVM bridge authorized unlockers list and add new "
    "bridge contract addresses to enhance the bridge's security and functionality."
)
DEFAULT_PROPOSAL_DETAILS = (
    "Replaces the evmbridge module parameters with the listed bridge workers and the "
    "bridge contract address."
)

PROPOSALS_QUERY_PATH = "/cosmos/gov/v1/proposals?proposal_status=PROPOSAL_STATUS_UNSPECIFIED"
STATUS_VOTING_PERIOD = "PROPOSAL_STATUS_VOTING_PERIOD"
STATUS_LABELS = {
    "PROPOSAL_STATUS_DEPOSIT_PERIOD": "💰 Deposit Period",
    STATUS_VOTING_PERIOD: "🗳️  Voting Period",
    "PROPOSAL_STATUS_PASSED": "✅ PASSED",
    "PROPOSAL_STATUS_REJECTED": "❌ REJECTED",
    "PROPOSAL_STATUS_FAILED": "💥 FAILED",
}

SPINNER_FRAMES = ("⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏")
SPINNER_NAME = "dots"
TERMINATE_GRACE_SECONDS = 5.0
TX_INCLUSION_WAIT_SECONDS = 6

COIN_PATTERN = re.compile(r"^(\d+)([a-zA-Z][a-zA-Z0-9/:._-]{1,127})$")
DEC_COIN_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)([a-zA-Z][a-zA-Z0-9/:._-]{1,127})$")
DURATION_PATTERN = re.compile(r"^(\d+)s$")
CID_V0_PATTERN = re.compile(r"^Qm[1-9A-HJ-NP-Za-km-z]{44}$")


__all__ = [
    "DEFAULT_ENV_FILE",
    "DEFAULT_LOG_FILE",
    "CONFIG_SEARCH_PATHS",
    "PROPOSAL_FILE",
    "METADATA_FILE",
    "DRAFT_METADATA_FILE",
    "STATE_FILE",
    "KEYRING_BACKEND",
    "GAS_ADJUSTMENT",
    "VOTE_OPTIONS",
    "PROPOSAL_MSG_TYPE",
    "GOV_AUTHORITY",
    "PLACEHOLDER_BRIDGE_WORKER",
    "PLACEHOLDER_CONTRACT_ADDRESS",
    "DEFAULT_PROPOSAL_TITLE",
    "DEFAULT_PROPOSAL_SUMMARY",
    "DEFAULT_PROPOSAL_DETAILS",
    "PROPOSALS_QUERY_PATH",
    "STATUS_VOTING_PERIOD",
    "STATUS_LABELS",
    "SPINNER_FRAMES",
    "SPINNER_NAME",
    "TERMINATE_GRACE_SECONDS",
    "TX_INCLUSION_WAIT_SECONDS",
    "COIN_PATTERN",
    "DEC_COIN_PATTERN",
    "DURATION_PATTERN",
    "CID_V0_PATTERN",
]
