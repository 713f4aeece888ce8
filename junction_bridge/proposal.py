from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from web3 import Web3

from .constants import (
    CID_V0_PATTERN,
    DEFAULT_PROPOSAL_DETAILS,
    DEFAULT_PROPOSAL_SUMMARY,
    DEFAULT_PROPOSAL_TITLE,
    DRAFT_METADATA_FILE,
    GOV_AUTHORITY,
    METADATA_FILE,
    PLACEHOLDER_BRIDGE_WORKER,
    PLACEHOLDER_CONTRACT_ADDRESS,
    PROPOSAL_FILE,
    PROPOSAL_MSG_TYPE,
)
from .errors import ProposalError
from .logging_utils import get_logger
from .prompts import Prompter

logger = get_logger()


@dataclass
class ProposalFields:
    bridge_workers: List[str] = field(default_factory=lambda: [PLACEHOLDER_BRIDGE_WORKER])
    contract_address: str = PLACEHOLDER_CONTRACT_ADDRESS
    title: str = DEFAULT_PROPOSAL_TITLE
    summary: str = DEFAULT_PROPOSAL_SUMMARY
    details: str = DEFAULT_PROPOSAL_DETAILS
    forum_url: str = ""

    def to_state(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_state(cls, data: Dict[str, Any]) -> "ProposalFields":
        """Rebuild from a state dict; a wrongly typed field raises TypeError."""

        known = {name: data[name] for name in cls.__dataclass_fields__ if name in data}
        workers = known.get("bridge_workers", [])
        if not isinstance(workers, list) or not all(isinstance(item, str) for item in workers):
            raise TypeError(f"bridge_workers must be a list of strings, got {workers!r}")
        for name, value in known.items():
            if name != "bridge_workers" and not isinstance(value, str):
                raise TypeError(f"{name} must be a string, got {value!r}")
        return cls(**known)


def check_contract_address(address: str) -> Optional[str]:
    """Return a warning for an address that does not look like an EVM address."""

    if not Web3.is_address(address):
        return f"{address!r} is not a valid EVM address (wrong length, characters or checksum)"
    if address[2:] == address[2:].lower():
        return f"{address} is not checksummed; checksummed form is {Web3.to_checksum_address(address)}"
    return None


def check_cid(cid: str) -> Optional[str]:
    """Cheap shape check for an IPFS CID; never rejects."""

    if CID_V0_PATTERN.match(cid):
        return None
    if cid.startswith("b") and len(cid) > 50:
        return None
    return f"CID {cid!r} does not look like a standard IPFS CID (Qm... or bafy...)"


def collect_fields(prompter: Prompter) -> ProposalFields:
    defaults = ProposalFields()
    print("\n🧾 Collecting proposal parameters...")
    workers = prompter.prompt_list("Bridge worker addresses", defaults.bridge_workers, env_name="BRIDGE_WORKERS")
    contract = prompter.prompt(
        "Bridge contract address", defaults.contract_address, env_name="BRIDGE_CONTRACT_ADDRESS"
    )
    warning = check_contract_address(contract)
    if warning:
        print(f"⚠️  {warning}")

    title = prompter.prompt("Proposal title", defaults.title, env_name="PROPOSAL_TITLE")
    summary = prompter.prompt("Proposal summary", defaults.summary, env_name="PROPOSAL_SUMMARY")
    details = prompter.prompt("Proposal details", defaults.details, env_name="PROPOSAL_DETAILS")
    forum_url = prompter.prompt("Forum URL (optional)", "", env_name="PROPOSAL_FORUM_URL")
    return ProposalFields(
        bridge_workers=workers,
        contract_address=contract,
        title=title,
        summary=summary,
        details=details,
        forum_url=forum_url,
    )


def build_metadata(fields: ProposalFields, draft_path: Path = DRAFT_METADATA_FILE) -> Dict[str, Any]:
    """Gov metadata, seeded from ``draft_metadata.json`` when one exists."""

    metadata: Dict[str, Any] = {}
    if draft_path.exists():
        try:
            draft = json.loads(draft_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable %s: %s", draft_path, exc)
        else:
            if isinstance(draft, dict):
                metadata.update(draft)
    metadata.update(
        {
            "title": fields.title,
            "authors": metadata.get("authors") or [],
            "summary": fields.summary,
            "details": fields.details,
            "proposal_forum_url": fields.forum_url,
            "vote_option_context": metadata.get("vote_option_context") or "",
        }
    )
    return metadata


def build_proposal(fields: ProposalFields, cid: str, deposit: str, expedited: bool = True) -> Dict[str, Any]:
    return {
        "messages": [
            {
                "@type": PROPOSAL_MSG_TYPE,
                "authority": GOV_AUTHORITY,
                "params": {
                    "bridge_workers": list(fields.bridge_workers),
                    "bridge_contract_address": fields.contract_address,
                },
            }
        ],
        "metadata": f"ipfs://{cid}",
        "deposit": deposit,
        "title": fields.title,
        "summary": fields.summary,
        "expedited": expedited,
    }


def write_json(path: Path, data: Dict[str, Any], indent: int = 2) -> Path:
    try:
        path.write_text(json.dumps(data, indent=indent, ensure_ascii=False) + "\n", encoding="utf-8")
    except OSError as exc:
        raise ProposalError(f"Error writing {path}: {exc}") from exc
    return path


def request_cid(prompter: Prompter, metadata_path: Path) -> str:
    print(f"\n📤 Upload {metadata_path} to IPFS, then paste the CID below.")
    print("  # Using ipfs CLI:")
    print(f"  ipfs add {metadata_path}")
    print("  # Or using a pinning service / https://ipfs.io/")
    cid = prompter.prompt_required("Enter IPFS CID", env_name="IPFS_CID")
    warning = check_cid(cid)
    if warning:
        print(f"⚠️  {warning}; continuing anyway")
    return cid


def prepare_proposal(
    prompter: Prompter,
    deposit: str,
    fields: Optional[ProposalFields] = None,
    metadata_path: Path = METADATA_FILE,
    proposal_path: Path = PROPOSAL_FILE,
    draft_path: Path = DRAFT_METADATA_FILE,
) -> tuple[ProposalFields, str]:
    """Collect fields, write metadata, wait for its CID and write the proposal.

    Returns the fields used and the CID supplied.
    """

    fields = fields or collect_fields(prompter)

    print(f"\n📝 Creating {metadata_path}...")
    write_json(metadata_path, build_metadata(fields, draft_path))
    print(f"✅ {metadata_path} created successfully")

    cid = request_cid(prompter, metadata_path)

    print(f"\n📝 Creating {proposal_path}...")
    write_json(proposal_path, build_proposal(fields, cid, deposit), indent=1)
    print(f"✅ {proposal_path} created successfully")
    return fields, cid
