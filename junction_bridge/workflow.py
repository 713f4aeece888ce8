"""Step sequences for the node-setup and proposal-submit runs.

Each step either completes or raises; nothing here retries. A failed run is
restarted from scratch, or from the submit phase if the state file says so.
"""
from __future__ import annotations

import json
import shutil
from pathlib import Path
from typing import Callable, Optional

from .animation import Spinner, countdown
from .config import Settings
from .constants import KEYRING_BACKEND, GAS_ADJUSTMENT, PROPOSAL_FILE, TX_INCLUSION_WAIT_SECONDS, VOTE_OPTIONS
from .errors import CommandError, InvalidVoteOption, JunctionBridgeError
from .executor import CommandRunner
from .genesis import GovTiming, patch_app_toml, update_genesis_timing
from .logging_utils import get_logger
from .monitor import ProposalMonitor
from .node import RunningSession
from .prompts import Prompter
from .proposal import ProposalFields, prepare_proposal
from .session import Phase, SessionState, SessionStore, advance

logger = get_logger()


def remove_home(settings: Settings) -> None:
    home = settings.home_path
    print(f"\n📁 Removing existing node directory {home}...")
    try:
        shutil.rmtree(home)
    except FileNotFoundError:
        return
    except OSError as exc:
        print(f"⚠️  Could not remove existing directory: {exc}")


def ensure_key(settings: Settings, runner: CommandRunner) -> bool:
    """Create ``key_name`` unless the keyring already holds it; True if created."""

    print("\n🔑 Generating keys...")
    if runner.succeeds(["keys", "show", settings.key_name, "--keyring-backend", KEYRING_BACKEND]):
        print(f"✅ Using existing key: {settings.key_name}")
        return False
    print(f"🔑 Creating new key: {settings.key_name}")
    runner.run(["keys", "add", settings.key_name, "--keyring-backend", KEYRING_BACKEND])
    return True


def init_chain(settings: Settings, runner: CommandRunner) -> None:
    print("🚀 Starting Junction Node Initialization...")
    print(f"Moniker: {settings.moniker}")
    print(f"Chain ID: {settings.chain_id}")
    print(f"Denom: {settings.denom}")

    remove_home(settings)

    print("\n🔧 Initializing node...")
    runner.run(["init", settings.moniker, "--default-denom", settings.denom, "--chain-id", settings.chain_id])

    ensure_key(settings, runner)

    print("\n💰 Adding genesis account...")
    runner.run(
        ["genesis", "add-genesis-account", settings.key_name, settings.amount, "--keyring-backend", KEYRING_BACKEND]
    )

    print("\n🏛️ Staking validator account...")
    runner.run(
        [
            "genesis",
            "gentx",
            settings.key_name,
            settings.validator_stake,
            "--keyring-backend",
            KEYRING_BACKEND,
            "--gas-prices",
            settings.gas_prices,
            "--chain-id",
            settings.chain_id,
        ]
    )

    print("\n📋 Collecting gentx files...")
    runner.run(["genesis", "collect-gentxs"])

    print("\n⚙️ Modifying genesis file...")
    update_genesis_timing(
        settings.genesis_file,
        GovTiming(
            max_deposit_period=settings.max_deposit_period,
            voting_period=settings.voting_period,
            expedited_voting_period=settings.expedited_voting_period,
        ),
    )
    print("✅ Genesis file updated with new voting and deposit periods")

    print("\n🔧 Modifying app.toml file...")
    patch_app_toml(settings.app_toml_file, settings.minimum_gas_prices)
    print("✅ App.toml file updated with new minimum gas prices")


def start_node(settings: Settings, runner: CommandRunner, running: RunningSession) -> int:
    print("\n🚀 Starting node...")
    print("Node will start with minimum gas prices:", settings.minimum_gas_prices)
    process = running.attach(runner.start(["start", "--minimum-gas-prices", settings.minimum_gas_prices]))
    return runner.wait(process)


def submit_proposal(settings: Settings, runner: CommandRunner, proposal_path: Path = PROPOSAL_FILE) -> str:
    args = [
        "tx",
        "gov",
        "submit-proposal",
        str(proposal_path),
        "--from",
        settings.signer,
        "--chain-id",
        settings.chain_id,
        "--fees",
        settings.proposal_fees,
        "--gas",
        "auto",
        "--gas-adjustment",
        GAS_ADJUSTMENT,
        "--keyring-backend",
        KEYRING_BACKEND,
        "-y",
    ]
    with Spinner("Submitting proposal to chain..."):
        output = runner.capture(args, show_stderr=True)
    if output.strip():
        print(output.rstrip())
    print("✅ Proposal submitted successfully!")
    return output


def latest_proposal_id(settings: Settings, runner: CommandRunner) -> str:
    output = runner.capture(["query", "gov", "proposals", "--output", "json"])
    try:
        payload = json.loads(output)
    except json.JSONDecodeError as exc:
        raise JunctionBridgeError(f"Could not parse proposals query output: {exc}") from exc
    ids = []
    for proposal in (payload or {}).get("proposals") or []:
        raw_id = str(proposal.get("id", ""))
        if raw_id.isdigit():
            ids.append(int(raw_id))
    if not ids:
        raise JunctionBridgeError("No proposals found on chain after submission")
    return str(max(ids))


def validate_vote_option(option: str) -> str:
    option = option.strip()
    if option not in VOTE_OPTIONS:
        raise InvalidVoteOption(
            f"Invalid vote option: {option}. Valid options are: {', '.join(VOTE_OPTIONS)}"
        )
    return option


def vote(settings: Settings, runner: CommandRunner, proposal_id: str, option: str) -> None:
    option = validate_vote_option(option)
    print(f"🗳️  Voting {option} on proposal {proposal_id}...")
    runner.run(
        [
            "tx",
            "gov",
            "vote",
            proposal_id,
            option,
            "--from",
            settings.signer,
            "--chain-id",
            settings.chain_id,
            "--fees",
            settings.proposal_fees,
            "--keyring-backend",
            KEYRING_BACKEND,
            "-y",
        ]
    )
    print(f"✅ Successfully voted {option} on proposal {proposal_id}!")


def run_setup_phase(
    settings: Settings,
    runner: CommandRunner,
    store: SessionStore,
    prompter: Prompter,
    running: RunningSession,
    launch_node: bool = True,
) -> SessionState:
    init_chain(settings, runner)

    fields, cid = prepare_proposal(prompter, settings.proposal_deposit)
    state = advance(SessionState(), fields, cid)
    store.save(state)

    print("\n" + "=" * 60)
    print("✅ Setup complete. Proposal files are ready.")
    print("=" * 60)
    print("Next steps:")
    print("1. Leave this terminal running the node")
    print("2. In a second terminal, run this script again to submit and vote")
    print("3. Press Ctrl+C here to stop the node and discard the session")

    if launch_node:
        start_node(settings, runner, running)
    return state


def run_submit_phase(
    settings: Settings,
    runner: CommandRunner,
    store: SessionStore,
    state: SessionState,
    prompter: Prompter,
    monitor: Optional[ProposalMonitor] = None,
    wait: Callable[..., bool] = countdown,
) -> Optional[str]:
    """Submit, vote and watch; returns the proposal id or None when skipped."""

    fields: ProposalFields = state.proposal
    print("🗳️  Resuming session: proposal ready for submission")
    print(f"Title: {fields.title}")
    print(f"Bridge workers: {', '.join(fields.bridge_workers)}")
    print(f"Bridge contract: {fields.contract_address}")
    print(f"Metadata: ipfs://{state.ipfs_cid}")

    if not prompter.confirm("Submit the proposal now?", default=True):
        print("⏭️  Skipping submission; session state removed.")
        store.clear()
        return None

    if settings.block_wait_seconds:
        wait(settings.block_wait_seconds, "Waiting for the node to produce blocks")

    submit_proposal(settings, runner)
    wait(TX_INCLUSION_WAIT_SECONDS, "Waiting for the transaction to be included")

    proposal_id = latest_proposal_id(settings, runner)
    print(f"📋 Proposal id: {proposal_id}")

    option = prompter.prompt("Vote option (yes/no/abstain/no_with_veto)", "yes", env_name="VOTE_OPTION")
    vote(settings, runner, proposal_id, option)

    monitor = monitor or ProposalMonitor(settings.rest_endpoint, settings.poll_interval)
    monitor.run()

    store.clear()
    print("✅ Session complete; state file removed.")
    return proposal_id


def run_session(
    settings: Settings,
    runner: CommandRunner,
    store: Optional[SessionStore] = None,
    prompter: Optional[Prompter] = None,
    running: Optional[RunningSession] = None,
    monitor: Optional[ProposalMonitor] = None,
    wait: Callable[..., bool] = countdown,
) -> Phase:
    """Run whichever phase the state file calls for; returns the phase run."""

    store = store or SessionStore()
    prompter = prompter or Prompter()
    running = running or RunningSession(store, settings.binary)
    state = store.load()

    with running:
        if state.phase is Phase.SUBMIT:
            try:
                run_submit_phase(settings, runner, store, state, prompter, monitor=monitor, wait=wait)
            except CommandError:
                logger.error("Submission step failed; state kept in %s so this phase can be re-run.", store.path)
                raise
            return Phase.SUBMIT
        run_setup_phase(settings, runner, store, prompter, running)
        return Phase.SETUP
