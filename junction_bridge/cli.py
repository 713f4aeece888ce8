"""``junction-bridge`` command line.

Subcommands mirror the manual operator steps: ``init-node``,
``submit-proposal``, ``vote``, ``monitor-proposals`` and ``run`` (the
two-phase interactive flow).
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from .config import Settings, load_settings
from .constants import DEFAULT_ENV_FILE
from .env_utils import current_env
from .errors import JunctionBridgeError
from .executor import CommandRunner
from .logging_utils import open_run_log
from .monitor import ProposalMonitor
from .node import RunningSession
from .prompts import Prompter
from .proposal import prepare_proposal
from .session import SessionStore
from .workflow import init_chain, run_session, start_node, submit_proposal, validate_vote_option, vote

# argparse dest -> Settings field
_SETTING_FLAGS = {
    "moniker": "moniker",
    "chain_id": "chain_id",
    "denom": "denom",
    "key_name": "key_name",
    "amount": "amount",
    "validator_stake": "validator_stake",
    "junctiond_path": "junctiond_path",
    "home_dir": "home_dir",
    "minimum_gas_prices": "minimum_gas_prices",
    "proposer_key": "proposer_key",
    "deposit": "proposal_deposit",
    "fees": "proposal_fees",
    "rest_endpoint": "rest_endpoint",
    "interval": "poll_interval",
    "log_file": "log_file",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="junction-bridge",
        description="Set up a local Junction node and drive a bridge-params governance proposal through a vote.",
    )
    parser.add_argument("--config", type=Path, help="YAML config file (default: ./config.yaml or ~/.junction-bridge/config.yaml)")
    parser.add_argument("--env-file", type=Path, default=DEFAULT_ENV_FILE, help="KEY=VALUE file loaded under the environment")
    parser.add_argument("--log-file", help="Command log file")
    sub = parser.add_subparsers(dest="command", required=True)

    init = sub.add_parser("init-node", help="Initialize and start a Junction node")
    init.add_argument("--moniker", help="Moniker for the node")
    init.add_argument("--chain-id", help="Chain ID")
    init.add_argument("--denom", help="Denomination")
    init.add_argument("--key-name", help="Key name")
    init.add_argument("--amount", help="Initial genesis account amount")
    init.add_argument("--validator-stake", help="Validator stake amount")
    init.add_argument("--junctiond-path", help="Path to junctiond binary")
    init.add_argument("--home-dir", help="Node home directory")
    init.add_argument("--minimum-gas-prices", help="Minimum gas prices")
    init.add_argument("--no-start", action="store_true", help="Prepare the node home without starting the node")
    init.set_defaults(handler=cmd_init_node)

    submit = sub.add_parser("submit-proposal", help="Build and submit the bridge params proposal")
    submit.add_argument("--proposer-key", help="Key that signs the proposal")
    submit.add_argument("--deposit", help="Proposal deposit, e.g. 51000000uamf")
    submit.add_argument("--fees", help="Transaction fees, e.g. 50uamf")
    submit.add_argument("--ipfs-cid", help="CID of the uploaded metadata.json")
    submit.add_argument("--title", help="Proposal title")
    submit.add_argument("--summary", help="Proposal summary")
    submit.add_argument("--junctiond-path", help="Path to junctiond binary")
    submit.set_defaults(handler=cmd_submit_proposal)

    vote_cmd = sub.add_parser("vote", help="Vote on a governance proposal (yes/no/abstain/no_with_veto)")
    vote_cmd.add_argument("proposal_id")
    vote_cmd.add_argument("vote_option")
    vote_cmd.add_argument("--proposer-key", help="Key that signs the vote")
    vote_cmd.add_argument("--fees", help="Transaction fees, e.g. 50uamf")
    vote_cmd.add_argument("--junctiond-path", help="Path to junctiond binary")
    vote_cmd.set_defaults(handler=cmd_vote)

    monitor = sub.add_parser("monitor-proposals", help="Watch proposal status until voting ends")
    monitor.add_argument("--rest-endpoint", help="REST endpoint, e.g. http://localhost:1317")
    monitor.add_argument("--interval", type=float, help="Seconds between polls")
    monitor.set_defaults(handler=cmd_monitor)

    run = sub.add_parser("run", help="Two-phase flow: set up the node, then re-run to submit and vote")
    run.set_defaults(handler=cmd_run)
    return parser


def settings_from_args(args: argparse.Namespace) -> Settings:
    overrides: Dict[str, Any] = {}
    for dest, field_name in _SETTING_FLAGS.items():
        value = getattr(args, dest, None)
        if value is not None:
            overrides[field_name] = value
    return load_settings(config_path=args.config, env_file=args.env_file, overrides=overrides)


def _runner(settings: Settings, log) -> CommandRunner:
    return CommandRunner(settings.binary, log=log)


def cmd_init_node(args: argparse.Namespace, settings: Settings, log) -> int:
    runner = _runner(settings, log)
    init_chain(settings, runner)
    if args.no_start:
        return 0
    with RunningSession(SessionStore(), settings.binary) as running:
        start_node(settings, runner, running)
    return 0


def cmd_submit_proposal(args: argparse.Namespace, settings: Settings, log) -> int:
    env = current_env(args.env_file)
    for flag, env_name in (("ipfs_cid", "IPFS_CID"), ("title", "PROPOSAL_TITLE"), ("summary", "PROPOSAL_SUMMARY")):
        value = getattr(args, flag, None)
        if value:
            env[env_name] = value
    print("🗳️  Starting Governance Proposal Submission...")
    prepare_proposal(Prompter(env), settings.proposal_deposit)
    submit_proposal(settings, _runner(settings, log))
    print("\n🎯 Next steps:")
    print("1. Wait for the deposit period to end")
    print("2. Use 'junction-bridge vote <proposal-id> <vote-option>' to vote")
    print("3. Use 'junction-bridge monitor-proposals' to monitor status")
    return 0


def cmd_vote(args: argparse.Namespace, settings: Settings, log) -> int:
    option = validate_vote_option(args.vote_option)
    vote(settings, _runner(settings, log), args.proposal_id, option)
    return 0


def cmd_monitor(args: argparse.Namespace, settings: Settings, log) -> int:
    print("🔍 Monitoring governance proposals...")
    print("Press Ctrl+C to stop monitoring")
    ProposalMonitor(settings.rest_endpoint, settings.poll_interval).run()
    return 0


def cmd_run(args: argparse.Namespace, settings: Settings, log) -> int:
    run_session(settings, _runner(settings, log), prompter=Prompter(current_env(args.env_file)))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    handler: Callable[..., int] = args.handler
    try:
        settings = settings_from_args(args)
        with open_run_log(Path(settings.log_file)) as log:
            return handler(args, settings, log)
    except JunctionBridgeError as exc:
        print(f"❌ {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
