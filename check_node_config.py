#!/usr/bin/env python3
"""Diagnostic script to check the governance test configuration."""

import os
import sys
from pathlib import Path

from junction_bridge import STATE_FILE, JunctionBridgeError, load_settings
from junction_bridge.config import FIELD_ENV, find_config_file
from junction_bridge.constants import DEFAULT_ENV_FILE
from junction_bridge.session import SessionStore


def main() -> int:
    print("=" * 60)
    print("Junction Bridge Configuration Diagnostic")
    print("=" * 60)

    issues = []

    config_file = find_config_file()
    if config_file:
        print(f"\n✓ Found YAML config: {config_file}")
    else:
        print("\n○ No config.yaml found (defaults and environment only)")
    if DEFAULT_ENV_FILE.exists():
        print(f"✓ Found .env file: {DEFAULT_ENV_FILE.resolve()}")
    else:
        print("○ No .env file in the working directory")

    try:
        settings = load_settings()
    except JunctionBridgeError as exc:
        print(f"\n❌ ERROR: {exc}")
        return 1

    print("\n" + "=" * 60)
    print("1. Resolved Settings")
    print("=" * 60)
    for name, value in settings.as_dict().items():
        source = "env" if os.getenv(FIELD_ENV[name]) else "default/file"
        print(f"  {name:26} = {value}  ({source})")

    print("\n" + "=" * 60)
    print("2. Node Binary")
    print("=" * 60)
    binary = Path(settings.binary)
    if not binary.exists():
        print(f"  ✗ Binary NOT FOUND: {binary}")
        issues.append(f"junctiond binary missing at {binary}")
    elif not os.access(binary, os.X_OK):
        print(f"  ✗ Binary is not executable: {binary}")
        issues.append(f"junctiond binary at {binary} is not executable (chmod +x)")
    else:
        print(f"  ✓ {binary} ({binary.stat().st_size:,} bytes)")

    print("\n" + "=" * 60)
    print("3. Node Home")
    print("=" * 60)
    for label, path in (("genesis.json", settings.genesis_file), ("app.toml", settings.app_toml_file)):
        if path.exists():
            print(f"  ✓ {label}: {path}")
        else:
            print(f"  ○ {label} not present yet: {path} (created by init-node)")

    print("\n" + "=" * 60)
    print("4. Session State")
    print("=" * 60)
    store = SessionStore(STATE_FILE)
    if store.exists():
        state = store.load()
        print(f"  ✓ {STATE_FILE} present, next run phase: {state.phase.value}")
    else:
        print("  ○ No session state; the next run starts with setup")

    print("\n" + "=" * 60)
    print("Summary")
    print("=" * 60)
    if issues:
        print(f"\n⚠️  Found {len(issues)} issue(s) to fix:\n")
        for i, issue in enumerate(issues, 1):
            print(f"  {i}. {issue}")
        return 1

    print("\n✅ All checks passed!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
