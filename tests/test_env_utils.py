from junction_bridge.env_utils import is_placeholder, parse_env_file, resolve_env_value, split_env_list


def test_split_env_list_trims_and_keeps_order():
    assert split_env_list("a, b ,c") == ["a", "b", "c"]


def test_split_env_list_blank_is_empty():
    assert split_env_list("") == []
    assert split_env_list("   ") == []
    assert split_env_list(None) == []


def test_split_env_list_keeps_inner_empty_entries():
    assert split_env_list("a,,b") == ["a", "", "b"]


def test_parse_env_file_does_not_override_existing(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text('export CHAIN_ID="file-chain"\nDENOM=uamf\n# comment\nEMPTY\n')
    env = {"CHAIN_ID": "shell-chain"}
    parse_env_file(env_file, env)
    assert env == {"CHAIN_ID": "shell-chain", "DENOM": "uamf"}


def test_parse_env_file_missing_is_noop(tmp_path):
    env = {}
    parse_env_file(tmp_path / "missing.env", env)
    assert env == {}


def test_placeholders():
    assert is_placeholder("<ipfs-cid>")
    assert is_placeholder("YOUR_CONTRACT_ADDRESS")
    assert not is_placeholder("Update your bridge workers")
    assert not is_placeholder("air1h58eezgk5j4jwwpk3nxggx63gfuhnfcj78z5vj")


def test_resolve_env_value_skips_placeholders_and_other_names():
    assert resolve_env_value("MINIMUM_GAS_PRICES", {"GAS_PRICES": "1uamf"}) is None
    assert resolve_env_value("MINIMUM_GAS_PRICES", {"MINIMUM_GAS_PRICES": "1uamf"}) == "1uamf"
    assert resolve_env_value("IPFS_CID", {"IPFS_CID": "<cid>"}) is None
    assert resolve_env_value("IPFS_CID", {}) is None
