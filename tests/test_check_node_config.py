import check_node_config


def test_missing_binary_is_reported(workdir, monkeypatch, capsys):
    monkeypatch.setenv("JUNCTIOND_PATH", str(workdir / "build" / "junctiond"))
    monkeypatch.setenv("HOME_DIR", str(workdir / "home"))
    assert check_node_config.main() == 1
    out = capsys.readouterr().out
    assert "Binary NOT FOUND" in out
    assert "No session state" in out


def test_all_checks_pass_with_executable_binary(workdir, monkeypatch, capsys):
    binary = workdir / "junctiond"
    binary.write_text("#!/bin/sh\n")
    binary.chmod(0o755)
    monkeypatch.setenv("JUNCTIOND_PATH", str(binary))
    monkeypatch.setenv("HOME_DIR", str(workdir / "home"))
    (workdir / "testing_state.json").write_text('{"phase": "submit"}')

    assert check_node_config.main() == 0
    out = capsys.readouterr().out
    assert "All checks passed" in out
    assert "next run phase: submit" in out
