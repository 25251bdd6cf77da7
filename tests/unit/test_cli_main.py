from __future__ import annotations

import json

import pytest

from dialmap.cli.__main__ import EXIT_FATAL, EXIT_PARTIAL_FAILURE, EXIT_SUCCESS_ALL, main


def _summary_line(out: str) -> str:
    lines = [line for line in out.splitlines() if line.startswith("SUMMARY ")]
    assert len(lines) == 1
    return lines[0]


def test_main_uses_local_config_and_source_directory(write_config, write_csv, sample_csv_text, temp_workdir, capsys):
    write_csv("a.csv", sample_csv_text)
    code = main([])
    out = capsys.readouterr().out

    assert code == EXIT_SUCCESS_ALL
    assert _summary_line(out).startswith(
        "SUMMARY files=1 success=1 failed=0 records=4 invalid_rows=0 skipped=0 elapsed_sec="
    )
    data = json.loads((temp_workdir / "output" / "a.json").read_text(encoding="utf-8"))
    assert data["appsByPath"]["建築/設計/意匠/設計"][0]["name"] == "BIMツール"
    assert not list((temp_workdir / "logs").glob("errors-*.log"))


def test_main_ranking_output(write_config, write_csv, sample_csv_text, capsys):
    write_csv("a.csv", sample_csv_text)
    code = main(["--ranking", "建築/施工", "--limit", "1"])
    out = capsys.readouterr().out

    assert code == EXIT_SUCCESS_ALL
    assert "RANKING a.csv path=建築/施工" in out
    assert "現場ナビ" in out
    assert "3.0億円" in out
    assert "工程くん" not in out


def test_main_ranking_no_apps(write_config, write_csv, sample_csv_text, capsys):
    write_csv("a.csv", sample_csv_text)
    assert main(["--ranking", "土木"]) == EXIT_SUCCESS_ALL
    assert "  (no apps)" in capsys.readouterr().out


def test_main_partial_failure_writes_error_log(write_config, write_csv, sample_csv_text, temp_workdir, capsys):
    good = write_csv("good.csv", sample_csv_text)
    code = main([str(good), str(temp_workdir / "data" / "missing.csv")])
    out = capsys.readouterr().out

    assert code == EXIT_PARTIAL_FAILURE
    assert "files=2 success=1 failed=1" in _summary_line(out)
    logs = list((temp_workdir / "logs").glob("errors-*.log"))
    assert len(logs) == 1
    record = json.loads(logs[0].read_text(encoding="utf-8").splitlines()[0])
    assert record["error_type"] == "FILE_READ_ERROR"
    assert record["row"] == -1


def test_main_explicit_output_dir_and_directory_arg(write_config, write_csv, sample_csv_text, temp_workdir, capsys):
    write_csv("a.csv", sample_csv_text)
    write_csv("b.CSV", sample_csv_text)
    code = main(["data", "--output-dir", "out"])
    capsys.readouterr()

    assert code == EXIT_SUCCESS_ALL
    assert sorted(p.name for p in (temp_workdir / "out").iterdir()) == ["a.json", "b.json"]


def test_main_missing_config_is_fatal(temp_workdir, capsys):
    code = main(["--config", "nope.yml"])
    out = capsys.readouterr().out
    assert code == EXIT_FATAL
    assert "ERROR config: config file not found" in out


def test_main_no_inputs_is_fatal(temp_workdir, sample_config_yaml, capsys):
    cfg = temp_workdir / "config" / "dialmap.yml"
    cfg.write_text(sample_config_yaml.replace("source_directory: ./data\n", ""), encoding="utf-8")
    code = main([])
    assert code == EXIT_FATAL
    assert "ERROR input: no input paths" in capsys.readouterr().out


def test_main_missing_source_directory_is_fatal(write_config, temp_workdir, capsys):
    (temp_workdir / "data").rmdir()
    assert main([]) == EXIT_FATAL
    assert "Directory not found" in capsys.readouterr().out


def test_main_config_from_env_file(temp_workdir, sample_config_yaml, write_csv, sample_csv_text, monkeypatch, capsys):
    # setenv -> delenv で終了時に環境変数が元へ戻る
    monkeypatch.setenv("DIALMAP_CONFIG", "placeholder")
    monkeypatch.delenv("DIALMAP_CONFIG")
    alt = temp_workdir / "alt.yml"
    alt.write_text(sample_config_yaml.replace("ranking_limit: 5", "ranking_limit: 1"), encoding="utf-8")
    (temp_workdir / ".env").write_text(f"DIALMAP_CONFIG={alt}\n", encoding="utf-8")
    write_csv("a.csv", sample_csv_text)

    code = main(["--ranking", "建築"])
    out = capsys.readouterr().out
    assert code == EXIT_SUCCESS_ALL
    assert "現場ナビ" in out
    assert "積算ソフト" not in out


def test_main_falls_back_to_bundled_config(temp_workdir, write_csv, sample_csv_text, capsys):
    write_csv("a.csv", sample_csv_text)
    assert main(["data"]) == EXIT_SUCCESS_ALL
    assert "records=4" in _summary_line(capsys.readouterr().out)


def test_main_debug_flag(write_config, write_csv, sample_csv_text, capsys):
    write_csv("a.csv", sample_csv_text)
    assert main(["--debug"]) == EXIT_SUCCESS_ALL
    out = capsys.readouterr().out
    assert "DEBUG debug mode enabled" in out
    assert "name cleaned" in out


@pytest.mark.parametrize("argv", [["--limit", "x"], ["--unknown"]])
def test_main_bad_arguments_exit(argv, temp_workdir):
    with pytest.raises(SystemExit):
        main(argv)
