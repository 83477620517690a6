import os
import sys

import pytest

import pi_main


def run_main(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["pi_main.py", *args])
    pi_main.main()


def test_usage(monkeypatch, capsys):
    with pytest.raises(SystemExit) as exc:
        run_main(monkeypatch, "estimate")
    assert exc.value.code == 1
    assert "Usage:" in capsys.readouterr().out


def test_unknown_command(monkeypatch, capsys, tmp_path):
    with pytest.raises(SystemExit) as exc:
        run_main(monkeypatch, "simulate", str(tmp_path), "2", "100", "2")
    assert exc.value.code == 1
    assert "Unknown command: simulate" in capsys.readouterr().out


def test_unknown_backend(monkeypatch, capsys, tmp_path):
    with pytest.raises(SystemExit):
        run_main(monkeypatch, "estimate", str(tmp_path), "2", "100", "2", "gpu")
    assert "Unknown backend: gpu" in capsys.readouterr().out


def test_genstatus_then_estimate(monkeypatch, capsys, tmp_path):
    directory = str(tmp_path / "status")
    run_main(monkeypatch, "genstatus", directory, "3", "500", "3")
    assert sorted(os.listdir(directory)) == ["status-00", "status-01", "status-02"]

    run_main(monkeypatch, "estimate", directory, "3", "500", "3", "thread")
    out = capsys.readouterr().out
    assert "Results for 3 replicates:" in out
    assert out.count("reproducibility confirmed") == 3
    assert "Total time:" in out


def test_estimate_without_status(monkeypatch, capsys, tmp_path):
    with pytest.raises(SystemExit) as exc:
        run_main(monkeypatch, "estimate", str(tmp_path), "2", "100", "2")
    assert exc.value.code == 1
    assert "Error:" in capsys.readouterr().out


def test_genstatus_without_workers(monkeypatch, tmp_path):
    directory = str(tmp_path / "status")
    run_main(monkeypatch, "genstatus", directory, "2", "100")
    assert sorted(os.listdir(directory)) == ["status-00", "status-01"]


def test_single_replicate_is_rejected_before_running(monkeypatch, capsys, tmp_path):
    directory = str(tmp_path / "status")
    run_main(monkeypatch, "genstatus", directory, "1", "200")
    capsys.readouterr()

    with pytest.raises(SystemExit) as exc:
        run_main(monkeypatch, "estimate", directory, "1", "200", "1", "thread")
    assert exc.value.code == 1
    out = capsys.readouterr().out
    assert "Error: at least 2 replicates" in out
    assert "running (parallel)" not in out


@pytest.mark.parametrize("points", ["0", "-10"])
def test_non_positive_points(monkeypatch, capsys, tmp_path, points):
    with pytest.raises(SystemExit) as exc:
        run_main(monkeypatch, "estimate", str(tmp_path), "2", points, "2")
    assert exc.value.code == 1
    out = capsys.readouterr().out
    assert "must be positive" in out
    assert "Usage:" in out
