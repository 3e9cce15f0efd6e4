import csv
import io
import logging
import math

import numpy as np
import pytest

from mcerrors.cli import main


@pytest.fixture
def meas(tmp_path):
    """8 rows: column 1 = 1..8, column 2 = 10 * column 1, column 3 constant."""
    p = tmp_path / "meas"
    p.write_text("".join(f"{i} {10 * i}\t2.5\n" for i in range(1, 9)))
    return p


def out_rows(text):
    lines = text.splitlines()
    return lines[0], [line.split() for line in lines[1:]]


def test_default_mode_prints_tint(meas, capsys):
    assert main(["-c", "1,3", str(meas)]) == 0
    header, rows = out_rows(capsys.readouterr().out)
    assert header == " col - average - sigma - tau_int"
    assert [r[0] for r in rows] == ["1", "3"]
    assert float(rows[0][1]) == 4.5
    assert rows[1][1:] == ["2.5", "0.0", "0.5"]


def test_naive_mode(tmp_path, capsys):
    p = tmp_path / "meas"
    p.write_text("1\n2\n3\n4\n5\n")
    main(["-t", "-c", "1", str(p)])
    header, rows = out_rows(capsys.readouterr().out)
    assert header == " col - average - sigma"
    assert rows == [["1", "3.0", repr(math.sqrt(0.5))]]


def test_block_mode(meas, capsys):
    main(["-b", "2", "-c", "1", "-c", "2", str(meas)])
    header, rows = out_rows(capsys.readouterr().out)
    assert header == " col - average - sigma"
    assert [r[0] for r in rows] == ["1", "2"]
    assert float(rows[0][1]) == pytest.approx(4.5)
    assert float(rows[0][2]) == pytest.approx(1.2910, abs=1e-4)
    assert float(rows[1][2]) == pytest.approx(12.910, abs=1e-3)


def test_skip_and_limit(meas, capsys):
    main(["-t", "-c", "1", "-s", "2", "-n", "3", str(meas)])
    _, rows = out_rows(capsys.readouterr().out)
    assert float(rows[0][1]) == 4.0


def test_acf_mode(meas, capsys):
    main(["-T", "10", "-c", "1", str(meas)])
    header, rows = out_rows(capsys.readouterr().out)
    assert header == " col - lag - autocorrelation"
    assert [r[1] for r in rows] == ["0", "1", "2", "3"]
    assert float(rows[0][2]) == pytest.approx(1.0)


def test_scan_mode(meas, capsys):
    main(["--scan", "-c", "1", str(meas)])
    header, rows = out_rows(capsys.readouterr().out)
    assert header == " col - block - nblocks - average - sigma"
    assert [(r[1], r[2]) for r in rows] == [("1", "8"), ("2", "4"), ("4", "2")]


def test_csv_output(meas, capsys):
    main(["--csv", "-t", "-c", "1,2", str(meas)])
    rows = list(csv.reader(io.StringIO(capsys.readouterr().out)))
    assert rows[0] == ["col", "average", "sigma"]
    assert [r[0] for r in rows[1:]] == ["1", "2"]
    assert float(rows[2][1]) == 45.0


def test_plot(meas, tmp_path, capsys):
    png = tmp_path / "acf.png"
    main(["-T", "3", "-c", "1,2", "--plot", str(png), str(meas)])
    assert png.exists() and png.stat().st_size > 0


def test_config_file(meas, tmp_path, capsys):
    cfg = tmp_path / "run.yaml"
    cfg.write_text("columns: [2]\nnaive: true\nskip: 7\n")
    main(["--config", str(cfg), "-s", "0", str(meas)])
    header, rows = out_rows(capsys.readouterr().out)
    assert header == " col - average - sigma"
    assert float(rows[0][1]) == 45.0


@pytest.mark.parametrize("argv", [
    ["FILE"],
    ["-c", "0", "FILE"],
    ["-c", "x", "FILE"],
    ["-c", "1", "-b", "2", "-T", "4", "FILE"],
    ["-c", "1", "-b", "0", "FILE"],
    ["-c", "1", "--plot", "x.png", "FILE"],
    ["-c", "1", "-n", "-3", "FILE"],
])
def test_usage_errors(meas, capsys, argv):
    argv = [str(meas) if a == "FILE" else a for a in argv]
    with pytest.raises(SystemExit) as ei:
        main(argv)
    assert ei.value.code == 2
    assert "usage:" in capsys.readouterr().err


def test_command_line_mode_replaces_config_mode(meas, tmp_path, capsys):
    cfg = tmp_path / "run.yaml"
    cfg.write_text("columns: [1]\nblock: 2\n")
    assert main(["--config", str(cfg), "-t", str(meas)]) == 0
    header, rows = out_rows(capsys.readouterr().out)
    assert header == " col - average - sigma"
    assert float(rows[0][2]) == pytest.approx(math.sqrt(5.25 / 7))


def test_conflicting_modes_in_config(meas, tmp_path):
    cfg = tmp_path / "run.yaml"
    cfg.write_text("columns: [1]\nblock: 2\nnaive: true\n")
    with pytest.raises(SystemExit) as ei:
        main(["--config", str(cfg), str(meas)])
    assert ei.value.code == 2


def test_unwritable_plot_gives_no_output(meas, tmp_path, capsys):
    png = tmp_path / "nodir" / "acf.png"
    with pytest.raises(SystemExit) as ei:
        main(["-T", "3", "-c", "1", "--plot", str(png), str(meas)])
    assert "Could not write plot" in str(ei.value.code)
    assert capsys.readouterr().out == ""


def test_missing_file(tmp_path, capsys):
    with pytest.raises(SystemExit) as ei:
        main(["-c", "1", str(tmp_path / "nope")])
    assert "Could not open file" in str(ei.value.code)
    assert capsys.readouterr().out == ""


def test_no_partial_output(tmp_path, capsys):
    p = tmp_path / "meas"
    p.write_text("1 2\n3 4\n5\n")
    with pytest.raises(SystemExit) as ei:
        main(["-c", "1,2", str(p)])
    assert "Line 3: not 2 columns" in str(ei.value.code)
    assert capsys.readouterr().out == ""


def test_block_failure_is_fatal(meas, capsys):
    with pytest.raises(SystemExit) as ei:
        main(["-b", "8", "-c", "1", str(meas)])
    assert "block" in str(ei.value.code)
    assert capsys.readouterr().out == ""


def test_unresolved_window_is_logged(tmp_path, capsys, caplog):
    p = tmp_path / "ramp"
    np.savetxt(p, np.arange(20.0))
    main(["-c", "1", str(p)])
    assert "col 1: correlation > N/2*6" in caplog.text
    _, rows = out_rows(capsys.readouterr().out)
    assert len(rows) == 1
