import csv

from dualizer.cli import main


def test_usage_on_wrong_argument_count(capsys):
    assert main([]) == 0
    out = capsys.readouterr().out
    assert "DualExtrude version 2.2" in out
    assert "Usage:  DualExtrude infile [DiaIn] outfile [DiaNew]" in out
    assert "BOTH DiaIn and DiaNew must be given!" in out


def test_three_paths_shows_usage(capsys, tmp_path):
    assert main(["a", "1.75", "b"]) == 0
    assert "Usage:" in capsys.readouterr().out
    assert not (tmp_path / "b").exists()


def test_convert(write_gcode, tmp_path, capsys):
    src = write_gcode("M104 S200 T0\nG1 X1 E1\n")
    out = tmp_path / "out.gcode"
    assert main([str(src), str(out)]) == 0
    assert out.read_text() == "M104 S200 T1\nM104 S200 T0\nG1 X1 A1 B1\n"
    stdout = capsys.readouterr().out
    assert "File uses right extruder, adding left..." in stdout
    assert "2 Lines processed" in stdout


def test_convert_with_diameters(write_gcode, tmp_path):
    src = write_gcode("M101 T1\nG1 E1\nG1 E2\n")
    out = tmp_path / "out.gcode"
    assert main([str(src), "1.75", str(out), "1.75"]) == 0
    assert out.read_text().splitlines()[-1] == "G1 A2.00000 B2"


def test_bad_diameter(write_gcode, tmp_path, capsys):
    src = write_gcode("M101 T1\n")
    out = tmp_path / "out.gcode"
    assert main([str(src), "9", str(out), "1.75"]) == 1
    assert "ERROR: Filament diameter: 9 too big/small!" in capsys.readouterr().err
    assert not out.exists()


def test_conflict_reports_error(write_gcode, tmp_path, capsys):
    src = write_gcode("M101 T0\nM101 T1\n")
    assert main([str(src), str(tmp_path / "out.gcode")]) == 1
    assert "ERROR: File already uses both extruders." in capsys.readouterr().err


def test_missing_input_reports_path(tmp_path, capsys):
    missing = tmp_path / "in.gcode"
    assert main([str(missing), str(tmp_path / "out.gcode")]) == 1
    assert f"ERROR: Can't open input file: {missing}" in capsys.readouterr().err


def test_quiet(write_gcode, tmp_path, capsys):
    src = write_gcode("M101 T0\n")
    assert main([str(src), str(tmp_path / "out.gcode"), "--quiet"]) == 0
    assert capsys.readouterr().out == ""


def test_csv_run_log(write_gcode, tmp_path):
    src = write_gcode("; hi\nM104 S200 T0\nM104 S0 T1\nG1 X1 E1\n")
    log = tmp_path / "logs" / "run.csv"
    assert main([str(src), str(tmp_path / "out.gcode"), "--csv", str(log), "--quiet"]) == 0
    with log.open(newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    line_rows = [(r["line"], r["action"]) for r in rows if r["type"] == "LINE"]
    assert line_rows == [("2", "duplicate"), ("3", "drop"), ("4", "split")]
    notes = [r["message"] for r in rows if r["type"] == "NOTE"]
    assert notes[0] == "Checking file..."
    assert notes[-1] == "4 Lines processed"


def test_csv_run_log_records_error(write_gcode, tmp_path):
    src = write_gcode("G1 X1 E1\n")
    log = tmp_path / "run.csv"
    assert main([str(src), str(tmp_path / "out.gcode"), "--csv", str(log), "--quiet"]) == 1
    text = log.read_text(encoding="utf-8")
    assert "ERROR: no used extruder found" in text


def test_diameters_echoed_as_typed(write_gcode, tmp_path, capsys):
    src = write_gcode("M101 T0\n")
    assert main([str(src), "1.750", str(tmp_path / "out.gcode"), "1.80"]) == 0
    assert "Input file diameter: 1.750   Added extruder diameter: 1.80" in capsys.readouterr().out


def test_uncreatable_run_log_reports_error(write_gcode, tmp_path, capsys):
    src = write_gcode("M101 T0\n")
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("x")
    log = blocker / "run.csv"
    assert main([str(src), str(tmp_path / "out.gcode"), "--csv", str(log), "--quiet"]) == 1
    assert f"ERROR: Can't create run log: {log}" in capsys.readouterr().err
    assert not (tmp_path / "out.gcode").exists()
