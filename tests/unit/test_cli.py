from pathlib import Path

from cansat_ground.cli import main
from cansat_ground.radio.frame_codec import decode

from helpers import telemetry_line


def test_command_prints_frame(capsys):
    assert main(["command", "CX", "ON", "--team-id", "1047"]) == 0

    text, frame_hex = capsys.readouterr().out.strip().split(" -> ")
    assert text == "CMD,1047,CX,ON"
    frame = decode(bytes.fromhex(frame_hex.replace(" ", "")))
    assert frame.data[3:] == b"CMD,1047,CX,ON"


def test_command_rejects_bad_argument():
    assert main(["command", "CX", "MAYBE"]) == 2
    assert main(["command", "SIM", "SOMETIMES"]) == 2


def test_replay_once_logs_telemetry(tmp_path, capsys):
    source = tmp_path / "in.csv"
    source.write_text("\n".join(telemetry_line(n) for n in range(4)) + "\nbroken\n")
    out = tmp_path / "out.csv"

    assert main(["replay", str(source), "--once", "--interval", "0",
                 "--tick", "0.01", "--telemetry-file", str(out)]) == 0

    assert out.read_text().splitlines() == [telemetry_line(n) for n in range(4)]
    printed = capsys.readouterr().out.splitlines()
    assert len(printed) == 5
    assert printed[0].startswith("Telemetry - ")


def test_listen_fails_when_port_cannot_open(tmp_path):
    out = tmp_path / "out.csv"

    assert main(["listen", "--port", str(tmp_path / "missing-port"),
                 "--tick", "0.01", "--telemetry-file", str(out)]) == 1
    assert not out.exists()


def test_plot_command(tmp_path):
    log = tmp_path / "telemetry.csv"
    log.write_text("\n".join(telemetry_line(n) for n in range(3)) + "\n")
    png = tmp_path / "out.png"

    assert main(["plot", str(log), "--out", str(png)]) == 0
    assert png.exists()


def test_sample_data_replays(tmp_path):
    sample = Path(__file__).resolve().parents[2] / "test_data" / "test_data.txt"
    out = tmp_path / "out.csv"

    assert main(["replay", str(sample), "--once", "--interval", "0",
                 "--tick", "0.01", "--telemetry-file", str(out)]) == 0
    assert len(out.read_text().splitlines()) == 8
