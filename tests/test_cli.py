import json

import numpy as np
import pytest
from PIL import Image

from qrtistry.cli import build_parser, main


def render(tmp_path, *flags):
    out = tmp_path / "qr.png"
    code = main(["render", "HELLO", "-o", str(out), "--size", "256", *flags])
    return code, out


def test_render_default(tmp_path, capsys):
    code, out = render(tmp_path)
    assert code == 0
    with Image.open(out) as image:
        assert image.size == (225, 225)
    assert "Generated:" in capsys.readouterr().out


def test_render_styled(tmp_path):
    code, out = render(
        tmp_path,
        "--module-style", "rounded-square", "--eye-style", "flower",
        "--gradient", "radial", "--gradient-end", "#ff0000",
        "--eye-color", "00ff00", "--corner-radius", "0.4",
        "--opacity", "0.8", "--color-preset", "ocean",
    )
    assert code == 0
    with Image.open(out) as image:
        arr = np.array(image)
    assert (arr[..., 3] < 255).any()


def test_render_with_logo(tmp_path, png_file):
    code, out = render(tmp_path, "--logo", str(png_file), "--logo-size", "0.3")
    assert code == 0
    assert out.exists()


def test_missing_logo_fails(tmp_path, capsys):
    code, out = render(tmp_path, "--logo", str(tmp_path / "missing.png"))
    assert code == 1
    assert not out.exists()
    assert "Error:" in capsys.readouterr().err


def test_size_out_of_range(tmp_path, capsys):
    code = main(["render", "HELLO", "-o", str(tmp_path / "qr.png"), "--size", "20"])
    assert code == 1
    assert "size_px" in capsys.readouterr().err


def test_preset_save_and_reuse(tmp_path):
    preset = tmp_path / "preset.json"
    code, _ = render(tmp_path, "--module-style", "circle", "--save-preset", str(preset))
    assert code == 0
    data = json.loads(preset.read_text(encoding="utf-8"))
    assert data["module_style"] == "Circle"
    assert data["text"] == "HELLO"

    out = tmp_path / "again.png"
    assert main(["render", "--preset", str(preset), "-o", str(out)]) == 0
    with Image.open(out) as image:
        assert image.size == (225, 225)


def test_no_gradient_overrides_preset(tmp_path):
    preset = tmp_path / "preset.json"
    render(tmp_path, "--gradient", "vertical", "--save-preset", str(preset))
    assert json.loads(preset.read_text(encoding="utf-8"))["use_gradient"] is True

    again = tmp_path / "again.json"
    out = tmp_path / "plain.png"
    assert main(["render", "--preset", str(preset), "--no-gradient", "-o", str(out),
                 "--save-preset", str(again)]) == 0
    assert json.loads(again.read_text(encoding="utf-8"))["use_gradient"] is False


def test_presets_listing(capsys):
    assert main(["presets"]) == 0
    out = capsys.readouterr().out
    assert "Classic" in out
    assert "Cyber" in out
    assert "fg=#000000" in out


def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "render" in capsys.readouterr().out


@pytest.mark.parametrize("flags", [
    ["--fg", "zzzzzz"],
    ["--fg", "#fff"],
    ["--module-style", "hexagon"],
    ["--ecc", "X"],
])
def test_bad_flag_values_exit(flags):
    with pytest.raises(SystemExit):
        build_parser().parse_args(["render", "HELLO", *flags])


def test_log_file_gets_json_lines(tmp_path):
    log_file = tmp_path / "qr.log"
    assert main(["--log-file", str(log_file), "presets"]) == 0
    lines = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    assert any(entry.get("event") == "cli.start" for entry in lines)


def test_mistyped_preset_reports_error(tmp_path, capsys):
    preset = tmp_path / "preset.json"
    preset.write_text(json.dumps({"size_px": 512.0}), encoding="utf-8")
    out = tmp_path / "qr.png"
    assert main(["render", "HELLO", "--preset", str(preset), "-o", str(out)]) == 1
    assert not out.exists()
    assert "size_px must be an integer" in capsys.readouterr().err
