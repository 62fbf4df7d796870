import numpy as np
from PIL import Image as PILImage

from image_editor.cli.edit_image import main
from conftest import solid


def test_edits_and_saves(write_png, tmp_path):
    source = write_png(solid(20, 30, (10, 20, 30)), "in.png")
    output = tmp_path / "out.png"

    code = main([str(source), "-o", str(output), "--filter", "invert", "--filter", "mirror",
                 "--offsets", "5", "0", "0", "--scale", "0.5"])

    assert code == 0
    saved = np.asarray(PILImage.open(output).convert("RGB"))
    assert saved.shape == (10, 15, 3)
    assert tuple(saved[0, 0]) == (250, 235, 225)


def test_prints_palette(write_png, capsys):
    source = write_png(solid(8, 8, (255, 0, 16)), "in.png")

    assert main([str(source), "--palette", "2"]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 2
    assert all(line.startswith("#ff0010") for line in lines)


def test_missing_input(tmp_path):
    assert main([str(tmp_path / "missing.png")]) == 1


def test_failed_step_sets_exit_code(write_png, tmp_path):
    source = write_png(solid(4, 4, (1, 2, 3)), "in.png")
    assert main([str(source), "--filter", "sepia"]) == 1
    assert main([str(source), "--overlay", str(tmp_path / "missing.png")]) == 1
