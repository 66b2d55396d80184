"""
End-to-end tests for scripts/run_deskew.py.
"""

import importlib.util
from pathlib import Path

import pytest

from album_vision.utils.io import load_image, load_json, save_image

SCRIPT_PATH = Path(__file__).resolve().parents[2] / "scripts" / "run_deskew.py"


@pytest.fixture(scope="module")
def run_deskew():
    spec = importlib.util.spec_from_file_location("run_deskew", SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestRunDeskewScript:
    def test_writes_image_and_metadata(self, run_deskew, tmp_path, spread_page_photo):
        photo = tmp_path / "photo.png"
        save_image(spread_page_photo, photo)
        output = tmp_path / "out" / "left.png"
        metadata = tmp_path / "out" / "left.json"

        code = run_deskew.main(
            [str(photo), "-o", str(output), "--mode", "left", "--metadata", str(metadata)]
        )

        assert code == 0
        page = load_image(output)
        meta = load_json(metadata)
        assert meta["mode"] == "LEFT_PAGE"
        assert meta["path"] == "PERSPECTIVE"
        assert meta["width"] == page.shape[1]
        assert meta["fold_x"] is not None

    def test_dump_config(self, run_deskew, tmp_path, flat_page_photo):
        photo = tmp_path / "photo.png"
        save_image(flat_page_photo, photo)
        dumped = tmp_path / "effective.yaml"

        code = run_deskew.main(
            [str(photo), "-o", str(tmp_path / "page.png"), "--dump-config", str(dumped)]
        )

        assert code == 0
        assert "fallback_confidence" in dumped.read_text()

    def test_missing_input(self, run_deskew, tmp_path):
        code = run_deskew.main([str(tmp_path / "missing.png"), "-o", str(tmp_path / "x.png")])
        assert code == 1

    def test_invalid_mode(self, run_deskew, tmp_path, flat_page_photo):
        photo = tmp_path / "photo.png"
        save_image(flat_page_photo, photo)

        code = run_deskew.main([str(photo), "-o", str(tmp_path / "x.png"), "--mode", "middle"])
        assert code == 1
