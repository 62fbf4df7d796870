import cv2
import numpy as np
import pytest
from PIL import Image as PILImage

from image_editor.models.image import Image
from image_editor.models.errors import DecodeError, EncodeError
from image_editor.repositories.image_repository import ImageRepository
from conftest import solid


@pytest.fixture
def repo() -> ImageRepository:
    return ImageRepository()


class TestLoad:
    def test_png_keeps_rgb_order(self, repo, write_png):
        pixels = solid(10, 12, (200, 30, 5))
        img = repo.load(write_png(pixels))

        assert img.pixels.dtype == np.uint8
        assert img.pixels.shape == (10, 12, 3)
        assert np.array_equal(img.pixels, pixels)
        assert img.path.name == "image.png"

    def test_grayscale_file_becomes_three_channels(self, repo, tmp_path):
        path = tmp_path / "gray.png"
        PILImage.fromarray(np.full((8, 8), 90, dtype=np.uint8)).save(path)

        img = repo.load(path)

        assert img.channels == 3
        assert np.all(img.pixels == 90)

    def test_missing_file(self, repo, tmp_path):
        with pytest.raises(DecodeError):
            repo.load(tmp_path / "nope.png")

    def test_unsupported_extension(self, repo, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello")
        with pytest.raises(DecodeError):
            repo.load(path)

    def test_corrupt_file(self, repo, tmp_path):
        path = tmp_path / "broken.png"
        path.write_bytes(b"definitely not a png")
        with pytest.raises(DecodeError):
            repo.load(path)


class TestLoadBytes:
    def test_decodes_encoded_stream(self, repo):
        pixels = solid(6, 4, (10, 20, 30))
        ok, encoded = cv2.imencode(".png", pixels[:, :, ::-1])
        assert ok

        img = repo.load_bytes(encoded.tobytes())

        assert np.array_equal(img.pixels, pixels)
        assert img.path is None

    @pytest.mark.parametrize("data", [b"", b"garbage bytes"])
    def test_rejects_bad_stream(self, repo, data):
        with pytest.raises(DecodeError):
            repo.load_bytes(data)


class TestSave:
    def test_png_round_trip_is_lossless(self, repo, tmp_path, random_image):
        target = repo.save(random_image, tmp_path / "out.png")

        assert target.exists()
        assert np.array_equal(repo.load(target).pixels, random_image.pixels)

    def test_jpeg_is_written(self, repo, tmp_path, solid_red_image):
        target = repo.save(solid_red_image, tmp_path / "out.jpg")
        reloaded = repo.load(target)

        assert reloaded.pixels.shape == solid_red_image.pixels.shape
        # lossy codec; only roughly red
        assert reloaded.pixels[..., 0].mean() > 240

    def test_falls_back_to_image_path(self, repo, tmp_path, solid_red_image):
        solid_red_image.path = tmp_path / "own_path.bmp"
        assert repo.save(solid_red_image) == solid_red_image.path
        assert solid_red_image.path.exists()

    def test_unsupported_extension(self, repo, tmp_path, solid_red_image):
        with pytest.raises(EncodeError):
            repo.save(solid_red_image, tmp_path / "out.xyz")

    def test_missing_directory(self, repo, tmp_path, solid_red_image):
        with pytest.raises(EncodeError):
            repo.save(solid_red_image, tmp_path / "missing" / "out.png")

    def test_no_path(self, repo, solid_red_image):
        with pytest.raises(EncodeError):
            repo.save(solid_red_image)


def test_valid_extensions_from_env(monkeypatch, tmp_path, solid_red_image):
    monkeypatch.setenv("VALID_IMAGE_EXTENSIONS", ".png")
    repo = ImageRepository()

    with pytest.raises(EncodeError):
        repo.save(solid_red_image, tmp_path / "out.jpg")


def test_image_clone_does_not_alias(solid_red_image):
    copy = solid_red_image.clone()
    copy.pixels[0, 0] = (1, 2, 3)

    assert tuple(solid_red_image.pixels[0, 0]) == (255, 0, 0)


def test_empty_sentinel():
    img = Image.empty()
    assert img.is_empty
    assert (img.width, img.height, img.channels) == (0, 0, 3)


def test_failed_save_leaves_no_partial_file(repo, tmp_path, solid_red_image, monkeypatch):
    target = tmp_path / "out.png"
    target.write_bytes(b"previous contents")

    def _half_written(self, fp, *args, **kwargs):
        with open(fp, "wb") as fh:
            fh.write(b"\x89PNG truncated")
        raise OSError("disk full")

    monkeypatch.setattr(PILImage.Image, "save", _half_written)

    with pytest.raises(EncodeError):
        repo.save(solid_red_image, target)

    assert target.read_bytes() == b"previous contents"
    assert [p.name for p in tmp_path.iterdir()] == ["out.png"]
