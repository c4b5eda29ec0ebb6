import httpx
import pytest

from badgeprint.exceptions import ImageLoadError
from badgeprint.utils.image_loader import ImageLoader


def test_loads_base64_data_uri(solid_uri):
    img = ImageLoader().load(solid_uri((1, 2, 3, 255), (5, 6)))
    assert img.mode == 'RGBA'
    assert img.size == (5, 6)
    assert img.getpixel((0, 0)) == (1, 2, 3, 255)


@pytest.mark.parametrize("ref", ['', 'data:image/png;base64', 'data:image/png,plain', 'data:image/png;base64,!!!'])
def test_bad_data_uris_raise(ref):
    with pytest.raises(ImageLoadError):
        ImageLoader().load(ref)


def test_undecodable_bytes_raise(tmp_path):
    path = tmp_path / 'not_an_image.png'
    path.write_bytes(b'hello')
    with pytest.raises(ImageLoadError) as exc:
        ImageLoader().load(str(path))
    assert exc.value.ref == str(path)


def test_missing_file_raises(tmp_path):
    with pytest.raises(ImageLoadError):
        ImageLoader().load(str(tmp_path / 'nope.png'))


def test_relative_and_images_refs_resolve_under_root(tmp_path, png_bytes):
    (tmp_path / 'photo.png').write_bytes(png_bytes((0, 255, 0, 255)))
    loader = ImageLoader(image_root=str(tmp_path))
    assert loader.resolve_path('/images/photo.png') == str(tmp_path / 'photo.png')
    assert loader.load('/images/photo.png').getpixel((0, 0)) == (0, 255, 0, 255)
    assert loader.load('photo.png').size == (8, 8)


def test_absolute_paths_are_left_alone(tmp_path):
    loader = ImageLoader(image_root=str(tmp_path))
    assert loader.resolve_path('/var/x.png') == '/var/x.png'


def test_fetches_urls_through_client(png_bytes):
    def handler(request):
        if request.url.path == '/ok.png':
            return httpx.Response(200, content=png_bytes((9, 9, 9, 255)))
        return httpx.Response(404)

    client = httpx.Client(transport=httpx.MockTransport(handler))
    loader = ImageLoader(client=client)
    assert loader.load('https://cdn.example.com/ok.png').getpixel((0, 0)) == (9, 9, 9, 255)
    with pytest.raises(ImageLoadError):
        loader.load('https://cdn.example.com/missing.png')
