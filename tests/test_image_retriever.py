import asyncio
import threading
from io import BytesIO

import httpx
import pytest
from PIL import Image

from tastebox.app.core.errors import StorageError
from tastebox.app.services.image_processing import extension_for
from tastebox.app.services.recipe_import import images as image_retriever
from tastebox.app.services.recipe_import.images import download_and_store_images

RealAsyncClient = httpx.AsyncClient


def make_image(fmt="JPEG", size=(1600, 1200)) -> bytes:
    out = BytesIO()
    Image.new("RGB", size, (200, 120, 40)).save(out, format=fmt)
    return out.getvalue()


JPEG = make_image()
PNG = make_image("PNG", (300, 200))


def use_transport(monkeypatch, handler):
    transport = httpx.MockTransport(handler)

    def client_factory(*args, **kwargs):
        kwargs["transport"] = transport
        return RealAsyncClient(*args, **kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", client_factory)


def image_handler(missing=()):
    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path in missing:
            return httpx.Response(404)
        if request.url.path.endswith(".png"):
            return httpx.Response(200, headers={"content-type": "image/png"}, content=PNG)
        return httpx.Response(200, headers={"content-type": "image/jpeg"}, content=JPEG)

    return handler


def test_extension_for():
    assert extension_for("image/png") == "png"
    assert extension_for("image/webp") == "webp"
    assert extension_for("image/jpeg") == "jpg"
    assert extension_for("image/gif") == "jpg"


def stored_files(storage):
    return sorted(path.name for path in storage.media_root.iterdir())


@pytest.mark.asyncio
async def test_second_image_failure_keeps_the_rest(monkeypatch, storage):
    use_transport(monkeypatch, image_handler(missing={"/b.jpg"}))
    images = await download_and_store_images(
        ["https://cdn.example.com/a.jpg", "https://cdn.example.com/b.jpg", "https://cdn.example.com/c.png"],
        storage,
    )
    assert [image.order for image in images] == [1, 2]
    assert images[0].url.endswith("-1.jpg")
    assert images[1].url.endswith("-3.png")
    assert images[1].alt_text == "Recipe image 2"
    assert len(stored_files(storage)) == 2


@pytest.mark.asyncio
async def test_images_are_resized_to_fit_and_keep_their_format(monkeypatch, storage):
    use_transport(monkeypatch, image_handler())
    images = await download_and_store_images(
        ["https://cdn.example.com/big.jpg", "https://cdn.example.com/small.png"], storage
    )
    assert len(images) == 2

    big = Image.open(storage.media_root / images[0].url.rsplit("/", 1)[-1])
    assert big.format == "JPEG"
    assert big.size == (800, 600)

    # Small images are not enlarged
    small = Image.open(storage.media_root / images[1].url.rsplit("/", 1)[-1])
    assert small.format == "PNG"
    assert small.size == (300, 200)


@pytest.mark.asyncio
async def test_only_first_three_candidates_are_downloaded(monkeypatch, storage):
    requested = []

    async def handler(request: httpx.Request) -> httpx.Response:
        requested.append(request.url.path)
        return httpx.Response(200, headers={"content-type": "image/jpeg"}, content=JPEG)

    use_transport(monkeypatch, handler)
    urls = [f"https://cdn.example.com/{i}.jpg" for i in range(1, 6)]
    images = await download_and_store_images(urls, storage)
    assert len(images) == 3
    assert sorted(requested) == ["/1.jpg", "/2.jpg", "/3.jpg"]


@pytest.mark.asyncio
async def test_network_errors_and_private_urls_are_skipped(monkeypatch, storage):
    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "down.example.com":
            raise httpx.ConnectError("unreachable", request=request)
        return httpx.Response(200, headers={"content-type": "image/jpeg"}, content=JPEG)

    use_transport(monkeypatch, handler)
    images = await download_and_store_images(
        ["https://down.example.com/a.jpg", "http://127.0.0.1/b.jpg", "https://cdn.example.com/c.jpg"],
        storage,
    )
    assert len(images) == 1
    assert images[0].order == 1


@pytest.mark.asyncio
async def test_malformed_candidate_url_is_skipped(monkeypatch, storage):
    use_transport(monkeypatch, image_handler())
    images = await download_and_store_images(["http://[::1", "https://cdn.example.com/a.jpg"], storage)
    assert len(images) == 1
    assert images[0].url.endswith("-2.jpg")


@pytest.mark.asyncio
async def test_non_image_responses_are_skipped(monkeypatch, storage):
    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/login":
            return httpx.Response(200, headers={"content-type": "text/html"}, content=b"<html>Sign in</html>")
        return httpx.Response(200, content=JPEG)

    use_transport(monkeypatch, handler)
    images = await download_and_store_images(
        ["https://cdn.example.com/login", "https://cdn.example.com/untyped.jpg"], storage
    )
    assert images == []
    assert stored_files(storage) == []


@pytest.mark.asyncio
async def test_undecodable_image_is_skipped(monkeypatch, storage):
    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/broken.jpg":
            return httpx.Response(200, headers={"content-type": "image/jpeg"}, content=b"not really a jpeg")
        return httpx.Response(200, headers={"content-type": "image/jpeg"}, content=JPEG)

    use_transport(monkeypatch, handler)
    images = await download_and_store_images(
        ["https://cdn.example.com/broken.jpg", "https://cdn.example.com/ok.jpg"], storage
    )
    assert [image.order for image in images] == [1]
    assert images[0].url.endswith("-2.jpg")


@pytest.mark.asyncio
async def test_unexpected_download_error_drops_only_that_image(monkeypatch, storage):
    use_transport(monkeypatch, image_handler())
    real_download = image_retriever._download

    async def exploding_download(client, url, index):
        if index == 1:
            raise RuntimeError("decoder crashed")
        return await real_download(client, url, index)

    monkeypatch.setattr(image_retriever, "_download", exploding_download)
    images = await download_and_store_images(
        ["https://cdn.example.com/a.jpg", "https://cdn.example.com/b.jpg"], storage
    )
    assert len(images) == 1
    assert images[0].order == 1
    assert images[0].url.endswith("-2.jpg")


@pytest.mark.asyncio
async def test_storage_failure_drops_only_that_image(monkeypatch, storage):
    use_transport(monkeypatch, image_handler())
    original_save = storage.save_bytes

    def flaky_save(filename, data, content_type):
        if filename.endswith("-1.jpg"):
            raise StorageError("disk full")
        return original_save(filename, data, content_type)

    monkeypatch.setattr(storage, "save_bytes", flaky_save)
    images = await download_and_store_images(
        ["https://cdn.example.com/a.jpg", "https://cdn.example.com/b.jpg"], storage
    )
    assert len(images) == 1
    assert images[0].order == 1
    assert images[0].url.endswith("-2.jpg")


@pytest.mark.asyncio
async def test_uploads_run_off_the_event_loop_thread(monkeypatch, storage):
    use_transport(monkeypatch, image_handler())
    original_save = storage.save_bytes
    loop_thread = threading.get_ident()
    upload_threads = []

    def recording_save(filename, data, content_type):
        upload_threads.append(threading.get_ident())
        return original_save(filename, data, content_type)

    monkeypatch.setattr(storage, "save_bytes", recording_save)
    images = await download_and_store_images(["https://cdn.example.com/a.jpg"], storage)
    assert len(images) == 1
    assert upload_threads and loop_thread not in upload_threads


@pytest.mark.asyncio
async def test_concurrent_imports_never_share_filenames(monkeypatch, storage):
    use_transport(monkeypatch, image_handler())
    urls = ["https://cdn.example.com/a.jpg", "https://cdn.example.com/b.jpg"]
    first, second = await asyncio.gather(
        download_and_store_images(urls, storage),
        download_and_store_images(urls, storage),
    )
    all_urls = [image.url for image in first + second]
    assert len(set(all_urls)) == 4
    assert len(stored_files(storage)) == 4


@pytest.mark.asyncio
async def test_no_candidates_returns_empty(storage):
    assert await download_and_store_images([], storage) == []
