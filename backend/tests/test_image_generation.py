from unittest.mock import MagicMock

import pytest

from services import openai_client
from services.errors import NoImageDataError
from services.image_generation import generate_diagram_image, should_fall_back

from helpers import image_response, openai_connection_error, openai_status_error


@pytest.fixture(autouse=True)
def models(monkeypatch):
    monkeypatch.setattr(openai_client, "IMAGE_MODEL", "gpt-image-1")
    monkeypatch.setattr(openai_client, "IMAGE_SIZE", "1536x1024")
    monkeypatch.setattr(openai_client, "FALLBACK_IMAGE_MODEL", "dall-e-3")
    monkeypatch.setattr(openai_client, "FALLBACK_IMAGE_SIZE", "1792x1024")


def make_client(*results):
    client = MagicMock()
    client.images.generate.side_effect = list(results)
    return client


def test_primary_model_success_skips_fallback():
    client = make_client(image_response("UE5HREFUQQ=="))

    image = generate_diagram_image(client, "A hand-drawn whiteboard workflow diagram of x")

    assert image.image_url == "data:image/png;base64,UE5HREFUQQ=="
    assert image.model == "gpt-image-1"
    assert image.used_fallback is False
    assert client.images.generate.call_count == 1
    kwargs = client.images.generate.call_args.kwargs
    assert kwargs["model"] == "gpt-image-1"
    assert kwargs["size"] == "1536x1024"
    assert kwargs["quality"] == "high"


@pytest.mark.parametrize(
    "error",
    [
        openai_status_error(403),
        openai_status_error(404, "The model `gpt-image-1` does not exist"),
        openai_status_error(400, "PERMISSION_DENIED: organization must be verified"),
    ],
)
def test_permission_or_availability_failure_uses_fallback(error):
    client = make_client(error, image_response("ZmFsbGJhY2s="))

    image = generate_diagram_image(client, "prompt")

    assert image.model == "dall-e-3"
    assert image.used_fallback is True
    assert image.image_url.endswith("ZmFsbGJhY2s=")
    assert client.images.generate.call_count == 2
    fallback_kwargs = client.images.generate.call_args_list[1].kwargs
    assert fallback_kwargs["model"] == "dall-e-3"
    assert fallback_kwargs["response_format"] == "b64_json"
    assert fallback_kwargs["size"] == "1792x1024"
    assert "quality" not in fallback_kwargs


@pytest.mark.parametrize(
    "error",
    [
        openai_status_error(401),
        openai_status_error(429),
        openai_status_error(500),
        openai_connection_error(),
        ValueError("bad prompt"),
    ],
)
def test_other_failures_propagate_without_fallback(error):
    client = make_client(error)

    with pytest.raises(type(error)):
        generate_diagram_image(client, "prompt")
    assert client.images.generate.call_count == 1


def test_fallback_failure_propagates():
    client = make_client(openai_status_error(403), openai_status_error(403))

    with pytest.raises(Exception) as exc_info:
        generate_diagram_image(client, "prompt")
    assert getattr(exc_info.value, "status_code", None) == 403
    assert client.images.generate.call_count == 2


def test_empty_response_raises_no_image_data():
    client = make_client(image_response(None))

    with pytest.raises(NoImageDataError):
        generate_diagram_image(client, "prompt")


def test_empty_fallback_response_raises_no_image_data():
    client = make_client(openai_status_error(404), image_response(None))

    with pytest.raises(NoImageDataError):
        generate_diagram_image(client, "prompt")


def test_should_fall_back_only_for_403_404_and_permission_denied():
    assert should_fall_back(openai_status_error(403))
    assert should_fall_back(openai_status_error(404))
    assert should_fall_back(RuntimeError("PERMISSION_DENIED"))
    assert not should_fall_back(openai_status_error(401))
    assert not should_fall_back(openai_status_error(500))
    assert not should_fall_back(RuntimeError("timeout"))
