"""Tests for YouTube channel resolution."""

from src.platforms.errors import ChannelNotFound, UnsupportedChannelUrl, UpstreamError
from src.platforms.youtube_adapter import ResolvedChannel


def test_resolves_channel(client, read_headers, mock_youtube_adapter):
    mock_youtube_adapter.resolve_channel.return_value = ResolvedChannel(
        channel_id="UCfound", url="https://www.youtube.com/channel/UCfound"
    )

    resp = client.post(
        "/api/resolve/youtube",
        headers=read_headers,
        json={"url": "https://www.youtube.com/@creator"},
    )

    assert resp.status_code == 200
    assert resp.json() == {
        "ok": True,
        "channelId": "UCfound",
        "url": "https://www.youtube.com/channel/UCfound",
        "sourceId": "youtube-ucfound",
    }
    mock_youtube_adapter.resolve_channel.assert_awaited_once_with(
        "https://www.youtube.com/@creator"
    )


def test_unsupported_url(client, read_headers, mock_youtube_adapter):
    mock_youtube_adapter.resolve_channel.side_effect = UnsupportedChannelUrl(
        "unsupported host: vimeo.com"
    )

    resp = client.post(
        "/api/resolve/youtube", headers=read_headers, json={"url": "https://vimeo.com/x"}
    )

    assert resp.status_code == 400
    assert resp.json() == {
        "ok": False,
        "error": "bad_request",
        "message": "unsupported host: vimeo.com",
    }


def test_channel_not_found(client, read_headers, mock_youtube_adapter):
    mock_youtube_adapter.resolve_channel.side_effect = ChannelNotFound("@nobody")

    resp = client.post("/api/resolve/youtube", headers=read_headers, json={"url": "@nobody"})

    assert resp.status_code == 404
    assert resp.json()["id"] == "@nobody"


def test_upstream_failure(client, read_headers, mock_youtube_adapter):
    mock_youtube_adapter.resolve_channel.side_effect = UpstreamError(
        "youtube channels fetch failed: 500", status=500
    )

    resp = client.post("/api/resolve/youtube", headers=read_headers, json={"url": "@someone"})

    assert resp.status_code == 502
    assert resp.json() == {
        "ok": False,
        "error": "upstream_error",
        "message": "youtube channels fetch failed: 500",
    }


def test_requires_token(client, mock_youtube_adapter):
    resp = client.post("/api/resolve/youtube", json={"url": "@someone"})

    assert resp.status_code == 401
    mock_youtube_adapter.resolve_channel.assert_not_called()


def test_empty_url(client, read_headers):
    resp = client.post("/api/resolve/youtube", headers=read_headers, json={"url": ""})

    assert resp.status_code == 400
