"""Tests for the Icinga2 action API client."""

import base64

import httpx
import pytest

from icinga2_downtime.client import Icinga2APIError, Icinga2Client, TransportError
from icinga2_downtime.models import ApiResponse, DowntimeAction, ObjectType, RequestDescriptor

DESCRIPTOR = RequestDescriptor(
    object_type=ObjectType.HOST,
    filter_expression='host.name == "h1"',
)


class TestApiResponse:
    def test_code_from_first_result(self):
        response = ApiResponse.from_payload(
            200, {"results": [{"code": 200.0, "status": "ok 'a'"}, {"code": 200, "status": "ok 'b'"}]}
        )
        assert response.http_succeeded is True
        assert response.result_code == 200
        assert response.error_field is None
        assert response.status_messages == ["ok 'a'", "ok 'b'"]

    def test_code_from_error_field(self):
        response = ApiResponse.from_payload(404, {"error": 404.0, "status": "No objects found."})
        assert response.http_succeeded is False
        assert response.result_code == 404
        assert response.status_text == "No objects found."
        assert response.status_messages == []

    def test_code_falls_back_to_http_status(self):
        response = ApiResponse.from_payload(500, {})
        assert response.result_code == 500


class TestIcinga2Client:
    @pytest.mark.asyncio
    async def test_posts_descriptor_payload(self, endpoint, fake_icinga, ok_reply):
        fake = fake_icinga(ok_reply("Successfully removed downtime 'h1!a'."))

        async with Icinga2Client(endpoint, transport=fake.transport) as client:
            response = await client.perform_action(DowntimeAction.REMOVE, DESCRIPTOR)

        (request,) = fake.requests
        assert request.method == "POST"
        assert str(request.url) == "https://icinga.example.com:5665/v1/actions/remove-downtime"
        assert request.headers["X-HTTP-Method-Override"] == "POST"
        assert request.headers["Accept"] == "application/json"
        assert request.headers["Authorization"] == "Basic " + base64.b64encode(b"root:s3cret").decode()
        assert fake.bodies == [{"type": "Host", "filter": 'host.name == "h1"'}]
        assert response.result_code == 200

    @pytest.mark.asyncio
    async def test_connection_error_raises_transport_error(self, endpoint, fake_icinga):
        fake = fake_icinga(httpx.ConnectError)

        async with Icinga2Client(endpoint, transport=fake.transport) as client:
            with pytest.raises(TransportError, match="Connection refused"):
                await client.perform_action(DowntimeAction.SCHEDULE, DESCRIPTOR)

    @pytest.mark.asyncio
    async def test_non_json_body(self, endpoint, fake_icinga):
        fake = fake_icinga((401, "Unauthorized. Please check your user credentials."))

        async with Icinga2Client(endpoint, transport=fake.transport) as client:
            response = await client.perform_action(DowntimeAction.SCHEDULE, DESCRIPTOR)

        assert response.result_code == 401
        assert response.error_field == 401
        assert response.status_text == "Unauthorized. Please check your user credentials."

    @pytest.mark.asyncio
    async def test_requires_context_manager(self, endpoint):
        client = Icinga2Client(endpoint)
        with pytest.raises(Icinga2APIError, match="not initialized"):
            await client.perform_action(DowntimeAction.REMOVE, DESCRIPTOR)

    def test_password_not_in_repr(self, endpoint):
        assert "s3cret" not in repr(endpoint)
        assert endpoint.base_url == "https://icinga.example.com:5665"
