"""
Unit Tests for Delivery Gateways
================================
"""

import json

import httpx
import pytest


def brevo_mailer(handler, **config_overrides):
    from secret_core.config import MailConfig
    from secret_core.delivery import BrevoMailer

    config = MailConfig(api_key="key-123", sender="My App <no-reply@app.test>", **config_overrides)
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return BrevoMailer(config, client=client, backoff=0)


class TestBrevoMailer:
    """Tests for the Brevo adapter."""

    @pytest.mark.asyncio
    async def test_send_otp_payload(self):
        """Should post a Brevo email with sender, recipient and both bodies."""
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(201, json={"messageId": "<abc@brevo>"})

        mailer = brevo_mailer(handler)
        receipt = await mailer.send_otp("user@test.com", "042042", "MyApp", 300)

        assert receipt.message_id == "<abc@brevo>"
        request = requests[0]
        assert request.headers["api-key"] == "key-123"
        body = json.loads(request.content)
        assert body["sender"] == {"email": "no-reply@app.test", "name": "My App"}
        assert body["to"] == [{"email": "user@test.com"}]
        assert "MyApp" in body["subject"]
        assert "042042" in body["textContent"]
        assert "042042" in body["htmlContent"]
        assert "5 minutes" in body["textContent"]

    @pytest.mark.asyncio
    async def test_send_password_reset_payload(self):
        """Reset mail should carry the link."""
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(201, json={"messageId": "m1"})

        mailer = brevo_mailer(handler)
        await mailer.send_password_reset(
            "user@test.com", "tok", "MyApp", "https://app.test/reset/tok", 900,
        )

        body = json.loads(requests[0].content)
        assert "https://app.test/reset/tok" in body["textContent"]
        assert "15 minutes" in body["textContent"]

    @pytest.mark.asyncio
    async def test_client_error_is_not_retried(self):
        """4xx should raise DeliveryError after a single attempt."""
        from secret_core.exceptions import DeliveryError

        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(400, json={"code": "invalid_parameter"})

        mailer = brevo_mailer(handler)

        with pytest.raises(DeliveryError) as exc_info:
            await mailer.send_otp("user@test.com", "123456", "MyApp", 300)

        assert exc_info.value.status_code == 400
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_server_error_is_retried(self):
        """5xx should be retried and succeed once the provider recovers."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if len(calls) < 3:
                return httpx.Response(503, text="unavailable")
            return httpx.Response(201, json={"messageId": "ok"})

        mailer = brevo_mailer(handler)
        receipt = await mailer.send_otp("user@test.com", "123456", "MyApp", 300)

        assert receipt.message_id == "ok"
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_connection_errors_exhaust_retries(self):
        """Persistent transport errors should end in DeliveryError."""
        from secret_core.exceptions import DeliveryError

        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            raise httpx.ConnectError("refused", request=request)

        mailer = brevo_mailer(handler)

        with pytest.raises(DeliveryError):
            await mailer.send_otp("user@test.com", "123456", "MyApp", 300)

        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_missing_credentials(self):
        """Unconfigured mailer should fail without a request."""
        from secret_core.config import MailConfig
        from secret_core.delivery import BrevoMailer
        from secret_core.exceptions import DeliveryError

        mailer = BrevoMailer(MailConfig())

        with pytest.raises(DeliveryError):
            await mailer.send_otp("user@test.com", "123456", "MyApp", 300)

    @pytest.mark.asyncio
    async def test_engine_maps_brevo_failure(self, store):
        """OTP engine should classify a rejected mail as DELIVERY_FAILED."""
        from secret_core.config import OTPConfig
        from secret_core.otp import OTPEngine
        from secret_core.outcome import FailureKind

        mailer = brevo_mailer(lambda request: httpx.Response(401, json={"message": "bad key"}))
        engine = OTPEngine(store, mailer, OTPConfig(secret="s"))

        outcome = await engine.send_register_otp("user@test.com")

        assert outcome.kind == FailureKind.DELIVERY_FAILED


class TestTemplates:
    """Tests for mail rendering."""

    def test_ttl_minutes_floor(self):
        """Sub-minute TTLs should show the 5 minute default."""
        from secret_core.delivery import ttl_minutes

        assert ttl_minutes(30) == 5
        assert ttl_minutes(600) == 10

    def test_reset_without_url_shows_token(self):
        """Without a link the token should be in the body."""
        from secret_core.delivery import render_reset_email

        text, html = render_reset_email("MyApp", "tok-123", "", 900)

        assert "tok-123" in text
        assert "tok-123" in html

    def test_app_name_is_escaped(self):
        """HTML body should escape the app name."""
        from secret_core.delivery import render_otp_email

        _, html = render_otp_email("<b>App</b>", "123456", 300)

        assert "<b>App</b>" not in html
        assert "&lt;b&gt;App&lt;/b&gt;" in html

    def test_parse_sender(self):
        """Should split display name and address."""
        from secret_core.delivery import parse_sender

        assert parse_sender("My App <no-reply@app.test>") == ("My App", "no-reply@app.test")
        assert parse_sender("no-reply@app.test") == ("", "no-reply@app.test")


class TestOutboxMailer:
    """Tests for the in-memory gateway."""

    @pytest.mark.asyncio
    async def test_records_and_fails(self):
        """Should record messages and raise when told to fail."""
        from secret_core.delivery import OutboxMailer
        from secret_core.exceptions import DeliveryError

        mailer = OutboxMailer()
        await mailer.send_otp("user@test.com", "123456", "MyApp", 300)
        assert mailer.last.secret == "123456"

        mailer.fail_with = "down"
        with pytest.raises(DeliveryError):
            await mailer.send_otp("user@test.com", "123456", "MyApp", 300)
        assert len(mailer.messages) == 1
