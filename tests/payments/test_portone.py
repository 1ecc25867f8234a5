import httpx
import pytest

from app.common.exceptions import UpstreamException
from app.payments.portone import PaymentInfo, PortOneClient


def make_client(handler, api_secret: str = "secret") -> PortOneClient:
    return PortOneClient(
        api_url="https://api.portone.test/",
        api_secret=api_secret,
        transport=httpx.MockTransport(handler),
    )


class TestGetPayment:
    def test_paid_payment(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"status": "PAID", "amount": {"total": 10000}})

        info = make_client(handler).get_payment("payment-1")

        assert info.is_paid
        assert info.amount == 10000
        assert seen[0].method == "GET"
        assert seen[0].url.path == "/payments/payment-1"
        assert seen[0].headers["Authorization"] == "PortOne secret"

    def test_payment_id_is_url_encoded(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"status": "READY"})

        make_client(handler).get_payment("a/b c")
        assert seen[0].url.raw_path == b"/payments/a%2Fb%20c"

    def test_not_paid(self):
        def handler(request):
            return httpx.Response(200, json={"status": "CANCELLED", "amount": {"total": 500}})

        info = make_client(handler).get_payment("payment-1")
        assert not info.is_paid
        assert info.status == "CANCELLED"

    def test_http_error_is_upstream_error(self):
        def handler(request):
            return httpx.Response(404, text="PAYMENT_NOT_FOUND")

        with pytest.raises(UpstreamException) as exc_info:
            make_client(handler).get_payment("payment-1")

        assert exc_info.value.status_code == 502
        assert exc_info.value.upstream_status == 404
        assert "PAYMENT_NOT_FOUND" in exc_info.value.detail

    def test_network_error_is_upstream_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(UpstreamException):
            make_client(handler).get_payment("payment-1")

    def test_non_json_body_is_upstream_error(self):
        def handler(request):
            return httpx.Response(200, text="<html>")

        with pytest.raises(UpstreamException):
            make_client(handler).get_payment("payment-1")

    def test_missing_secret(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={})

        with pytest.raises(UpstreamException):
            make_client(handler, api_secret="").get_payment("payment-1")
        assert calls == []


class TestPaymentInfo:
    def test_amount_total(self):
        info = PaymentInfo.from_api("p", {"status": "PAID", "amount": {"total": 3000}})
        assert info.amount == 3000

    def test_falls_back_to_total_amount(self):
        info = PaymentInfo.from_api("p", {"status": "PAID", "totalAmount": 4000})
        assert info.amount == 4000

    def test_zero_total_falls_back_to_total_amount(self):
        info = PaymentInfo.from_api("p", {"amount": {"total": 0}, "totalAmount": 4000})
        assert info.amount == 4000

    def test_no_amount(self):
        info = PaymentInfo.from_api("p", {"status": "READY"})
        assert info.amount is None

    @pytest.mark.parametrize("total", ["10000", 10000.7, 10000.0, True])
    def test_non_integer_amount_is_unset(self, total):
        info = PaymentInfo.from_api("p", {"status": "PAID", "amount": {"total": total}})
        assert info.amount is None

    def test_non_integer_total_amount_is_unset(self):
        info = PaymentInfo.from_api("p", {"status": "PAID", "totalAmount": "4000"})
        assert info.amount is None
