"""Tests for the e-book download endpoint."""

import json

import httpx
from sqlalchemy import select

from app.ebooks.storage import StorageClient
from app.purchases.models import EbookPurchase


def purchase_ebook(client, portone, make_payment_id, ebook, user_id):
    payment_id = make_payment_id(ebook.id, user_id)
    portone.add_payment(payment_id, total=ebook.price)
    response = client.post(
        "/api/v1/payments/ebook/verify",
        json={"paymentId": payment_id, "itemId": str(ebook.id)},
    )
    assert response.status_code == 200


class TestDownload:
    def test_requires_login(self, client, make_ebook):
        ebook = make_ebook()
        response = client.get(f"/api/v1/ebooks/{ebook.id}/download")
        assert response.status_code == 401

    def test_requires_purchase(self, client, storage, auth_headers, make_ebook):
        ebook = make_ebook()

        response = client.get(f"/api/v1/ebooks/{ebook.id}/download", headers=auth_headers)
        assert response.status_code == 403
        assert response.json()["code"] == "not_purchased"
        assert storage.requests == []

    def test_signed_url_and_download_count(
        self, client, db_session, portone, storage, auth_headers, user_id, make_ebook,
        make_payment_id,
    ):
        ebook = make_ebook(price=15000, full_pdf_path="pdfs/handbook.pdf")
        purchase_ebook(client, portone, make_payment_id, ebook, user_id)

        response = client.get(f"/api/v1/ebooks/{ebook.id}/download", headers=auth_headers)
        assert response.status_code == 200

        data = response.json()["data"]
        assert data["filename"] == "Data Science Handbook.pdf"
        assert data["downloadUrl"] == (
            "https://project.supabase.test/storage/v1/object/sign/ebooks/pdfs/handbook.pdf"
            "?token=signed&download="
        )
        assert "expiresAt" in data

        sign_request = storage.requests[0]
        assert sign_request.method == "POST"
        assert sign_request.headers["apikey"] == "service-role"
        assert json.loads(sign_request.content) == {"expiresIn": 300}

        client.get(f"/api/v1/ebooks/{ebook.id}/download", headers=auth_headers)
        purchase = db_session.execute(select(EbookPurchase)).scalar_one()
        db_session.refresh(purchase)
        assert purchase.download_count == 2
        assert purchase.last_downloaded_at is not None

    def test_missing_pdf(
        self, client, portone, auth_headers, user_id, make_ebook, make_payment_id
    ):
        ebook = make_ebook(price=15000, full_pdf_path=None)
        purchase_ebook(client, portone, make_payment_id, ebook, user_id)

        response = client.get(f"/api/v1/ebooks/{ebook.id}/download", headers=auth_headers)
        assert response.status_code == 404

    def test_storage_failure_does_not_count(
        self, client, db_session, portone, storage, auth_headers, user_id, make_ebook,
        make_payment_id,
    ):
        ebook = make_ebook(price=15000)
        purchase_ebook(client, portone, make_payment_id, ebook, user_id)
        storage.fail_status = 400

        response = client.get(f"/api/v1/ebooks/{ebook.id}/download", headers=auth_headers)
        assert response.status_code == 502

        purchase = db_session.execute(select(EbookPurchase)).scalar_one()
        assert purchase.download_count == 0


class TestStorageClient:
    def test_download_param_without_query(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"signedURL": "/object/sign/ebooks/a.pdf"})

        storage = StorageClient(
            supabase_url="https://project.supabase.test/",
            service_role_key="service-role",
            bucket="ebooks",
            transport=httpx.MockTransport(handler),
        )
        signed = storage.create_signed_url("a.pdf", expires_in=60)
        assert signed.url == (
            "https://project.supabase.test/storage/v1/object/sign/ebooks/a.pdf?download="
        )
