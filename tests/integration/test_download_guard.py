"""Integration tests for grant-gated static downloads."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient, Response
from starlette.responses import PlainTextResponse

from fastapi_lead_pipeline.app import create_app
from fastapi_lead_pipeline.config import Settings
from fastapi_lead_pipeline.grants import GrantKind, GrantSigner
from fastapi_lead_pipeline.guard import DownloadGuard
from fastapi_lead_pipeline.mail import MailDispatcher

QUOTE_PATH = "/Lift%20Quotes%20Pdf/quote.pdf"
BROCHURE_PATH = "/Broucher/brochure.pdf"


async def _get(app: FastAPI, path: str, cookie: str | None = None) -> Response:
    headers = {"Cookie": cookie} if cookie else {}
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        return await client.get(path, headers=headers)


@pytest.fixture
def signer(clock: Any) -> GrantSigner:
    return GrantSigner("test-download-secret", clock=clock)


@pytest.fixture
def site(
    tmp_path: Path, settings: Settings, signer: GrantSigner, stub_provider: Any
) -> FastAPI:
    (tmp_path / "Lift Quotes Pdf").mkdir()
    (tmp_path / "Lift Quotes Pdf" / "quote.pdf").write_bytes(b"%PDF-quote")
    (tmp_path / "Broucher").mkdir()
    (tmp_path / "Broucher" / "brochure.pdf").write_bytes(b"%PDF-brochure")
    (tmp_path / "index.html").write_text("<h1>home</h1>")
    configured = settings.model_copy(update={"static_dir": str(tmp_path)})
    return create_app(
        configured,
        dispatcher=MailDispatcher([stub_provider("smtp")]),
        signer=signer,
    )


class TestDownloadGuard:
    async def test_public_assets_unaffected(self, site: FastAPI) -> None:
        resp = await _get(site, "/index.html")
        assert resp.status_code == 200
        assert "home" in resp.text

    async def test_missing_grant(self, site: FastAPI) -> None:
        resp = await _get(site, QUOTE_PATH)
        assert resp.status_code == 403
        assert resp.text == "Forbidden"

    async def test_valid_grant(self, site: FastAPI, signer: GrantSigner) -> None:
        value = signer.issue(GrantKind.QUOTES).encode()
        resp = await _get(site, QUOTE_PATH, f"svs_dl_quotes={value}")
        assert resp.status_code == 200
        assert resp.content == b"%PDF-quote"

    async def test_grant_is_kind_specific(self, site: FastAPI, signer: GrantSigner) -> None:
        value = signer.issue(GrantKind.QUOTES).encode()
        resp = await _get(site, BROCHURE_PATH, f"svs_dl_brochure={value}")
        assert resp.status_code == 403

    async def test_expired_grant(self, site: FastAPI, signer: GrantSigner, clock: Any) -> None:
        value = signer.issue(GrantKind.BROCHURE, 180).encode()
        clock.advance(181)
        resp = await _get(site, BROCHURE_PATH, f"svs_dl_brochure={value}")
        assert resp.status_code == 403

    async def test_forged_grant(self, site: FastAPI, clock: Any) -> None:
        forged = GrantSigner("guessed", clock=clock).issue(GrantKind.QUOTES).encode()
        resp = await _get(site, QUOTE_PATH, f"svs_dl_quotes={forged}")
        assert resp.status_code == 403

    async def test_non_ascii_expiry_in_cookie(self, site: FastAPI) -> None:
        async with AsyncClient(transport=ASGITransport(app=site), base_url="http://test") as client:
            resp = await client.get(
                BROCHURE_PATH, headers={"Cookie": b"svs_dl_brochure=\xb2.abc"}
            )
        assert resp.status_code == 403
        assert resp.text == "Forbidden"


async def test_guard_on_plain_app(signer: GrantSigner) -> None:
    app = FastAPI()
    app.add_middleware(
        DownloadGuard, signer=signer, protected={"/private/": GrantKind.BROCHURE}
    )

    @app.get("/private/file")
    async def private_file() -> PlainTextResponse:
        return PlainTextResponse("secret")

    assert (await _get(app, "/private/file")).status_code == 403
    value = signer.issue(GrantKind.BROCHURE).encode()
    resp = await _get(app, "/private/file", f"svs_dl_brochure={value}")
    assert resp.text == "secret"
