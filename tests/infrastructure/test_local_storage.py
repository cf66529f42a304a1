import pytest

from infrastructure.adapters.storage_port import StorageProviderPortAdapter
from infrastructure.external.storage import (
    NotFoundError,
    StorageConfig,
    ValidationError,
)
from infrastructure.external.storage.factory import create_provider


@pytest.fixture
async def provider(tmp_path):
    return await create_provider(
        StorageConfig(local_base_path=str(tmp_path / "objects"), public_base_url="https://cdn.example.com/files")
    )


@pytest.mark.asyncio
async def test_upload_overwrites_same_key(provider):
    await provider.upload(b"first", "invoices/invoice-1.pdf", metadata={"order_id": 1}, content_type="application/pdf")
    result = await provider.upload(b"second", "invoices/invoice-1.pdf", content_type="application/pdf")

    assert await provider.download("invoices/invoice-1.pdf") == b"second"
    assert result.url == "https://cdn.example.com/files/invoices/invoice-1.pdf"
    meta = await provider.get_metadata("invoices/invoice-1.pdf")
    assert meta.size == len(b"second")
    assert meta.content_type == "application/pdf"
    # No temporary files are left next to the object
    assert sorted(p.name for p in (provider.base_path / "invoices").iterdir()) == [
        "invoice-1.pdf",
        "invoice-1.pdf.meta",
    ]


@pytest.mark.asyncio
async def test_traversal_keys_are_rejected(provider):
    with pytest.raises(ValidationError):
        await provider.upload(b"x", "../escape.pdf")
    assert await provider.exists("../escape.pdf") is False


@pytest.mark.asyncio
async def test_missing_and_deleted_objects(provider):
    with pytest.raises(NotFoundError):
        await provider.download("invoices/nope.pdf")
    await provider.upload(b"x", "invoices/gone.pdf")
    assert await provider.delete("invoices/gone.pdf") is True
    assert await provider.exists("invoices/gone.pdf") is False
    assert await provider.delete("invoices/gone.pdf") is False


@pytest.mark.asyncio
async def test_port_adapter_reports_outcome(provider):
    port = StorageProviderPortAdapter(provider)
    outcome = await port.upload(b"%PDF-1.4", "invoices/invoice-7.pdf", content_type="application/pdf")

    assert outcome.key == "invoices/invoice-7.pdf"
    assert outcome.size == 8
    assert outcome.url == port.public_url("invoices/invoice-7.pdf")
    assert await port.exists("invoices/invoice-7.pdf")
    assert port.info().type == "local"
