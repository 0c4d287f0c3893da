"""
Document history: ownership on read/delete, newest-first listing, 30-day
analytics and downloads.
"""
from datetime import datetime, timedelta, timezone

import pytest

from models import ExportFormat, GeneratedDocument
from services.document_export import export_document
from services.document_store import document_store

VIN = "1M8GDM9AXKP042788"


@pytest.mark.asyncio
async def test_list_is_newest_first_and_scoped(memory_db):
    first = await document_store.add_generated_document("owner", "NVIS", VIN, "first")
    second = await document_store.add_generated_document("owner", "BillOfSale", VIN, "second")
    await document_store.add_generated_document("someone-else", "NVIS", VIN, "not mine")
    memory_db.generated_documents.docs[0]["created_at"] -= timedelta(minutes=5)

    documents = await document_store.list_documents_for_user("owner")

    assert [d.document_id for d in documents] == [second, first]


@pytest.mark.asyncio
async def test_delete_missing_document(memory_db):
    with pytest.raises(LookupError):
        await document_store.delete_document("owner", "GD-MISSING")


@pytest.mark.asyncio
async def test_delete_other_users_document_is_refused(memory_db):
    document_id = await document_store.add_generated_document("owner", "NVIS", VIN, "text")

    with pytest.raises(PermissionError):
        await document_store.delete_document("intruder", document_id)

    assert len(memory_db.generated_documents.docs) == 1


@pytest.mark.asyncio
async def test_delete_own_document(memory_db):
    document_id = await document_store.add_generated_document("owner", "NVIS", VIN, "text")
    assert await document_store.delete_document("owner", document_id) == {"success": True}
    assert await document_store.count_documents() == 0


@pytest.mark.asyncio
async def test_analytics_counts_last_30_days_oldest_first(memory_db):
    now = datetime(2024, 6, 30, 12, 0, tzinfo=timezone.utc)
    memory_db.generated_documents.docs.extend([
        {"user_id": "owner", "document_type": "NVIS", "created_at": now},
        {"user_id": "owner", "document_type": "VIN Label", "created_at": now - timedelta(hours=2)},
        {"user_id": "owner", "document_type": "BillOfSale", "created_at": now - timedelta(days=29)},
        {"user_id": "owner", "document_type": "NVIS", "created_at": now - timedelta(days=45)},
        {"user_id": "other", "document_type": "NVIS", "created_at": now},
    ])

    days = await document_store.get_user_analytics("owner", now=now)

    assert len(days) == 30
    assert days[0].date == "2024-06-01"
    assert days[0].bill_of_sale == 1
    assert days[-1].date == "2024-06-30"
    assert (days[-1].nvis, days[-1].vin_label) == (1, 1)
    assert sum(d.nvis for d in days) == 1


class TestDocumentRoutes:

    def test_get_and_delete_enforce_ownership(self, client, memory_db, make_user):
        owner, owner_headers = make_user()
        _, intruder_headers = make_user(email="intruder@example.com")
        memory_db.generated_documents.docs.append(
            GeneratedDocument(document_id="GD-1", user_id=owner.user_id, document_type="NVIS", vin=VIN, content="x").model_dump()
        )

        assert client.get("/api/documents/GD-1", headers=intruder_headers).status_code == 403
        assert client.delete("/api/documents/GD-1", headers=intruder_headers).status_code == 403
        assert client.delete("/api/documents/GD-404", headers=owner_headers).status_code == 404
        assert client.delete("/api/documents/GD-1", headers=owner_headers).json() == {"success": True}

    def test_list_and_analytics(self, client, make_user):
        _, headers = make_user()
        assert client.get("/api/documents", headers=headers).json() == []
        analytics = client.get("/api/documents/analytics", headers=headers).json()
        assert len(analytics) == 30

    @pytest.mark.parametrize("fmt,content_type,magic", [
        ("txt", "text/plain", b"NEW VEHICLE"),
        ("pdf", "application/pdf", b"%PDF"),
        ("docx", "application/vnd.openxmlformats", b"PK"),
    ])
    def test_download_formats(self, client, memory_db, make_user, fmt, content_type, magic):
        owner, headers = make_user()
        memory_db.generated_documents.docs.append(
            GeneratedDocument(
                document_id="GD-2", user_id=owner.user_id, document_type="NVIS", vin=VIN,
                content="NEW VEHICLE INFORMATION STATEMENT (NVIS)\n\nMake: <NorthStar> & Co",
            ).model_dump()
        )

        response = client.get(f"/api/documents/GD-2/download?format={fmt}", headers=headers)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith(content_type)
        assert f"NVIS_{VIN}_GD-2.{fmt}" in response.headers["content-disposition"]
        assert response.content.startswith(magic)


def test_label_export_renders_table():
    document = GeneratedDocument(
        user_id="owner", document_type="VIN Label", vin=VIN, content='{"VIN": "%s", "GVWR": "7000 KG"}' % VIN,
    )
    body, content_type, filename = export_document(document, ExportFormat.PDF)
    assert body.startswith(b"%PDF")
    assert content_type == "application/pdf"
    assert filename.startswith("VIN_Label_")


def test_download_filename_drops_header_breaking_characters(client, memory_db, make_user):
    owner, headers = make_user()
    memory_db.generated_documents.docs.append(
        GeneratedDocument(
            document_id="GD-3", user_id=owner.user_id, document_type="VIN Label",
            vin='1M8GDM9A"; x=/..', content="{}",
        ).model_dump()
    )

    response = client.get("/api/documents/GD-3/download?format=txt", headers=headers)

    assert response.status_code == 200
    assert response.headers["content-disposition"] == 'attachment; filename="VIN_Label_1M8GDM9Ax.._GD-3.txt"'
