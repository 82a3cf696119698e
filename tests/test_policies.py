import pytest

from fineract_rag.rag.policies import POLICY, PolicyDocumentService


async def test_policy_lifecycle(store, mock_embedder):
    service = PolicyDocumentService(store, mock_embedder)

    doc = await service.add("Collateral policy", "Loans above 5000 need collateral.")
    assert doc.document_type == POLICY
    assert doc.embedding == pytest.approx([0.1, 0.2, 0.3])

    # Policies take part in search like any indexed document
    embedded = await store.list_documents_with_embedding()
    assert [d.id for d in embedded] == [doc.id]

    mock_embedder.embed_one.return_value = [0.3, 0.2, 0.1]
    updated = await service.update(doc.id, content="Loans above 10000 need collateral.")
    assert updated.content == "Loans above 10000 need collateral."
    assert updated.embedding == pytest.approx([0.3, 0.2, 0.1])
    mock_embedder.embed_one.assert_awaited_with("Loans above 10000 need collateral.")

    assert [d.id for d in await service.list()] == [doc.id]

    assert await service.delete(doc.id) is True
    assert await service.list() == []


async def test_title_only_update_does_not_reembed(store, mock_embedder):
    service = PolicyDocumentService(store, mock_embedder)
    doc = await service.add("Old", "Body")
    mock_embedder.embed_one.reset_mock()

    updated = await service.update(doc.id, title="New")

    assert updated.title == "New"
    mock_embedder.embed_one.assert_not_awaited()


async def test_indexed_entities_are_not_policies(store, mock_embedder):
    await store.upsert_document("1", "client", "Client: A", "a", [1.0, 0.0, 0.0])
    client = await store.get_document_by_key("1", "client")
    service = PolicyDocumentService(store, mock_embedder)

    assert await service.update(client.id, title="x") is None
    assert await service.delete(client.id) is False
    assert await store.get_document(client.id) is not None
