"""
RAG Routes

Query answering, indexing control and policy document management.

Answer failures are not handled here: ``AnswerGenerationError`` propagates
to the application-level handler, which reports "could not generate a
response" without leaking the cause.
"""

from typing import Annotated, List

from fastapi import APIRouter, Depends, HTTPException, status

from .dependencies import (
    get_answer_generator,
    get_indexer,
    get_policy_service,
    get_services,
    verify_admin,
)
from .models import (
    IndexingStatsResponse,
    PolicyCreateRequest,
    PolicyDocument,
    PolicyUpdateRequest,
    QueryRequest,
)
from ..rag.answer import AnswerGenerator
from ..rag.indexer import Indexer
from ..rag.models import IndexedDocument, IndexingReport, RAGResponse
from ..rag.policies import PolicyDocumentService
from ..services import Services

router = APIRouter(prefix="/rag", tags=["rag"])


def _to_policy(doc: IndexedDocument) -> PolicyDocument:
    return PolicyDocument(
        id=doc.id,
        title=doc.title,
        content=doc.content,
        metadata=doc.metadata,
        updated_at=doc.updated_at,
    )


# ---------------------------------------------------------------------
# Query
# ---------------------------------------------------------------------

@router.post(
    "/query",
    response_model=RAGResponse,
    summary="Answer a question from indexed and live Fineract data",
)
async def query(
    req: QueryRequest,
    answers: Annotated[AnswerGenerator, Depends(get_answer_generator)],
) -> RAGResponse:
    return await answers.answer(req.query, req.user_id)


# ---------------------------------------------------------------------
# Indexing
# ---------------------------------------------------------------------

@router.post(
    "/index",
    response_model=IndexingReport,
    dependencies=[Depends(verify_admin)],
    summary="Run a full indexing pass now",
)
async def index_now(
    indexer: Annotated[Indexer, Depends(get_indexer)],
) -> IndexingReport:
    """
    Run an immediate indexing pass and return its report.

    If a run is already in progress the report comes back with
    ``skipped_run`` set instead of starting a second one.
    """
    return await indexer.index_now()


@router.get(
    "/index",
    response_model=IndexingStatsResponse,
    dependencies=[Depends(verify_admin)],
)
async def indexing_stats(
    services: Annotated[Services, Depends(get_services)],
) -> IndexingStatsResponse:
    stats = await services.store.get_stats()
    return IndexingStatsResponse(**stats, indexing_running=services.indexer.is_running)


# ---------------------------------------------------------------------
# Policy documents
# ---------------------------------------------------------------------

@router.get("/policies", response_model=List[PolicyDocument])
async def list_policies(
    policies: Annotated[PolicyDocumentService, Depends(get_policy_service)],
) -> List[PolicyDocument]:
    return [_to_policy(doc) for doc in await policies.list()]


@router.post(
    "/policies",
    response_model=PolicyDocument,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(verify_admin)],
)
async def create_policy(
    req: PolicyCreateRequest,
    policies: Annotated[PolicyDocumentService, Depends(get_policy_service)],
) -> PolicyDocument:
    doc = await policies.add(req.title, req.content, req.metadata)
    return _to_policy(doc)


@router.put(
    "/policies/{document_id}",
    response_model=PolicyDocument,
    dependencies=[Depends(verify_admin)],
)
async def update_policy(
    document_id: str,
    req: PolicyUpdateRequest,
    policies: Annotated[PolicyDocumentService, Depends(get_policy_service)],
) -> PolicyDocument:
    doc = await policies.update(
        document_id,
        title=req.title,
        content=req.content,
        metadata=req.metadata,
    )
    if doc is None:
        raise HTTPException(status_code=404, detail="Policy document not found")
    return _to_policy(doc)


@router.delete(
    "/policies/{document_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(verify_admin)],
)
async def delete_policy(
    document_id: str,
    policies: Annotated[PolicyDocumentService, Depends(get_policy_service)],
) -> None:
    if not await policies.delete(document_id):
        raise HTTPException(status_code=404, detail="Policy document not found")
