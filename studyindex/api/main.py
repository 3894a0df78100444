"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import List, Optional

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from studyindex.config import settings
from studyindex.errors import (
    IndexBuildError,
    LoadError,
    NotFoundError,
    NotReadyError,
    ParseError,
    StudyIndexError,
)
from studyindex.models.document import Document
from studyindex.models.retrieval import (
    DanglingLink,
    QuestionRef,
    RebuildResponse,
    RelatedResponse,
    SearchRequest,
    SearchResponse,
    SectionRef,
)
from studyindex.retrieval.service import IndexService

logger = logging.getLogger(__name__)

service = IndexService()


def get_service() -> IndexService:
    return service


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.build_on_startup:
        try:
            service.rebuild()
        except StudyIndexError as exc:
            logger.error("Initial index build failed: %s", exc)
    yield


app = FastAPI(
    title="studyindex",
    description="Search API over Markdown interview study notes",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(NotReadyError)
async def not_ready_handler(_: Request, exc: NotReadyError) -> JSONResponse:
    return JSONResponse(status_code=503, content={"detail": str(exc)})


@app.exception_handler(NotFoundError)
async def not_found_handler(_: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(LoadError)
@app.exception_handler(ParseError)
@app.exception_handler(IndexBuildError)
async def build_failed_handler(_: Request, exc: StudyIndexError) -> JSONResponse:
    logger.error("Rebuild failed: %s", exc)
    return JSONResponse(status_code=500, content={"detail": str(exc)})


@app.get("/health")
def health(svc: IndexService = Depends(get_service)) -> dict[str, str]:
    """Readiness probe reporting the index state."""
    return {"status": "ok", "state": svc.state.value}


@app.post("/rebuild", response_model=RebuildResponse)
def rebuild(svc: IndexService = Depends(get_service)) -> RebuildResponse:
    """Reload the corpus and publish a fresh index."""
    stats = svc.rebuild().stats()
    return RebuildResponse(
        state=svc.state.value,
        documents=stats["documents"],
        sections=stats["sections"],
        terms=stats["terms"],
        dangling_links=stats["dangling_links"],
    )


@app.post("/search", response_model=SearchResponse)
def search(payload: SearchRequest, svc: IndexService = Depends(get_service)) -> SearchResponse:
    """Ranked sections matching a free-text query."""
    limit = payload.limit or settings.default_search_limit
    hits = svc.search(payload.query, scope=payload.scope, limit=limit)
    return SearchResponse(query=payload.query, hits=hits)


@app.get("/headings", response_model=List[SectionRef])
def headings(q: str, svc: IndexService = Depends(get_service)) -> List[SectionRef]:
    return svc.find_by_heading(q)


@app.get("/tags/{tag}", response_model=List[str])
def documents_by_tag(tag: str, svc: IndexService = Depends(get_service)) -> List[str]:
    return svc.find_by_tag(tag)


@app.get("/questions", response_model=List[QuestionRef])
def questions(
    doc_id: Optional[str] = None,
    svc: IndexService = Depends(get_service),
) -> List[QuestionRef]:
    return svc.list_questions(scope=doc_id)


@app.get("/links/dangling", response_model=List[DanglingLink])
def dangling(svc: IndexService = Depends(get_service)) -> List[DanglingLink]:
    index = svc.snapshot()
    return [
        DanglingLink(doc_id=document.id, link=link)
        for document in index.documents
        for link in document.dangling_links()
    ]


@app.get("/related/{doc_id:path}", response_model=RelatedResponse)
def related_documents(doc_id: str, svc: IndexService = Depends(get_service)) -> RelatedResponse:
    return RelatedResponse(doc_id=doc_id, related=sorted(svc.related(doc_id)))


@app.get("/backlinks/{doc_id:path}", response_model=RelatedResponse)
def backlink_documents(doc_id: str, svc: IndexService = Depends(get_service)) -> RelatedResponse:
    return RelatedResponse(doc_id=doc_id, related=sorted(svc.backlinks(doc_id)))


@app.get("/documents/{doc_id:path}", response_model=Document)
def document(doc_id: str, svc: IndexService = Depends(get_service)) -> Document:
    return svc.get_document(doc_id)


def main() -> None:
    logging.basicConfig(level=settings.log_level)
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
