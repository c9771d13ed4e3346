from fastapi import APIRouter

from app.api.v1.endpoints import cases, hearings, case_views, bookmarks, documents

api_router = APIRouter()

api_router.include_router(cases.router, prefix="/cases", tags=["cases"])
api_router.include_router(hearings.router, prefix="/hearings", tags=["hearings"])
api_router.include_router(case_views.router, prefix="/case-views", tags=["case-views"])
api_router.include_router(bookmarks.router, prefix="/bookmarks", tags=["bookmarks"])
api_router.include_router(documents.router, prefix="/documents", tags=["documents"])
