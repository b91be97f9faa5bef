"""
pmgraph FastAPI Application

A REST API server for the project memory graph.
Provides endpoints for projects, documents, edges, context, search and auto-update.
"""

from contextlib import asynccontextmanager
from typing import Any, Literal

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, Field

from pmgraph import __version__
from pmgraph.config import Config
from pmgraph.core.filesystem import FileSync
from pmgraph.core.store.factory import DocumentStoreFactory
from pmgraph.models import (
    ConversationLog,
    DocType,
    Document,
    DocumentVersion,
    EdgeType,
    ProjectContext,
    ProjectEdge,
    ProjectNode,
    ProjectStatus,
    ProjectType,
    SearchResult,
    UpdateApplied,
    UpdateMode,
)
from pmgraph.services.project_memory import ProjectMemory
from pmgraph.utils.exceptions import (
    AlreadyExistsError,
    ConstraintViolationError,
    NotFoundError,
    ProjectMemoryError,
    ValidationError,
)
from pmgraph.utils.logger import get_logger, setup_logging

# Global memory instance
memory: ProjectMemory | None = None
logger = get_logger(__name__)


# Pydantic models for API
class CreateProjectRequest(BaseModel):
    """Request model for registering a project."""

    name: str = Field(..., min_length=1, description="Unique project slug")
    path: str = Field(..., min_length=1, description="Filesystem path of the project")
    display_name: str | None = None
    tech_stack: list[str] = Field(default_factory=list)
    owner: str | None = None
    parent: str | None = Field(default=None, description="Parent project ID or name")
    type: ProjectType = ProjectType.PROJECT


class UpdateProjectRequest(BaseModel):
    """Request model for updating project metadata."""

    display_name: str | None = None
    status: ProjectStatus | None = None
    tech_stack: list[str] | None = None
    owner: str | None = None


class UpdateDocumentRequest(BaseModel):
    """Request model for merging content into a document."""

    content: str
    mode: UpdateMode | None = Field(default=None, description="Defaults per doc type")
    change_summary: str | None = None


class SearchRequest(BaseModel):
    """Request model for keyword search."""

    query: str = Field(..., description="Free-text query")
    project: str | None = Field(default=None, description="Project ID or name")
    doc_types: list[DocType] | None = None
    limit: int = Field(default=10, ge=1, le=100, description="Max results")


class AddEdgeRequest(BaseModel):
    """Request model for linking two projects."""

    from_project: str
    to_project: str
    type: EdgeType
    description: str = ""
    strength: float = Field(default=0.5, ge=0.0, le=1.0)
    bidirectional: bool = False


class AutoUpdateRequest(BaseModel):
    """Request model for classifying a conversation summary."""

    summary: str = Field(..., min_length=1)


class AutoUpdateResponse(BaseModel):
    """Response model for auto-update."""

    project: str
    updates_applied: list[UpdateApplied]


class SyncRequest(BaseModel):
    """Request model for re-mirroring documents to disk."""

    project: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    memory_initialized: bool
    storage_backend: str
    file_sync: bool


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown."""
    global memory

    # Load configuration from environment or use defaults
    config = Config.from_env()

    # Initialize logging with config
    setup_logging(config.logging)

    logger.info("Starting pmgraph server")
    logger.info(
        f"Configuration: storage={config.storage.backend}, "
        f"sync_to_disk={config.docs.sync_to_disk}"
    )

    store = DocumentStoreFactory.create(config)
    file_sync = FileSync(config.docs.docs_root) if config.docs.sync_to_disk else None

    memory = ProjectMemory(store=store, config=config, file_sync=file_sync)
    await memory.initialize()
    logger.info("pmgraph initialized")

    yield

    # Cleanup
    logger.info("Shutting down pmgraph server")
    await memory.close()
    memory = None
    logger.info("Cleanup complete")


# Create FastAPI app
app = FastAPI(
    title="pmgraph API",
    description="Project memory graph with typed, versioned documents",
    version=__version__,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def status_for(error: ProjectMemoryError) -> int:
    """HTTP status code for a domain error."""
    if isinstance(error, NotFoundError):
        return 404
    if isinstance(error, AlreadyExistsError | ConstraintViolationError):
        return 409
    if isinstance(error, ValidationError):
        return 422
    return 500


@app.exception_handler(ProjectMemoryError)
async def project_memory_error_handler(request: Request, exc: ProjectMemoryError):
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.kind}")
    return JSONResponse(status_code=status_code, content=exc.to_payload())


def get_memory() -> ProjectMemory:
    if not memory:
        raise HTTPException(status_code=503, detail="Project memory not initialized")
    return memory


# Health check endpoint
@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy" if memory else "initializing",
        memory_initialized=memory is not None,
        storage_backend=memory.config.storage.backend if memory else "unknown",
        file_sync=bool(memory and memory.file_sync),
    )


# Project endpoints
@app.post("/projects", response_model=ProjectNode, status_code=201)
async def create_project(request: CreateProjectRequest):
    """
    Register a project.

    Eight template documents (todo, confirm, progress, delays, prd, memory,
    notes, qa) are created at version 1. When ``parent`` is given a
    parent_child edge is added from the parent to the new project.
    """
    return await get_memory().create_project(
        name=request.name,
        path=request.path,
        tech_stack=request.tech_stack,
        owner=request.owner,
        parent_id=request.parent,
        display_name=request.display_name,
        project_type=request.type,
    )


@app.get("/projects", response_model=list[ProjectNode])
async def list_projects(status: ProjectStatus | None = Query(default=None)):
    """List projects, most recently updated first."""
    return await get_memory().list_projects(status)


@app.get("/projects/{project}", response_model=ProjectNode)
async def get_project(project: str):
    """Retrieve a project by ID or name."""
    return await get_memory().get_project(project)


@app.patch("/projects/{project}", response_model=ProjectNode)
async def update_project(project: str, request: UpdateProjectRequest):
    """Update display name, status, tech stack or owner."""
    return await get_memory().update_project(
        project,
        display_name=request.display_name,
        status=request.status,
        tech_stack=request.tech_stack,
        owner=request.owner,
    )


@app.delete("/projects/{project}")
async def delete_project(project: str):
    """Delete a project with its documents, versions and edges."""
    deleted = await get_memory().delete_project(project)
    return {"deleted": deleted, "project": project}


@app.get("/projects/{project}/conversations", response_model=list[ConversationLog])
async def list_conversations(project: str):
    """List auto-update conversation logs of a project, newest first."""
    return await get_memory().get_conversations(project)


# Document endpoints
@app.put("/projects/{project}/documents/{doc_type}", response_model=Document)
async def update_document(project: str, doc_type: str, request: UpdateDocumentRequest):
    """
    Merge content into a document.

    - "append": content is added after the existing text
    - "upsert": the section named by the first "## " header is replaced,
      or appended when absent

    Each update bumps the version and stores a snapshot.
    """
    return await get_memory().update_document(
        project,
        doc_type,
        request.content,
        mode=request.mode,
        change_summary=request.change_summary,
    )


@app.get("/projects/{project}/documents/{doc_type}", response_model=Document)
async def get_document(project: str, doc_type: str):
    """Retrieve one document of a project."""
    return await get_memory().get_document(project, doc_type)


@app.get(
    "/projects/{project}/documents/{doc_type}/versions",
    response_model=list[DocumentVersion],
)
async def get_document_history(project: str, doc_type: str):
    """List version snapshots of a document, newest first."""
    return await get_memory().get_document_history(project, doc_type)


# Context endpoint
@app.get("/projects/{project}/context", response_model=None)
async def get_context(
    project: str,
    include_related: bool = Query(default=False),
    depth: int | None = Query(default=None, ge=0),
    format: Literal["json", "markdown"] = Query(default="json"),
) -> ProjectContext | PlainTextResponse:
    """
    Assemble a project's context.

    With ``include_related`` the graph is walked breadth-first up to
    ``depth`` hops. ``format=markdown`` returns the rendered transcript.
    """
    pm = get_memory()
    if format == "markdown":
        text = await pm.render_context(project, include_related, depth)
        return PlainTextResponse(text, media_type="text/markdown")
    return await pm.get_context(project, include_related, depth)


# Search endpoint
@app.post("/search", response_model=list[SearchResult])
async def search(request: SearchRequest):
    """
    Keyword search across documents.

    Results are ranked by keyword frequency; ties keep most recently
    modified first.
    """
    return await get_memory().search(
        request.query,
        project=request.project,
        doc_types=request.doc_types,
        limit=request.limit,
    )


# Edge endpoints
@app.post("/edges", response_model=ProjectEdge, status_code=201)
async def add_edge(request: AddEdgeRequest):
    """Link two projects with a typed, directed edge."""
    return await get_memory().add_edge(
        request.from_project,
        request.to_project,
        request.type,
        description=request.description,
        strength=request.strength,
        bidirectional=request.bidirectional,
    )


@app.delete("/edges/{edge_id}")
async def remove_edge(edge_id: str):
    """Delete an edge."""
    await get_memory().remove_edge(edge_id)
    return {"deleted": True, "edge_id": edge_id}


# Auto-update endpoint
@app.post("/projects/{project}/auto-update", response_model=AutoUpdateResponse)
async def auto_update(project: str, request: AutoUpdateRequest):
    """
    Route a conversation summary into the matching documents.

    Keywords select todo, progress, memory, delays or notes; a summary that
    matches nothing is appended to notes.
    """
    applied = await get_memory().classify_and_apply(request.summary, project)
    return AutoUpdateResponse(project=project, updates_applied=applied)


# File sync endpoint
@app.post("/sync")
async def sync(request: SyncRequest | None = None) -> dict[str, Any]:
    """Re-mirror one or all projects to the docs directory."""
    synced = await get_memory().sync(request.project if request else None)
    return {"synced": synced}


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "pmgraph API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }
