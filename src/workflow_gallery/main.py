import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .catalog import WorkflowCatalog
from .config import get_settings
from .connectors import close_connector, create_github_client
from .errors import GalleryError, NotFound
from .models import (
    CategoriesResponse,
    ErrorResponse,
    MessageResponse,
    RepositoryInfo,
    RepositoryInfoResponse,
    StructureResponse,
    WorkflowListResponse,
    WorkflowResponse,
)

load_dotenv()

logger = logging.getLogger(__name__)

settings = get_settings()
catalog = WorkflowCatalog.from_settings(settings, create_github_client(settings))


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Repository: %s", catalog.repository)
    logger.info("Discovery: %s", catalog.explorer.describe())
    logger.info("GitHub token: %s", "configured" if catalog.client.has_token else "not configured")
    yield
    await close_connector(catalog.client)


app = FastAPI(
    title="n8n Workflow Gallery API",
    description="Cached, display-ready listing of n8n workflows hosted on GitHub",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(
        status_code=404,
        content=ErrorResponse(error=str(exc)).model_dump(exclude_none=True),
    )


@app.exception_handler(GalleryError)
async def gallery_error_handler(request: Request, exc: GalleryError):
    logger.error("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error=str(exc), repository=catalog.repository).model_dump(),
    )


@app.get("/api/workflows")
async def list_workflows(q: str | None = None):
    listing = await catalog.list_workflows(q)
    return WorkflowListResponse(
        count=listing.count,
        total=listing.total,
        workflows=listing.workflows,
        cached=listing.cached,
        cache_age=listing.cache_age,
        repository=catalog.repository,
        folder=catalog.explorer.describe().get("workflows_folder"),
        categories=listing.categories,
        structure=listing.structure,
        warning=listing.warning,
    ).model_dump(mode="json")


@app.get("/api/workflow/{filename}")
async def get_workflow(filename: str):
    summary = await catalog.get_workflow(filename)
    return WorkflowResponse(workflow=summary).model_dump(mode="json")


@app.get("/api/repo-info")
async def repo_info():
    info = await catalog.get_repository_info()
    return RepositoryInfoResponse(repo=RepositoryInfo(**info)).model_dump(mode="json")


@app.get("/api/structure")
async def structure():
    report = await catalog.get_structure_report()
    return StructureResponse(**report).model_dump(mode="json")


@app.get("/api/categories")
async def categories():
    data = await catalog.get_categories()
    return CategoriesResponse(**data).model_dump(mode="json")


@app.get("/api/health")
def health():
    return catalog.health()


@app.post("/api/clear-cache")
def clear_cache():
    catalog.clear_cache()
    return MessageResponse(message="Cache cleared successfully").model_dump()


@app.get("/api/debug")
def debug():
    return {**catalog.debug(), "port": settings.port}


def serve() -> None:
    """Run the API with uvicorn on the configured port."""
    import uvicorn

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    serve()
