"""FastAPI main application."""
import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import JSONResponse
from fastapi.security import APIKeyHeader
from pydantic import BaseModel, Field

from src.config import config, Config
from src.jobs.runner import SalesSyncRunner, build_runner
from src.logging_conf import setup_logging

logger = logging.getLogger(__name__)

app = FastAPI(title="Complete Sales Sync API", version="0.1.0")

# API Key security (if configured)
API_KEY_HEADER = APIKeyHeader(name="X-API-KEY", auto_error=False)

_runner: Optional[SalesSyncRunner] = None


def verify_api_key(api_key: str = Depends(API_KEY_HEADER)) -> bool:
    """Verify API key if configured."""
    expected_key = config.API_KEY
    if expected_key:
        if not api_key or api_key != expected_key:
            raise HTTPException(status_code=403, detail="Invalid API key")
    return True


def get_runner() -> SalesSyncRunner:
    """Runner built from configuration on first use."""
    global _runner
    if _runner is None:
        _runner = build_runner()
    return _runner


@app.on_event("startup")
async def startup():
    setup_logging()


class CompleteSalesRequest(BaseModel):
    """Request model for a sync batch."""
    integration_account_id: str
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    limit: int = Field(default_factory=lambda: config.DEFAULT_LIMIT, ge=1)


@app.get("/health")
async def health():
    """Health check endpoint (no auth required)."""
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.post("/complete-sales")
async def complete_sales(
    request: CompleteSalesRequest,
    _: bool = Depends(verify_api_key),
    runner: SalesSyncRunner = Depends(get_runner),
):
    """Enrich and upsert the account's latest orders."""
    result = await runner.run_batch(
        request.integration_account_id,
        date_from=request.date_from,
        date_to=request.date_to,
        limit=request.limit,
    )
    status_code = 200 if result.success else 500
    return JSONResponse(result.to_response(), status_code=status_code)


if __name__ == "__main__":
    import uvicorn
    Config.validate()
    uvicorn.run(app, host="0.0.0.0", port=8000)
