import logging
from typing import Dict

from fastapi import FastAPI, Request
from starlette.responses import JSONResponse

from .agent.prompts import GENERIC_SERVER_ERROR
from .api.chat_routes import router as chat_router
from .logging_config import configure_logging


configure_logging()
logger = logging.getLogger(__name__)
app = FastAPI(title="Learning Profile Advisor", version="0.1.0")
app.include_router(chat_router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s", request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": GENERIC_SERVER_ERROR})


@app.get("/healthz")
def health() -> Dict[str, str]:
    return {"status": "ok"}
