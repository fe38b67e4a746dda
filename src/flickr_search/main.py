import logging
import os

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from flickr_search.ws import router as ws_router

logger = logging.getLogger(__name__)

app = FastAPI()


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    # HTTPException and validation errors keep FastAPI's own handlers
    logger.exception(f"[app] Unhandled error on {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": str(exc)})


@app.get("/health")
async def health():
    return {"status": "ok"}


app.include_router(ws_router)


def start(reload: bool = True):
    """
    Entry point for the application when run as a script.
    """
    level = os.environ.get("LOG_LEVEL", "INFO").upper()
    log_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "()": "uvicorn.logging.DefaultFormatter",
                "fmt": "%(levelprefix)s %(message)s",
            },
            "access": {
                "()": "uvicorn.logging.AccessFormatter",
                "fmt": '%(levelprefix)s %(client_addr)s - "%(request_line)s" %(status_code)s',
            },
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stderr",
            },
            "access": {
                "class": "logging.StreamHandler",
                "formatter": "access",
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {
            "flickr_search": {"handlers": ["default"], "level": level},
            "httpx": {"level": "WARNING", "propagate": True},
            "uvicorn": {"handlers": ["default"], "level": "INFO"},
            "uvicorn.error": {"level": "INFO"},
            "uvicorn.access": {
                "handlers": ["access"],
                "level": "INFO",
                "propagate": False,
            },
        },
    }

    uvicorn.run(
        "flickr_search.main:app",
        host=os.environ.get("HOST", "127.0.0.1"),
        reload=reload,
        port=int(os.environ.get("PORT", "8000")),
        reload_dirs=["src/flickr_search"],
        reload_excludes=["__pycache__"],
        log_level=level.lower(),
        log_config=log_config,
    )


if __name__ == "__main__":
    start(reload=False)
