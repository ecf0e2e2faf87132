"""Liveness endpoint for container orchestration."""

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

app = FastAPI(title="Discord Relay", docs_url=None, redoc_url=None, openapi_url=None)


@app.get("/healthz", response_class=PlainTextResponse)
async def healthz():
    return "ok"
