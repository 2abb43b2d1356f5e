# api/app.py

"""
FastAPI application for the Snift REST API.

Launch with: python3 snift.py --serve [--port 8080]
"""

import logging
import time

from fastapi import Depends, FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel

from checks.errors import InvalidURL, ProbeFailure, UnresolvableHost
from checks.scoring import ScoreEngine

logger = logging.getLogger("snift.api")

# --- App Setup ---

app = FastAPI(
    title="Snift API",
    description="Website Security Score",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

# Loads the server catalog once; a malformed catalog stops the process here
engine = ScoreEngine()


def get_engine():
    return engine


# --- Request Models ---

class ScoreRequest(BaseModel):
    url: str


def error_response(status_code, message):
    return JSONResponse(status_code=status_code, content={"error": message})


async def score_url(url, score_engine):
    start = time.monotonic()
    try:
        result = await score_engine.compute_score(url)
    except InvalidURL:
        return error_response(400, "Invalid URL")
    except UnresolvableHost:
        return error_response(400, "Invalid Domain")
    except ProbeFailure as e:
        logger.error("Scoring failed for %s: %s", url, e)
        return error_response(500, "Unexpected Error Occured")
    logger.info("Score for %s obtained in %.2f seconds", url, time.monotonic() - start)
    return {"status": "ok", "result": result.to_dict()}


# --- Routes ---

@app.get("/", response_class=PlainTextResponse)
async def home():
    return "Welcome to Snift!"


@app.post("/api/scores")
async def post_score(req: ScoreRequest, score_engine: ScoreEngine = Depends(get_engine)):
    """Score the URL given in the request body."""
    return await score_url(req.url, score_engine)


@app.get("/api/scores")
async def get_score(
    url: str = Query(..., description="URL to score"),
    score_engine: ScoreEngine = Depends(get_engine),
):
    """Score the URL given as a query parameter."""
    return await score_url(url, score_engine)
