"""Suggestion edge function -- forwards interview questions to the AI provider.

Run:  python edge_function.py
Listens on http://EDGE_HOST:EDGE_PORT (default 0.0.0.0:8787)

Endpoints:
  POST /          -- {"question": "..."} -> {"suggestion": "..."} or {"error": "..."}
  POST /suggest   -- same as POST /
  GET  /health    -- readiness and whether an API key is configured

The provider is called through the OpenAI SDK; by default it points at
Gemini's OpenAI-compatible endpoint.
"""

from typing import Any, AsyncIterator, Optional

import httpx
import openai
import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from loguru import logger
from openai import AsyncOpenAI
from pydantic import BaseModel

from config import Settings, configure_logging, load_settings

COACH_PROMPT = """You are an expert interview coach. When given an interview question, provide a clear, concise, and compelling response that:
1. Directly answers the question
2. Uses the STAR method (Situation, Task, Action, Result) when applicable
3. Highlights key achievements and skills
4. Keeps the response between 1-2 minutes when spoken
5. Sounds natural and conversational

Provide only the suggested response without any additional commentary or explanation.

Interview question: {question}"""

CORS_ALLOW_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]


class AIServiceNotConfigured(Exception):
    pass


class SuggestionResponse(BaseModel):
    suggestion: str


class HealthResponse(BaseModel):
    status: str
    configured: bool
    model: str


def build_prompt(question: str) -> str:
    return COACH_PROMPT.format(question=question)


def get_settings() -> Settings:
    return load_settings()


def build_ai_client(settings: Settings, *, http_client: Optional[httpx.AsyncClient] = None) -> AsyncOpenAI:
    # One upstream call per request; provider errors go straight back to the caller.
    return AsyncOpenAI(
        api_key=settings.gemini_api_key,
        base_url=settings.ai_base_url,
        max_retries=0,
        timeout=settings.ai_timeout_s,
        http_client=http_client,
    )


async def get_ai_client(settings: Settings = Depends(get_settings)) -> AsyncIterator[Optional[AsyncOpenAI]]:
    if not settings.gemini_api_key:
        yield None
        return
    client = build_ai_client(settings)
    try:
        yield client
    finally:
        await client.close()


def _extract_suggestion(resp: Any) -> str:
    choices = getattr(resp, "choices", None)
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    return content if isinstance(content, str) else ""


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


app = FastAPI(title="Interview Helper Edge Function")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=CORS_ALLOW_HEADERS,
)


@app.get("/health")
async def health(settings: Settings = Depends(get_settings)):
    return HealthResponse(status="ok", configured=bool(settings.gemini_api_key), model=settings.ai_model)


@app.options("/")
@app.options("/suggest")
async def preflight():
    return Response(status_code=200)


@app.api_route("/", methods=["GET", "PUT", "PATCH", "DELETE"])
@app.api_route("/suggest", methods=["GET", "PUT", "PATCH", "DELETE"])
async def method_not_allowed():
    return _error(405, "Method not allowed")


@app.post("/")
@app.post("/suggest")
async def suggest(
    request: Request,
    settings: Settings = Depends(get_settings),
    client: Optional[AsyncOpenAI] = Depends(get_ai_client),
):
    try:
        try:
            body = await request.json()
        except ValueError:
            return _error(400, "Invalid JSON in request body")

        question = body.get("question") if isinstance(body, dict) else None
        if not isinstance(question, str) or not question.strip():
            return _error(400, "Valid question is required")

        if client is None:
            raise AIServiceNotConfigured("GEMINI_API_KEY is not configured")

        logger.debug(f"Requesting suggestion: [{question[:80]}] model={settings.ai_model}")
        try:
            resp = await client.chat.completions.create(
                model=settings.ai_model,
                messages=[{"role": "user", "content": build_prompt(question)}],
                temperature=settings.ai_temperature,
                top_p=settings.ai_top_p,
                max_tokens=settings.ai_max_output_tokens,
            )
        except openai.APIStatusError as exc:
            logger.error(f"Google AI Error: {exc.status_code} {exc.body}")
            if exc.status_code == 429:
                return _error(429, "Rate limit exceeded. Please try again later.")
            return _error(500, "AI service error")

        suggestion = _extract_suggestion(resp)
        if not suggestion:
            logger.error(f"Invalid response structure: {resp!r}")
            raise RuntimeError("Invalid response format from Google AI")

        logger.info(f"Suggestion ready ({len(suggestion)} chars) [{question[:50]}]")
        return SuggestionResponse(suggestion=suggestion)
    except Exception as e:
        logger.error(f"Google AI edge function error: {e}")
        return _error(500, str(e) or "Unknown error")


if __name__ == "__main__":
    settings = load_settings()
    configure_logging(settings.log_level)

    print()
    print("Interview Helper Edge Function")
    print(f"  Model:  {settings.ai_model}")
    print(f"  AI URL: {settings.ai_base_url}")
    print(f"  URL:    http://{settings.edge_host}:{settings.edge_port}")
    print()

    uvicorn.run(app, host=settings.edge_host, port=settings.edge_port)
