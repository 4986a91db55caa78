from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from api.routes.audio import router as audio_router
from infrastructure.metrics import get_metrics_response

app = FastAPI(title="Dimensi Suara Audio Service")

# CORS: allow the release wizard (Vite dev server) to call the API
# Include both localhost and 127.0.0.1 variants; browsers treat them as different origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)

app.include_router(audio_router)


@app.get("/health")
def health() -> dict[str, str]:
    """Return a simple liveness check."""
    return {"status": "ok"}


@app.get("/metrics")
def metrics() -> Response:
    """Prometheus metrics endpoint.

    Returns metrics in Prometheus text exposition format.
    Returns empty response if prometheus_client is not installed.
    """
    body, content_type = get_metrics_response()
    return Response(content=body, media_type=content_type)
