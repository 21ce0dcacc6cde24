from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.api.v1.router import api_router
from app.models import business, knowledge, user  # noqa: F401  register all tables


app = FastAPI(
    title="MindRobo Knowledge API",
    description="Knowledge base editor backend for the MindRobo AI receptionist",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


@app.get("/health")
async def health():
    return {"status": "ok", "service": "mindrobo-knowledge-api", "version": "0.1.0"}
