
"""CDP spec backend.

This FastAPI application backs a mobile lookup tool for vintage CD-player
hardware: given a typed query, a photo of the player, or a spoken model
name, it returns the matching DAC chip and laser pickup records from the
Supabase catalog, merged with any specifications Gemini generated earlier
in the same session.  Environment variables defined on the hosting
platform configure the Supabase and Gemini connections; see
``cdpspec.config``.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cdpspec.api import router as session_router
from cdpspec.config import Settings
from cdpspec.logging_config import setup_logging


settings = Settings.from_env()
setup_logging(level=settings.log_level, json_output=settings.log_format != "text")
logger = logging.getLogger("cdpspec-api")

if not settings.supabase_configured and settings.catalog_backend == "supabase":
    logger.warning("MISSING Supabase configuration: SUPABASE_URL and SUPABASE_ANON_KEY")
if not settings.ai_available:
    logger.info("GEMINI_API_KEY not set or implausible; AI lookups disabled")


app = FastAPI(title="CDP Spec Lookup")

# Configure CORS to allow requests from any origin. In production,
# consider restricting this to your frontend domain.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(session_router)


@app.get("/")
def read_root():
    return {"message": "CDP spec backend", "ai_available": settings.ai_available}


if __name__ == "__main__":  # pragma: no cover
    # Only run uvicorn if this module is executed directly. When
    # deployed, the start command invokes uvicorn via the process manager.
    import uvicorn

    uvicorn.run("cdpspec_backend:app", host="0.0.0.0", port=8000, reload=True)
