"""
Web service launcher.
"""

import os

import uvicorn


def tickerlens_web_main() -> None:
    """Start the FastAPI web service."""

    host = os.getenv("TICKERLENS_HOST", "0.0.0.0")
    port = int(os.getenv("TICKERLENS_PORT", "8000"))
    reload = os.getenv("TICKERLENS_RELOAD", "false").lower() == "true"

    uvicorn.run("tickerlens.web.app:create_app", factory=True, host=host, port=port, reload=reload, log_level="info")


if __name__ == "__main__":
    tickerlens_web_main()
