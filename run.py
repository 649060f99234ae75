import os

import uvicorn


def main() -> None:
    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "8000"))
    reload = os.getenv("RELOAD", "false").strip().lower() in {"1", "true", "yes", "y"}

    uvicorn.run(
        "stockkeeper.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=os.getenv("LOG_LEVEL", "info").strip().lower(),
    )


if __name__ == "__main__":
    main()
