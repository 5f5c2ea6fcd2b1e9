import os

import uvicorn

from ipecho.logger import build_log_config


def main() -> None:
    """Run the FastAPI application with uvicorn."""
    uvicorn.run(
        "ipecho.main:app",
        log_config=build_log_config(),
        host=os.getenv("IPECHO_HOST", "127.0.0.1"),
        port=int(os.getenv("IPECHO_PORT", "8000")),
        reload=os.getenv("IPECHO_RELOAD", "").lower() in ("1", "true", "yes"),
        # The edge proxy's X-Forwarded-* headers describe the real client.
        proxy_headers=True,
        forwarded_allow_ips="*",
    )


if __name__ == "__main__":
    main()
