# backend/cranedb/serve.py
"""
Run the API with uvicorn.

    python -m cranedb.serve

HOST / PORT / RELOAD / LOG_LEVEL come from the environment. TLS is expected
to terminate at the plant reverse proxy, so forwarded headers are trusted
from FORWARDED_ALLOW_IPS.
"""

import os

import uvicorn


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes", "on"}


def main() -> None:
    uvicorn.run(
        "cranedb.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=_env_flag("RELOAD"),
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
        proxy_headers=True,
        forwarded_allow_ips=os.getenv("FORWARDED_ALLOW_IPS", "127.0.0.1"),
    )


if __name__ == "__main__":
    main()
