"""Entry point for running the records API or the portal."""

import logging
import os

import uvicorn
from dotenv import load_dotenv

load_dotenv()

APPS = {
    "api": ("student_records.src.api.main:create_app", "8000"),
    "portal": ("student_records.src.portal.main:create_app", "8001"),
}


def main() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # SERVICE=api|portal picks the app; PORT overrides its default port
    service = os.getenv("SERVICE", "api").lower()
    if service not in APPS:
        raise SystemExit(f"SERVICE must be one of {sorted(APPS)}, got {service!r}")
    target, default_port = APPS[service]
    port = int(os.getenv("PORT", default_port))

    uvicorn.run(
        target,
        factory=True,
        host=os.getenv("HOST", "0.0.0.0"),
        port=port,
        reload=os.getenv("RELOAD", "").lower() in {"1", "true", "yes"},
    )


if __name__ == "__main__":
    main()
