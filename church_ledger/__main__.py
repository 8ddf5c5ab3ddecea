"""Run the API server: python -m church_ledger"""

import uvicorn

from church_ledger.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        "church_ledger.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_config=None,
    )


if __name__ == "__main__":
    main()
