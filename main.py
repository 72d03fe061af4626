"""
Main entrypoint: serve the SEI credit score API with uvicorn.

Env: API_HOST, API_PORT, LOG_LEVEL, SEI_EXPLORER_API_URL, SEI_REST_URL,
SEI_EVM_RPC_URL, SEISCORE_REQUEST_TIMEOUT_SEC, SEISCORE_TX_LIMIT.

Equivalent: uvicorn seiscore.api_server.app:app --host 0.0.0.0 --port 8000
"""

import os

# Configure structured JSON logging before other imports that may log
from seiscore.seiscore_logging import get_logger

logger = get_logger("main")


def main() -> None:
    from seiscore.config.env import get_api_bind
    from seiscore.config.settings import get_settings

    api_host, api_port = get_api_bind()
    settings = get_settings()
    logger.info(
        "main_server_starting",
        host=api_host,
        port=api_port,
        explorer_api_url=settings.explorer_api_url,
        rest_url=settings.rest_url,
        evm_rpc_url=settings.evm_rpc_url,
    )

    from seiscore.api_server.app import app
    import uvicorn

    uvicorn.run(app, host=api_host, port=api_port, log_level=os.getenv("LOG_LEVEL", "info").lower())


if __name__ == "__main__":
    main()
