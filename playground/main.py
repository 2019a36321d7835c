"""Process runner for the playground.

Integrated mode serves the HTTP API and the NiceGUI page from one uvicorn
server. Separate mode starts them as two processes. Host, ports, log level
and mode all come from `Settings`.
"""

import asyncio
import logging
import subprocess
import sys
from urllib.parse import urlsplit

from playground.agent.config import Settings, get_settings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def api_url_matches_port(settings: Settings) -> bool:
    """Whether the UI's API base URL targets the port the API binds."""
    url = urlsplit(settings.api_base_url)
    port = url.port or (443 if url.scheme == "https" else 80)
    return port == settings.port


def api_command(settings: Settings) -> list[str]:
    """Command line for the standalone API process."""
    return [
        sys.executable,
        "-m",
        "uvicorn",
        "playground.api.app:app",
        "--host",
        settings.host,
        "--port",
        str(settings.port),
        "--log-level",
        settings.log_level.lower(),
    ]


def ui_command() -> list[str]:
    """Command line for the standalone page process."""
    return [sys.executable, "-c", "from playground.ui.chat_page import main; main()"]


def run_integrated(settings: Settings) -> None:
    """Mount NiceGUI on the FastAPI app and serve both on `settings.port`."""
    import uvicorn
    from nicegui import ui

    from playground.api.app import create_app
    from playground.ui.chat_page import chat_page  # noqa: F401 - Registers the page

    app = create_app()
    ui.run_with(
        app,
        title="LLM Playground",
        favicon="🧪",
        storage_secret=settings.storage_secret,
    )

    logger.info(f"Serving API and playground on http://{settings.host}:{settings.port}")
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


async def supervise(processes: list[subprocess.Popen]) -> None:
    """Wait until any process exits, then stop the rest."""
    try:
        while all(proc.poll() is None for proc in processes):
            await asyncio.sleep(1)
    finally:
        for proc in processes:
            if proc.poll() is None:
                proc.terminate()
        for proc in processes:
            proc.wait()


def run_separate(settings: Settings) -> None:
    """Run the API on `settings.port` and the page on `settings.ui_port`."""
    logger.info(f"Starting API on http://{settings.host}:{settings.port}")
    logger.info(f"Starting playground on http://localhost:{settings.ui_port}")

    processes = [subprocess.Popen(api_command(settings)), subprocess.Popen(ui_command())]
    try:
        asyncio.run(supervise(processes))
    except KeyboardInterrupt:
        logger.info("Shutting down servers...")


def main() -> None:
    settings = get_settings()
    configure_logging(settings)

    if not api_url_matches_port(settings):
        logger.warning(
            f"API_BASE_URL {settings.api_base_url} does not target port {settings.port}; "
            "the playground may not reach the API"
        )

    logger.info(f"Starting LLM Playground in {settings.run_mode} mode")
    if settings.run_mode == "separate":
        run_separate(settings)
    else:
        run_integrated(settings)


if __name__ == "__main__":
    main()
