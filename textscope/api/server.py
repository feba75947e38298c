import uvicorn

from textscope.config.environment_variables import EnvironmentVariables
from textscope.utils.logging import make_logger

logger = make_logger(__name__)


def main() -> None:
    environment_variables = EnvironmentVariables.refresh()
    logger.info(
        f"Server running at http://{environment_variables.HOST}:{environment_variables.PORT}"
    )
    uvicorn.run(
        "textscope.api.app:app",
        host=environment_variables.HOST,
        port=environment_variables.PORT,
        timeout_graceful_shutdown=10,
    )


if __name__ == "__main__":
    main()
