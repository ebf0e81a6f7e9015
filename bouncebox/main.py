"""Application entry point."""

from engine.api.logging import get_logger
from engine.runtime.bootstrap import run_hosted_runtime
from engine.runtime.config import initialize_runtime_config
from engine.runtime.logging import configure_engine_logging, stop_engine_logging

from bouncebox.app import create_app
from bouncebox.world import HEIGHT, WIDTH

logger = get_logger(__name__)


def main() -> None:
    """Run the bouncing box demo."""
    config = initialize_runtime_config()
    configure_engine_logging(config.logging)
    logger.debug(
        "runtime_config headless=%s loop_mode=%s vsync=%s window=%dx%d",
        config.bootstrap.headless,
        config.render.loop_mode,
        config.render.vsync,
        config.window.width,
        config.window.height,
    )
    try:
        exit_code = run_hosted_runtime(
            app_factory=create_app,
            buffer_size=(WIDTH, HEIGHT),
            runtime_name="bouncebox",
            config=config,
        )
    finally:
        stop_engine_logging()
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
