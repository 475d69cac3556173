from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from jsonconfig import ConfigStore
from jsonconfig.utils import setup_logging

RUNTIME_CONFIG_PATH = Path("data") / "RuntimeConfig.json"


class ApplicationSettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    run_in_background: bool = Field(default=True, alias="runInBackground")
    target_frame_rate: int = Field(default=60, alias="targetFrameRate")


class RuntimeConfig(BaseModel):
    name: str = "Runtime"
    value: int = 0
    application: ApplicationSettings = Field(default_factory=ApplicationSettings)


def _on_config_changed(config: RuntimeConfig) -> None:
    logging.info("Config changed: runInBackground=%s", config.application.run_in_background)


def main() -> None:
    setup_logging()

    with ConfigStore(RUNTIME_CONFIG_PATH, RuntimeConfig) as store:
        store.add_listener(_on_config_changed)

        result = store.load()
        if not result.is_success():
            logging.warning("Config load reported: %s", result)

        application = store.get_section("application", ApplicationSettings)
        if application is not None:
            logging.info(
                "application section: runInBackground=%s targetFrameRate=%s",
                application.run_in_background,
                application.target_frame_rate,
            )


if __name__ == "__main__":
    main()
