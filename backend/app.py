import json
import os
from contextlib import asynccontextmanager

import log_config  # noqa: F401
import yaml

# Import endpoints router
from api import router as endpoints_router
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from core.solar_advice.exceptions import SolarAdviceException
from core.solar_advice.models import TariffPeriod
from core.solar_advice.settings import HomeSettings, SystemConfiguration
from core.solar_advice.time_utils import parse_time

# Get ingress prefix from environment variable
INGRESS_PREFIX = os.environ.get("INGRESS_PREFIX", "")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan manager for FastAPI app."""
    routes = []
    for route in app.routes:
        path = getattr(route, "path", getattr(route, "mount_path", "Unknown path"))
        methods = getattr(route, "methods", None)
        if methods is not None:
            routes.append(f"{path} - {methods}")
    logger.info(f"Registered routes: {routes}")

    yield


# Create FastAPI app with correct root_path
app = FastAPI(root_path=INGRESS_PREFIX, lifespan=lifespan)


# Add global exception handler to prevent server restarts
@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    import traceback

    tb_str = traceback.format_exception(type(exc), exc, exc.__traceback__)
    error_msg = "".join(tb_str)

    logger.error(f"Unhandled exception: {exc!s}")
    logger.error(f"Request path: {request.url.path}")
    logger.error(f"Stack trace:\n{error_msg}")

    return JSONResponse(
        status_code=500,
        content={
            "detail": str(exc),
            "type": str(type(exc).__name__),
            "message": "The server encountered an internal error but is still running.",
        },
    )


logger.info(f"Ingress prefix: {INGRESS_PREFIX}")

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include the router from api.py
app.include_router(endpoints_router)


class SolarAdviceController:
    """Holds the loaded system, home and tariff settings for the API."""

    def __init__(self):
        options = self._load_options()
        if not options:
            logger.warning("No configuration options found, using defaults")
            options = {}

        self.system_config = SystemConfiguration()
        self.home_settings = HomeSettings()
        self.tariffs: list[TariffPeriod] = []

        self._apply_settings(options)

        logger.info("Solar advice controller initialized")

    def _load_options(self):
        """Load options from the add-on options file or config.yaml."""

        options_json = os.environ.get("OPTIONS_JSON", "/data/options.json")
        config_yaml = os.environ.get("CONFIG_YAML", "/app/config.yaml")

        # First try the standard options.json (production)
        if os.path.exists(options_json):
            try:
                with open(options_json) as f:
                    options = json.load(f)
                    logger.info(f"Loaded options from {options_json}")
                    return options
            except (OSError, json.JSONDecodeError) as e:
                logger.error(f"Error loading options from {options_json}: {e!s}")

        # If not available, try to load from config.yaml directly (development)
        if os.path.exists(config_yaml):
            try:
                with open(config_yaml) as f:
                    config = yaml.safe_load(f) or {}

                if "options" in config:
                    logger.info(f"Loaded options from {config_yaml} (options section)")
                    return config["options"]

                logger.warning(
                    f"No 'options' section found in {config_yaml}, using entire file"
                )
                return config
            except (OSError, yaml.YAMLError) as e:
                logger.error(f"Error loading from {config_yaml}: {e!s}")

        return None

    def _apply_settings(self, options):
        """Apply system, home and tariff settings from the options dictionary.

        Args:
            options: Dictionary with optional ``system``, ``home`` and
                ``tariffs`` sections, keys in snake_case
        """
        try:
            logger.debug(f"Applying settings: {json.dumps(options, indent=2)}")

            self.system_config = SystemConfiguration.from_config(
                {"system": options.get("system", {})}
            )
            self.home_settings = HomeSettings.from_config(options)
            self.tariffs = [
                TariffPeriod(
                    id=str(period.get("id", period["name"])),
                    name=period["name"],
                    start_time=period["start_time"],
                    end_time=period["end_time"],
                    is_cheap=bool(period.get("is_cheap", False)),
                    rate=period.get("rate"),
                )
                for period in options.get("tariffs", [])
            ]
            for period in self.tariffs:
                parse_time(period.start_time)
                parse_time(period.end_time)

            if not self.system_config.total_system_kwp:
                logger.warning("Total system power (kWp) is not configured")
            if not self.system_config.has_battery:
                logger.warning("Battery capacity is not configured")

            logger.info(
                f"Settings applied: {self.system_config.total_system_kwp} kWp, "
                f"{self.system_config.battery_capacity_kwh} kWh battery, "
                f"{len(self.tariffs)} tariff periods"
            )

        except (SolarAdviceException, KeyError, TypeError, ValueError) as e:
            logger.error(f"CRITICAL: Failed to apply settings: {e}", exc_info=True)
            raise RuntimeError(
                f"Settings application failed - check the options file for invalid "
                f"or missing settings. Error: {e}"
            ) from e

    def get_settings(self) -> dict:
        """Current settings by section."""
        return {
            "system": self.system_config,
            "home": self.home_settings,
            "tariffs": self.tariffs,
        }

    def update_settings(self, settings: dict):
        """Update settings in memory.

        Args:
            settings: ``system`` and ``home`` snake_case update dicts and/or a
                ``tariffs`` list of TariffPeriod
        """
        if "system" in settings:
            self.system_config.update(**settings["system"])
        if "home" in settings:
            self.home_settings.update(**settings["home"])
        if "tariffs" in settings:
            self.tariffs = list(settings["tariffs"])
        logger.info(f"Settings updated: {sorted(settings)}")


# Global controller instance
advice_controller = SolarAdviceController()
