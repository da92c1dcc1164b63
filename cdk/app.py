#!/usr/bin/env python3
import logging
import os

import aws_cdk as cdk

from idp_infra.platform import build_platform
from idp_infra.settings import config_path, load_settings
from idp_infra.stack_config import ConfigurationError

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger("app")

app = cdk.App()

# Base platform first, then the application stacks that build on it
try:
    settings = load_settings(config_path(app.node.try_get_context("config")))
    build_platform(app, settings)
except ConfigurationError as e:
    logger.error("Invalid configuration: %s", e)
    raise

app.synth()
