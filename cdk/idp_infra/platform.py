import logging
from typing import Any, Dict, List, Tuple

import aws_cdk as cdk

from idp_infra.contrib.petapp.base_config import get_base_config
from idp_infra.contrib.petapp.interfaces import (
    CommonStackConfig,
    PetAppCustomConfig,
    PetAppStackConfig,
)
from idp_infra.contrib.petapp.pet_app_stack import PetAppStack
from idp_infra.stack_config import compose
from idp_infra.stacks.base_stack import BaseStack, BaseStackConfig

logger = logging.getLogger(__name__)


def environment(settings: Dict[str, Any]) -> cdk.Environment:
    return cdk.Environment(account=settings.get("account"), region=settings["region"])


def build_platform(app: cdk.App, settings: Dict[str, Any]) -> Tuple[BaseStack, List[PetAppStack]]:
    env = environment(settings)

    base_settings = dict(settings["base"])
    base_id = base_settings.pop("id")
    base = BaseStack(app, base_id, config=compose(BaseStackConfig, base_settings), env=env)

    pet_apps = []
    for pet_app_settings in settings.get("pet_apps", []):
        config = compose(
            PetAppStackConfig,
            get_base_config(base, repository=pet_app_settings["repository"]),
            CommonStackConfig.model_construct(owner=pet_app_settings["owner"]),
            PetAppCustomConfig.model_construct(branch=pet_app_settings["branch"]),
        )
        pet_app = PetAppStack(app, pet_app_settings["id"], config=config, env=env)
        pet_app.add_dependency(base)
        pet_apps.append(pet_app)

    logger.info("Declared %s and %d application stack(s)", base_id, len(pet_apps))
    return base, pet_apps
