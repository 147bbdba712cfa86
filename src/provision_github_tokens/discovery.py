"""Populate an :class:`InstallationRegistry` from a discovery snapshot.

Discovery itself (crawling the GitHub API) happens elsewhere; this module
only replays its output.  Apps are registered with the roles the apps input
assigns them, and apps the input does not mention are skipped along with
their installations.
"""
from __future__ import annotations

import logging
from typing import Sequence

from provision_github_tokens.config.models import AppInput, DiscoverySnapshot
from provision_github_tokens.provision import StaticEnvironmentLister
from provision_github_tokens.registry import InstallationRegistry

logger = logging.getLogger(__name__)


def load_registry(
    snapshot: DiscoverySnapshot, apps_input: Sequence[AppInput]
) -> InstallationRegistry:
    """Build a registry from *snapshot*, using *apps_input* for app roles.

    Installations are registered in snapshot order, which fixes the order
    accounts and repos are resolved in.
    """
    registry = InstallationRegistry()
    inputs = {app.app_id: app for app in apps_input}

    for app in snapshot.apps:
        app_input = inputs.get(app.id)
        if app_input is None:
            logger.warning("App %s is not configured - skipping", app.id)
            continue
        if not app_input.issuer.enabled and not app_input.provisioner.enabled:
            logger.debug("App %s has no roles enabled", app.id)
        registry.register_app(app, issuer=app_input.issuer, provisioner=app_input.provisioner)

    registered = {registration.app.id for registration in registry.apps}
    skipped = 0
    for installation in snapshot.installations:
        if installation.app_id not in registered:
            skipped += 1
            continue
        registry.register_installation(installation, installation.repositories)

    if skipped:
        logger.debug("Skipped %d installations of unconfigured apps", skipped)
    logger.info(
        "Discovered %d apps with %d installations",
        len(registry.apps),
        len(registry.installations),
    )
    return registry


def environment_lister(snapshot: DiscoverySnapshot) -> StaticEnvironmentLister:
    """Return a lister serving the environments recorded in *snapshot*."""
    return StaticEnvironmentLister(snapshot.environments)
