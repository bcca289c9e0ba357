"""Application context management for the CLI."""

from dataclasses import dataclass

from mmui.cli.common.exits import EXIT_USAGE, die
from mmui.cli.common.output import out
from mmui.core.actions import ActionRunner
from mmui.core.adapters.migration_api import MigrationAPI
from mmui.core.client import ClientConfig, ClientConfigError, get_config


@dataclass
class AppContext:
    """Application context holding daemon settings, API adapter and action runner."""

    config: ClientConfig
    api: MigrationAPI
    runner: ActionRunner


def build_context(url: str | None, *, insecure: bool = False) -> AppContext:
    """Build and return the application context.

    Args:
        url: Optional daemon URL overriding $MMUI_URL.
        insecure: Disable TLS certificate verification.

    Returns:
        AppContext: Context with a configured API adapter and an action
        runner that reports through ``out`` and invalidates the API cache.
    """
    try:
        config = get_config(url, verify_tls=False if insecure else None)
    except ClientConfigError as exc:
        die(str(exc), code=EXIT_USAGE)
    api = MigrationAPI(config)
    runner = ActionRunner(notifier=out, invalidate=api.cache.invalidate)
    return AppContext(config=config, api=api, runner=runner)
