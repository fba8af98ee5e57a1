"""
Main FastAPI application for translate-proxy.
"""

import copy
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import APP_NAME, APP_VERSION, ProxySettings
from .errors import CredentialStoreError, TranslateProxyError
from .routes import translate_router
from .services.auth import (
    CredentialStore,
    StoredConfig,
    TokenManager,
    ensure_oauth_token,
)
from .services.cloud_client import CloudClient
from .services.folder_resolver import FolderResolver, ResolvedScope
from .services.prompt import ConsolePrompter, Prompter
from .services.request_executor import HttpSession, RequestExecutor
from .services.translate_client import TranslationGateway

logger = logging.getLogger(__name__)


@dataclass
class ProxyContext:
    """Everything the proxy needs at runtime, wired once at startup."""

    settings: ProxySettings
    store: CredentialStore
    config: StoredConfig
    token_manager: TokenManager
    resolver: FolderResolver
    gateway: TranslationGateway
    prompter: Prompter


def build_context(
    settings: ProxySettings,
    prompter: Optional[Prompter] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ProxyContext:
    """
    Load the config file and wire the services.

    Args:
        settings: Startup settings
        prompter: Interactive input capability; console when None
        transport: Optional httpx transport for upstream calls

    Raises:
        CredentialStoreError: If the config file cannot be read
    """
    prompter = prompter or ConsolePrompter()
    store = CredentialStore(settings.config_file)
    config = store.load()

    http = HttpSession(
        timeout=settings.request_timeout,
        verify=not settings.insecure,
        transport=transport,
    )
    token_manager = TokenManager(
        config,
        http,
        settings.iam_token_url,
        store=store,
        persist_on_refresh=settings.writeable_config,
    )
    executor = RequestExecutor(http, token_manager)
    resolver = FolderResolver(
        CloudClient(executor, settings.clouds_url, settings.folders_url),
        prompter,
        new_folder_name=settings.new_folder_name,
        all_folders=settings.all_folders,
    )
    gateway = TranslationGateway(
        executor, settings.translate_url, log_payloads=settings.log_payloads
    )
    return ProxyContext(
        settings=settings,
        store=store,
        config=config,
        token_manager=token_manager,
        resolver=resolver,
        gateway=gateway,
        prompter=prompter,
    )


async def bootstrap(context: ProxyContext) -> ResolvedScope:
    """
    One-time startup: check the OAuth token, resolve the folder and rewrite
    the config file if the process owns it and something changed.
    """
    loaded_config = copy.deepcopy(context.config)

    await ensure_oauth_token(
        context.token_manager, context.prompter, context.settings.oauth_token_url
    )

    scope = await context.resolver.resolve(context.config.folder_id or None)
    context.config.folder_id = scope.folder_id
    context.gateway.scope = scope

    if context.settings.writeable_config and context.config != loaded_config:
        try:
            context.store.save(context.config)
            logger.info(f"Config saved to {context.store.path}")
        except CredentialStoreError as e:
            logger.error(f"Could not write config file: {e}")

    return scope


API_DESCRIPTION = """
**translate-proxy** is a local proxy for Yandex Cloud Translate.

It keeps the cloud credentials to itself: the OAuth token is exchanged for
short-lived IAM tokens, which are refreshed automatically, and requests run
under a folder selected once at startup.
"""


def create_app(context: ProxyContext) -> FastAPI:
    """Create the FastAPI application; startup resolution runs in the lifespan."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting translate proxy...")
        if context.gateway.scope is None:
            try:
                await bootstrap(context)
            except TranslateProxyError as e:
                logger.error(f"Startup failed: {e}")
                raise
        logger.info(f"Translating in folder {context.gateway.folder_id}")
        yield
        logger.info("Shutting down...")

    app = FastAPI(
        title=APP_NAME,
        version=APP_VERSION,
        description=API_DESCRIPTION,
        lifespan=lifespan,
        redoc_url=None,
    )
    app.state.context = context
    app.state.gateway = context.gateway

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["Content-Type"],
    )

    app.include_router(translate_router)
    return app
