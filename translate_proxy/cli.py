"""
Command line entry point: builds the settings and starts the server.

Usage:
    translate-proxy                                 # default config file, localhost:8080
    translate-proxy --address 0.0.0.0:9000          # listen elsewhere
    translate-proxy --config-file ./proxy.json      # externally managed config (never rewritten)

Environment variables (also read from .env):
    TRANSLATE_PROXY_CONFIG_FILE, TRANSLATE_PROXY_ADDRESS,
    TRANSLATE_PROXY_NEW_FOLDER_NAME, TRANSLATE_PROXY_LOG_LEVEL
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv

from .config import (
    APP_NAME,
    CLOUDS_URL,
    DEFAULT_ADDRESS,
    DEFAULT_NEW_FOLDER_NAME,
    FOLDERS_URL,
    IAM_TOKEN_URL,
    OAUTH_TOKEN_URL,
    TRANSLATE_URL,
    ProxySettings,
    default_config_file,
    parse_address,
)
from .errors import TranslateProxyError

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Local proxy for Yandex Cloud Translate",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--config-file",
        default=os.getenv("TRANSLATE_PROXY_CONFIG_FILE", ""),
        help="Configuration file (default: ~/.config/translate-proxy/config.json)",
    )
    parser.add_argument(
        "--new-folder-name",
        default=os.getenv("TRANSLATE_PROXY_NEW_FOLDER_NAME", DEFAULT_NEW_FOLDER_NAME),
        help="New cloud folder name",
    )
    parser.add_argument(
        "--all-folders",
        action="store_true",
        help="Don't explore only active cloud folders",
    )
    parser.add_argument("--oauth-token-url", default=OAUTH_TOKEN_URL, help="OAuth token URL")
    parser.add_argument("--iam-token-url", default=IAM_TOKEN_URL, help="IAM token URL")
    parser.add_argument("--clouds-url", default=CLOUDS_URL, help="Yandex Clouds URL")
    parser.add_argument(
        "--cloud-folders-url", default=FOLDERS_URL, help="Yandex Cloud folders URL"
    )
    parser.add_argument(
        "--translate-url", default=TRANSLATE_URL, help="Yandex Translate API URL"
    )
    parser.add_argument(
        "--address",
        default=os.getenv("TRANSLATE_PROXY_ADDRESS", DEFAULT_ADDRESS),
        help="http server address",
    )
    parser.add_argument(
        "--insecure", action="store_true", help="disable server certs verifying"
    )
    parser.add_argument("--accesslog", action="store_true", help="enable access log")
    parser.add_argument("--tls-cert-file", default="", help="tls cert file")
    parser.add_argument("--tls-key-file", default="", help="tls key file")
    parser.add_argument(
        "--debug",
        action="store_true",
        help="debug logging, including translate payloads",
    )
    return parser


def settings_from_args(args: argparse.Namespace) -> ProxySettings:
    """
    Build settings from parsed arguments.

    Raises:
        ValueError: If the listen address is malformed
    """
    writeable_config = not args.config_file
    host, port = parse_address(args.address)
    return ProxySettings(
        config_file=args.config_file or default_config_file(),
        writeable_config=writeable_config,
        new_folder_name=args.new_folder_name,
        all_folders=args.all_folders,
        oauth_token_url=args.oauth_token_url,
        iam_token_url=args.iam_token_url,
        clouds_url=args.clouds_url,
        folders_url=args.cloud_folders_url,
        translate_url=args.translate_url,
        host=host,
        port=port,
        insecure=args.insecure,
        access_log=args.accesslog,
        tls_cert_file=args.tls_cert_file or None,
        tls_key_file=args.tls_key_file or None,
        log_payloads=args.debug,
    )


def configure_logging(debug: bool = False) -> None:
    level_name = "DEBUG" if debug else os.getenv("TRANSLATE_PROXY_LOG_LEVEL", "INFO")
    logging.basicConfig(
        level=getattr(logging, level_name.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.debug)

    try:
        settings = settings_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    from .main import build_context, create_app

    try:
        context = build_context(settings)
    except TranslateProxyError as e:
        logger.error(f"Startup failed: {e}")
        return 1

    app = create_app(context)

    import uvicorn

    scheme = "https" if settings.tls_enabled else "http"
    logger.info(f"Start listening {scheme}://{settings.host}:{settings.port}")
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        ssl_certfile=settings.tls_cert_file if settings.tls_enabled else None,
        ssl_keyfile=settings.tls_key_file if settings.tls_enabled else None,
        access_log=settings.access_log,
        log_level="debug" if args.debug else "info",
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
