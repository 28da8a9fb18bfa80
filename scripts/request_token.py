#!/usr/bin/env python3
"""
Manually exercise the runtime SPI adapter against a deployed backend.

Reads APIGEE_RUNTIME_URI and APIGEE_RUNTIME_KEY (a .env file works) and
runs one operation, printing the result.
"""

import argparse
import asyncio
import json
import sys

from dotenv import load_dotenv

from runtime_spi.config import get_adapter_config
from runtime_spi.core.domain import (
    AuthorizationCodeRedirectRequest,
    AuthorizationCodeTokenRequest,
    ClientCredentialsRequest,
    ImplicitGrantRequest,
    InvalidateTokenRequest,
    PasswordCredentialsRequest,
    RefreshTokenRequest,
    TokenResult,
)
from runtime_spi.core.exceptions import AdapterError
from runtime_spi.core.ports import RuntimeSPI
from runtime_spi.infrastructure.apigee_runtime import ApigeeRuntimeAdapter
from runtime_spi.logging_config import setup_global_logging

# Load environment variables from .env file
load_dotenv()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Call the Apigee runtime SPI.")
    parser.add_argument(
        "operation",
        choices=[
            "client",
            "password",
            "authcode",
            "exchange",
            "implicit",
            "refresh",
            "invalidate",
        ],
    )
    parser.add_argument("--client-id", required=True)
    parser.add_argument("--client-secret", default="")
    parser.add_argument("--scope")
    parser.add_argument("--username")
    parser.add_argument("--password")
    parser.add_argument("--redirect-uri")
    parser.add_argument("--state")
    parser.add_argument("--code", help="Authorization code to exchange")
    parser.add_argument("--refresh-token")
    parser.add_argument("--access-token")
    parser.add_argument("--token-lifetime", type=int, help="Lifetime in milliseconds")
    return parser


async def run(args: argparse.Namespace) -> None:
    adapter: RuntimeSPI = ApigeeRuntimeAdapter.from_config(get_adapter_config())

    if args.operation == "client":
        result = await adapter.create_token_client_credentials(
            ClientCredentialsRequest(
                client_id=args.client_id,
                client_secret=args.client_secret,
                scope=args.scope,
                token_lifetime=args.token_lifetime,
            )
        )
    elif args.operation == "password":
        result = await adapter.create_token_password_credentials(
            PasswordCredentialsRequest(
                client_id=args.client_id,
                client_secret=args.client_secret,
                username=args.username or "",
                password=args.password or "",
                scope=args.scope,
                token_lifetime=args.token_lifetime,
            )
        )
    elif args.operation == "authcode":
        result = await adapter.generate_authorization_code(
            AuthorizationCodeRedirectRequest(
                client_id=args.client_id,
                redirect_uri=args.redirect_uri,
                scope=args.scope,
                state=args.state,
            )
        )
    elif args.operation == "exchange":
        result = await adapter.create_token_authorization_code(
            AuthorizationCodeTokenRequest(
                client_id=args.client_id,
                client_secret=args.client_secret,
                code=args.code or "",
                redirect_uri=args.redirect_uri,
                token_lifetime=args.token_lifetime,
            )
        )
    elif args.operation == "implicit":
        result = await adapter.create_token_implicit_grant(
            ImplicitGrantRequest(
                client_id=args.client_id,
                redirect_uri=args.redirect_uri,
                scope=args.scope,
                state=args.state,
            )
        )
    elif args.operation == "refresh":
        result = await adapter.refresh_token(
            RefreshTokenRequest(
                client_id=args.client_id,
                client_secret=args.client_secret,
                refresh_token=args.refresh_token or "",
                scope=args.scope,
            )
        )
    else:
        result = await adapter.invalidate_token(
            InvalidateTokenRequest(
                client_id=args.client_id,
                client_secret=args.client_secret,
                refresh_token=args.refresh_token,
                access_token=args.access_token,
            )
        )

    if isinstance(result, TokenResult):
        print(json.dumps(result.to_oauth_response(), indent=2))
    else:
        print(result)


def main():
    setup_global_logging()
    args = build_parser().parse_args()

    try:
        asyncio.run(run(args))
    except AdapterError as e:
        print(f"Error ({e.status_code}): {e.message}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
