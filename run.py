#!/usr/bin/env python3
"""
Start the Menu Lens backend with uvicorn.

    python run.py --env production --port 8080
    python run.py --create-sample staging
    python run.py --env development --issue-dev-token alice
"""

import argparse
import os
import sys
from typing import Optional

from app.config.loader import ConfigLoader, load_config_for_environment
from app.config.settings import Environment, Settings
from app.core.security import issue_token


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Menu Lens Backend Server")
    parser.add_argument(
        "--env",
        choices=[env.value for env in Environment],
        help="Environment to run (default: ENVIRONMENT env var or development)",
    )
    server = parser.add_argument_group("server overrides")
    server.add_argument("--host")
    server.add_argument("--port", type=int)
    server.add_argument("--workers", type=int)
    server.add_argument("--reload", action="store_true")
    server.add_argument("--debug", action="store_true")

    tools = parser.add_argument_group("configuration tools")
    tools.add_argument("--list-envs", action="store_true", help="List .env.<environment> files")
    tools.add_argument("--validate-env", metavar="ENV", help="Check an environment's configuration and exit")
    tools.add_argument("--create-sample", metavar="ENV", help="Write .env.<ENV>.sample and exit")
    tools.add_argument("--issue-dev-token", metavar="SUBJECT", help="Print a signed token for SUBJECT and exit")
    tools.add_argument("--token-minutes", type=int, default=60, help="Lifetime of --issue-dev-token tokens")
    return parser


def issue_dev_token(environment: Optional[str], subject: str, expires_minutes: int = 60) -> str:
    """Sign a token with the environment's shared secret for local testing."""
    try:
        settings = load_config_for_environment(environment)
    except ValueError as e:
        sys.exit(f"Failed to load configuration: {e}")

    security = settings.security
    if settings.is_production() or security.jwks_url:
        sys.exit("Development tokens are not issued for production or identity-provider keys")
    algorithm = (security.get_jwt_algorithms() or ["HS256"])[0]
    if not algorithm.startswith("HS") or not security.jwt_secret:
        sys.exit(f"Development tokens need a shared secret and an HS algorithm, not {algorithm}")
    return issue_token(security.jwt_secret, subject, expires_minutes=expires_minutes, algorithm=algorithm)


def run_config_tool(args: argparse.Namespace) -> bool:
    """Handle the configuration tools; returns True if one ran."""
    if args.list_envs:
        print("Environment files:", ", ".join(ConfigLoader.get_available_environments()) or "none")
        return True

    if args.validate_env:
        if not ConfigLoader.validate_environment_config(args.validate_env):
            sys.exit(f"Configuration for '{args.validate_env}' is invalid")
        print(f"Configuration for '{args.validate_env}' is valid")
        return True

    if args.create_sample:
        try:
            print(f"Wrote {ConfigLoader.create_sample_env_file(args.create_sample)}")
        except (OSError, ValueError) as e:
            sys.exit(f"Could not write sample configuration: {e}")
        return True

    if args.issue_dev_token:
        print(issue_dev_token(args.env, args.issue_dev_token, args.token_minutes))
        return True

    return False


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    overrides = {
        name: value
        for name, value in (("host", args.host), ("port", args.port), ("workers", args.workers))
        if value
    }
    if args.reload:
        overrides["reload"] = True
    if args.debug:
        overrides["debug"] = True
        # the server process reads its own settings
        os.environ["DEBUG"] = "true"
    return settings.model_copy(update=overrides)


def main():
    args = build_parser().parse_args()
    if run_config_tool(args):
        return

    try:
        settings = apply_overrides(load_config_for_environment(args.env), args)
    except ValueError as e:
        sys.exit(f"Failed to load configuration: {e}")

    env = settings.environment.value
    if not ConfigLoader.validate_environment_config(env):
        sys.exit(f"Configuration for '{env}' is invalid")
    os.environ["ENVIRONMENT"] = env

    print(
        f"Starting {settings.app_name} v{settings.app_version} ({env}) on "
        f"{settings.host}:{settings.port}, workers={settings.workers}, reload={settings.reload}"
    )

    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        workers=1 if settings.reload else settings.workers,
        log_level=settings.log_level.value.lower(),
    )


if __name__ == "__main__":
    main()
