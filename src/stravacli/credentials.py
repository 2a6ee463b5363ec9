#!/usr/bin/env python3
"""
Helper for saving a Strava access token to a .env file.
"""

from pathlib import Path

from dotenv import set_key

from .constants import ACCESS_TOKEN_ENV_VAR

__all__ = ["save_access_token"]


def _read_gitignore(gitignore_path: Path) -> str:
    if not gitignore_path.exists():
        return ""
    with open(gitignore_path, "r", encoding="utf-8") as f:
        return f.read()


def _offer_gitignore(env_path: Path) -> None:
    """Ask to list the token file in the .gitignore next to it."""
    gitignore_path = env_path.parent / ".gitignore"
    content = _read_gitignore(gitignore_path)
    patterns = {line.strip() for line in content.splitlines()}
    if {env_path.name, f"/{env_path.name}"} & patterns:
        return

    where = "your .gitignore" if gitignore_path.exists() else "a new .gitignore"
    response = input(f"\n{env_path.name} holds your access token. Add it to {where}? (y/n): ")
    if response.strip().lower() not in ("y", "yes"):
        return

    prefix = "\n" if content and not content.endswith("\n") else ""
    with open(gitignore_path, "a", encoding="utf-8") as f:
        f.write(f"{prefix}# Strava access token\n{env_path.name}\n")
    print(f"✅ Added {env_path.name} to {gitignore_path}")


def save_access_token(token: str, env_path: str = ".env", check_gitignore: bool = True) -> Path:
    """Store ``token`` as STRAVA_ACCESS_TOKEN in ``env_path``.

    Other entries in an existing file are kept. The file is made readable by
    the owner only.

    Returns:
        Path of the .env file.
    """
    path = Path(env_path)
    path.touch(mode=0o600, exist_ok=True)
    set_key(str(path), ACCESS_TOKEN_ENV_VAR, token)

    # Set restrictive permissions
    path.chmod(0o600)

    print(f"\n✅ Access token saved to {path.absolute()}")
    print("   Commands will pick it up when --access_token is not given.")

    if check_gitignore:
        _offer_gitignore(path)
    return path
