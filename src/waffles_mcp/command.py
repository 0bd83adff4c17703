"""Waffles command builder.

Command format:
    waffles.sh \
      -s {host} \
      -r {role} \
      [-d] \
      [-k {private_key}] \
      [-z {remote_dir}] \
      [-c {retry}] \
      [-y] \
      [-u {user}] \
      [-w {wait}]

with WAFFLES_SITE_DIR={site_directory} in the environment.
"""

from __future__ import annotations

from .runtime.process_runner import InvocationSpec
from .schema import DEFAULT_WAFFLES_EXEC, WafflesConfig

__all__ = ["SITE_DIR_ENV", "build_flags", "build_invocation"]

# Environment variable waffles.sh reads the site directory from
SITE_DIR_ENV = "WAFFLES_SITE_DIR"


def build_flags(config: WafflesConfig) -> list[str]:
    """Build the waffles.sh flag list."""
    # required flags
    flags = ["-s", config.host, "-r", config.role]

    # optional flags
    if config.debug:
        flags.append("-d")

    if config.private_key:
        flags.extend(["-k", config.private_key])

    if config.remote_dir:
        flags.extend(["-z", config.remote_dir])

    if config.retry != 0:
        flags.extend(["-c", str(config.retry)])

    if config.sudo:
        flags.append("-y")

    if config.user:
        flags.extend(["-u", config.user])

    if config.wait != 0:
        flags.extend(["-w", str(config.wait)])

    return flags


def build_invocation(config: WafflesConfig) -> InvocationSpec:
    """Map a decoded configuration to the invocation that runs waffles."""
    return InvocationSpec(
        program=config.waffles_exec or DEFAULT_WAFFLES_EXEC,
        args=tuple(build_flags(config)),
        env={SITE_DIR_ENV: config.site_directory},
    )
