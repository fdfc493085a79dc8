"""Command handlers for the varset CLI."""

import argparse
import logging
import os
import shlex
import shutil
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path

from config import Settings
from core import (
    EnvLoader,
    NotFoundError,
    PermissionDeniedError,
    PermissionStore,
    ProfileStore,
    ValidationError,
    parse_config,
    safe_read_file,
    validate_directory,
    validate_file,
    validate_variable_name,
    validate_variable_value,
)
from core.constants import ExitCode, PRIVATE_FILE_MODE

from . import __version__
from .formatters import (
    EXPORT_FORMATS,
    compare_variables,
    format_diff,
    format_diff_summary,
    format_envrc,
    format_shell,
)
from .hooks import generate_hook

logger = logging.getLogger(__name__)

DEFAULT_EDITOR = "vi"


@dataclass
class Context:
    """Objects shared by all commands of one invocation."""

    settings: Settings
    permissions: PermissionStore
    profiles: ProfileStore
    loader: EnvLoader
    cwd: Path

    @classmethod
    def create(cls, settings: Settings, cwd: Path | None = None) -> "Context":
        permissions = PermissionStore(settings)
        profiles = ProfileStore(settings)
        return cls(
            settings=settings,
            permissions=permissions,
            profiles=profiles,
            loader=EnvLoader(settings, permissions, profiles),
            cwd=cwd or Path.cwd(),
        )

    def envrc_path(self, path: str | None) -> Path:
        """The given path, or the .envrc of the current directory."""
        return Path(path) if path else self.cwd / self.settings.envrc_filename

    def display_path(self, path: str) -> str:
        home = str(self.settings.home_dir)
        if path == home or path.startswith(home.rstrip("/") + "/"):
            return "~" + path[len(home.rstrip("/")):]
        return path


def handle_allow(args: argparse.Namespace, ctx: Context) -> int:
    canonical = ctx.permissions.grant(ctx.envrc_path(args.path))
    print(f"✓ Allowed: {canonical}")
    return ExitCode.SUCCESS


def handle_deny(args: argparse.Namespace, ctx: Context) -> int:
    canonical = ctx.permissions.revoke(ctx.envrc_path(args.path))
    print(f"✗ Denied: {canonical}")
    return ExitCode.SUCCESS


def handle_prune(args: argparse.Namespace, ctx: Context) -> int:
    removed = ctx.permissions.prune()
    if removed:
        print(f"Pruned {removed} stale entries")
    else:
        print("No stale entries to prune")
    return ExitCode.SUCCESS


def _variable_names(path: str, max_depth: int) -> list[str]:
    try:
        return sorted(parse_config(safe_read_file(path), source=path, max_depth=max_depth))
    except (OSError, UnicodeDecodeError, ValidationError) as e:
        logger.warning("Cannot read %s: %s", path, e)
        return []


def handle_list(args: argparse.Namespace, ctx: Context) -> int:
    entries = ctx.permissions.entries()
    if not entries:
        print("No .envrc files tracked yet.")
        print("Use 'varset allow <file>' to track .envrc files.")
        return ExitCode.SUCCESS

    active: list[tuple[str, list[str]]] = []
    denied: list[tuple[str, bool]] = []
    missing: list[str] = []

    for path, entry in sorted(entries.items()):
        exists = os.path.isfile(path)
        if not entry.allowed:
            denied.append((path, exists))
        elif exists:
            active.append((path, _variable_names(path, ctx.settings.max_interpolation_depth)))
        else:
            missing.append(path)

    if active:
        print("\nActive .envrc files (loaded):")
        for path, names in active:
            noun = "variable" if len(names) == 1 else "variables"
            print(f"  {ctx.display_path(path)} (✓ allowed, {len(names)} {noun})")
            for name in names:
                print(f"    - {name}")

    if denied:
        print("\nDenied .envrc files:")
        for path, exists in denied:
            suffix = "" if exists else " (file not found)"
            print(f"  {ctx.display_path(path)} (✗ denied){suffix}")

    if missing:
        print("\nMissing .envrc files (stale):")
        for path in missing:
            print(f"  {ctx.display_path(path)} (file not found)")

    total = sum(len(names) for _, names in active)
    print(
        f"\nSummary: {len(active)} active, {len(denied)} denied, {len(missing)} missing "
        f"({total} total variables loaded)"
    )
    return ExitCode.SUCCESS


def handle_reload(args: argparse.Namespace, ctx: Context) -> int:
    variables = ctx.loader.load_upward(ctx.cwd)
    for key, value in variables.items():
        validate_variable_name(key)
        validate_variable_value(value)
    sys.stdout.write(format_shell(variables))
    return ExitCode.SUCCESS


def handle_export(args: argparse.Namespace, ctx: Context) -> int:
    variables = ctx.loader.load_upward(ctx.cwd)
    sys.stdout.write(EXPORT_FORMATS[args.format](variables))
    return ExitCode.SUCCESS


def _run_command(command: list[str], env: dict[str, str] | None = None) -> int:
    """Run a child process and return its exit status."""
    try:
        return subprocess.run(command, env=env, check=False).returncode
    except PermissionError as e:
        raise PermissionDeniedError(f"Cannot execute {command[0]}: {e.strerror}") from e


def handle_exec(args: argparse.Namespace, ctx: Context) -> int:
    directory = validate_directory(args.directory)

    executable = shutil.which(args.cmd)
    if executable is None:
        raise NotFoundError("Command", args.cmd)

    env = dict(os.environ)
    env.update(ctx.loader.load_single(directory))

    logger.debug("Running %s in environment of %s", shlex.join([args.cmd, *args.args]), directory)
    return _run_command([executable, *args.args], env=env)


def handle_use(args: argparse.Namespace, ctx: Context) -> int:
    if args.clear:
        if ctx.profiles.clear_active(ctx.cwd):
            print(f"✓ Active profile cleared for {ctx.cwd}")
        else:
            print("No active profile")
        return ExitCode.SUCCESS

    if not args.profile:
        active = ctx.profiles.get_active(ctx.cwd)
        print(f"Active profile: {active}" if active else "No active profile")
        return ExitCode.SUCCESS

    profile_file = ctx.profiles.profile_file(ctx.cwd, args.profile)
    canonical = ctx.profiles.set_active(ctx.cwd, args.profile)
    if not profile_file.exists():
        logger.warning("%s does not exist at %s", profile_file.name, ctx.cwd)
    print(f"✓ Active profile set to '{args.profile}' for {canonical}")
    return ExitCode.SUCCESS


def _read_variables(path: str, ctx: Context) -> dict[str, str]:
    validate_file(path)
    try:
        content = safe_read_file(path)
    except (OSError, UnicodeDecodeError) as e:
        raise ValidationError(f"Cannot read {path}: {e}") from e
    return parse_config(content, source=path, max_depth=ctx.settings.max_interpolation_depth)


def handle_diff(args: argparse.Namespace, ctx: Context) -> int:
    color = sys.stdout.isatty()

    if args.preview:
        target = Path(args.files[0]) if args.files else ctx.cwd
        validate_directory(target)
        diff = compare_variables(ctx.loader.load_upward(ctx.cwd), ctx.loader.load_upward(target))
        print(f"\nVariable changes when entering: {target}\n")
    else:
        if len(args.files) != 2:
            raise ValidationError("Usage: varset diff <file1> <file2> or varset diff --preview [directory]")
        first, second = (os.path.abspath(path) for path in args.files)
        diff = compare_variables(_read_variables(first, ctx), _read_variables(second, ctx))
        print(f"\nComparing: {first}")
        print(f"       vs: {second}\n")

    print(format_diff(diff, color=color))
    print(format_diff_summary(diff, color=color))
    return ExitCode.SUCCESS


def handle_import(args: argparse.Namespace, ctx: Context) -> int:
    target = ctx.envrc_path(args.target)
    imported = _read_variables(args.source, ctx)

    existing: dict[str, str] = {}
    if target.exists():
        existing = _read_variables(str(target), ctx)

    merged = {**existing, **imported}
    target.write_text(format_envrc(merged), encoding="utf-8")
    print(f"Imported {len(imported)} variables from {args.source} to {target}")
    return ExitCode.SUCCESS


def handle_edit(args: argparse.Namespace, ctx: Context) -> int:
    path = ctx.envrc_path(args.path)
    editor = os.environ.get("EDITOR") or DEFAULT_EDITOR
    command = shlex.split(editor)
    if not command or len(editor) > 1024:
        raise ValidationError("Invalid EDITOR environment variable")

    if not path.exists():
        path.touch()
        os.chmod(path, PRIVATE_FILE_MODE)

    return _run_command([*command, str(path)])


def handle_hook(args: argparse.Namespace, ctx: Context) -> int:
    executable = shutil.which("varset") or os.path.abspath(sys.argv[0])
    print(generate_hook(args.shell, executable))
    return ExitCode.SUCCESS


def handle_version(args: argparse.Namespace, ctx: Context) -> int:
    print(f"varset {__version__}")
    return ExitCode.SUCCESS
