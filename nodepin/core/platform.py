"""
Platform detection for nodepin.

Version managers behave differently per platform: nvm-windows is a real
executable answering ``nvm version``, while nvm-sh is a shell function that
only exists after ``nvm.sh`` has been sourced. This module detects the
platform and login shell and builds the shell descriptors and environment the
managers need.

Usage:
    from nodepin.core.platform import detect_platform

    info = detect_platform()
    print(f"{info.type} ({info.shell}), nvm at {info.nvm_dir}")
"""

import functools
import os
import platform
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Mapping, Optional


@dataclass(frozen=True)
class ShellExecutor:
    """
    Interpreter and flags used to run a script string.

    Attributes:
        command: Shell executable (e.g. '/bin/bash', 'cmd')
        args: Flags placed before the script (e.g. ['-c'], ['/c'])
    """

    command: str
    args: List[str]

    def argv(self, script: str) -> List[str]:
        """Full argument vector for running ``script``."""
        return [self.command, *self.args, script]


@dataclass(frozen=True)
class PlatformInfo:
    """
    Platform information relevant to Node version managers.

    Attributes:
        type: 'windows', 'macos' or 'linux'
        shell: 'cmd', 'powershell', 'git-bash', 'bash', 'zsh', 'fish' or 'sh'
        nvm_dir: nvm installation directory
        home_dir: User home directory
    """

    type: str
    shell: str
    nvm_dir: str
    home_dir: str

    def is_windows(self) -> bool:
        return self.type == "windows"

    def cache_suffix(self) -> str:
        """Platform family used in cache keys ('windows' or 'unix')."""
        return "windows" if self.is_windows() else "unix"

    def __str__(self) -> str:
        return f"{self.type} ({self.shell})"


@functools.lru_cache(maxsize=1)
def detect_platform() -> PlatformInfo:
    """
    Detect current platform information.

    This function is cached - it only runs detection once per process.

    Returns:
        PlatformInfo for the running system
    """
    return build_platform_info(platform.system(), os.environ, str(Path.home()))


def build_platform_info(
    system: str, environ: Mapping[str, str], home_dir: str
) -> PlatformInfo:
    """
    Build PlatformInfo from explicit inputs.

    Args:
        system: Value of ``platform.system()`` ('Windows', 'Darwin', 'Linux')
        environ: Environment variables
        home_dir: User home directory

    Returns:
        PlatformInfo instance
    """
    system = system.lower()

    if system == "windows":
        return PlatformInfo(
            type="windows",
            shell=_detect_windows_shell(environ),
            nvm_dir=environ.get("NVM_HOME")
            or environ.get("NVM_SYMLINK")
            or os.path.join(home_dir, "AppData", "Roaming", "nvm"),
            home_dir=home_dir,
        )

    return PlatformInfo(
        type="macos" if system == "darwin" else "linux",
        shell=_detect_unix_shell(environ),
        nvm_dir=environ.get("NVM_DIR") or os.path.join(home_dir, ".nvm"),
        home_dir=home_dir,
    )


def _detect_windows_shell(environ: Mapping[str, str]) -> str:
    shell = (environ.get("SHELL") or environ.get("ComSpec") or "").lower()

    if "powershell" in shell or "pwsh" in shell:
        return "powershell"
    if "bash" in shell or environ.get("MSYSTEM"):
        return "git-bash"
    return "cmd"


def _detect_unix_shell(environ: Mapping[str, str]) -> str:
    shell = environ.get("SHELL") or "/bin/sh"

    for name in ("zsh", "bash", "fish"):
        if name in shell:
            return name
    return "sh"


_UNIX_SHELL_PATHS = {
    "zsh": "/bin/zsh",
    "bash": "/bin/bash",
    "fish": "/usr/bin/fish",
    "sh": "/bin/sh",
}


def get_shell_executor(info: Optional[PlatformInfo] = None) -> ShellExecutor:
    """
    Get the non-interactive shell descriptor for the platform.

    Args:
        info: Platform to use. If None, detects current platform.

    Returns:
        ShellExecutor for running one-off scripts
    """
    info = info or detect_platform()

    if info.is_windows():
        if info.shell == "powershell":
            return ShellExecutor("powershell", ["-Command"])
        if info.shell == "git-bash":
            return ShellExecutor("bash", ["-c"])
        return ShellExecutor("cmd", ["/c"])

    return ShellExecutor(_UNIX_SHELL_PATHS.get(info.shell, "/bin/sh"), ["-c"])


def get_interactive_shell_executor(
    info: Optional[PlatformInfo] = None,
) -> ShellExecutor:
    """
    Get an interactive shell descriptor, so rc files that load nvm are read.

    Windows has no equivalent and gets the regular executor.

    Args:
        info: Platform to use. If None, detects current platform.

    Returns:
        ShellExecutor with interactive flags on Unix
    """
    info = info or detect_platform()

    if info.is_windows():
        return get_shell_executor(info)
    return ShellExecutor(_UNIX_SHELL_PATHS.get(info.shell, "/bin/sh"), ["-i", "-c"])


def build_nvm_init_command(info: Optional[PlatformInfo] = None) -> str:
    """
    Build the shell snippet that loads nvm-sh into a fresh shell.

    Args:
        info: Platform to use. If None, detects current platform.

    Returns:
        Init snippet, or an empty string on Windows
    """
    info = info or detect_platform()

    if info.is_windows():
        return ""

    nvm_script = os.path.join(info.nvm_dir, "nvm.sh")
    return f'export NVM_DIR="{info.nvm_dir}"; [ -s "{nvm_script}" ] && . "{nvm_script}"'


def build_nvm_environment(
    info: Optional[PlatformInfo] = None, environ: Optional[Mapping[str, str]] = None
) -> Dict[str, str]:
    """
    Build the environment for running nvm in a sub-shell.

    Args:
        info: Platform to use. If None, detects current platform.
        environ: Base environment. If None, uses ``os.environ``.

    Returns:
        Copy of the base environment with nvm variables set
    """
    info = info or detect_platform()
    env = dict(os.environ if environ is None else environ)

    if info.is_windows():
        env["NVM_HOME"] = info.nvm_dir
        env.setdefault("NVM_SYMLINK", os.path.join(info.nvm_dir, "nodejs"))
    else:
        env["NVM_DIR"] = info.nvm_dir

    return env


def clear_platform_cache():
    """
    Clear the platform detection cache.

    This forces the next call to detect_platform() to re-detect.
    """
    detect_platform.cache_clear()


__all__ = [
    "PlatformInfo",
    "ShellExecutor",
    "build_nvm_environment",
    "build_nvm_init_command",
    "build_platform_info",
    "clear_platform_cache",
    "detect_platform",
    "get_interactive_shell_executor",
    "get_shell_executor",
]
