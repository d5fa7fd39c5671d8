"""
Tests for platform detection and nvm shell helpers.
"""

from unittest.mock import patch

from nodepin.core.platform import (
    PlatformInfo,
    ShellExecutor,
    build_nvm_environment,
    build_nvm_init_command,
    build_platform_info,
    detect_platform,
    get_interactive_shell_executor,
    get_shell_executor,
)


class TestBuildPlatformInfo:
    """Test platform info construction from explicit inputs."""

    def test_linux_defaults(self):
        info = build_platform_info("Linux", {"SHELL": "/usr/bin/zsh"}, "/home/dev")

        assert info.type == "linux"
        assert info.shell == "zsh"
        assert info.nvm_dir == "/home/dev/.nvm"
        assert info.cache_suffix() == "unix"
        assert not info.is_windows()

    def test_macos(self):
        info = build_platform_info("Darwin", {}, "/Users/dev")

        assert info.type == "macos"
        assert info.shell == "sh"

    def test_nvm_dir_from_environment(self):
        info = build_platform_info(
            "Linux", {"NVM_DIR": "/opt/nvm", "SHELL": "/bin/bash"}, "/home/dev"
        )

        assert info.nvm_dir == "/opt/nvm"
        assert info.shell == "bash"

    def test_windows(self):
        info = build_platform_info(
            "Windows",
            {"ComSpec": "C:\\Windows\\system32\\cmd.exe", "NVM_HOME": "C:\\nvm"},
            "C:\\Users\\dev",
        )

        assert info.type == "windows"
        assert info.shell == "cmd"
        assert info.nvm_dir == "C:\\nvm"
        assert info.cache_suffix() == "windows"

    def test_windows_powershell(self):
        info = build_platform_info(
            "Windows", {"SHELL": "C:\\Program Files\\PowerShell\\pwsh.exe"}, "C:\\u"
        )
        assert info.shell == "powershell"

    def test_windows_git_bash(self):
        info = build_platform_info("Windows", {"MSYSTEM": "MINGW64"}, "C:\\u")
        assert info.shell == "git-bash"


class TestDetectPlatform:
    """Test memoised detection."""

    def test_detection_is_cached(self):
        with patch(
            "nodepin.core.platform.build_platform_info",
            return_value=PlatformInfo("linux", "bash", "/n", "/h"),
        ) as build:
            first = detect_platform()
            second = detect_platform()

        assert first is second
        assert build.call_count == 1


class TestShellExecutors:
    """Test shell descriptors."""

    def test_unix_executor(self, linux_platform):
        executor = get_shell_executor(linux_platform)

        assert executor == ShellExecutor("/bin/bash", ["-c"])
        assert executor.argv("echo hi") == ["/bin/bash", "-c", "echo hi"]

    def test_windows_cmd_executor(self, windows_platform):
        assert get_shell_executor(windows_platform) == ShellExecutor("cmd", ["/c"])

    def test_interactive_executor(self, linux_platform):
        executor = get_interactive_shell_executor(linux_platform)
        assert executor.args == ["-i", "-c"]

    def test_interactive_falls_back_on_windows(self, windows_platform):
        assert get_interactive_shell_executor(windows_platform) == ShellExecutor(
            "cmd", ["/c"]
        )


class TestNvmHelpers:
    """Test nvm init command and environment."""

    def test_init_command_sources_nvm_sh(self, linux_platform):
        command = build_nvm_init_command(linux_platform)

        assert 'export NVM_DIR="/home/dev/.nvm"' in command
        assert '. "/home/dev/.nvm/nvm.sh"' in command

    def test_init_command_empty_on_windows(self, windows_platform):
        assert build_nvm_init_command(windows_platform) == ""

    def test_unix_environment(self, linux_platform):
        env = build_nvm_environment(linux_platform, {"PATH": "/usr/bin"})

        assert env == {"PATH": "/usr/bin", "NVM_DIR": "/home/dev/.nvm"}

    def test_windows_environment(self, windows_platform):
        env = build_nvm_environment(windows_platform, {})

        assert env["NVM_HOME"] == windows_platform.nvm_dir
        assert env["NVM_SYMLINK"].endswith("nodejs")

    def test_environment_is_a_copy(self, linux_platform):
        base = {"PATH": "/usr/bin"}
        build_nvm_environment(linux_platform, base)
        assert base == {"PATH": "/usr/bin"}
