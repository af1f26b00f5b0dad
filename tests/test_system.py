"""
Tests for the host tool wrappers in puckforge.utils.
"""

import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from puckforge.exceptions import CommandError, DependencyInstallError, InstallError
from puckforge.utils.steamcmd import SteamCMD
from puckforge.utils.system import (
    AccountManager, AptManager, CommandRunner, SwapManager, SystemdManager, SystemInfo
)

from conftest import RecordingRunner


class TestCommandRunner:

    def test_successful_command(self):
        result = CommandRunner().run([sys.executable, "-c", "print('ok')"], capture_output=True)

        assert result.returncode == 0
        assert result.stdout.strip() == "ok"

    def test_failure_raises_with_returncode(self):
        with pytest.raises(CommandError) as excinfo:
            CommandRunner().run([sys.executable, "-c", "import sys; sys.exit(3)"])

        assert excinfo.value.returncode == 3
        assert excinfo.value.exit_code == 3

    def test_failure_uses_requested_error_class(self):
        with pytest.raises(InstallError) as excinfo:
            CommandRunner().run(
                [sys.executable, "-c", "import sys; sys.exit(8)"],
                error_cls=InstallError,
            )

        # Download failures always exit with 1
        assert excinfo.value.exit_code == 1

    def test_signal_exit_maps_to_shell_status(self):
        with pytest.raises(CommandError) as excinfo:
            CommandRunner().run([sys.executable, "-c", "import os, signal; os.kill(os.getpid(), signal.SIGTERM)"])

        assert excinfo.value.returncode == -15
        assert excinfo.value.exit_code == 143

    def test_missing_executable(self):
        with pytest.raises(CommandError) as excinfo:
            CommandRunner().run(["/nonexistent/puckforge-tool"])

        assert excinfo.value.returncode == 127

    def test_input_is_passed_on_stdin(self):
        result = CommandRunner().run(
            [sys.executable, "-c", "import sys; print(sys.stdin.read().upper())"],
            input_text="steam",
            capture_output=True,
        )

        assert result.stdout.strip() == "STEAM"

    def test_dry_run_does_not_execute_or_write(self, tmp_path):
        runner = CommandRunner(dry_run=True)
        target = tmp_path / "nested" / "file.txt"

        result = runner.run([sys.executable, "-c", "import sys; sys.exit(1)"])
        runner.make_directory(tmp_path / "nested")
        runner.write_file(target, "content")
        runner.append_line(tmp_path / "fstab", "line")

        assert result.returncode == 0
        assert not (tmp_path / "nested").exists()
        assert not (tmp_path / "fstab").exists()

    def test_append_line(self, tmp_path):
        fstab = tmp_path / "fstab"
        fstab.write_text("UUID=abc / ext4 defaults 0 1\n")

        CommandRunner().append_line(fstab, "/swapfile none swap sw 0 0")

        assert fstab.read_text().splitlines()[-1] == "/swapfile none swap sw 0 0"


class TestAptManager:

    def test_install_runs_noninteractive(self):
        runner = RecordingRunner()

        AptManager(runner).install("steamcmd")

        assert runner.commands == [["apt", "install", "-y", "steamcmd"]]

    def test_failure_is_dependency_error(self):
        runner = RecordingRunner(failures={"apt": 100})

        with pytest.raises(DependencyInstallError) as excinfo:
            AptManager(runner).update()

        assert excinfo.value.exit_code == 100

    def test_preseed_pipes_each_selection(self):
        runner = RecordingRunner()

        AptManager(runner).preseed(["a b c", "d e f"])

        assert runner.commands == [["debconf-set-selections"]] * 2
        assert runner.inputs == ["a b c\n", "d e f\n"]

    def test_repository_and_architecture(self):
        runner = RecordingRunner()
        apt = AptManager(runner)

        apt.add_repository("non-free")
        apt.add_architecture("i386")

        assert runner.commands == [
            ["apt-add-repository", "-y", "non-free"],
            ["dpkg", "--add-architecture", "i386"],
        ]


class TestSwapManager:

    @pytest.fixture
    def proc_swaps(self, tmp_path):
        path = tmp_path / "swaps"
        path.write_text("Filename\tType\tSize\tUsed\tPriority\n")
        return path

    def _manager(self, runner, tmp_path, proc_swaps):
        return SwapManager(
            runner,
            tmp_path / "swapfile",
            500,
            fstab_path=tmp_path / "fstab",
            proc_swaps_path=proc_swaps,
        )

    def test_provision_new_swapfile(self, tmp_path, proc_swaps):
        runner = RecordingRunner()
        swapfile = tmp_path / "swapfile"

        created = self._manager(runner, tmp_path, proc_swaps).provision()

        assert created is True
        assert runner.commands == [
            ["fallocate", "-l", "500M", str(swapfile)],
            ["chmod", "600", str(swapfile)],
            ["mkswap", str(swapfile)],
            ["swapon", str(swapfile)],
        ]
        assert (tmp_path / "fstab").read_text() == f"{swapfile} none swap sw 0 0\n"

    def test_falls_back_to_dd(self, tmp_path, proc_swaps):
        runner = RecordingRunner(failures={"fallocate": 1})

        self._manager(runner, tmp_path, proc_swaps).provision()

        assert runner.executables()[:3] == ["fallocate", "dd", "chmod"]
        assert "count=500" in runner.commands[1]

    def test_active_swapfile_is_left_alone(self, tmp_path, proc_swaps):
        swapfile = tmp_path / "swapfile"
        proc_swaps.write_text(
            "Filename\tType\tSize\tUsed\tPriority\n"
            f"{swapfile}\tfile\t511996\t0\t-2\n"
        )
        (tmp_path / "fstab").write_text(f"{swapfile} none swap sw 0 0\n")
        runner = RecordingRunner()

        created = self._manager(runner, tmp_path, proc_swaps).provision()

        assert created is False
        assert runner.commands == []
        assert (tmp_path / "fstab").read_text().count("swap sw") == 1

    def test_active_swapfile_with_space_in_path(self, tmp_path, proc_swaps):
        swapfile = tmp_path / "swap file"
        escaped = str(swapfile).replace(" ", "\\040")
        proc_swaps.write_text(
            "Filename\tType\tSize\tUsed\tPriority\n"
            f"{escaped}\tfile\t511996\t0\t-2\n"
        )
        runner = RecordingRunner()
        manager = SwapManager(
            runner, swapfile, 500,
            fstab_path=tmp_path / "fstab", proc_swaps_path=proc_swaps,
        )

        created = manager.provision()
        manager.provision()

        assert created is False
        assert runner.commands == []
        assert (tmp_path / "fstab").read_text() == f"{escaped} none swap sw 0 0\n"

    def test_fstab_entry_not_duplicated(self, tmp_path, proc_swaps):
        swapfile = tmp_path / "swapfile"
        (tmp_path / "fstab").write_text(f"# comment\n{swapfile} none swap sw 0 0\n")

        self._manager(RecordingRunner(), tmp_path, proc_swaps).provision()

        assert (tmp_path / "fstab").read_text().count(f"{swapfile} none") == 1

    def test_commented_fstab_entry_does_not_count(self, tmp_path, proc_swaps):
        swapfile = tmp_path / "swapfile"
        (tmp_path / "fstab").write_text(f"#{swapfile} none swap sw 0 0\n")
        manager = self._manager(RecordingRunner(), tmp_path, proc_swaps)

        assert manager.has_fstab_entry() is False

    def test_command_failure_propagates(self, tmp_path, proc_swaps):
        runner = RecordingRunner(failures={"mkswap": 1})

        with pytest.raises(CommandError):
            self._manager(runner, tmp_path, proc_swaps).provision()

        assert "swapon" not in runner.executables()
        assert not (tmp_path / "fstab").exists()


class TestAccountManager:

    def test_creates_missing_user(self):
        runner = RecordingRunner()

        with patch.object(AccountManager, "user_exists", return_value=False):
            created = AccountManager(runner).ensure_system_user("puck")

        assert created is True
        assert runner.commands == [["useradd", "-r", "puck"]]

    def test_existing_user_is_tolerated(self):
        runner = RecordingRunner()

        with patch.object(AccountManager, "user_exists", return_value=True):
            created = AccountManager(runner).ensure_system_user("puck")

        assert created is False
        assert runner.commands == []

    def test_root_exists(self):
        assert AccountManager.user_exists("root") is True

    def test_chown(self):
        runner = RecordingRunner()
        accounts = AccountManager(runner)

        accounts.chown(Path("/srv/puckserver"), "puck", recursive=True)
        accounts.chown(Path("/srv/puckserver/server1.json"), "puck")

        assert runner.commands == [
            ["chown", "-R", "puck:puck", "/srv/puckserver"],
            ["chown", "puck:puck", "/srv/puckserver/server1.json"],
        ]


class TestSystemdManager:

    def test_install_template_unit_overwrites(self, tmp_path):
        runner = RecordingRunner()
        systemd = SystemdManager(runner, tmp_path)
        (tmp_path / "puck@.service").write_text("old")

        path = systemd.install_template_unit("puck", "[Unit]\n")
        systemd.daemon_reload()

        assert path == tmp_path / "puck@.service"
        assert path.read_text() == "[Unit]\n"
        assert runner.commands == [["systemctl", "daemon-reload"]]

    def test_instance_unit(self):
        assert SystemdManager.instance_unit("puck", "server2") == "puck@server2"


class TestSteamCMD:

    def test_app_update_arguments(self):
        runner = RecordingRunner()

        SteamCMD(runner, Path("/usr/games/steamcmd")).app_update(3481440, Path("/srv/puckserver"))

        assert runner.commands == [[
            "/usr/games/steamcmd",
            "+force_install_dir", "/srv/puckserver",
            "+login", "anonymous",
            "+app_update", "3481440",
            "+quit",
        ]]

    def test_validate_flag(self):
        args = SteamCMD(RecordingRunner()).build_app_update_args(3481440, Path("/srv/puckserver"), validate=True)

        assert args[-2:] == ["validate", "+quit"]

    def test_failure_is_install_error(self):
        runner = RecordingRunner(failures={"steamcmd": 8})

        with pytest.raises(InstallError) as excinfo:
            SteamCMD(runner).app_update(3481440, Path("/srv/puckserver"))

        assert excinfo.value.exit_code == 1


def test_active_swaps_missing_file(tmp_path):
    assert SystemInfo.get_active_swaps(tmp_path / "missing") == []
