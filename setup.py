from configparser import ConfigParser
from packaging.requirements import Requirement
from subprocess import check_call
from typing import Any, List
from setuptools import setup, Command


def read_requirements():
    cfg = ConfigParser()
    cfg.read("setup.cfg")
    return cfg["options"]["install_requires"]


class ListDependenciesCommand(Command):
    """A custom command to list dependencies"""

    description = "list package dependencies"
    user_options: List[Any] = []

    def initialize_options(self):
        pass

    def finalize_options(self):
        pass

    def run(self):
        print(read_requirements())


class PyInstallerCommand(Command):
    """A custom command to run PyInstaller to build a standalone kube-porthole executable."""

    description = "run PyInstaller on kube-porthole entrypoint"
    user_options: List[Any] = []

    def initialize_options(self):
        pass

    def finalize_options(self):
        pass

    def run(self):
        command = [
            "pyinstaller",
            "--clean",
            "--onefile",
            "--name",
            "kube-porthole",
        ]
        for line in read_requirements().splitlines():
            if line.strip():
                command.extend(["--hidden-import", Requirement(line.strip()).name])
        command.append("kube_porthole/__main__.py")
        print(" ".join(command))
        check_call(command)


setup(
    use_scm_version={"fallback_version": "0.1.0"},
    cmdclass={"dependencies": ListDependenciesCommand, "pyinstaller": PyInstallerCommand},
)
