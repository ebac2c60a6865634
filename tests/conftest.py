"""Shared fixtures: a Liquid-kernel style configuration and release listing."""

import pytest

from release_db.config import parse_config
from release_db.generator import RepositoryGenerator


CONFIG = {
    "settings": {
        "name": "liquid",
        "owner": "liquidprjkt",
        "repo": "liquid_kernel_desktop_x86",
        "max_packages": 3,
        "architectures": ["x86_64"],
        "packager": "Liquid Mirror <hi@zamkara.tech>",
    },
    "packages": [
        {
            "base": "linux-upstream",
            "description": "Liquid Kernel for Arch Linux",
            "license": "GPL2",
            "groups": ["linux-upstream"],
            "depends": ["linux-firmware"],
            "optdepends": ["wireless-regdb: to set the correct wireless channels of your country"],
            "conflicts": ["linux"],
            "replaces": ["linux"],
            "db_depends": ["linux-firmware", "wireless-regdb"],
            "install_paths": [
                "/usr/lib/modules/{version}/vmlinuz",
                "/usr/lib/modules/{version}/build",
                "/usr/lib/modules/{version}/kernel",
                "/boot/initramfs-{version}.img",
                "/boot/System.map-{version}",
            ],
            "default_install_paths": [
                "/boot/vmlinuz-{version}",
                "/usr/src/linux-{version}",
            ],
            "patterns": [
                r"^linux-upstream-(?P<version>\d+\.\d+\.\d+_liquid-\d+)-(?P<arch>x86_64)\.pkg\.tar\.zst$",
                r"^linux-upstream-(?P<variant>rt|zen|lts)-(?P<version>\d+\.\d+\.\d+_liquid-\d+)-(?P<arch>x86_64)\.pkg\.tar\.zst$",
            ],
        }
    ],
}


def make_asset(name, size=1024):
    return {
        "name": name,
        "size": size,
        "browser_download_url": f"https://github.com/liquidprjkt/dl/{name}",
        "label": None,
    }


def make_release(tag, published_at, names, draft=False):
    return {
        "tag_name": tag,
        "published_at": published_at,
        "draft": draft,
        "assets": [make_asset(name) for name in names],
    }


class FakeSource:
    """Release source returning a canned listing."""

    def __init__(self, releases=None, error=None):
        self.releases = releases or []
        self.error = error
        self.calls = 0

    def get_releases(self, owner, repo, per_page=30):
        self.calls += 1
        if self.error:
            raise self.error
        return self.releases


@pytest.fixture
def settings():
    return parse_config(CONFIG)


@pytest.fixture
def releases():
    return [
        make_release("6.6.1_liquid-2", "2024-02-01T10:00:00Z", [
            "linux-upstream-zen-6.6.1_liquid-2-x86_64.pkg.tar.zst",
            "linux-upstream-6.6.1_liquid-2-x86_64.pkg.tar.zst",
            "linux-upstream-6.6.1_liquid-2-x86_64.pkg.tar.zst.sig",
            "linux-upstream_6.6.1-2_amd64.deb",
            "foo-1.0.pkg.tar.zst",
        ]),
        make_release("7.0.0_liquid-1", None, [
            "linux-upstream-7.0.0_liquid-1-x86_64.pkg.tar.zst",
        ], draft=True),
        make_release("6.5.0_liquid-1", "2024-01-01T10:00:00Z", [
            "linux-upstream-6.5.0_liquid-1-x86_64.pkg.tar.zst",
        ]),
        make_release("6.4.0_liquid-1", "2023-12-01T10:00:00Z", [
            "linux-upstream-rt-6.4.0_liquid-1-x86_64.pkg.tar.zst",
        ]),
    ]


@pytest.fixture
def source(releases):
    return FakeSource(releases)


@pytest.fixture
def generator(settings, source):
    return RepositoryGenerator(settings, source=source)
