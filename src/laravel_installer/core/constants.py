"""Fixed values shared by the installer's core and services."""

from __future__ import annotations

DEFAULT_TEMPLATE = "laravel/laravel"
INSTALLER_PACKAGE = "laravel/installer"
DEV_VERSION = "dev-master"

DATABASE_DRIVERS = ("mysql", "mariadb", "pgsql", "sqlite", "sqlsrv")
DEFAULT_DATABASE = "sqlite"

STARTER_KITS = {
    "react": "laravel/react-starter-kit",
    "vue": "laravel/vue-starter-kit",
    "livewire": "laravel/livewire-starter-kit",
}
BLANK_STARTER_KITS = {
    "react": "laravel/blank-react-starter-kit",
    "vue": "laravel/blank-vue-starter-kit",
    "livewire": "laravel/blank-livewire-starter-kit",
}
FIRST_PARTY_KIT_PREFIX = "laravel/"
COMPONENTS_CHANNEL = "dev-components"
WORKOS_CHANNEL = "dev-workos"

REQUIRED_PHP_EXTENSIONS = ("ctype", "filter", "hash", "mbstring", "openssl", "session", "tokenizer")

# Programs that must never receive --no-ansi / --quiet.
FLAG_SKIP_PROGRAMS = frozenset({"chmod", "rm", "rd", "rmdir", "git", "pest"})
NO_ANSI_FLAG = "--no-ansi"
QUIET_FLAG = "--quiet"
OUTPUT_INDENT = "    "

VERSION_FEED_URL = "https://repo.packagist.org/p2/laravel/installer.json"
VERSION_CACHE_FILE = "laravel-installer-version-check.json"
VERSION_TOKEN_FILE = "laravel-installer-last-modified"
VERSION_CACHE_TTL_SECONDS = 86400
VERSION_FETCH_TIMEOUT_SECONDS = 3.0
USER_AGENT = "Laravel Installer"

__all__ = [
    "DEFAULT_TEMPLATE",
    "INSTALLER_PACKAGE",
    "DEV_VERSION",
    "DATABASE_DRIVERS",
    "DEFAULT_DATABASE",
    "STARTER_KITS",
    "BLANK_STARTER_KITS",
    "FIRST_PARTY_KIT_PREFIX",
    "COMPONENTS_CHANNEL",
    "WORKOS_CHANNEL",
    "REQUIRED_PHP_EXTENSIONS",
    "FLAG_SKIP_PROGRAMS",
    "NO_ANSI_FLAG",
    "QUIET_FLAG",
    "OUTPUT_INDENT",
    "VERSION_FEED_URL",
    "VERSION_CACHE_FILE",
    "VERSION_TOKEN_FILE",
    "VERSION_CACHE_TTL_SECONDS",
    "VERSION_FETCH_TIMEOUT_SECONDS",
    "USER_AGENT",
]
