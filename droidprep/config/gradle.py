"""Gradle-side configuration written during prepare.

- ``cdv-gradle-config.json``: SDK/tooling versions and the package namespace
- ``gradle.properties``: JVM args and AndroidX/Kotlin switches
- ``cdv-gradle-name.gradle``: the Gradle root project name
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Callable, Mapping, Optional, Protocol

from ..errors import PrepareError
from ..events import Diagnostics
from ..platform_paths import PLATFORM_NAME

logger = logging.getLogger(__name__)

GRADLE_CONFIG_DEFAULTS: dict[str, Any] = {
    "MIN_SDK_VERSION": 24,
    "SDK_VERSION": 35,
    "COMPILE_SDK_VERSION": None,
    "GRADLE_VERSION": "8.13",
    "MIN_BUILD_TOOLS_VERSION": "35.0.0",
    "AGP_VERSION": "8.7.3",
    "KOTLIN_VERSION": "1.9.24",
    "ANDROIDX_APP_COMPAT_VERSION": "1.7.0",
    "ANDROIDX_WEBKIT_VERSION": "1.12.1",
    "ANDROIDX_CORE_SPLASHSCREEN_VERSION": "1.0.1",
    "GRADLE_PLUGIN_GOOGLE_SERVICES_VERSION": "4.4.2",
    "IS_GRADLE_PLUGIN_GOOGLE_SERVICES_ENABLED": False,
    "IS_GRADLE_PLUGIN_KOTLIN_ENABLED": False,
    "PACKAGE_NAMESPACE": "io.cordova.helloCordova",
    "JAVA_SOURCE_COMPATIBILITY": 8,
    "JAVA_TARGET_COMPATIBILITY": 8,
    "KOTLIN_JVM_TARGET": None,
}

GRADLE_PROPERTIES_DEFAULTS: dict[str, str] = {
    "org.gradle.jvmargs": "-Xmx2048m",
    "android.useAndroidX": "true",
}

GENERATED_HEADER = "// GENERATED FILE - DO NOT EDIT\n"
_UNSAFE_NAME_CHARS = re.compile(r'[/\\:<>"?*|]')


class PreferenceSource(Protocol):
    def get_preference(self, name: str, platform: Optional[str] = None) -> str: ...


def parse_number(value: str) -> int | float:
    """Leading-number parse; ``"24"`` -> 24, ``"1.5x"`` -> 1.5.

    Raises:
        ValueError: the value does not start with a number.
    """
    match = re.match(r"\s*[-+]?(\d+(\.\d*)?|\.\d+)", value)
    if not match:
        raise ValueError(f"Not a number: {value!r}")
    number = float(match.group(0))
    return int(number) if number.is_integer() else number


def parse_bool(value: str) -> bool:
    return value.lower() == "true"


# (descriptor preference, gradle key, converter)
PREFERENCE_MAPPING: tuple[tuple[str, str, Callable[[str], Any]], ...] = (
    ("android-minSdkVersion", "MIN_SDK_VERSION", parse_number),
    ("android-maxSdkVersion", "MAX_SDK_VERSION", parse_number),
    ("android-targetSdkVersion", "SDK_VERSION", parse_number),
    ("android-compileSdkVersion", "COMPILE_SDK_VERSION", parse_number),
    ("android-buildToolsVersion", "BUILD_TOOLS_VERSION", str),
    ("GradleVersion", "GRADLE_VERSION", str),
    ("AndroidGradlePluginVersion", "AGP_VERSION", str),
    ("GradlePluginKotlinVersion", "KOTLIN_VERSION", str),
    ("AndroidXAppCompatVersion", "ANDROIDX_APP_COMPAT_VERSION", str),
    ("AndroidXWebKitVersion", "ANDROIDX_WEBKIT_VERSION", str),
    ("GradlePluginGoogleServicesVersion", "GRADLE_PLUGIN_GOOGLE_SERVICES_VERSION", str),
    ("GradlePluginGoogleServicesEnabled", "IS_GRADLE_PLUGIN_GOOGLE_SERVICES_ENABLED", parse_bool),
    ("GradlePluginKotlinEnabled", "IS_GRADLE_PLUGIN_KOTLIN_ENABLED", parse_bool),
    ("AndroidJavaSourceCompatibility", "JAVA_SOURCE_COMPATIBILITY", parse_number),
    ("AndroidJavaTargetCompatibility", "JAVA_TARGET_COMPATIBILITY", parse_number),
    ("AndroidKotlinJVMTarget", "KOTLIN_JVM_TARGET", str),
)


def user_gradle_config(preferences: PreferenceSource, platform: str = PLATFORM_NAME) -> dict[str, Any]:
    """Gradle values overridden by descriptor preferences; unset ones are skipped."""
    config: dict[str, Any] = {}
    for pref, key, convert in PREFERENCE_MAPPING:
        raw = preferences.get_preference(pref, platform)
        if not raw:
            continue
        try:
            config[key] = convert(raw)
        except ValueError as e:
            raise PrepareError(f'Invalid value for preference "{pref}": {raw}') from e
    return config


def is_compile_sdk_valid(compile_sdk: Optional[int], target_sdk: Optional[int], diag: Diagnostics) -> bool:
    """Warn when the compile SDK is lower than the target SDK. Unset compile SDK follows the target."""
    if compile_sdk is None or target_sdk is None:
        return True
    if compile_sdk >= target_sdk:
        return True
    diag.warn(
        "compileSdkVersion (%s) is lower than targetSdkVersion (%s). "
        "Consider setting android-compileSdkVersion to at least the target SDK version.",
        compile_sdk, target_sdk,
    )
    return False


class GradleConfig:
    """Editor for ``cdv-gradle-config.json``."""

    def __init__(self, path: Path | str, values: Optional[Mapping[str, Any]] = None):
        self.path = Path(path)
        self.values: dict[str, Any] = dict(values or {})

    @classmethod
    def load(cls, path: Path | str) -> "GradleConfig":
        path = Path(path)
        values = json.loads(path.read_text(encoding="utf-8")) if path.exists() else dict(GRADLE_CONFIG_DEFAULTS)
        return cls(path, values)

    @classmethod
    def from_preferences(
        cls,
        path: Path | str,
        preferences: PreferenceSource,
        platform: str = PLATFORM_NAME,
        diagnostics: Optional[Diagnostics] = None,
    ) -> "GradleConfig":
        diag = diagnostics or Diagnostics(__name__)
        values = {**GRADLE_CONFIG_DEFAULTS, **user_gradle_config(preferences, platform)}
        is_compile_sdk_valid(values.get("COMPILE_SDK_VERSION"), values.get("SDK_VERSION"), diag)
        return cls(path, values)

    def set_package_name(self, package_name: str) -> "GradleConfig":
        self.values["PACKAGE_NAMESPACE"] = package_name
        return self

    def to_json(self) -> str:
        return json.dumps(self.values, indent=2)

    def write(self) -> None:
        self.path.write_text(self.to_json(), encoding="utf-8")
        logger.debug("Wrote %s", self.path)


def _jvm_memory_mb(args: str) -> Optional[float]:
    match = re.search(r"-Xmx(\d+)([kKmMgG]?)", args)
    if not match:
        return None
    amount, unit = int(match.group(1)), match.group(2).lower()
    factor = {"k": 1 / 1024, "m": 1, "g": 1024, "": 1 / (1024 * 1024)}[unit]
    return amount * factor


class GradleProperties:
    """Line-preserving editor for ``gradle.properties``.

    Only ``key=value`` lines that are set through :meth:`set` are rewritten;
    comments, blank lines and unrelated properties stay as they are.
    """

    _SEPARATOR = re.compile(r"\s*[=:]\s*")

    def __init__(self, path: Path | str, defaults: Mapping[str, str] = GRADLE_PROPERTIES_DEFAULTS):
        self.path = Path(path)
        self.defaults = dict(defaults)
        self.lines: list[str] = []
        if self.path.exists():
            self.lines = self.path.read_text(encoding="utf-8").splitlines()

    def _find(self, key: str) -> tuple[int, Optional[str]]:
        for index, line in enumerate(self.lines):
            stripped = line.strip()
            if not stripped or stripped[0] in "#!":
                continue
            parts = self._SEPARATOR.split(stripped, maxsplit=1)
            if parts[0] == key:
                return index, parts[1] if len(parts) > 1 else ""
        return -1, None

    def get(self, key: str) -> Optional[str]:
        return self._find(key)[1]

    def set(self, key: str, value: str) -> None:
        index, _ = self._find(key)
        line = f"{key}={value}"
        if index < 0:
            self.lines.append(line)
        else:
            self.lines[index] = line

    def _configure(self, properties: Mapping[str, str], diag: Diagnostics) -> None:
        for key, value in properties.items():
            current = self.get(key)
            if not current:
                diag.verbose("[Gradle Properties] Appending configuration item: %s=%s", key, value)
                self.set(key, value)
                continue
            if current == value:
                continue
            recommended = self.defaults.get(key)
            if recommended and recommended != value:
                should_emit = True
                if key == "org.gradle.jvmargs":
                    wanted, floor = _jvm_memory_mb(value), _jvm_memory_mb(recommended)
                    should_emit = wanted is None or floor is None or wanted < floor
                if should_emit:
                    diag.log(
                        '[Gradle Properties] Detected Gradle property "%s" with the value of "%s", '
                        'Cordova\'s recommended value is "%s"',
                        key, value, recommended,
                    )
            else:
                diag.log('[Gradle Properties] Overwriting "%s" with the value of "%s"', key, value)
            self.set(key, value)

    def configure(self, user_config: Mapping[str, str], diagnostics: Optional[Diagnostics] = None) -> None:
        """Apply defaults, then *user_config*, and save."""
        diag = diagnostics or Diagnostics(__name__)
        diag.verbose("[Gradle Properties] Preparing Configuration")
        diag.verbose("[Gradle Properties] Appending default configuration properties")
        self._configure(self.defaults, diag)
        diag.verbose("[Gradle Properties] Appending custom configuration properties")
        self._configure(user_config, diag)
        self.save()

    def save(self) -> None:
        self.path.write_text("\n".join(self.lines) + "\n", encoding="utf-8")


def gradle_properties_user_config(
    preferences: PreferenceSource,
    jvmargs: Optional[str] = None,
    platform: str = PLATFORM_NAME,
) -> dict[str, str]:
    config: dict[str, str] = {}
    if jvmargs:
        config["org.gradle.jvmargs"] = jvmargs
    if preferences.get_preference("GradlePluginKotlinEnabled", platform):
        style = preferences.get_preference("GradlePluginKotlinCodeStyle", platform)
        config["kotlin.code.style"] = style or "official"
    return config


def sanitize_project_name(name: str) -> str:
    return _UNSAFE_NAME_CHARS.sub("_", name)


def write_gradle_name(path: Path | str, name: str) -> str:
    """Write ``cdv-gradle-name.gradle`` and return its content."""
    content = GENERATED_HEADER + f'rootProject.name = "{sanitize_project_name(name)}"\n'
    Path(path).write_text(content, encoding="utf-8")
    return content
