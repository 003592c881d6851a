"""pytest configuration file."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

import pytest

from droidprep.platform_paths import PLATFORM_DIR_ENV, ProjectLocations


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (may take several seconds)"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests that run a full prepare/clean on a sample project"
    )


@pytest.fixture(autouse=True, scope="session")
def _silence_logs():
    os.environ.pop(PLATFORM_DIR_ENV, None)
    logging.getLogger("droidprep").setLevel(logging.DEBUG)
    yield


CONFIG_TEMPLATE = """<?xml version='1.0' encoding='utf-8'?>
<widget id="{id}" version="{version}"{attrs} xmlns="http://www.w3.org/ns/widgets" xmlns:cdv="http://cordova.apache.org/ns/1.0">
    <name{short}>{name}</name>
    <description>Sample application</description>
    <content src="index.html" />
    <access origin="*" />
{body}
</widget>
"""

DEFAULT_BODY = """    <preference name="Orientation" value="portrait" />
    <platform name="android">
        <icon src="res/icon/android/mdpi.png" density="mdpi" />
        <icon src="res/icon/android/hdpi.png" density="hdpi" />
    </platform>"""

DEFAULTS_XML = """<?xml version='1.0' encoding='utf-8'?>
<widget xmlns="http://www.w3.org/ns/widgets" xmlns:cdv="http://cordova.apache.org/ns/1.0">
    <!-- platform defaults -->
    <feature name="Whitelist" />
    <preference name="loglevel" value="DEBUG" />
</widget>
"""

STRINGS_XML = """<?xml version='1.0' encoding='utf-8'?>
<resources>
    <string name="app_name">HelloCordova</string>
    <string name="launcher_name">@string/app_name</string>
    <string name="activity_name">@string/launcher_name</string>
</resources>
"""

THEMES_XML = """<?xml version='1.0' encoding='utf-8'?>
<resources xmlns:tools="http://schemas.android.com/tools">
    <style name="Theme.App.SplashScreen" parent="Theme.SplashScreen.IconBackground">
        <item name="windowSplashScreenBackground">@color/cdv_splashscreen_background</item>
        <item name="windowSplashScreenAnimatedIcon">@drawable/ic_cdv_splashscreen</item>
        <item name="windowSplashScreenAnimationDuration">200</item>
        <item name="postSplashScreenTheme">@style/Theme.Cordova.App.DayNight</item>
        <item name="android:windowOptOutEdgeToEdgeEnforcement">true</item>
    </style>
</resources>
"""

COLORS_XML = """<?xml version='1.0' encoding='utf-8'?>
<resources>
    <color name="cdv_splashscreen_background">#FFFFFF</color>
</resources>
"""

MANIFEST_XML = """<?xml version='1.0' encoding='utf-8'?>
<manifest xmlns:android="http://schemas.android.com/apk/res/android" android:versionCode="10000" android:versionName="1.0.0">
    <application android:label="@string/app_name">
        <activity android:name="MainActivity" android:launchMode="singleTop" android:exported="true">
            <intent-filter android:label="@string/launcher_name">
                <action android:name="android.intent.action.MAIN" />
                <category android:name="android.intent.category.LAUNCHER" />
            </intent-filter>
        </activity>
    </application>
</manifest>
"""

MAIN_ACTIVITY = """package io.cordova.hellocordova;

import org.apache.cordova.*;

public class MainActivity extends CordovaActivity
{
}
"""


@dataclass
class SampleProject:
    """A descriptor project with a minimal Android platform below it."""
    root: Path

    @property
    def platform(self) -> Path:
        return self.root / "platforms" / "android"

    @property
    def locations(self) -> ProjectLocations:
        return ProjectLocations.for_platform(self.platform)

    def add_file(self, rel: str, content: bytes | str = b"") -> Path:
        path = self.root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, str):
            path.write_text(content, encoding="utf-8")
        else:
            path.write_bytes(content)
        return path

    def write_config(
        self,
        body: str = DEFAULT_BODY,
        *,
        id: str = "com.example.hello",
        version: str = "2.3.4",
        name: str = "Hello World",
        short_name: str | None = None,
        attrs: str = "",
    ) -> Path:
        short = f' short="{short_name}"' if short_name else ""
        return self.add_file(
            "config.xml",
            CONFIG_TEMPLATE.format(id=id, version=version, attrs=attrs, name=name, short=short, body=body),
        )

    def read(self, rel: str) -> str:
        return (self.root / rel).read_text(encoding="utf-8")

    def snapshot(self) -> dict[str, bytes]:
        return {
            p.relative_to(self.root).as_posix(): p.read_bytes()
            for p in sorted(self.root.rglob("*")) if p.is_file()
        }


def build_sample_project(root: Path) -> SampleProject:
    project = SampleProject(root)
    project.write_config()
    project.add_file("www/index.html", "<html></html>")
    project.add_file("www/js/index.js", "console.log('hi');")
    for density in ("mdpi", "hdpi", "xhdpi"):
        project.add_file(f"res/icon/android/{density}.png", f"png-{density}".encode())

    android = "platforms/android"
    main = f"{android}/app/src/main"
    project.add_file(f"{android}/platform_www/cordova.js", "// cordova")
    project.add_file(f"{android}/cordova/defaults.xml", DEFAULTS_XML)
    project.add_file(f"{main}/res/values/cdv_strings.xml", STRINGS_XML)
    project.add_file(f"{main}/res/values/cdv_themes.xml", THEMES_XML)
    project.add_file(f"{main}/res/values/cdv_colors.xml", COLORS_XML)
    project.add_file(f"{main}/res/xml/.keep")
    for sub in ("mipmap-ldpi", "mipmap-mdpi", "mipmap-hdpi", "mipmap-xhdpi", "mipmap-mdpi-v26", "mipmap-hdpi-v26"):
        (root / main / "res" / sub).mkdir(parents=True, exist_ok=True)
    project.add_file(f"{main}/AndroidManifest.xml", MANIFEST_XML)
    project.add_file(f"{main}/java/io/cordova/hellocordova/MainActivity.java", MAIN_ACTIVITY)
    project.add_file(f"{android}/gradle.properties", "# Project-wide Gradle settings.\norg.gradle.jvmargs=-Xmx2048m\n")
    return project


@pytest.fixture
def sample_project(tmp_path: Path) -> SampleProject:
    return build_sample_project(tmp_path / "app")
