from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional

from kivy.logger import Logger

from .commands import RECOVERY_PREFIX
from .config import Settings
from .recovery import PACKAGE_SCHEME_ACTIONS, RECOVERY_ACTIONS


JAVA_BOOT_RECEIVER_SRC = r"""
package {JAVA_PACKAGE};

import android.content.BroadcastReceiver;
import android.content.Context;
import android.content.Intent;
import android.util.Log;

public class BootReceiver extends BroadcastReceiver {{
    private static final String TAG = "DreamClockBootReceiver";

    @Override
    public void onReceive(Context context, Intent intent) {{
        String action = intent.getAction();
        Log.d(TAG, "Boot receiver triggered with action: " + action);
        // Python decides what the action means; the receiver only forwards it.
        try {{
            {SERVICE_CLASS}.start(context, "{RECOVERY_PREFIX}" + action);
        }} catch (Exception e) {{
            Log.e(TAG, "Error forwarding " + action + " to the alarm service", e);
        }}
    }}
}}
"""

EXTRA_MANIFEST_XML = r"""<manifest xmlns:android="http://schemas.android.com/apk/res/android">
    <uses-permission android:name="android.permission.RECEIVE_BOOT_COMPLETED"/>
    <uses-permission android:name="android.permission.FOREGROUND_SERVICE"/>
    <uses-permission android:name="android.permission.POST_NOTIFICATIONS"/>
    <uses-permission android:name="android.permission.REQUEST_IGNORE_BATTERY_OPTIMIZATIONS"/>

    <application>
        <receiver
            android:name="{JAVA_PACKAGE}.BootReceiver"
            android:exported="false">
{FILTERS}
        </receiver>
    </application>
</manifest>
"""


def _action_lines(actions: Iterable[str]) -> str:
    return "\n".join(f'                <action android:name="{a}"/>' for a in actions)


def _intent_filter(actions: list[str], scheme: Optional[str] = None) -> str:
    lines = ["            <intent-filter>", _action_lines(actions)]
    if scheme:
        # An intent carrying a data URI only matches filters declaring its scheme.
        lines.append(f'                <data android:scheme="{scheme}"/>')
    lines.append("            </intent-filter>")
    return "\n".join(lines)


def _intent_filters(actions: list[str]) -> str:
    plain = [a for a in actions if a not in PACKAGE_SCHEME_ACTIONS]
    with_package = [a for a in actions if a in PACKAGE_SCHEME_ACTIONS]
    filters = []
    if plain:
        filters.append(_intent_filter(plain))
    if with_package:
        filters.append(_intent_filter(with_package, scheme="package"))
    return "\n".join(filters)


def render_boot_receiver(settings: Settings) -> str:
    return JAVA_BOOT_RECEIVER_SRC.format(
        JAVA_PACKAGE=settings.java_package,
        SERVICE_CLASS=settings.service_class,
        RECOVERY_PREFIX=RECOVERY_PREFIX,
    )


def render_manifest(settings: Settings, actions: Optional[Iterable[str]] = None) -> str:
    return EXTRA_MANIFEST_XML.format(
        JAVA_PACKAGE=settings.java_package,
        FILTERS=_intent_filters(list(actions if actions is not None else RECOVERY_ACTIONS)),
    )


def write_android_sources(out_dir: Path, settings: Optional[Settings] = None) -> Path:
    """
    Writes the boot receiver stub and the manifest snippet for buildozer.
    In buildozer.spec set:
        android.add_src = android_src
        android.extra_manifest_xml = android_src/extra_manifest.xml
        services = Alarms:service/main.py:foreground:sticky
    """
    settings = settings or Settings()
    src_root = out_dir / "android_src"
    java_dir = src_root / Path(*settings.java_package.split("."))
    java_dir.mkdir(parents=True, exist_ok=True)

    (java_dir / "BootReceiver.java").write_text(render_boot_receiver(settings), encoding="utf-8")
    (src_root / "extra_manifest.xml").write_text(render_manifest(settings), encoding="utf-8")
    Logger.info(f"DreamClock: wrote android sources to {src_root}")
    return src_root
